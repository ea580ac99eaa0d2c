"""清洁工单数据库模型

独立于生产订单：created -> started -> finished，完成时记录耗时（秒）
"""

import enum

from sqlalchemy import Column, DateTime, Enum, Integer, Text
from sqlalchemy.sql import func

from ..database.connection import Base


class CleaningState(str, enum.Enum):
    created = "created"
    started = "started"
    finished = "finished"


class CleaningOrder(Base):
    """清洁工单表"""
    __tablename__ = "cleaning_orders"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    state = Column(
        Enum(CleaningState, name="cleaning_state", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CleaningState.created,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
