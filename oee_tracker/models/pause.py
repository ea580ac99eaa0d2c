"""暂停记录数据库模型

每条记录属于一个生产订单；end_time 为空表示暂停进行中（每个订单最多一条）
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database.connection import Base


class PauseRecord(Base):
    """暂停记录表"""
    __tablename__ = "pauses"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("production_orders.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, nullable=True)  # floor((end - start) / 60s)
    pause_type = Column(String(64), nullable=False)
    comment = Column(Text, nullable=True)
    # 创建时由类型决定，只有进行中的记录改类型时才会变化
    counts_toward_downtime = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("ProductionOrder", back_populates="pauses")

    @property
    def is_open(self) -> bool:
        return self.end_time is None
