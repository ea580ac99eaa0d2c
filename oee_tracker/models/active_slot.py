"""活动订单槽模型

单行表（id=1），记录当前处于 started 状态的订单；
在 start 事务内写入，pause / finish / delete 时清空
"""

from sqlalchemy import Column, ForeignKey, Integer

from ..database.connection import Base

ACTIVE_SLOT_ID = 1


class ActiveOrderSlot(Base):
    """活动订单槽"""
    __tablename__ = "active_order_slot"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("production_orders.id"), nullable=True, unique=True)
