"""数据库模型模块

定义所有 SQLAlchemy ORM 模型
"""

from .production_order import ProductionOrder, OrderState
from .pause import PauseRecord
from .active_slot import ActiveOrderSlot, ACTIVE_SLOT_ID
from .cleaning_order import CleaningOrder, CleaningState

__all__ = [
    "ProductionOrder",
    "OrderState",
    "PauseRecord",
    "ActiveOrderSlot",
    "ACTIVE_SLOT_ID",
    "CleaningOrder",
    "CleaningState",
]
