"""API数据模型模块

定义所有 Pydantic 模型（请求/响应结构体）
"""

from .pause import (
    PauseCreate,
    PauseUpdate,
    PauseRead,
    PauseTypeRead,
    PauseTypeStatistics,
    PauseStatistics,
)
from .production_order import (
    ProductionOrderCreate,
    ProductionOrderUpdate,
    ProductDetailsUpdate,
    ProductionOrderRead,
    FinishRequest,
    PauseRequest,
    CounterRequest,
    SimulateTimeRequest,
    OEEMetricsRead,
    OrderStatistics,
    PauseOutcome,
    FinishOutcome,
)
from .cleaning_order import (
    CleaningOrderCreate,
    CleaningOrderUpdate,
    CleaningOrderRead,
    CleaningSummary,
)

__all__ = [
    "PauseCreate",
    "PauseUpdate",
    "PauseRead",
    "PauseTypeRead",
    "PauseTypeStatistics",
    "PauseStatistics",
    "ProductionOrderCreate",
    "ProductionOrderUpdate",
    "ProductDetailsUpdate",
    "ProductionOrderRead",
    "FinishRequest",
    "PauseRequest",
    "CounterRequest",
    "SimulateTimeRequest",
    "OEEMetricsRead",
    "OrderStatistics",
    "PauseOutcome",
    "FinishOutcome",
    "CleaningOrderCreate",
    "CleaningOrderUpdate",
    "CleaningOrderRead",
    "CleaningSummary",
]
