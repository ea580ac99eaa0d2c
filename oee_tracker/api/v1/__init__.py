from .cleaning_orders import router as cleaning_orders_router
from .orders import router as orders_router
from .pauses import router as pauses_router

__all__ = ["cleaning_orders_router", "orders_router", "pauses_router"]
