from .production_order import (
    get_order,
    get_order_by_code,
    get_started_order,
    list_orders,
    create_order,
    update_order,
    delete_order,
    get_active_slot,
    release_active_slot,
)

from .pause import (
    get_pause,
    get_open_pause,
    list_pauses,
    list_pauses_for_order,
    create_pause,
    delete_pause,
)

from .cleaning_order import (
    get_cleaning_order,
    list_cleaning_orders,
    list_finished_cleaning_orders,
    create_cleaning_order,
    update_cleaning_order,
    delete_cleaning_order,
)

__all__ = [
    # Production order functions
    "get_order",
    "get_order_by_code",
    "get_started_order",
    "list_orders",
    "create_order",
    "update_order",
    "delete_order",
    "get_active_slot",
    "release_active_slot",

    # Pause functions
    "get_pause",
    "get_open_pause",
    "list_pauses",
    "list_pauses_for_order",
    "create_pause",
    "delete_pause",

    # Cleaning order functions
    "get_cleaning_order",
    "list_cleaning_orders",
    "list_finished_cleaning_orders",
    "create_cleaning_order",
    "update_cleaning_order",
    "delete_cleaning_order",
]
