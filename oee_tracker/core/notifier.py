"""事件通知

进程内的发布订阅：emit 将事件推送给所有订阅者。
通知属于尽力而为的副作用，订阅者出错只记录日志，不会影响已提交的状态变更。
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

ORDER_CREATED = "production_order:created"
ORDER_UPDATED = "production_order:updated"
ORDER_DELETED = "production_order:deleted"
PAUSE_UPDATED = "pause:updated"
CLEANING_CREATED = "cleaning_order:created"
CLEANING_UPDATED = "cleaning_order:updated"
CLEANING_DELETED = "cleaning_order:deleted"


class Notifier:
    def __init__(self):
        self._subscribers: List[Callable[[str, Any], None]] = []

    def subscribe(self, callback: Callable[[str, Any], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[str, Any], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event_name: str, payload: Any) -> None:
        logger.debug("emit %s", event_name)
        for callback in list(self._subscribers):
            try:
                callback(event_name, payload)
            except Exception:
                logger.exception("通知订阅者处理事件 %s 失败", event_name)


# 应用级通知器
notifier = Notifier()


def emit_serialized(events: Notifier, event_name: str, read_schema, obj) -> None:
    """用 read_schema 序列化 ORM 对象后发送；序列化失败只记录日志"""
    try:
        payload = read_schema.model_validate(obj).model_dump(mode="json")
    except Exception:
        logger.exception("序列化 %s %s 失败，未发送通知 %s",
                         read_schema.__name__, getattr(obj, "id", None), event_name)
        return
    events.emit(event_name, payload)
