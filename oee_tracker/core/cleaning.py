"""清洁工单

与生产订单互不影响的简单流程：
    created -> started -> finished
- 只有 created 可以开始、可以删除；只有 started 可以完成
- 完成时 duration_seconds = floor((end_time - start_time) 秒)
- 通知在提交之后发送
"""

import logging
import math
from datetime import timedelta
from typing import Callable, Mapping, Optional

from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database.connection import transaction
from ..models import CleaningState
from ..utils.helpers import utcnow
from .errors import InvalidStateError, NotFoundError, ValidationError
from .notifier import (
    CLEANING_CREATED,
    CLEANING_DELETED,
    CLEANING_UPDATED,
    Notifier,
    emit_serialized,
    notifier as default_notifier,
)

logger = logging.getLogger(__name__)


def _clean_description(value) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError("清洁描述必填", details=["description: 必填"])
    return text


class CleaningOrderService:
    def __init__(self, db: Session, notifier: Optional[Notifier] = None, clock: Optional[Callable] = None):
        self.db = db
        self.notifier = notifier or default_notifier
        self.clock = clock or utcnow

    def get(self, cleaning_id: int):
        cleaning = crud.get_cleaning_order(self.db, cleaning_id)
        if not cleaning:
            raise NotFoundError("清洁工单未找到")
        return cleaning

    def list_all(self, days: Optional[int] = None, skip: int = 0, limit: int = 100):
        """days 不为空时只返回最近 days 天创建的工单"""
        since = None
        if days is not None:
            if days < 0:
                raise ValidationError("days 不能为负数", details=["days"])
            since = self.clock() - timedelta(days=days)
        return crud.list_cleaning_orders(self.db, since=since, skip=skip, limit=limit)

    def _notify(self, event_name: str, cleaning) -> None:
        emit_serialized(self.notifier, event_name, schemas.CleaningOrderRead, cleaning)

    def create(self, fields: Mapping):
        description = _clean_description(fields.get("description"))
        with transaction(self.db):
            cleaning = crud.create_cleaning_order(self.db, {
                "description": description,
                "state": CleaningState.created,
                "created_at": self.clock(),
            })
        logger.info("清洁工单 %s 已创建", cleaning.id)
        self._notify(CLEANING_CREATED, cleaning)
        return cleaning

    def update(self, cleaning_id: int, fields: Mapping):
        """只修改描述；请求中的状态字段被忽略"""
        changes = {}
        if fields.get("description") is not None:
            changes["description"] = _clean_description(fields["description"])
        with transaction(self.db):
            cleaning = self.get(cleaning_id)
            if changes:
                crud.update_cleaning_order(self.db, cleaning, changes)
        self._notify(CLEANING_UPDATED, cleaning)
        return cleaning

    def start(self, cleaning_id: int):
        with transaction(self.db):
            cleaning = self.get(cleaning_id)
            if cleaning.state != CleaningState.created:
                raise InvalidStateError(f"清洁工单状态为 {cleaning.state.value}，无法开始")
            crud.update_cleaning_order(self.db, cleaning, {
                "state": CleaningState.started,
                "start_time": self.clock(),
            })
        logger.info("清洁工单 %s 已开始", cleaning_id)
        self._notify(CLEANING_UPDATED, cleaning)
        return cleaning

    def finish(self, cleaning_id: int):
        with transaction(self.db):
            cleaning = self.get(cleaning_id)
            if cleaning.state != CleaningState.started:
                raise InvalidStateError(f"清洁工单状态为 {cleaning.state.value}，无法完成")
            now = self.clock()
            duration = max(math.floor((now - cleaning.start_time).total_seconds()), 0)
            crud.update_cleaning_order(self.db, cleaning, {
                "state": CleaningState.finished,
                "end_time": now,
                "duration_seconds": duration,
            })
        logger.info("清洁工单 %s 已完成，耗时 %s 秒", cleaning_id, duration)
        self._notify(CLEANING_UPDATED, cleaning)
        return cleaning

    def delete(self, cleaning_id: int) -> None:
        with transaction(self.db):
            cleaning = self.get(cleaning_id)
            if cleaning.state != CleaningState.created:
                raise InvalidStateError(f"清洁工单状态为 {cleaning.state.value}，无法删除")
            crud.delete_cleaning_order(self.db, cleaning)
        logger.info("清洁工单 %s 已删除", cleaning_id)
        self.notifier.emit(CLEANING_DELETED, {"id": cleaning_id})

    def summary(self, start=None, end=None) -> dict:
        """时间段内已完成清洁的次数、总耗时与平均耗时（秒）"""
        finished = crud.list_finished_cleaning_orders(self.db, start=start, end=end)
        total_seconds = sum(c.duration_seconds or 0 for c in finished)
        count = len(finished)
        return {
            "total_cleanings": count,
            "total_seconds": total_seconds,
            "average_seconds": total_seconds // count if count else 0,
        }
