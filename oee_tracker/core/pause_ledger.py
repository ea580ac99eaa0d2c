"""暂停台账

按订单追加记录暂停区间：
- record_start 打开一条暂停（无结束时间）
- record_end 关闭暂停并计算整分钟时长
- sum_counting_duration 汇总计入停机的已关闭暂停时长，作为指标计算的暂停时间依据

换班 / 部分中断类型即使标记被误存为 True 也不会被计入。
台账本身不开启事务，调用方（状态机）负责事务边界。
"""

import logging
from collections import OrderedDict
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from .. import crud
from ..config.pause_types import NON_COUNTING_PAUSE_TYPES, counts_toward_downtime, is_valid_pause_type
from ..models import OrderState
from ..utils.helpers import minutes_between
from .errors import InvalidStateError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def is_counting(pause) -> bool:
    """暂停是否计入停机：存储标记为真且类型不属于不计入类型"""
    return bool(pause.counts_toward_downtime) and pause.pause_type not in NON_COUNTING_PAUSE_TYPES


def sum_counting_minutes(pauses: Iterable, now: Optional[datetime] = None) -> int:
    """汇总计入停机的暂停分钟数

    now 为空时只统计已关闭的记录；给定 now 时进行中的暂停按 now 截止计算。
    """
    total = 0
    for pause in pauses:
        if not is_counting(pause):
            continue
        if pause.end_time is not None:
            total += pause.duration_minutes or 0
        elif now is not None:
            total += max(minutes_between(pause.start_time, now), 0)
    return total


class PauseLedger:
    def __init__(self, db: Session):
        self.db = db

    def get(self, pause_id: int):
        pause = crud.get_pause(self.db, pause_id)
        if not pause:
            raise NotFoundError("暂停记录未找到")
        return pause

    def open_pause(self, order_id: int):
        return crud.get_open_pause(self.db, order_id)

    def list_for_order(self, order_id: int):
        return crud.list_pauses_for_order(self.db, order_id)

    def list_all(self, skip: int = 0, limit: int = 100):
        return crud.list_pauses(self.db, skip=skip, limit=limit)

    def record_start(self, order_id: int, pause_type: str, comment: Optional[str], now: datetime):
        """打开一条新的暂停记录"""
        if not is_valid_pause_type(pause_type):
            raise ValidationError("暂停类型无效", details=[f"pause_type: {pause_type!r}"])
        if crud.get_open_pause(self.db, order_id) is not None:
            raise InvalidStateError("该订单已有进行中的暂停")
        pause = crud.create_pause(self.db, {
            "order_id": order_id,
            "start_time": now,
            "pause_type": pause_type,
            "comment": comment,
            "counts_toward_downtime": counts_toward_downtime(pause_type),
        })
        logger.info("订单 %s 开始暂停 %s（类型 %s，计入停机=%s）",
                    order_id, pause.id, pause_type, pause.counts_toward_downtime)
        return pause

    def record_end(self, pause_id: int, now: datetime) -> int:
        """关闭暂停，返回整分钟时长"""
        pause = self.get(pause_id)
        if not pause.is_open:
            raise InvalidStateError("该暂停已经结束")
        duration = max(minutes_between(pause.start_time, now), 0)
        pause.end_time = now
        pause.duration_minutes = duration
        self.db.flush()
        logger.info("暂停 %s 结束，时长 %s 分钟", pause.id, duration)
        return duration

    def sum_counting_duration(self, order_id: int) -> int:
        """订单计入停机的已关闭暂停总分钟数"""
        return sum_counting_minutes(self.list_for_order(order_id))

    def change_type(self, pause_id: int, new_type: str):
        """修改进行中暂停的类型，同时重新判定是否计入停机"""
        if not is_valid_pause_type(new_type):
            raise ValidationError("暂停类型无效", details=[f"pause_type: {new_type!r}"])
        pause = self.get(pause_id)
        if not pause.is_open:
            raise InvalidStateError("只能修改进行中暂停的类型")
        pause.pause_type = new_type
        pause.counts_toward_downtime = counts_toward_downtime(new_type)
        self.db.flush()
        return pause

    def update_comment(self, pause_id: int, comment: Optional[str]):
        if not comment:
            raise ValidationError("备注不能为空", details=["comment"])
        pause = self.get(pause_id)
        pause.comment = comment
        self.db.flush()
        return pause

    def delete(self, pause_id: int):
        """删除已结束的暂停；计入停机的时长从订单累计暂停中扣除"""
        pause = self.get(pause_id)
        if pause.is_open:
            raise InvalidStateError("不能删除进行中的暂停")
        order = crud.get_order(self.db, pause.order_id)
        if order is not None:
            if order.state == OrderState.finished:
                raise InvalidStateError("订单已完成，暂停记录不可删除")
            if is_counting(pause):
                order.accumulated_paused_minutes = max(
                    (order.accumulated_paused_minutes or 0) - (pause.duration_minutes or 0), 0
                )
        crud.delete_pause(self.db, pause)
        return pause

    def statistics(self, order_id: int) -> dict:
        """按类型统计订单的暂停次数与时长"""
        by_type = OrderedDict()
        counted = 0
        not_counted = 0
        pauses = self.list_for_order(order_id)
        for pause in pauses:
            minutes = pause.duration_minutes or 0
            entry = by_type.setdefault(pause.pause_type, {
                "pause_type": pause.pause_type,
                "count": 0,
                "total_minutes": 0,
                "counts_toward_downtime": counts_toward_downtime(pause.pause_type),
            })
            entry["count"] += 1
            entry["total_minutes"] += minutes
            if is_counting(pause):
                counted += minutes
            else:
                not_counted += minutes
        return {
            "order_id": order_id,
            "total_pauses": len(pauses),
            "counted_minutes": counted,
            "not_counted_minutes": not_counted,
            "by_type": sorted(by_type.values(), key=lambda e: e["count"], reverse=True),
        }
