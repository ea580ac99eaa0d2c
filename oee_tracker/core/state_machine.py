"""生产订单状态机

合法的状态流转：
    created -> started -> paused -> started -> ... -> finished
- finish 在除 finished 之外的任何状态都允许
- 同一时刻最多只有一个订单处于 started：start 在进程级锁与数据库事务内完成
  “检查 + 占用活动槽”，防止并发 start 同时成功
- 所有变更在一个事务内完成，出错整体回滚；通知在提交之后发送，失败不影响状态
"""

import logging
import threading
from datetime import timedelta
from typing import Callable, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..config.pause_types import is_valid_pause_type
from ..database.connection import transaction
from ..models import OrderState
from ..utils.helpers import utcnow
from .errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .metrics import ClosingInputs, MetricsEngine, MetricsSnapshot
from .notifier import (
    ORDER_CREATED,
    ORDER_DELETED,
    ORDER_UPDATED,
    PAUSE_UPDATED,
    Notifier,
    emit_serialized,
    notifier as default_notifier,
)
from .pause_ledger import PauseLedger, is_counting

logger = logging.getLogger(__name__)

# 保护“单一活动订单”的检查与写入
_ACTIVE_SLOT_LOCK = threading.Lock()

REQUIRED_FIELDS = ("order_code", "article_code", "product_name", "target_quantity", "target_boxes")
TEXT_FIELDS = ("product_format", "product_type", "container_type")
# 通用更新允许的字段；状态只能通过状态机流转修改
UPDATABLE_FIELDS = {
    "target_quantity",
    "target_boxes",
    "units_per_box",
    "initial_cut_number",
    "final_cut_number",
    "closing_good_units",
    "closing_bad_units",
} | set(TEXT_FIELDS)
PRODUCT_DETAIL_FIELDS = set(TEXT_FIELDS) | {"units_per_box"}

TRUE_STRINGS = {"1", "true", "yes", "si", "sí", "on"}


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_int(value):
    """严格整数解析，失败返回 None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


class OrderStateMachine:
    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable] = None,
        engine: Optional[MetricsEngine] = None,
    ):
        self.db = db
        self.notifier = notifier or default_notifier
        self.clock = clock or utcnow
        self.engine = engine or MetricsEngine()
        self.ledger = PauseLedger(db)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def get_order(self, order_id: int):
        order = crud.get_order(self.db, order_id)
        if not order:
            raise NotFoundError("生产订单未找到")
        return order

    def _notify(self, event_name: str, order) -> None:
        emit_serialized(self.notifier, event_name, schemas.ProductionOrderRead, order)

    def _close_open_pause(self, order, now):
        """关闭进行中的暂停；计入停机的时长累加到订单"""
        pause = self.ledger.open_pause(order.id)
        if pause is None:
            return None
        duration = self.ledger.record_end(pause.id, now)
        if is_counting(pause):
            order.accumulated_paused_minutes = (order.accumulated_paused_minutes or 0) + duration
        return pause

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------
    def _validate_create(self, fields: Mapping) -> Tuple[dict, list]:
        errors = []
        data = {}

        for name in REQUIRED_FIELDS:
            if _is_blank(fields.get(name)):
                errors.append(f"{name}: 必填")

        for name in ("order_code", "article_code", "product_name"):
            value = fields.get(name)
            if not _is_blank(value):
                data[name] = str(value).strip()

        target_quantity = fields.get("target_quantity")
        if not _is_blank(target_quantity):
            parsed = _to_int(target_quantity)
            if parsed is None:
                errors.append("target_quantity: 必须是整数")
            elif parsed <= 0:
                errors.append("target_quantity: 必须大于 0")
            else:
                data["target_quantity"] = parsed

        target_boxes = fields.get("target_boxes")
        if not _is_blank(target_boxes):
            parsed = _to_int(target_boxes)
            if parsed is None:
                errors.append("target_boxes: 必须是整数")
            elif parsed < 0:
                errors.append("target_boxes: 不能为负数")
            else:
                data["target_boxes"] = parsed

        units_per_box = fields.get("units_per_box")
        if not _is_blank(units_per_box):
            parsed = _to_int(units_per_box)
            if parsed is None:
                errors.append("units_per_box: 必须是整数")
            elif parsed < 0:
                errors.append("units_per_box: 不能为负数")
            else:
                data["units_per_box"] = parsed

        repercap = _to_bool(fields.get("repercap"))
        data["repercap"] = repercap
        initial_cut = fields.get("initial_cut_number")
        if _is_blank(initial_cut):
            if repercap:
                errors.append("initial_cut_number: 启用 repercap 时必填")
        else:
            parsed = _to_int(initial_cut)
            if parsed is None:
                errors.append("initial_cut_number: 必须是整数")
            elif parsed < 0:
                errors.append("initial_cut_number: 不能为负数")
            else:
                data["initial_cut_number"] = parsed

        for name in TEXT_FIELDS:
            value = fields.get(name)
            if not _is_blank(value):
                data[name] = str(value).strip()

        return data, errors

    def create(self, fields: Mapping):
        """校验并创建订单，状态为 created"""
        data, errors = self._validate_create(fields)
        if errors:
            raise ValidationError("订单字段缺失或无效", details=errors)

        data.update(
            state=OrderState.created,
            estimated_production_hours=self.engine.estimated_production_hours(data["target_quantity"]),
            good_units=0,
            counted_boxes=0,
            rejected_units=0,
            weight_scale_units=0,
            operator_units=0,
            weight_scale_total=0,
            accumulated_paused_minutes=0,
        )
        with transaction(self.db):
            if crud.get_order_by_code(self.db, data["order_code"]):
                raise ConflictError("已存在相同编号的订单", details=[data["order_code"]])
            try:
                order = crud.create_order(self.db, data)
            except IntegrityError as exc:
                raise ConflictError("已存在相同编号的订单", details=[data["order_code"]]) from exc

        logger.info("订单 %s (%s) 已创建", order.id, order.order_code)
        self._notify(ORDER_CREATED, order)
        return order

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self, order_id: int):
        """开始或恢复订单"""
        with _ACTIVE_SLOT_LOCK:
            with transaction(self.db):
                order = self.get_order(order_id)
                slot = crud.get_active_slot(self.db, for_update=True)
                active = crud.get_started_order(self.db, exclude_id=order.id)
                if active is not None:
                    raise ConflictError(
                        "已有正在生产的订单，无法开始",
                        details=[f"active_order_id: {active.id}"],
                    )
                if order.state not in (OrderState.created, OrderState.paused):
                    raise InvalidStateError(f"订单状态为 {order.state.value}，无法开始")

                now = self.clock()
                if order.state == OrderState.paused:
                    self._close_open_pause(order, now)
                order.state = OrderState.started
                if order.start_time is None:
                    order.start_time = now
                slot.order_id = order.id
                self.db.flush()

        logger.info("订单 %s 已开始", order_id)
        self._notify(ORDER_UPDATED, order)
        return order

    def pause(self, order_id: int, pause_type: str, comment: Optional[str] = None):
        """暂停订单，返回 (订单, 暂停记录)"""
        if not is_valid_pause_type(pause_type):
            raise ValidationError("暂停类型缺失或无效", details=[f"pause_type: {pause_type!r}"])
        with transaction(self.db):
            order = self.get_order(order_id)
            if order.state != OrderState.started:
                raise InvalidStateError("只能暂停处于 started 状态的订单")
            pause = self.ledger.record_start(order.id, pause_type, comment, self.clock())
            order.state = OrderState.paused
            crud.release_active_slot(self.db, order.id)
            self.db.flush()

        self._notify(ORDER_UPDATED, order)
        return order, pause

    def resume_pause(self, pause_id: int):
        """按暂停记录恢复订单，等同于 start"""
        pause = self.ledger.get(pause_id)
        if not pause.is_open:
            raise InvalidStateError("该暂停已经结束")
        order = self.get_order(pause.order_id)
        if order.state != OrderState.paused:
            raise InvalidStateError("订单不处于 paused 状态，无法结束暂停")
        return self.start(order.id)

    def finish(self, order_id: int, closing=None) -> Tuple[object, MetricsSnapshot]:
        """完成订单：关闭进行中的暂停，计算全部指标并一次性写入"""
        if not isinstance(closing, ClosingInputs):
            closing = ClosingInputs.from_mapping(closing)
        negative = closing.negative_fields()
        if negative:
            raise ValidationError("收尾数值不能为负数", details=[f"{name}: 不能为负数" for name in negative])
        with transaction(self.db):
            order = self.get_order(order_id)
            if order.state == OrderState.finished:
                raise InvalidStateError("订单已经完成")

            now = self.clock()
            if order.state == OrderState.paused:
                self._close_open_pause(order, now)
            pauses = self.ledger.list_for_order(order.id)
            snapshot = self.engine.compute(order, pauses, closing, now)

            crud.update_order(self.db, order, snapshot.as_order_fields())
            order.state = OrderState.finished
            order.end_time = now
            crud.release_active_slot(self.db, order.id)
            self.db.flush()

        logger.info("订单 %s 已完成：OEE=%s 运行 %s 分钟 / 暂停 %s 分钟",
                    order_id, snapshot.oee, snapshot.active_minutes, snapshot.paused_minutes)
        self._notify(ORDER_UPDATED, order)
        return order, snapshot

    # ------------------------------------------------------------------
    # edits
    # ------------------------------------------------------------------
    def update(self, order_id: int, fields: Mapping, allowed=None):
        """通用部分更新；不会重新计算指标"""
        allowed = UPDATABLE_FIELDS if allowed is None else allowed
        values = {k: v for k, v in fields.items() if k != "state" and v is not None}
        unknown = sorted(set(values) - allowed)
        if unknown:
            raise ValidationError("包含不可修改的字段", details=unknown)

        errors = []
        for name, value in list(values.items()):
            if name in TEXT_FIELDS:
                values[name] = str(value).strip()
                continue
            parsed = _to_int(value)
            if parsed is None:
                errors.append(f"{name}: 必须是整数")
            elif name == "target_quantity" and parsed <= 0:
                errors.append(f"{name}: 必须大于 0")
            elif parsed < 0:
                errors.append(f"{name}: 不能为负数")
            else:
                values[name] = parsed
        if errors:
            raise ValidationError("字段无效", details=errors)

        with transaction(self.db):
            order = self.get_order(order_id)
            if order.state == OrderState.finished:
                frozen = sorted(set(values) - set(TEXT_FIELDS))
                if frozen:
                    raise InvalidStateError("订单已完成，数值字段不可修改", details=frozen)
            if "target_quantity" in values:
                values["estimated_production_hours"] = self.engine.estimated_production_hours(
                    values["target_quantity"]
                )
            crud.update_order(self.db, order, values)

        self._notify(ORDER_UPDATED, order)
        return order

    def update_product_details(self, order_id: int, fields: Mapping):
        return self.update(order_id, fields, allowed=PRODUCT_DETAIL_FIELDS)

    def delete(self, order_id: int) -> None:
        """只允许删除 created 状态的订单"""
        with transaction(self.db):
            order = self.get_order(order_id)
            if order.state != OrderState.created:
                raise InvalidStateError(f"订单状态为 {order.state.value}，无法删除")
            crud.delete_order(self.db, order)
        logger.info("订单 %s 已删除", order_id)
        self.notifier.emit(ORDER_DELETED, {"id": order_id})

    def simulate_time(self, order_id: int, minutes: int = 60):
        """将开始时间前移 minutes 分钟，模拟生产已进行更久"""
        minutes = _to_int(minutes)
        if minutes is None:
            raise ValidationError("minutes 必须是整数", details=["minutes"])
        with transaction(self.db):
            order = self.get_order(order_id)
            if order.state != OrderState.started:
                raise InvalidStateError(f"只能模拟 started 状态的订单，当前状态 {order.state.value}")
            order.start_time = order.start_time - timedelta(minutes=minutes)
            self.db.flush()
        logger.info("订单 %s 模拟时间前移 %s 分钟", order_id, minutes)
        self._notify(ORDER_UPDATED, order)
        return order

    # ------------------------------------------------------------------
    # pause records
    # ------------------------------------------------------------------
    def update_pause(self, pause_id: int, comment: Optional[str] = None, pause_type: Optional[str] = None):
        """修改暂停备注，或修改进行中暂停的类型"""
        if comment is None and pause_type is None:
            raise ValidationError("没有需要修改的字段", details=["comment", "pause_type"])
        with transaction(self.db):
            pause = self.ledger.get(pause_id)
            if pause_type is not None:
                self.ledger.change_type(pause_id, pause_type)
            if comment is not None:
                self.ledger.update_comment(pause_id, comment)
        emit_serialized(self.notifier, PAUSE_UPDATED, schemas.PauseRead, pause)
        return pause

    def delete_pause(self, pause_id: int) -> None:
        with transaction(self.db):
            pause = self.ledger.delete(pause_id)
            order_id = pause.order_id
        order = crud.get_order(self.db, order_id)
        if order is not None:
            self._notify(ORDER_UPDATED, order)
