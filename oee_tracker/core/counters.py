"""生产计数器调整

只有 started / paused 状态的订单可以修改计数：
- 箱数变化时，若设置了每箱件数，合格件 = 箱数 * 每箱件数（覆盖）
- 合格件增加或设置时，若设置了每箱件数，箱数提升到 floor(合格件 / 每箱件数)，只升不降
- 剔除件、称重站件数变化时重新计算称重总数与回收率
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .. import crud, schemas
from ..database.connection import transaction
from ..models import OrderState
from .errors import InvalidStateError, NotFoundError, ValidationError
from .metrics import recovered_units, weight_recirculation, weight_recovery_rate
from .notifier import ORDER_UPDATED, Notifier, emit_serialized, notifier as default_notifier
from ..utils.helpers import round6

logger = logging.getLogger(__name__)

COUNTABLE_STATES = (OrderState.started, OrderState.paused)


def _parse_amount(amount) -> int:
    """数量必须是整数"""
    if amount is None or isinstance(amount, bool):
        raise ValidationError("数量必填", details=["amount"])
    if isinstance(amount, int):
        return amount
    if isinstance(amount, float):
        if amount.is_integer():
            return int(amount)
        raise ValidationError("数量必须是整数", details=["amount"])
    text = str(amount).strip()
    if not text:
        raise ValidationError("数量必填", details=["amount"])
    try:
        return int(text)
    except ValueError:
        raise ValidationError("数量必须是整数", details=["amount"])


def _refresh_weight_scale(order) -> None:
    """称重总数 = 称重站件数 + 剔除件，并同步回收相关字段"""
    order.weight_scale_total = (order.weight_scale_units or 0) + (order.rejected_units or 0)
    good = order.good_units or 0
    recovered = recovered_units(order.weight_scale_total, good)
    order.recovered_units = recovered
    order.weight_recovery_rate = round6(weight_recovery_rate(recovered, order.weight_scale_total))
    order.weight_recirculation = weight_recirculation(
        order.weight_scale_total, good + (order.closing_bad_units or 0)
    )


class CounterAdjuster:
    def __init__(self, db: Session, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier or default_notifier

    def _mutate(self, order_id: int, mutation: Callable):
        with transaction(self.db):
            order = crud.get_order(self.db, order_id)
            if not order:
                raise NotFoundError("生产订单未找到")
            if order.state not in COUNTABLE_STATES:
                raise InvalidStateError(f"订单状态为 {order.state.value}，不能修改计数")
            mutation(order)
            self.db.flush()
        emit_serialized(self.notifier, ORDER_UPDATED, schemas.ProductionOrderRead, order)
        return order

    @staticmethod
    def _check_non_negative(name: str, value: int) -> None:
        if value < 0:
            raise ValidationError(f"{name} 不能为负数", details=[name])

    # 合格件
    def _apply_good_units(self, order, value: int) -> None:
        """合格件变化时箱数只升不降"""
        self._check_non_negative("good_units", value)
        order.good_units = value
        units_per_box = order.units_per_box or 0
        if units_per_box > 0:
            order.counted_boxes = max(order.counted_boxes or 0, value // units_per_box)

    def increment_good_units(self, order_id: int, amount=1):
        amount = _parse_amount(amount)
        order = self._mutate(order_id, lambda o: self._apply_good_units(o, (o.good_units or 0) + amount))
        logger.info("订单 %s 合格件 %+d -> %s", order_id, amount, order.good_units)
        return order

    def set_good_units(self, order_id: int, amount):
        amount = _parse_amount(amount)
        self._check_non_negative("good_units", amount)
        return self._mutate(order_id, lambda o: self._apply_good_units(o, amount))

    # 箱数
    def _apply_boxes(self, order, boxes: int) -> None:
        self._check_non_negative("counted_boxes", boxes)
        order.counted_boxes = boxes
        units_per_box = order.units_per_box or 0
        if units_per_box > 0:
            order.good_units = boxes * units_per_box

    def increment_boxes(self, order_id: int, amount=1):
        amount = _parse_amount(amount)
        order = self._mutate(order_id, lambda o: self._apply_boxes(o, (o.counted_boxes or 0) + amount))
        logger.info("订单 %s 箱数 %+d -> %s（合格件 %s）", order_id, amount, order.counted_boxes, order.good_units)
        return order

    def set_boxes(self, order_id: int, amount):
        amount = _parse_amount(amount)
        return self._mutate(order_id, lambda o: self._apply_boxes(o, amount))

    # 剔除件
    def increment_rejected(self, order_id: int, amount=1):
        amount = _parse_amount(amount)

        def mutation(order):
            value = (order.rejected_units or 0) + amount
            self._check_non_negative("rejected_units", value)
            order.rejected_units = value
            _refresh_weight_scale(order)

        return self._mutate(order_id, mutation)

    # 称重站
    def _apply_weight_scale(self, order, value: int) -> None:
        self._check_non_negative("weight_scale_units", value)
        order.weight_scale_units = value
        _refresh_weight_scale(order)

    def increment_weight_scale_units(self, order_id: int, amount=1):
        amount = _parse_amount(amount)
        return self._mutate(
            order_id, lambda o: self._apply_weight_scale(o, (o.weight_scale_units or 0) + amount)
        )

    def set_weight_scale_units(self, order_id: int, amount):
        amount = _parse_amount(amount)
        return self._mutate(order_id, lambda o: self._apply_weight_scale(o, amount))

    # 操作员计数
    def _apply_operator(self, order, value: int) -> None:
        self._check_non_negative("operator_units", value)
        order.operator_units = value

    def increment_operator_units(self, order_id: int, amount=1):
        amount = _parse_amount(amount)
        return self._mutate(order_id, lambda o: self._apply_operator(o, (o.operator_units or 0) + amount))

    def set_operator_units(self, order_id: int, amount):
        amount = _parse_amount(amount)
        return self._mutate(order_id, lambda o: self._apply_operator(o, amount))
