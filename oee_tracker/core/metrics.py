"""生产指标计算

MetricsEngine.compute(order, pauses, closing, now) 是纯函数：读取订单字段与暂停台账，
返回不可变的 MetricsSnapshot，本身不写数据库。计算顺序：

1. 合格件：units_per_box > 0 且已计箱数 > 0 时，合格件 = units_per_box * 箱数
2. 进行中的暂停按 now 截止
3. 暂停分钟 = 计入停机的暂停时长之和
4. 总分钟 = floor((now - start_time) / 60s)，已开始时最少 1 分钟，未开始为 0
5. 运行分钟 = 总分钟 - 暂停分钟（为负时置 0 并给出警告）
6. 收尾合格 / 不合格 / 总件数
7. 称重站回收件数、回流件数
8. Repercap 回流：(末切割号 - 初切割号) - 总件数
9. 比率：暂停占比、合格率、剔除率、完成率、实际产能、可用率、性能、质量、OEE
10. 小数统一保留 6 位；百分比为 0-100，OEE 三要素为 0-1
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional, Tuple

from ..config.settings import settings
from ..utils.helpers import first_nonzero, minutes_between, parse_float, parse_int, round6, utcnow
from .pause_ledger import is_counting, sum_counting_minutes

logger = logging.getLogger(__name__)

SUBTRACTIVE = "subtractive"
MULTIPLICATIVE = "multiplicative"
REPERCAP_FORMULAS = (SUBTRACTIVE, MULTIPLICATIVE)


@dataclass(frozen=True)
class ClosingInputs:
    """收尾时由操作员提供的数值，全部可选"""
    closing_good_units: Optional[int] = None
    closing_bad_units: Optional[int] = None
    final_cut_number: Optional[int] = None
    weight_scale_total: Optional[int] = None
    rejected_units: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping]) -> "ClosingInputs":
        data = data or {}
        return cls(**{
            name: parse_int(data.get(name), default=None, field=name)
            for name in cls.__dataclass_fields__
        })

    def negative_fields(self) -> list:
        """显式给出且小于 0 的字段名"""
        return [
            name for name in self.__dataclass_fields__
            if getattr(self, name) is not None and getattr(self, name) < 0
        ]


@dataclass(frozen=True)
class MetricsSnapshot:
    good_units: int
    closing_good_units: int
    closing_bad_units: int
    total_units: int
    rejected_units: int
    weight_scale_total: int
    recovered_units: int
    weight_recirculation: int
    final_cut_number: Optional[int]
    repercap_recirculation: Optional[int]
    total_minutes: int
    active_minutes: int
    paused_minutes: int
    estimated_production_hours: float
    paused_percent: float
    good_percent: float
    bad_percent: float
    rejection_rate: float
    weight_recovery_rate: float
    completion_percent: float
    repercap_recovery_rate: Optional[float]
    actual_rate: float
    actual_vs_theoretical: float
    availability: float
    performance: float
    quality: float
    oee: float
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def as_order_fields(self) -> dict:
        """订单上需要写入的字段"""
        values = asdict(self)
        values.pop("warnings")
        return values


def total_elapsed_minutes(start_time: Optional[datetime], now: datetime) -> int:
    """开始至今的整分钟数；已开始时最少 1 分钟"""
    if start_time is None:
        return 0
    total = minutes_between(start_time, now)
    return total if total >= 1 else 1


def recovered_units(weight_scale_total: int, good_units: int) -> int:
    """称重站回收件数 = max(0, 称重总数 - 合格件)，任一为 0 时为 0"""
    if weight_scale_total > 0 and good_units > 0:
        return max(weight_scale_total - good_units, 0)
    return 0


def weight_recovery_rate(recovered: int, weight_scale_total: int) -> float:
    if weight_scale_total > 0:
        return recovered / weight_scale_total * 100
    return 0.0


def weight_recirculation(weight_scale_total: int, total_units: int) -> int:
    """称重回流 = 称重总数 - 总件数"""
    if weight_scale_total > 0 and total_units > 0:
        return weight_scale_total - total_units
    return 0


class MetricsEngine:
    def __init__(self, reference_rate: float = None, repercap_formula: str = None):
        rate = settings.REFERENCE_RATE if reference_rate is None else reference_rate
        self.reference_rate = parse_float(rate, default=0.0, field="reference_rate")
        self.repercap_formula = (repercap_formula or settings.REPERCAP_FORMULA).lower()
        if self.repercap_formula not in REPERCAP_FORMULAS:
            raise ValueError(f"未知的 repercap 公式: {self.repercap_formula}")

    def estimated_production_hours(self, target_quantity) -> float:
        target = parse_int(target_quantity, field="target_quantity")
        if self.reference_rate <= 0:
            return 0.0
        return round6(target / self.reference_rate)

    @staticmethod
    def resolve_good_units(order) -> int:
        """箱数自动推导优先于手动设置的合格件"""
        units_per_box = parse_int(order.units_per_box, field="units_per_box")
        boxes = parse_int(order.counted_boxes, field="counted_boxes")
        if units_per_box > 0 and boxes > 0:
            return units_per_box * boxes
        return parse_int(order.good_units, field="good_units")

    def repercap_recirculation(self, initial_cut, final_cut, total_units: int, good_units: int):
        if initial_cut is None or final_cut is None:
            return None
        delta = final_cut - initial_cut
        if self.repercap_formula == MULTIPLICATIVE:
            return good_units * delta
        return delta - total_units

    def compute(self, order, pauses: Iterable, closing: ClosingInputs = None, now: datetime = None) -> MetricsSnapshot:
        closing = closing or ClosingInputs()
        now = now or utcnow()
        pauses = list(pauses)
        warnings = []
        rate = self.reference_rate

        good_units = self.resolve_good_units(order)

        # 时间
        paused_minutes = sum_counting_minutes(pauses, now=now)
        total_minutes = total_elapsed_minutes(order.start_time, now)
        active_minutes = total_minutes - paused_minutes
        if active_minutes < 0:
            message = (f"暂停时间（{paused_minutes} 分钟）超过总时间（{total_minutes} 分钟），"
                       f"运行时间按 0 计算")
            logger.warning("订单 %s: %s", getattr(order, "id", None), message)
            warnings.append(message)
            active_minutes = 0

        # 件数
        closing_good = first_nonzero(
            closing.closing_good_units,
            good_units,
            parse_int(order.closing_good_units, field="closing_good_units"),
        )
        closing_bad = first_nonzero(
            closing.closing_bad_units,
            parse_int(order.closing_bad_units, field="closing_bad_units"),
        )
        total_units = closing_good + closing_bad
        rejected = first_nonzero(closing.rejected_units, parse_int(order.rejected_units, field="rejected_units"))

        # 称重站
        scale_total = first_nonzero(
            closing.weight_scale_total,
            parse_int(order.weight_scale_total, field="weight_scale_total"),
        )
        recovered = recovered_units(scale_total, good_units)
        scale_recirculation = weight_recirculation(scale_total, total_units)

        # Repercap
        final_cut = closing.final_cut_number
        if final_cut is None:
            final_cut = parse_int(order.final_cut_number, default=None, field="final_cut_number")
        initial_cut = parse_int(order.initial_cut_number, default=None, field="initial_cut_number")
        repercap_recirculation = self.repercap_recirculation(initial_cut, final_cut, total_units, good_units)

        # 比率
        target = parse_int(order.target_quantity, field="target_quantity")
        paused_percent = paused_minutes / total_minutes * 100 if total_minutes > 0 else 0.0
        good_percent = closing_good / total_units * 100 if total_units > 0 else 0.0
        bad_percent = closing_bad / total_units * 100 if total_units > 0 else 0.0
        rejection_rate = rejected / total_units * 100 if total_units > 0 else 0.0
        completion_percent = closing_good / target * 100 if target > 0 else 0.0
        repercap_recovery_rate = None
        if repercap_recirculation is not None and total_units > 0:
            repercap_recovery_rate = repercap_recirculation / total_units * 100

        actual_rate = total_units / active_minutes * 60 if active_minutes > 0 else 0.0
        actual_vs_theoretical = actual_rate / rate * 100 if rate > 0 else 0.0

        # OEE
        availability = active_minutes / total_minutes if total_minutes > 0 else 0.0
        theoretical_units = active_minutes * rate / 60
        performance = total_units / theoretical_units if theoretical_units > 0 else 0.0
        quality = closing_good / total_units if total_units > 0 else 0.0
        oee = availability * performance * quality

        return MetricsSnapshot(
            good_units=good_units,
            closing_good_units=closing_good,
            closing_bad_units=closing_bad,
            total_units=total_units,
            rejected_units=rejected,
            weight_scale_total=scale_total,
            recovered_units=recovered,
            weight_recirculation=scale_recirculation,
            final_cut_number=final_cut,
            repercap_recirculation=repercap_recirculation,
            total_minutes=total_minutes,
            active_minutes=active_minutes,
            paused_minutes=paused_minutes,
            estimated_production_hours=self.estimated_production_hours(target),
            paused_percent=round6(paused_percent),
            good_percent=round6(good_percent),
            bad_percent=round6(bad_percent),
            rejection_rate=round6(rejection_rate),
            weight_recovery_rate=round6(weight_recovery_rate(recovered, scale_total)),
            completion_percent=round6(completion_percent),
            repercap_recovery_rate=round6(repercap_recovery_rate),
            actual_rate=round6(actual_rate),
            actual_vs_theoretical=round6(actual_vs_theoretical),
            availability=round6(availability),
            performance=round6(performance),
            quality=round6(quality),
            oee=round6(oee),
            warnings=tuple(warnings),
        )

    @staticmethod
    def live_times(order, pauses: Iterable, now: datetime = None) -> dict:
        """未完成订单的实时时间统计（秒）"""
        now = now or utcnow()
        if order.start_time is None:
            return {"total_seconds": 0, "active_seconds": 0, "paused_seconds": 0}
        end = order.end_time or now
        total = math.floor((end - order.start_time).total_seconds())
        paused = 0
        for pause in pauses:
            if not is_counting(pause):
                continue
            pause_end = pause.end_time or end
            paused += max(math.floor((pause_end - pause.start_time).total_seconds()), 0)
        return {
            "total_seconds": total,
            "active_seconds": max(total - paused, 0),
            "paused_seconds": paused,
        }
