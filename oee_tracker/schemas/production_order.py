"""生产订单数据结构定义

定义生产订单相关的Pydantic模型
- 创建 / 收尾请求中的数值字段接受字符串或数字，真正的校验在状态机中完成，
  以便一次性返回所有缺失 / 非法字段
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from ..models import OrderState
from .pause import PauseRead

NumberLike = Union[int, float, str, None]


class ProductionOrderCreate(BaseModel):
    """创建订单时的模型"""
    order_code: Optional[str] = None
    article_code: Optional[str] = None
    product_name: Optional[str] = None
    target_quantity: NumberLike = None
    target_boxes: NumberLike = None
    units_per_box: NumberLike = None
    repercap: Optional[bool] = False
    initial_cut_number: NumberLike = None
    product_format: Optional[str] = None
    product_type: Optional[str] = None
    container_type: Optional[str] = None


class ProductionOrderUpdate(BaseModel):
    """通用更新模型（不能修改状态）"""
    target_quantity: Optional[int] = None
    target_boxes: Optional[int] = None
    units_per_box: Optional[int] = None
    initial_cut_number: Optional[int] = None
    final_cut_number: Optional[int] = None
    closing_good_units: Optional[int] = None
    closing_bad_units: Optional[int] = None
    product_format: Optional[str] = None
    product_type: Optional[str] = None
    container_type: Optional[str] = None


class ProductDetailsUpdate(BaseModel):
    """手动修改产品细节"""
    product_format: Optional[str] = None
    product_type: Optional[str] = None
    container_type: Optional[str] = None
    units_per_box: Optional[int] = None


class FinishRequest(BaseModel):
    """收尾输入，全部可选"""
    closing_good_units: NumberLike = None
    closing_bad_units: NumberLike = None
    final_cut_number: NumberLike = None
    weight_scale_total: NumberLike = None
    rejected_units: NumberLike = None


class PauseRequest(BaseModel):
    pause_type: Optional[str] = None
    comment: Optional[str] = None


class CounterRequest(BaseModel):
    amount: NumberLike = None


class SimulateTimeRequest(BaseModel):
    minutes: int = 60


class ProductionOrderRead(BaseModel):
    """读取订单时的模型"""
    id: int
    order_code: str
    article_code: str
    product_name: str
    product_format: Optional[str] = None
    product_type: Optional[str] = None
    container_type: Optional[str] = None
    target_quantity: int
    target_boxes: int
    units_per_box: Optional[int] = None
    estimated_production_hours: Optional[float] = None
    state: OrderState
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    good_units: int = 0
    counted_boxes: int = 0
    rejected_units: int = 0
    weight_scale_units: int = 0
    operator_units: int = 0
    weight_scale_total: int = 0
    recovered_units: Optional[int] = None
    weight_recirculation: Optional[int] = None
    weight_recovery_rate: Optional[float] = None
    accumulated_paused_minutes: int = 0

    repercap: bool = False
    initial_cut_number: Optional[int] = None
    final_cut_number: Optional[int] = None

    closing_good_units: Optional[int] = None
    closing_bad_units: Optional[int] = None
    total_units: Optional[int] = None
    total_minutes: Optional[int] = None
    active_minutes: Optional[int] = None
    paused_minutes: Optional[int] = None
    paused_percent: Optional[float] = None
    good_percent: Optional[float] = None
    bad_percent: Optional[float] = None
    completion_percent: Optional[float] = None
    rejection_rate: Optional[float] = None
    repercap_recirculation: Optional[int] = None
    repercap_recovery_rate: Optional[float] = None
    actual_rate: Optional[float] = None
    actual_vs_theoretical: Optional[float] = None
    availability: Optional[float] = None
    performance: Optional[float] = None
    quality: Optional[float] = None
    oee: Optional[float] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pauses: List[PauseRead] = []

    class Config:
        from_attributes = True


class OEEMetricsRead(BaseModel):
    """OEE 指标读取模型"""
    availability: Optional[float] = None
    performance: Optional[float] = None
    quality: Optional[float] = None
    oee: Optional[float] = None
    total_minutes: Optional[int] = None
    active_minutes: Optional[int] = None
    paused_minutes: Optional[int] = None
    target_quantity: int
    closing_good_units: Optional[int] = None
    closing_bad_units: Optional[int] = None
    rejected_units: int = 0
    actual_rate: Optional[float] = None
    actual_vs_theoretical: Optional[float] = None

    class Config:
        from_attributes = True


class OrderStatistics(BaseModel):
    """订单实时时间统计（秒）"""
    order_id: int
    total_seconds: int
    active_seconds: int
    paused_seconds: int
    total_display: str
    active_display: str
    paused_display: str


class PauseOutcome(BaseModel):
    order: ProductionOrderRead
    pause: PauseRead
    counts_toward_downtime: bool


class FinishOutcome(BaseModel):
    order: ProductionOrderRead
    warnings: List[str] = []
