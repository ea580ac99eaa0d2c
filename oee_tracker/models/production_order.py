"""生产订单数据库模型

定义生产订单及其状态枚举
- 实时计数器在 started / paused 状态下可变，finished 后冻结
- 派生指标（时间、比率、OEE）只在 finish 时一次性写入，之前为 NULL
"""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database.connection import Base


class OrderState(str, enum.Enum):
    created = "created"
    started = "started"
    paused = "paused"
    finished = "finished"


class ProductionOrder(Base):
    """生产订单表"""
    __tablename__ = "production_orders"

    id = Column(Integer, primary_key=True, index=True)
    # 标识字段，创建后不可修改
    order_code = Column(String(64), unique=True, index=True, nullable=False)  # 订单编号
    article_code = Column(String(64), nullable=False)  # 物料编号
    product_name = Column(String(255), nullable=False)  # 产品名称

    # 产品细节（可手动修改）
    product_format = Column(String(255), nullable=True)  # 规格
    product_type = Column(String(255), nullable=True)  # 类型
    container_type = Column(String(255), nullable=True)  # 罐型

    # 计划数量
    target_quantity = Column(Integer, nullable=False)  # 计划生产数量（> 0）
    target_boxes = Column(Integer, nullable=False, default=0)  # 计划箱数（>= 0）
    units_per_box = Column(Integer, nullable=True)  # 每箱件数
    estimated_production_hours = Column(Float, nullable=True)  # target_quantity / 理论标准

    # 生命周期
    state = Column(
        Enum(OrderState, name="order_state", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderState.created,
    )
    start_time = Column(DateTime, nullable=True)  # 首次开始时间，所有耗时计算的锚点
    end_time = Column(DateTime, nullable=True)

    # 实时计数器
    good_units = Column(Integer, nullable=False, default=0)  # 合格件
    counted_boxes = Column(Integer, nullable=False, default=0)  # 已计箱数（高水位）
    rejected_units = Column(Integer, nullable=False, default=0)  # 剔除件
    weight_scale_units = Column(Integer, nullable=False, default=0)  # 称重站件数
    operator_units = Column(Integer, nullable=False, default=0)  # 操作员上报件数
    weight_scale_total = Column(Integer, nullable=False, default=0)  # weight_scale_units + rejected_units
    recovered_units = Column(Integer, nullable=True)
    weight_recirculation = Column(Integer, nullable=True)
    weight_recovery_rate = Column(Float, nullable=True)

    # 恢复生产时累计的计入停机的暂停分钟
    accumulated_paused_minutes = Column(Integer, nullable=False, default=0)

    # Repercap（卫生切割计数）
    repercap = Column(Boolean, nullable=False, default=False)
    initial_cut_number = Column(Integer, nullable=True)
    final_cut_number = Column(Integer, nullable=True)

    # 收尾数量
    closing_good_units = Column(Integer, nullable=True)
    closing_bad_units = Column(Integer, nullable=True)
    total_units = Column(Integer, nullable=True)

    # 时间（分钟）
    total_minutes = Column(Integer, nullable=True)
    active_minutes = Column(Integer, nullable=True)
    paused_minutes = Column(Integer, nullable=True)

    # 百分比（0-100）
    paused_percent = Column(Float, nullable=True)
    good_percent = Column(Float, nullable=True)
    bad_percent = Column(Float, nullable=True)
    completion_percent = Column(Float, nullable=True)
    rejection_rate = Column(Float, nullable=True)
    repercap_recirculation = Column(Integer, nullable=True)
    repercap_recovery_rate = Column(Float, nullable=True)

    # 标准产能
    actual_rate = Column(Float, nullable=True)  # 实际件/小时
    actual_vs_theoretical = Column(Float, nullable=True)

    # OEE 三要素（0-1）
    availability = Column(Float, nullable=True)
    performance = Column(Float, nullable=True)
    quality = Column(Float, nullable=True)
    oee = Column(Float, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    pauses = relationship(
        "PauseRecord",
        back_populates="order",
        order_by="PauseRecord.start_time",
        cascade="all, delete-orphan",
    )
