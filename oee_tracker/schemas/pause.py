"""暂停数据结构定义

定义暂停相关的Pydantic模型
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class PauseCreate(BaseModel):
    """手动创建暂停（等同于暂停订单）"""
    order_id: int
    pause_type: Optional[str] = None
    comment: Optional[str] = None


class PauseUpdate(BaseModel):
    """修改暂停：备注，或进行中暂停的类型"""
    comment: Optional[str] = None
    pause_type: Optional[str] = None


class PauseRead(BaseModel):
    """读取暂停时的模型"""
    id: int
    order_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    pause_type: str
    comment: Optional[str] = None
    counts_toward_downtime: bool

    class Config:
        from_attributes = True


class PauseTypeRead(BaseModel):
    type: str
    description: str
    counts_toward_downtime: bool


class PauseTypeStatistics(BaseModel):
    pause_type: str
    count: int
    total_minutes: int
    counts_toward_downtime: bool


class PauseStatistics(BaseModel):
    """单个订单的暂停统计"""
    order_id: int
    total_pauses: int
    counted_minutes: int
    not_counted_minutes: int
    by_type: List[PauseTypeStatistics]
