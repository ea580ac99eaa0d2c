"""清洁工单数据结构定义"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..models.cleaning_order import CleaningState


class CleaningOrderCreate(BaseModel):
    description: Optional[str] = None


class CleaningOrderUpdate(BaseModel):
    """只有描述可以修改，状态通过 start / finish 流转"""
    description: Optional[str] = None


class CleaningOrderRead(BaseModel):
    id: int
    description: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    state: CleaningState
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CleaningSummary(BaseModel):
    """时间段内已完成清洁的汇总"""
    total_cleanings: int
    total_seconds: int
    average_seconds: int
