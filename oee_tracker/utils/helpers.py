"""工具函数模块

包含时间与数值解析相关的常用工具函数
- parse_int / parse_float: None、空串、非数字输入返回默认值；非数字输入会记录警告
"""

import logging
import math
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """当前 UTC 时间（不带时区，与数据库中的 DateTime 字段一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def minutes_between(start: datetime, end: datetime) -> int:
    """两个时间点之间的整分钟数（向下取整）

    公式：floor((end - start) / 60000ms)
    """
    return math.floor((end - start).total_seconds() / 60)


def parse_int(value, default=0, field: str = None):
    """将输入解析为整数；无法解析时返回 default"""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            logger.warning("字段 %s 不是有效数字: %r，使用默认值 %r", field or "?", value, default)
            return default
        return int(value)
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            logger.warning("字段 %s 不是有效数字: %r，使用默认值 %r", field or "?", value, default)
            return default


def parse_float(value, default=0.0, field: str = None):
    """将输入解析为浮点数；无法解析时返回 default"""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        if not (isinstance(value, str) and not value.strip()):
            logger.warning("字段 %s 不是有效数字: %r，使用默认值 %r", field or "?", value, default)
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def first_nonzero(*values) -> int:
    """按顺序返回第一个非零整数值，都为零时返回 0"""
    for value in values:
        if value:
            return value
    return 0


def round6(value):
    """保留 6 位小数后入库"""
    if value is None:
        return None
    return round(float(value), 6)


def format_duration_seconds(seconds) -> str:
    """将秒数格式化为 hh:mm:ss"""
    if not seconds:
        return "00:00:00"
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
