"""应用模块入口

生产订单生命周期与 OEE 指标服务
"""

from . import (
    config,
    crud,
    db,
    models,
    schemas,
    core,
)

# 从子模块导入关键组件
from .config import settings
from .db import get_db, engine, Base

__version__ = "1.0.0"

__all__ = [
    "config",
    "crud",
    "db",
    "models",
    "schemas",
    "core",
    "settings",
    "get_db",
    "engine",
    "Base",
]
