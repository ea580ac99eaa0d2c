"""日志配置

应用启动时调用一次 configure_logging：
- 输出到 stdout，带线程名（并发 start 的日志可以区分请求线程）
- oee_tracker 自身的日志级别可以单独设置，第三方库默认保持安静
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 第三方库的默认级别
LIBRARY_LEVELS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "multipart": logging.WARNING,
}


def _to_level(name: Optional[str], fallback: int) -> int:
    if not name:
        return fallback
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else fallback


def configure_logging(level: str = "INFO", app_level: Optional[str] = None) -> None:
    """配置根日志；app_level 为空时 oee_tracker 与根日志同级"""
    root_level = _to_level(level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    # uvicorn --reload 会重复导入，先移除旧的 handler
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
    root_logger.addHandler(handler)
    root_logger.setLevel(root_level)

    logging.getLogger("oee_tracker").setLevel(_to_level(app_level, root_level))
    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)
    logging.captureWarnings(True)

    if _to_level(level, -1) == -1:
        logging.getLogger(__name__).warning("无效的日志级别 %r，使用 INFO", level)
