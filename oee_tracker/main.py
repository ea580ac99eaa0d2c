"""FastAPI主应用入口

实现生产订单生命周期与 OEE 指标的 RESTful API 服务
- 使用依赖注入管理数据库会话、时钟与通知器
- 领域错误统一映射为 {"detail": ..., "errors": [...]} 响应
"""

import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api.v1 import cleaning_orders_router, orders_router, pauses_router
from .config.settings import settings
from .core.errors import DomainError
from .database.connection import Base, engine, get_db
from .logging_conf import configure_logging

configure_logging(settings.LOG_LEVEL, settings.APP_LOG_LEVEL or None)
logger = logging.getLogger(__name__)

# 确保数据表存在（正式环境使用 alembic 迁移）
Base.metadata.create_all(bind=engine)

# 创建FastAPI应用实例
app = FastAPI(title=settings.APP_TITLE, description=settings.APP_DESCRIPTION, version=settings.APP_VERSION)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s 失败: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s 被拒绝(%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "errors": exc.details})


# 包含API路由
app.include_router(orders_router, prefix="/api/v1")
app.include_router(pauses_router, prefix="/api/v1")
app.include_router(cleaning_orders_router, prefix="/api/v1")


# 健康检查端点
@app.get("/health/db")
def health_check(db: Session = Depends(get_db)):
    """检查数据库连接状态"""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "reachable"}
    except SQLAlchemyError:
        logger.exception("数据库健康检查失败")
        raise HTTPException(status_code=503, detail="Database connection failed")


# 根路径 - 返回服务状态
@app.get("/")
def read_root():
    """返回服务运行状态"""
    return {"service": settings.APP_TITLE, "version": settings.APP_VERSION, "status": "running"}
