"""数据库连接模块

统一管理数据库引擎、会话和模型基类的创建
- transaction() 为核心操作提供原子事务边界：成功提交，任何异常回滚后继续抛出
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..config.settings import settings

# sqlite 需要允许跨线程使用连接（TestClient / 线程池）
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# 创建数据库引擎
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.ECHO_SQL,  # 从配置中读取是否显示SQL日志
    connect_args=connect_args,
)

# 创建会话工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 创建模型基类
Base = declarative_base()


def get_db():
    """获取数据库会话的依赖函数"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db):
    """事务作用域：正常结束提交，异常时回滚"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
