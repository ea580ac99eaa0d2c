"""应用配置模块

使用 Pydantic Settings 管理应用配置，支持从 .env 文件加载环境变量
- REFERENCE_RATE: 理论标准产能（件/小时），用于预计时长、性能、OEE 计算
- REPERCAP_FORMULA: 卫生切割计数回流公式（subtractive / multiplicative）
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置类"""

    # 应用配置
    APP_TITLE: str = "生产订单 OEE 系统"
    APP_DESCRIPTION: str = "生产订单生命周期与 OEE 指标 API"
    APP_VERSION: str = "1.0.0"

    # 日志级别
    LOG_LEVEL: str = "INFO"
    APP_LOG_LEVEL: str = ""  # oee_tracker 自身的级别，为空时与 LOG_LEVEL 相同

    # MySQL 配置 - 从环境变量加载
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_HOST: str = ""
    MYSQL_PORT: str = "3306"
    MYSQL_DB: str = "oee_db"

    # 数据库配置 - 优先使用DATABASE_URL，否则从MySQL配置构建
    DATABASE_URL: str = ""
    ECHO_SQL: bool = False  # 是否打印SQL日志

    # 生产指标配置
    REFERENCE_RATE: float = 4000.0  # 理论标准（件/小时）
    REPERCAP_FORMULA: str = "subtractive"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # 如果没有显式设置DATABASE_URL，从MySQL配置构建，否则退回本地 sqlite
        if not self.DATABASE_URL:
            if self.MYSQL_HOST:
                self.DATABASE_URL = f"mysql+pymysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}@{self.MYSQL_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DB}"
            else:
                self.DATABASE_URL = "sqlite:///./dev.db"

    class Config:
        env_file = ".env"  # 从.env文件加载配置


# 创建全局配置实例
settings = Settings()
