"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 数据库 ──
    DATABASE_URL: str
    DB_SCHEMA: str = "public"

    DB_ECHO: bool = False  # 打印 SQL 日志，调试时可在 .env 设为 true

    # ── 连接池 ──
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # ── Redis ──
    REDIS_URL: str
    REDIS_MAX_CONNECTIONS: int = 10

    # ── JWT ──
    JWT_SECRET: str = "dev-secret-change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 天

    # ── 用户分页 ──
    USER_PAGE_SIZE_DEFAULT: int = 10
    USER_PAGE_SIZE_MAX: int = 100

    # ── MCP 工具网关 ──
    MCP_ENFORCE_OUTPUT_SCHEMA: bool = True  # 声明了 output_model 的工具，返回值必须符合

    # ── 应用 ──
    ENV: str = "development"  # development | production
    APP_NAME: str = "user-mcp-backend"
    APP_PORT: int = 8000

    @model_validator(mode="after")
    def _check_production_secret(self) -> "Settings":
        """生产环境强制要求配置安全的 JWT_SECRET"""
        if self.ENV == "production" and (
            self.JWT_SECRET.startswith("dev-") or len(self.JWT_SECRET) < 32
        ):
            raise ValueError(
                "生产环境 JWT_SECRET 不能使用默认值，"
                "且长度必须 >= 32 位。请在 .env 中配置安全的密钥。"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
