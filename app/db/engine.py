"""
数据库引擎：AsyncEngine + AsyncSession 工厂

- UserService 持有 async_session 工厂，每个操作自行开启 / 提交会话
- /health 通过 get_db 依赖拿一次性会话做连通性探测
- 表位于 DB_SCHEMA 下，由连接级 search_path 定位（模型本身不写 schema，便于测试换 SQLite）
"""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    pool_pre_ping=True,
    echo=settings.DB_ECHO,
    connect_args={"server_settings": {"search_path": settings.DB_SCHEMA}},
)

# 提交后不过期：UserService 在会话关闭后仍要调用 to_safe_dict()
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI 依赖注入：单次请求的数据库会话（目前仅健康检查使用）"""
    async with async_session() as session:
        yield session
