"""数据库连接管理

单一异步引擎，按 DATABASE_BACKEND 选择 SQLite（aiosqlite）或 PostgreSQL（asyncpg）。
事务边界：Repository 只 flush，服务层显式 commit；
get_db / get_db_context 在正常结束时兜底提交，异常时回滚。
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import Settings, settings
from app.core.logging import get_logger

logger = get_logger("database")

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    # WAL 允许读写并发，busy_timeout 避免短暂锁冲突直接报错
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(config: Settings) -> AsyncEngine:
    """根据配置创建引擎"""
    if config.DATABASE_BACKEND == "sqlite":
        engine = create_async_engine(
            config.database_url,
            connect_args={"timeout": 30, "check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_pragmas)
        return engine

    if config.DATABASE_BACKEND == "postgres":
        return create_async_engine(
            config.database_url,
            pool_size=config.DATABASE_POOL_SIZE,
            max_overflow=config.DATABASE_POOL_MAX_OVERFLOW,
            pool_timeout=config.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,
        )

    raise ValueError(f"不支持的数据库后端: {config.DATABASE_BACKEND}")


def get_engine() -> AsyncEngine:
    """获取引擎（首次调用时创建）"""
    global _engine
    if _engine is None:
        _engine = build_engine(settings)
        logger.info("数据库引擎已创建", backend=settings.DATABASE_BACKEND)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """获取会话工厂"""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（用于 FastAPI 依赖注入）"""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except (Exception, asyncio.CancelledError):
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（上下文管理器，用于启动任务、脚本等无 request 场景）"""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except (Exception, asyncio.CancelledError):
            await session.rollback()
            raise


async def init_db() -> None:
    """创建缺失的表（不做迁移）"""
    from app.models import Base

    settings.ensure_data_dir()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据库表初始化完成", backend=settings.DATABASE_BACKEND)


async def close_db() -> None:
    """释放连接池"""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("数据库连接已关闭")
    _engine = None
    _session_factory = None
