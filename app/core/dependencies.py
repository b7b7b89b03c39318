"""FastAPI 依赖注入

- 路由层使用 Depends(get_db_session) 获取会话
- ConfigCache 与 GeminiClient 在启动时创建并挂在 app.state 上
- 管理后台路由通过 require_admin 校验登录态
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.errors import raise_unauthorized
from app.core.gemini import GeminiClient
from app.services.admin_auth import SESSION_ADMIN_ID
from app.services.config_cache import ConfigCache


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（用于 FastAPI 路由依赖注入）"""
    async for session in get_db():
        yield session


def get_config_cache(request: Request) -> ConfigCache:
    return request.app.state.config_cache


def get_llm_client(request: Request) -> GeminiClient:
    return request.app.state.llm_client


async def require_admin(request: Request) -> int:
    """要求管理员登录态，返回 admin_id"""
    admin_id = request.session.get(SESSION_ADMIN_ID)
    if admin_id is None:
        raise_unauthorized()
    return admin_id


async def get_knowledge_store(
    db: AsyncSession = Depends(get_db_session),
    cache: ConfigCache = Depends(get_config_cache),
):
    from app.services.knowledge import KnowledgeStore

    return KnowledgeStore(db, cache)


async def get_consultation_service(
    db: AsyncSession = Depends(get_db_session),
    cache: ConfigCache = Depends(get_config_cache),
    llm: GeminiClient = Depends(get_llm_client),
):
    from app.services.consultation import ConsultationService

    return ConsultationService(db, cache, llm)
