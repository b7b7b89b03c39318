"""FastAPI 应用入口"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import settings
from app.core.database import close_db, get_db_context, get_session_factory, init_db
from app.core.errors import register_exception_handlers
from app.core.gemini import GeminiClient
from app.core.logging import configure_logging, get_logger
from app.core.rate_limit import configure_consultation_limit
from app.routers import admin, admin_knowledge, calculators, chat, health, profile
from app.services.admin_auth import AdminAuthService
from app.services.config_cache import ConfigCache, DatabaseCacheLoader
from app.services.settings import SettingsService

logger = get_logger("app")


async def _seed_defaults() -> None:
    """写入默认系统设置与默认管理员"""
    async with get_db_context() as session:
        await SettingsService(session).seed_defaults()
        created = await AdminAuthService(session).ensure_default_admin(
            settings.DEFAULT_ADMIN_USERNAME,
            settings.DEFAULT_ADMIN_PASSWORD,
        )
    if created:
        logger.warning(
            "已创建默认管理员，请尽快修改密码",
            username=settings.DEFAULT_ADMIN_USERNAME,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    # 启动时配置日志（确保最先执行）
    configure_logging()

    logger.info("启动应用...")

    await init_db()
    await _seed_defaults()

    cache = ConfigCache(
        DatabaseCacheLoader(get_session_factory()),
        settings_ttl=settings.SETTINGS_CACHE_TTL_SECONDS,
        knowledge_ttl=settings.KNOWLEDGE_CACHE_TTL_SECONDS,
    )
    app.state.config_cache = cache

    # 聊天限流参数只在启动时读取一次
    await configure_consultation_limit(cache)

    app.state.llm_client = GeminiClient(
        api_key=settings.gemini_api_key,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.GEMINI_TIMEOUT_SECONDS,
    )
    if not settings.gemini_api_key:
        logger.warning("未配置 GEMINI_API_KEY，聊天与咨询将返回错误")

    logger.info("应用启动完成", host=settings.API_HOST, port=settings.API_PORT)

    yield

    logger.info("正在关闭应用...")

    await app.state.llm_client.aclose()
    logger.debug("Gemini 客户端已关闭")

    await close_db()

    logger.info("应用已关闭")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_TITLE,
        description="Consultoria em protocolos ergogênicos: perfil, chat com IA, calculadoras e painel administrativo",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # 管理员登录态（签名 cookie）
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        https_only=settings.SESSION_HTTPS_ONLY,
        same_site="lax",
    )

    # CORS 配置
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    # 注册路由
    application.include_router(profile.router)
    application.include_router(chat.router)
    application.include_router(calculators.router)
    application.include_router(admin.router)
    application.include_router(admin_knowledge.router)
    application.include_router(health.router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
    )
