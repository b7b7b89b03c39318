"""Pytest 配置"""

import os
import tempfile

import pytest

# 测试环境配置：在导入 app.core.config 之前设置
os.environ.setdefault("DATABASE_BACKEND", "sqlite")
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(prefix="imperio_test_"), "app.db"))
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("GEMINI_BASE_URL", "https://gemini.invalid/v1beta")
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("LOG_MODE", "simple")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FILE", "")

from collections.abc import AsyncGenerator  # noqa: E402

import httpx  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.gemini import GenerationResult  # noqa: E402
from app.core.rate_limit import (  # noqa: E402
    DEFAULT_CHAT_MAX_REQUESTS,
    DEFAULT_CHAT_WINDOW_MINUTES,
    admin_rate_limit,
    chat_limit_message,
    consultation_rate_limit,
)
from app.models import Base  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeGeminiClient:
    """替代 GeminiClient：记录调用，返回预设结果或抛出预设异常"""

    def __init__(self, text: str = "Resposta da IA", tokens_used: int = 120):
        self.api_key = "test-key"
        self.text = text
        self.tokens_used = tokens_used
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def generate_content(self, model, system_instruction, temperature, prompt):
        self.calls.append(
            {
                "model": model,
                "system_instruction": system_instruction,
                "temperature": temperature,
                "prompt": prompt,
            }
        )
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.text, tokens_used=self.tokens_used)

    async def aclose(self):
        return None


@pytest.fixture
async def engine():
    """内存 SQLite 引擎（单连接共享）"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
async def app(session_factory, fake_llm):
    """测试应用：内存数据库 + 假 Gemini 客户端 + 已初始化的默认数据

    ASGITransport 不触发 lifespan，这里手动完成启动时的准备工作。
    """
    from app.core.dependencies import get_db_session
    from app.main import create_app
    from app.services.admin_auth import AdminAuthService
    from app.services.config_cache import ConfigCache, DatabaseCacheLoader
    from app.services.settings import SettingsService

    async with session_factory() as session:
        await SettingsService(session).seed_defaults()
        await AdminAuthService(session).ensure_default_admin("admin", "senha123")

    application = create_app()
    application.state.config_cache = ConfigCache(DatabaseCacheLoader(session_factory))
    application.state.llm_client = fake_llm

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session

    consultation_rate_limit.configure(
        DEFAULT_CHAT_MAX_REQUESTS,
        DEFAULT_CHAT_WINDOW_MINUTES * 60,
        chat_limit_message(DEFAULT_CHAT_WINDOW_MINUTES),
    )
    await admin_rate_limit.reset()
    await consultation_rate_limit.reset()

    yield application

    await admin_rate_limit.reset()
    await consultation_rate_limit.reset()


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
async def admin_client(client) -> httpx.AsyncClient:
    """已登录的管理员客户端"""
    response = await client.post("/api/admin/login", json={"username": "admin", "password": "senha123"})
    assert response.status_code == 200
    return client


PROFILE_PAYLOAD = {
    "sessionId": "sess-1",
    "gender": "feminino",
    "goal": "cutting",
    "preferences": ["oral"],
    "age": 28,
    "experience": 2,
}


@pytest.fixture
async def profile(client) -> dict:
    response = await client.post("/api/profile", json=PROFILE_PAYLOAD)
    assert response.status_code == 200
    return response.json()
