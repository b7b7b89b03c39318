"""配置模块测试"""

from app.core.config import Settings, settings


class TestSettingsBasic:
    """测试基本配置"""

    def test_settings_exists(self):
        assert settings is not None

    def test_cache_ttls(self):
        """知识库 TTL 为设置 TTL 的 5 倍"""
        assert settings.SETTINGS_CACHE_TTL_SECONDS == 60.0
        assert settings.KNOWLEDGE_CACHE_TTL_SECONDS == 300.0

    def test_gemini_timeout_is_explicit(self):
        assert settings.GEMINI_TIMEOUT_SECONDS > 0


class TestDatabaseConfig:
    """测试数据库配置"""

    def test_sqlite_url(self):
        s = Settings(DATABASE_BACKEND="sqlite", DATABASE_PATH="./data/x.db")
        assert s.database_url == "sqlite+aiosqlite:///./data/x.db"

    def test_postgres_url(self):
        s = Settings(
            DATABASE_BACKEND="postgres",
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_HOST="db",
            POSTGRES_PORT=5433,
            POSTGRES_DB="imperio",
        )
        assert s.database_url == "postgresql+asyncpg://u:p@db:5433/imperio"


class TestDerivedValues:
    """测试派生配置"""

    def test_gemini_key_falls_back_to_google_key(self):
        s = Settings(GEMINI_API_KEY="", GOOGLE_AI_API_KEY="google-key")
        assert s.gemini_api_key == "google-key"

    def test_gemini_key_prefers_gemini_key(self):
        s = Settings(GEMINI_API_KEY="gemini-key", GOOGLE_AI_API_KEY="google-key")
        assert s.gemini_api_key == "gemini-key"

    def test_cors_origins_list(self):
        s = Settings(CORS_ORIGINS="http://a.com, http://b.com,,")
        assert s.cors_origins_list == ["http://a.com", "http://b.com"]
