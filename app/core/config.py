"""应用配置管理

进程级配置（数据库、会话、Gemini 凭据、日志等）来自环境变量 / .env。
运营类配置（系统提示词、温度、限流参数等）存储在 system_settings 表，
运行时通过 ConfigCache 读取。
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ========== 应用信息 ==========
    APP_TITLE: str = "Império Pharma API"
    APP_VERSION: str = "0.1.0"

    # ========== Gemini 配置 ==========
    GEMINI_API_KEY: str = ""  # 为空时回退到 GOOGLE_AI_API_KEY
    GOOGLE_AI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 30.0  # 单次调用的硬性超时

    # ========== 缓存配置 ==========
    SETTINGS_CACHE_TTL_SECONDS: float = 60.0
    KNOWLEDGE_CACHE_TTL_SECONDS: float = 300.0  # 知识库变化较少，5 倍于设置 TTL

    # ========== 数据库配置 ==========
    DATABASE_BACKEND: str = "sqlite"  # sqlite, postgres
    DATABASE_PATH: str = "./data/app.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_POOL_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "imperio"

    # ========== 会话配置 ==========
    SESSION_SECRET: str = "change-me-in-production"
    SESSION_COOKIE_NAME: str = "imperio_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24  # 24 小时
    SESSION_HTTPS_ONLY: bool = False

    # ========== 默认管理员 ==========
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "senha123"

    # ========== 服务配置 ==========
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    CORS_ORIGINS: str = "http://localhost:5173"

    # ========== 日志配置 ==========
    LOG_LEVEL: str = "DEBUG"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_MODE: str = "detailed"  # simple, detailed, json
    LOG_FILE: str = "./logs/app.log"
    LOG_FILE_ROTATION: str = "10 MB"
    LOG_FILE_RETENTION: str = "7 days"

    @property
    def gemini_api_key(self) -> str:
        """生效的 Gemini API Key"""
        return self.GEMINI_API_KEY or self.GOOGLE_AI_API_KEY

    @property
    def database_url(self) -> str:
        """数据库 URL（根据 DATABASE_BACKEND 生成）"""
        if self.DATABASE_BACKEND == "postgres":
            return (
                f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )
        return f"sqlite+aiosqlite:///{self.DATABASE_PATH}"

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS 允许的源列表（逗号分隔）"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def ensure_data_dir(self) -> None:
        """确保数据目录存在"""
        if self.DATABASE_BACKEND == "sqlite":
            Path(self.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


settings = get_settings()
