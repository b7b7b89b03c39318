"""配置缓存

两级 read-through 缓存：
- settings 层：system_settings 全量 KV，TTL 默认 60 秒
- knowledge 层：启用中的产品 / 方案 / 知识条目，TTL 默认 300 秒（5 倍）

读取时若该层过期（或从未加载、已失效）则同步整体刷新后再返回。
刷新失败时保留旧快照并记录日志，不向调用方抛出，refreshed_at 不前移，
下一次读取会重试。

不加锁：并发请求可能重复刷新，后写入者覆盖，结果一致。

按画像查询方案（get_protocols_by_profile）永不缓存，始终直接查库，
保证定向字段修改后立即生效。
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.repositories.knowledge import (
    KnowledgeEntryRepository,
    ProductRepository,
    ProtocolRepository,
)
from app.repositories.setting import SettingRepository
from app.schemas.knowledge import KnowledgeEntryResponse, ProductResponse, ProtocolResponse

logger = get_logger("services.config_cache")

T = TypeVar("T")


@dataclass
class KnowledgeSnapshot:
    """知识库快照（只含启用中的条目）"""

    products: list[ProductResponse] = field(default_factory=list)
    protocols: list[ProtocolResponse] = field(default_factory=list)
    knowledge: list[KnowledgeEntryResponse] = field(default_factory=list)


class CacheLoader(Protocol):
    """缓存数据源"""

    async def fetch_settings(self) -> dict[str, str]: ...

    async def fetch_knowledge(self) -> KnowledgeSnapshot: ...

    async def fetch_protocols_by_profile(
        self,
        goal: str,
        gender: str | None,
        experience: int | None,
    ) -> list[ProtocolResponse]: ...


class DatabaseCacheLoader:
    """从数据库读取缓存数据，每次读取使用独立会话"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_settings(self) -> dict[str, str]:
        async with self._session_factory() as session:
            rows = await SettingRepository(session).list_ordered()
        return {row.key: row.value for row in rows}

    async def fetch_knowledge(self) -> KnowledgeSnapshot:
        async with self._session_factory() as session:
            products = await ProductRepository(session).list_all(active_only=True)
            protocols = await ProtocolRepository(session).list_all(active_only=True)
            entries = await KnowledgeEntryRepository(session).list_all(active_only=True)
            return KnowledgeSnapshot(
                products=[ProductResponse.model_validate(p) for p in products],
                protocols=[ProtocolResponse.model_validate(p) for p in protocols],
                knowledge=[KnowledgeEntryResponse.model_validate(k) for k in entries],
            )

    async def fetch_protocols_by_profile(
        self,
        goal: str,
        gender: str | None,
        experience: int | None,
    ) -> list[ProtocolResponse]:
        async with self._session_factory() as session:
            rows = await ProtocolRepository(session).list_by_profile(goal, gender, experience)
            return [ProtocolResponse.model_validate(row) for row in rows]


@dataclass
class CacheTier(Generic[T]):
    """单层缓存：值 + 刷新时间 + TTL"""

    name: str
    ttl: float
    value: T
    refreshed_at: float | None = None

    def is_stale(self, now: float) -> bool:
        return self.refreshed_at is None or (now - self.refreshed_at) >= self.ttl

    def invalidate(self) -> None:
        self.refreshed_at = None


class ConfigCache:
    """设置与知识库的内存缓存

    Args:
        loader: 数据源
        settings_ttl: settings 层 TTL（秒）
        knowledge_ttl: knowledge 层 TTL（秒）
        clock: 单调时钟，测试时可替换
    """

    def __init__(
        self,
        loader: CacheLoader,
        settings_ttl: float = 60.0,
        knowledge_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._clock = clock
        self._settings: CacheTier[dict[str, str]] = CacheTier("settings", settings_ttl, {})
        self._knowledge: CacheTier[KnowledgeSnapshot] = CacheTier("knowledge", knowledge_ttl, KnowledgeSnapshot())

    # ========== settings 层 ==========

    async def _ensure_settings(self) -> dict[str, str]:
        if self._settings.is_stale(self._clock()):
            try:
                values = await self._loader.fetch_settings()
            except Exception as e:
                logger.warning("刷新设置缓存失败，继续使用旧快照", error=str(e))
            else:
                self._settings.value = values
                self._settings.refreshed_at = self._clock()
                logger.debug("设置缓存已刷新", count=len(values))
        return self._settings.value

    async def get(self, key: str, default: str = "") -> str:
        """读取设置值；key 不存在时返回 default"""
        values = await self._ensure_settings()
        return values.get(key, default)

    async def get_float(self, key: str, default: float) -> float:
        raw = await self.get(key, "")
        try:
            return float(raw)
        except ValueError:
            if raw:
                logger.warning("设置值不是有效数字，使用默认值", key=key, value=raw, default=default)
            return default

    async def get_int(self, key: str, default: int) -> int:
        raw = await self.get(key, "")
        try:
            return int(raw)
        except ValueError:
            if raw:
                logger.warning("设置值不是有效整数，使用默认值", key=key, value=raw, default=default)
            return default

    # ========== knowledge 层 ==========

    async def _ensure_knowledge(self) -> KnowledgeSnapshot:
        if self._knowledge.is_stale(self._clock()):
            try:
                snapshot = await self._loader.fetch_knowledge()
            except Exception as e:
                logger.warning("刷新知识库缓存失败，继续使用旧快照", error=str(e))
            else:
                self._knowledge.value = snapshot
                self._knowledge.refreshed_at = self._clock()
                logger.debug(
                    "知识库缓存已刷新",
                    products=len(snapshot.products),
                    protocols=len(snapshot.protocols),
                    knowledge=len(snapshot.knowledge),
                )
        return self._knowledge.value

    async def get_active_products(self) -> list[ProductResponse]:
        return list((await self._ensure_knowledge()).products)

    async def get_active_protocols(self) -> list[ProtocolResponse]:
        return list((await self._ensure_knowledge()).protocols)

    async def get_active_knowledge(self) -> list[KnowledgeEntryResponse]:
        return list((await self._ensure_knowledge()).knowledge)

    async def get_protocols_by_profile(
        self,
        goal: str,
        gender: str | None = None,
        experience: int | None = None,
    ) -> list[ProtocolResponse]:
        """按画像查询方案（不缓存，直接查库）"""
        return await self._loader.fetch_protocols_by_profile(goal, gender, experience)

    def invalidate(self) -> None:
        """两层同时失效，下次读取强制刷新"""
        self._settings.invalidate()
        self._knowledge.invalidate()
        logger.info("配置缓存已失效")
