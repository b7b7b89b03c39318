"""ConfigCache 测试

使用假的数据源与可控时钟，验证 TTL、失效与刷新失败时的行为。
"""

from datetime import datetime

import pytest

from app.schemas.knowledge import ProductResponse, ProtocolResponse
from app.services.config_cache import ConfigCache, KnowledgeSnapshot


NOW = datetime(2026, 1, 1, 12, 0, 0)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _product(product_id: int, name: str) -> ProductResponse:
    return ProductResponse(
        id=product_id,
        name=name,
        category="oral",
        description=None,
        dosage_info=None,
        contraindications=None,
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
    )


def _protocol(protocol_id: int, title: str) -> ProtocolResponse:
    return ProtocolResponse(
        id=protocol_id,
        title=title,
        category="cutting",
        target_goal="cutting",
        target_gender="both",
        min_experience=0,
        max_experience=None,
        protocol_steps=[],
        duration=None,
        warnings=None,
        pct_required=False,
        is_active=True,
        created_at=NOW,
        updated_at=NOW,
    )


class FakeLoader:
    """记录调用次数的数据源"""

    def __init__(self):
        self.settings: dict[str, str] = {"ai_model": "gemini-2.5-flash"}
        self.snapshot = KnowledgeSnapshot(products=[_product(1, "Oxandrolona")])
        self.profile_protocols = [_protocol(1, "Cutting iniciante")]
        self.fail = False
        self.settings_calls = 0
        self.knowledge_calls = 0
        self.profile_calls: list[tuple] = []

    async def fetch_settings(self) -> dict[str, str]:
        self.settings_calls += 1
        if self.fail:
            raise RuntimeError("database is locked")
        return dict(self.settings)

    async def fetch_knowledge(self) -> KnowledgeSnapshot:
        self.knowledge_calls += 1
        if self.fail:
            raise RuntimeError("database is locked")
        return self.snapshot

    async def fetch_protocols_by_profile(self, goal, gender, experience):
        self.profile_calls.append((goal, gender, experience))
        return list(self.profile_protocols)


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(loader, clock) -> ConfigCache:
    return ConfigCache(loader, settings_ttl=60, knowledge_ttl=300, clock=clock)


class TestSettingsTier:
    """settings 层"""

    @pytest.mark.anyio
    async def test_first_read_loads(self, cache, loader):
        assert await cache.get("ai_model") == "gemini-2.5-flash"
        assert loader.settings_calls == 1

    @pytest.mark.anyio
    async def test_missing_key_returns_default(self, cache, loader, clock):
        """默认值在缓存的各种状态下都生效"""
        assert await cache.get("missing", "fallback") == "fallback"
        clock.advance(30)
        assert await cache.get("missing", "fallback") == "fallback"
        clock.advance(60)
        assert await cache.get("missing", "fallback") == "fallback"
        cache.invalidate()
        assert await cache.get("missing", "fallback") == "fallback"

    @pytest.mark.anyio
    async def test_missing_key_default_is_empty_string(self, cache):
        assert await cache.get("missing") == ""

    @pytest.mark.anyio
    async def test_empty_value_is_returned_as_is(self, cache, loader):
        """key 存在但值为空串时不回退到默认值"""
        loader.settings["welcome_message"] = ""
        assert await cache.get("welcome_message", "Olá") == ""

    @pytest.mark.anyio
    async def test_change_visible_only_after_ttl(self, cache, loader, clock):
        assert await cache.get("ai_model") == "gemini-2.5-flash"
        loader.settings["ai_model"] = "gemini-2.5-pro"

        clock.advance(59)
        assert await cache.get("ai_model") == "gemini-2.5-flash"
        assert loader.settings_calls == 1

        clock.advance(1)
        assert await cache.get("ai_model") == "gemini-2.5-pro"
        assert loader.settings_calls == 2

    @pytest.mark.anyio
    async def test_refresh_failure_keeps_stale_snapshot(self, cache, loader, clock):
        assert await cache.get("ai_model") == "gemini-2.5-flash"

        loader.fail = True
        clock.advance(61)
        assert await cache.get("ai_model") == "gemini-2.5-flash"
        assert loader.settings_calls == 2

        # 刷新时间未前移，下一次读取继续重试
        assert await cache.get("ai_model") == "gemini-2.5-flash"
        assert loader.settings_calls == 3

        loader.fail = False
        loader.settings["ai_model"] = "gemini-2.5-pro"
        assert await cache.get("ai_model") == "gemini-2.5-pro"
        assert loader.settings_calls == 4

    @pytest.mark.anyio
    async def test_failure_before_first_load_uses_default(self, cache, loader):
        loader.fail = True
        assert await cache.get("ai_model", "padrão") == "padrão"


class TestNumericGetters:
    """数值读取"""

    @pytest.mark.anyio
    async def test_get_float(self, cache, loader):
        loader.settings["ai_temperature"] = "0.5"
        assert await cache.get_float("ai_temperature", 0.8) == 0.5

    @pytest.mark.anyio
    async def test_get_float_invalid_uses_default(self, cache, loader):
        loader.settings["ai_temperature"] = "quente"
        assert await cache.get_float("ai_temperature", 0.8) == 0.8

    @pytest.mark.anyio
    async def test_get_int(self, cache, loader):
        loader.settings["rate_limit_requests"] = "20"
        assert await cache.get_int("rate_limit_requests", 10) == 20

    @pytest.mark.anyio
    async def test_get_int_missing_uses_default(self, cache):
        assert await cache.get_int("rate_limit_requests", 10) == 10


class TestKnowledgeTier:
    """knowledge 层"""

    @pytest.mark.anyio
    async def test_single_fetch_serves_all_lists(self, cache, loader):
        products = await cache.get_active_products()
        await cache.get_active_protocols()
        await cache.get_active_knowledge()

        assert [p.name for p in products] == ["Oxandrolona"]
        assert loader.knowledge_calls == 1

    @pytest.mark.anyio
    async def test_knowledge_ttl_is_independent(self, cache, loader, clock):
        await cache.get("ai_model")
        await cache.get_active_products()

        clock.advance(120)
        await cache.get("ai_model")
        await cache.get_active_products()
        assert loader.settings_calls == 2
        assert loader.knowledge_calls == 1

        clock.advance(180)
        await cache.get_active_products()
        assert loader.knowledge_calls == 2

    @pytest.mark.anyio
    async def test_invalidate_forces_exactly_one_refresh(self, cache, loader):
        await cache.get_active_products()
        loader.snapshot = KnowledgeSnapshot(products=[_product(2, "Enantato")])

        cache.invalidate()
        first = await cache.get_active_products()
        second = await cache.get_active_products()

        assert [p.name for p in first] == ["Enantato"]
        assert [p.name for p in second] == ["Enantato"]
        assert loader.knowledge_calls == 2

    @pytest.mark.anyio
    async def test_invalidate_also_resets_settings(self, cache, loader):
        await cache.get("ai_model")
        cache.invalidate()
        await cache.get("ai_model")
        assert loader.settings_calls == 2

    @pytest.mark.anyio
    async def test_returned_list_is_a_copy(self, cache):
        products = await cache.get_active_products()
        products.clear()
        assert len(await cache.get_active_products()) == 1

    @pytest.mark.anyio
    async def test_knowledge_refresh_failure_keeps_snapshot(self, cache, loader, clock):
        await cache.get_active_products()
        loader.fail = True
        clock.advance(301)
        assert [p.name for p in await cache.get_active_products()] == ["Oxandrolona"]


class TestProtocolsByProfile:
    """按画像查询方案"""

    @pytest.mark.anyio
    async def test_always_hits_loader(self, cache, loader):
        await cache.get_protocols_by_profile("cutting", "female", 2)
        await cache.get_protocols_by_profile("cutting", "female", 2)
        assert loader.profile_calls == [("cutting", "female", 2), ("cutting", "female", 2)]

    @pytest.mark.anyio
    async def test_change_visible_immediately(self, cache, loader):
        assert len(await cache.get_protocols_by_profile("cutting")) == 1
        loader.profile_protocols = []
        assert await cache.get_protocols_by_profile("cutting") == []
