"""系统设置服务测试"""

import pytest

from app.schemas.settings import SettingUpsert
from app.services.settings import DEFAULT_SETTINGS, SettingsService


class TestSeedDefaults:
    @pytest.mark.anyio
    async def test_seed_is_idempotent(self, db_session):
        service = SettingsService(db_session)
        assert await service.seed_defaults() == len(DEFAULT_SETTINGS)
        assert await service.seed_defaults() == 0

    @pytest.mark.anyio
    async def test_seed_keeps_existing_values(self, db_session):
        service = SettingsService(db_session)
        await service.set_setting(SettingUpsert(key="ai_model", value="gemini-2.5-pro", category="ai"))

        await service.seed_defaults()

        values = {s.key: s.value for s in await service.list_settings()}
        assert values["ai_model"] == "gemini-2.5-pro"
        assert values["rate_limit_requests"] == "10"


class TestUpsert:
    @pytest.mark.anyio
    async def test_update_keeps_description_when_omitted(self, db_session):
        service = SettingsService(db_session)
        await service.seed_defaults()

        updated = await service.set_setting(SettingUpsert(key="ai_temperature", value="0.4"))

        assert updated.value == "0.4"
        assert updated.description == "Temperatura da IA (0.0 - 1.0)"
        assert updated.category == "ai"
