"""系统设置 Repository"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.setting import SystemSetting
from app.repositories.base import BaseRepository


class SettingRepository(BaseRepository[SystemSetting]):
    """系统设置数据访问"""

    model = SystemSetting

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_by_key(self, key: str) -> SystemSetting | None:
        result = await self.session.execute(select(SystemSetting).where(SystemSetting.key == key))
        return result.scalar_one_or_none()

    async def list_ordered(self) -> list[SystemSetting]:
        result = await self.session.execute(select(SystemSetting).order_by(SystemSetting.key))
        return list(result.scalars().all())

    async def upsert(
        self,
        key: str,
        value: str,
        description: str | None = None,
        category: str | None = None,
    ) -> SystemSetting:
        """按 key 创建或更新

        更新时 description / category 仅在显式传入时覆盖。
        """
        setting = await self.get_by_key(key)
        if setting is None:
            setting = SystemSetting(
                key=key,
                value=value,
                description=description,
                category=category or "general",
            )
            return await self.create(setting)

        values: dict[str, str] = {"value": value}
        if description is not None:
            values["description"] = description
        if category is not None:
            values["category"] = category
        return await self.update(setting, values)
