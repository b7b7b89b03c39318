"""知识库 Repository（产品、方案、知识条目）"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.knowledge import KnowledgeEntry
from app.models.product import Product
from app.models.protocol import Protocol
from app.repositories.base import BaseRepository

# 画像表单提交葡语性别，方案定向字段使用 male / female
PROFILE_GENDER_TARGETS = {
    "masculino": "male",
    "feminino": "female",
    "male": "male",
    "female": "female",
}


def target_gender_for(gender: str) -> str | None:
    """画像性别转为方案 target_gender，无法识别时返回 None（只匹配 both）"""
    return PROFILE_GENDER_TARGETS.get(gender.strip().lower())


class ProductRepository(BaseRepository[Product]):
    """产品数据访问"""

    model = Product

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def list_all(self, *, active_only: bool = False) -> list[Product]:
        stmt = select(Product)
        if active_only:
            stmt = stmt.where(Product.is_active.is_(True))
        result = await self.session.execute(stmt.order_by(Product.name, Product.id))
        return list(result.scalars().all())


class ProtocolRepository(BaseRepository[Protocol]):
    """方案数据访问"""

    model = Protocol

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def list_all(self, *, active_only: bool = False) -> list[Protocol]:
        stmt = select(Protocol)
        if active_only:
            stmt = stmt.where(Protocol.is_active.is_(True))
        result = await self.session.execute(stmt.order_by(Protocol.title, Protocol.id))
        return list(result.scalars().all())

    async def list_by_profile(
        self,
        goal: str,
        gender: str | None = None,
        experience: int | None = None,
    ) -> list[Protocol]:
        """按画像筛选启用中的方案

        - goal 精确匹配
        - gender 给定时（masculino/feminino 或 male/female）匹配对应性别或 both
        - experience 给定时需落在 [min_experience, max_experience] 内，max 为空视为无上限
        """
        stmt = select(Protocol).where(
            Protocol.is_active.is_(True),
            Protocol.target_goal == goal,
        )
        if gender is not None:
            target = target_gender_for(gender)
            if target is None:
                stmt = stmt.where(Protocol.target_gender == "both")
            else:
                stmt = stmt.where(Protocol.target_gender.in_((target, "both")))
        if experience is not None:
            stmt = stmt.where(
                Protocol.min_experience <= experience,
                or_(Protocol.max_experience.is_(None), Protocol.max_experience >= experience),
            )
        result = await self.session.execute(stmt.order_by(Protocol.title, Protocol.id))
        return list(result.scalars().all())


class KnowledgeEntryRepository(BaseRepository[KnowledgeEntry]):
    """知识条目数据访问"""

    model = KnowledgeEntry

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def list_all(self, *, active_only: bool = False) -> list[KnowledgeEntry]:
        stmt = select(KnowledgeEntry)
        if active_only:
            stmt = stmt.where(KnowledgeEntry.is_active.is_(True))
        stmt = stmt.order_by(KnowledgeEntry.priority, KnowledgeEntry.title, KnowledgeEntry.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
