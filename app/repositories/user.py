"""用户画像 Repository"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """用户画像数据访问"""

    model = User

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_by_session_id(self, session_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.session_id == session_id))
        return result.scalar_one_or_none()

    async def list_recent(self) -> list[User]:
        """全部用户，最新创建在前"""
        result = await self.session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return list(result.scalars().all())

    async def count_created_since(self, since: datetime) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.created_at >= since)
        )
        return int(result.scalar_one())

    async def count_by_goal(self) -> list[tuple[str, int]]:
        """按目标分组统计用户数"""
        result = await self.session.execute(
            select(User.goal, func.count(User.id)).group_by(User.goal).order_by(User.goal)
        )
        return [(goal, int(count)) for goal, count in result.all()]
