"""管理员 Repository"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import Admin
from app.models.base import utcnow
from app.repositories.base import BaseRepository


class AdminRepository(BaseRepository[Admin]):
    """管理员数据访问"""

    model = Admin

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_by_username(self, username: str) -> Admin | None:
        result = await self.session.execute(select(Admin).where(Admin.username == username))
        return result.scalar_one_or_none()

    async def create_admin(self, username: str, password_hash: str) -> Admin:
        return await self.create(Admin(username=username, password=password_hash))

    async def touch_last_login(self, admin: Admin) -> Admin:
        return await self.update(admin, {"last_login": utcnow()})
