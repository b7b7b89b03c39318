"""用户画像服务"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import raise_not_found
from app.core.logging import get_logger
from app.models.user import User
from app.repositories.user import UserRepository
from app.schemas.profile import ProfileCreate

logger = get_logger("services.profile")

USER_NOT_FOUND_MESSAGE = "Usuário não encontrado"


class ProfileService:
    """用户画像服务"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = UserRepository(db)

    async def create_profile(self, data: ProfileCreate) -> User:
        """创建画像；session_id 已存在时直接返回已有画像"""
        existing = await self.repo.get_by_session_id(data.session_id)
        if existing is not None:
            return existing

        user = await self.repo.create(User(**data.model_dump()))
        await self.db.commit()
        logger.info("用户画像已创建", session_id=data.session_id, goal=data.goal)
        return user

    async def get_profile(self, session_id: str) -> User:
        """获取画像，不存在时抛出 404"""
        user = await self.repo.get_by_session_id(session_id)
        if user is None:
            raise_not_found("user", USER_NOT_FOUND_MESSAGE, session_id)
        return user
