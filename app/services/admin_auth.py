"""管理员认证服务"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppError, raise_bad_request
from app.core.logging import get_logger
from app.core.security import dummy_verify, hash_password, verify_password
from app.models.admin import Admin
from app.repositories.admin import AdminRepository

logger = get_logger("services.admin_auth")

INVALID_CREDENTIALS_MESSAGE = "Credenciais inválidas"
MISSING_CREDENTIALS_MESSAGE = "Usuário e senha são obrigatórios"

SESSION_ADMIN_ID = "admin_id"
SESSION_ADMIN_USERNAME = "admin_username"


class AdminAuthService:
    """管理员登录与默认账号初始化"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = AdminRepository(db)

    async def authenticate(self, username: str | None, password: str | None) -> Admin:
        """校验用户名密码

        Raises:
            AppError: 缺少字段 400，凭据无效 401
        """
        if not username or not password:
            raise_bad_request("missing_credentials", MISSING_CREDENTIALS_MESSAGE)

        logger.info("管理员登录尝试", username=username)
        admin = await self.repo.get_by_username(username)
        if admin is None:
            await asyncio.to_thread(dummy_verify)
            logger.warning("管理员不存在", username=username)
            raise AppError(code="invalid_credentials", message=INVALID_CREDENTIALS_MESSAGE, status_code=401)

        if not await asyncio.to_thread(verify_password, password, admin.password):
            logger.warning("管理员密码错误", username=username)
            raise AppError(code="invalid_credentials", message=INVALID_CREDENTIALS_MESSAGE, status_code=401)

        admin = await self.repo.touch_last_login(admin)
        await self.db.commit()
        logger.info("管理员登录成功", username=username, admin_id=admin.id)
        return admin

    async def ensure_default_admin(self, username: str, password: str) -> bool:
        """默认管理员不存在时创建

        Returns:
            是否新建
        """
        if await self.repo.get_by_username(username) is not None:
            return False

        hashed = await asyncio.to_thread(hash_password, password)
        await self.repo.create_admin(username, hashed)
        await self.db.commit()
        logger.info("默认管理员已创建", username=username)
        return True
