"""管理员认证服务测试"""

import threading

import pytest

from app.core import security
from app.core.errors import AppError
from app.services import admin_auth
from app.services.admin_auth import AdminAuthService


@pytest.fixture
async def service(db_session) -> AdminAuthService:
    service = AdminAuthService(db_session)
    await service.ensure_default_admin("admin", "senha123")
    return service


class TestAuthenticate:
    @pytest.mark.anyio
    async def test_valid_credentials_update_last_login(self, service):
        admin = await service.authenticate("admin", "senha123")
        assert admin.username == "admin"
        assert admin.last_login is not None

    @pytest.mark.anyio
    async def test_wrong_password_is_401(self, service):
        with pytest.raises(AppError) as exc_info:
            await service.authenticate("admin", "errada")
        assert exc_info.value.status_code == 401

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("username", "password"),
        [("admin", "errada"), ("ninguem", "senha123")],
    )
    async def test_hashing_runs_off_event_loop(self, service, monkeypatch, username, password):
        """哈希校验在线程池执行，不阻塞事件循环"""
        loop_thread = threading.get_ident()
        threads: list[int] = []

        def record_verify(plain, hashed):
            threads.append(threading.get_ident())
            return security.verify_password(plain, hashed)

        def record_dummy():
            threads.append(threading.get_ident())
            security.dummy_verify()

        monkeypatch.setattr(admin_auth, "verify_password", record_verify)
        monkeypatch.setattr(admin_auth, "dummy_verify", record_dummy)

        with pytest.raises(AppError):
            await service.authenticate(username, password)

        assert len(threads) == 1
        assert threads[0] != loop_thread


class TestEnsureDefaultAdmin:
    @pytest.mark.anyio
    async def test_existing_admin_is_kept(self, service):
        assert await service.ensure_default_admin("admin", "outra") is False
        admin = await service.authenticate("admin", "senha123")
        assert admin.username == "admin"
