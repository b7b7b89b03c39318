"""管理后台 API 路由

整组路由先经过管理后台限流（未登录请求同样计数），
除 /login 外均要求管理员登录态。
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_config_cache, get_db_session, require_admin
from app.core.logging import get_logger
from app.core.rate_limit import admin_rate_limit
from app.schemas.admin import (
    AnalyticsResponse,
    DashboardStats,
    LoginRequest,
    LoginResponse,
    UserDetail,
)
from app.schemas.common import SuccessResponse
from app.schemas.conversation import ConversationTurnResponse
from app.schemas.profile import ProfileResponse
from app.schemas.settings import SettingResponse, SettingUpsert
from app.services.admin_auth import SESSION_ADMIN_ID, SESSION_ADMIN_USERNAME, AdminAuthService
from app.services.analytics import AnalyticsService
from app.services.config_cache import ConfigCache
from app.services.consultation import DEFAULT_COST_PER_1K_TOKENS
from app.services.settings import SettingsService

logger = get_logger("router.admin")
router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(admin_rate_limit)])


# ========== 认证 ==========


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
):
    admin = await AdminAuthService(db).authenticate(body.username, body.password)
    request.session[SESSION_ADMIN_ID] = admin.id
    request.session[SESSION_ADMIN_USERNAME] = admin.username
    return admin


@router.post("/logout", response_model=SuccessResponse, dependencies=[Depends(require_admin)])
async def logout(request: Request):
    logger.info("管理员已登出", username=request.session.get(SESSION_ADMIN_USERNAME))
    request.session.pop(SESSION_ADMIN_ID, None)
    request.session.pop(SESSION_ADMIN_USERNAME, None)
    return SuccessResponse()


# ========== 统计 ==========


@router.get("/dashboard", response_model=DashboardStats, dependencies=[Depends(require_admin)])
async def get_dashboard(
    db: AsyncSession = Depends(get_db_session),
    cache: ConfigCache = Depends(get_config_cache),
):
    cost_per_1k = await cache.get_float("api_cost_per_1k_tokens", DEFAULT_COST_PER_1K_TOKENS)
    return await AnalyticsService(db).dashboard(cost_per_1k)


@router.get("/analytics", response_model=AnalyticsResponse, dependencies=[Depends(require_admin)])
async def get_analytics(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    db: AsyncSession = Depends(get_db_session),
):
    """API 用量分析（默认最近 30 天）"""
    return await AnalyticsService(db).analytics(start_date, end_date)


# ========== 用户与对话 ==========


@router.get("/users", response_model=list[ProfileResponse], dependencies=[Depends(require_admin)])
async def list_users(db: AsyncSession = Depends(get_db_session)):
    return await AnalyticsService(db).list_users()


@router.get("/users/{session_id}", response_model=UserDetail, dependencies=[Depends(require_admin)])
async def get_user_detail(session_id: str, db: AsyncSession = Depends(get_db_session)):
    """画像 + 对话 + 计算记录"""
    return await AnalyticsService(db).user_detail(session_id)


@router.get(
    "/conversations",
    response_model=list[ConversationTurnResponse],
    dependencies=[Depends(require_admin)],
)
async def list_conversations(
    search: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    db: AsyncSession = Depends(get_db_session),
):
    return await AnalyticsService(db).list_conversations(search, start_date, end_date)


# ========== 系统设置 ==========


@router.get("/settings", response_model=list[SettingResponse], dependencies=[Depends(require_admin)])
async def list_settings(db: AsyncSession = Depends(get_db_session)):
    return await SettingsService(db).list_settings()


@router.post("/settings", response_model=SettingResponse, dependencies=[Depends(require_admin)])
async def set_setting(
    request: SettingUpsert,
    db: AsyncSession = Depends(get_db_session),
):
    """写入设置（按 key upsert），新值在设置缓存 TTL 内生效"""
    return await SettingsService(db).set_setting(request)
