"""用户画像与对话历史 API"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_consultation_service, get_db_session
from app.schemas.conversation import ConversationTurnResponse
from app.schemas.profile import ProfileCreate, ProfileResponse
from app.services.consultation import ConsultationService
from app.services.profile import ProfileService

router = APIRouter(prefix="/api", tags=["profile"])


@router.post("/profile", response_model=ProfileResponse)
async def create_profile(
    request: ProfileCreate,
    db: AsyncSession = Depends(get_db_session),
):
    """创建画像（同一 sessionId 重复提交返回已有画像）"""
    return await ProfileService(db).create_profile(request)


@router.get("/profile/{session_id}", response_model=ProfileResponse)
async def get_profile(
    session_id: str,
    db: AsyncSession = Depends(get_db_session),
):
    return await ProfileService(db).get_profile(session_id)


@router.get("/conversations/{session_id}", response_model=list[ConversationTurnResponse])
async def get_conversations(
    session_id: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    """会话的全部消息（时间正序）"""
    return await service.list_history(session_id)
