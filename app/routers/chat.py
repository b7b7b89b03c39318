"""聊天与咨询 API

/chat 与 /consultation 共享同一个限流计数器。
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.core.dependencies import get_consultation_service
from app.core.rate_limit import consultation_rate_limit
from app.schemas.conversation import (
    AnalysisRequest,
    ChatRequest,
    ConsultationRequest,
    ConversationTurnResponse,
)
from app.services.consultation import ConsultationService

router = APIRouter(prefix="/api", tags=["chat"])


@router.post(
    "/chat",
    response_model=ConversationTurnResponse,
    dependencies=[Depends(consultation_rate_limit)],
)
async def chat(
    request: ChatRequest,
    service: ConsultationService = Depends(get_consultation_service),
):
    """发送消息，返回 AI 回复"""
    return await service.chat(request.session_id, request.message)


@router.post("/analysis", response_model=ConversationTurnResponse)
async def analysis(
    request: AnalysisRequest,
    service: ConsultationService = Depends(get_consultation_service),
):
    """生成初始画像分析"""
    return await service.analysis(request.session_id)


@router.post(
    "/consultation",
    response_model=ConversationTurnResponse,
    dependencies=[Depends(consultation_rate_limit)],
)
async def consultation(
    request: ConsultationRequest,
    service: ConsultationService = Depends(get_consultation_service),
):
    """结构化咨询（结合按画像定向的方案与产品）"""
    return await service.consult(request.session_id, request.message)


@router.get("/consultation/{session_id}/download", response_class=PlainTextResponse)
async def download_consultation(
    session_id: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    """下载纯文本对话记录"""
    content = await service.transcript(session_id)
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="consulta-{session_id}.txt"'},
    )
