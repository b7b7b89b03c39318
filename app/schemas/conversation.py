"""对话相关 Schema"""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class ChatRequest(CamelModel):
    """聊天请求"""

    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=4000)


class AnalysisRequest(CamelModel):
    """初始分析请求"""

    session_id: str = Field(..., min_length=1)


class ConsultationRequest(CamelModel):
    """结构化咨询请求，message 为空时按画像生成完整方案建议"""

    session_id: str = Field(..., min_length=1)
    message: str | None = Field(default=None, max_length=4000)


class ConversationTurnResponse(CamelModel):
    """单条消息响应"""

    id: int
    session_id: str
    message: str
    sender: str
    timestamp: datetime
    tokens_used: int = 0
