"""Pydantic 模型"""

from app.schemas.admin import (
    AnalyticsResponse,
    DashboardStats,
    LoginRequest,
    LoginResponse,
    UserDetail,
)
from app.schemas.calculators import (
    CalculationResponse,
    CaloriesRequest,
    MacrosRequest,
    TmbRequest,
)
from app.schemas.common import CamelModel, SuccessResponse
from app.schemas.conversation import (
    AnalysisRequest,
    ChatRequest,
    ConsultationRequest,
    ConversationTurnResponse,
)
from app.schemas.knowledge import (
    KnowledgeEntryCreate,
    KnowledgeEntryResponse,
    KnowledgeEntryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ProtocolCreate,
    ProtocolResponse,
    ProtocolUpdate,
)
from app.schemas.profile import ProfileCreate, ProfileResponse
from app.schemas.settings import SettingResponse, SettingUpsert

__all__ = [
    "AnalysisRequest",
    "AnalyticsResponse",
    "CalculationResponse",
    "CaloriesRequest",
    "CamelModel",
    "ChatRequest",
    "ConsultationRequest",
    "ConversationTurnResponse",
    "DashboardStats",
    "KnowledgeEntryCreate",
    "KnowledgeEntryResponse",
    "KnowledgeEntryUpdate",
    "LoginRequest",
    "LoginResponse",
    "MacrosRequest",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "ProfileCreate",
    "ProfileResponse",
    "ProtocolCreate",
    "ProtocolResponse",
    "ProtocolUpdate",
    "SettingResponse",
    "SettingUpsert",
    "SuccessResponse",
    "TmbRequest",
    "UserDetail",
]
