"""数据访问层"""

from app.repositories.admin import AdminRepository
from app.repositories.conversation import ConversationRepository
from app.repositories.knowledge import (
    KnowledgeEntryRepository,
    ProductRepository,
    ProtocolRepository,
)
from app.repositories.setting import SettingRepository
from app.repositories.usage import ApiUsageRepository, CalculationRepository
from app.repositories.user import UserRepository

__all__ = [
    "AdminRepository",
    "ApiUsageRepository",
    "CalculationRepository",
    "ConversationRepository",
    "KnowledgeEntryRepository",
    "ProductRepository",
    "ProtocolRepository",
    "SettingRepository",
    "UserRepository",
]
