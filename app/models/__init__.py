"""数据模型"""

from app.models.admin import Admin
from app.models.base import Base
from app.models.conversation import ConversationTurn, Sender
from app.models.knowledge import KnowledgeEntry
from app.models.product import Product
from app.models.protocol import Protocol
from app.models.setting import SystemSetting
from app.models.usage import ApiUsage, UserCalculation
from app.models.user import User

__all__ = [
    "Admin",
    "ApiUsage",
    "Base",
    "ConversationTurn",
    "KnowledgeEntry",
    "Product",
    "Protocol",
    "Sender",
    "SystemSetting",
    "User",
    "UserCalculation",
]
