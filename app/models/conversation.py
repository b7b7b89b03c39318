"""对话消息模型"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Sender(str, Enum):
    """消息发送方"""

    USER = "user"
    AI = "ai"


class ConversationTurn(Base):
    """对话表（每行一条消息，按会话追加）"""

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sender: Mapped[str] = mapped_column(String(10), nullable=False)  # user / ai
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    tokens_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
