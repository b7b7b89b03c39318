"""用户画像模型"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class User(Base):
    """用户画像表

    以前端生成的 session_id 作为业务标识，一个会话对应一份画像。
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    goal: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    preferences: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    experience: Mapped[int] = mapped_column(Integer, nullable=False)  # 训练经验（年）
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
