"""产品模型（知识库：AI 可引用的产品资料）"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Product(Base):
    """产品表

    is_active=False 视为软删除，不进入 AI 上下文。
    """

    __tablename__ = "ai_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    dosage_info: Mapped[str | None] = mapped_column(Text, nullable=True, comment="剂量说明")
    contraindications: Mapped[str | None] = mapped_column(Text, nullable=True, comment="禁忌")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
