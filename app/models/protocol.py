"""方案模型（知识库：按画像定向的训练/用药方案）"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Protocol(Base):
    """方案表

    定向字段：
    - target_goal: 必填，与用户 goal 精确匹配
    - target_gender: male / female / both，为空时不匹配任何性别过滤
    - min_experience / max_experience: 经验年限区间，max 为空表示无上限
    """

    __tablename__ = "ai_protocols"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    target_goal: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    target_gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    min_experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    protocol_steps: Mapped[list] = mapped_column(JSON, nullable=False, comment="步骤列表")
    duration: Mapped[str | None] = mapped_column(String(100), nullable=True)
    warnings: Mapped[str | None] = mapped_column(Text, nullable=True)
    pct_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
