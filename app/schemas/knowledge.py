"""知识库 Schema（产品、方案、知识条目）

Update 模型字段全部可选，配合 model_dump(exclude_unset=True) 做部分更新。
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, model_validator

from app.schemas.common import CamelModel

TargetGender = Literal["male", "female", "both"]

EXPERIENCE_RANGE_MESSAGE = "maxExperience deve ser maior ou igual a minExperience"


def check_experience_range(min_experience: int | None, max_experience: int | None) -> None:
    """经验区间 min > max 的方案永远无法匹配任何画像"""
    if min_experience is not None and max_experience is not None and min_experience > max_experience:
        raise ValueError(EXPERIENCE_RANGE_MESSAGE)


# ========== 产品 ==========


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    dosage_info: str | None = None
    contraindications: str | None = None
    is_active: bool = True


class ProductUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    dosage_info: str | None = None
    contraindications: str | None = None
    is_active: bool | None = None


class ProductResponse(CamelModel):
    id: int
    name: str
    category: str
    description: str | None = None
    dosage_info: str | None = None
    contraindications: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ========== 方案 ==========


class ProtocolCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=100)
    target_goal: str = Field(..., min_length=1, max_length=50)
    target_gender: TargetGender | None = None
    min_experience: int = Field(default=0, ge=0)
    max_experience: int | None = Field(default=None, ge=0)
    protocol_steps: list[Any]
    duration: str | None = None
    warnings: str | None = None
    pct_required: bool = False
    is_active: bool = True

    @model_validator(mode="after")
    def _experience_range(self) -> "ProtocolCreate":
        check_experience_range(self.min_experience, self.max_experience)
        return self


class ProtocolUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    target_goal: str | None = Field(default=None, min_length=1, max_length=50)
    target_gender: TargetGender | None = None
    min_experience: int | None = Field(default=None, ge=0)
    max_experience: int | None = Field(default=None, ge=0)
    protocol_steps: list[Any] | None = None
    duration: str | None = None
    warnings: str | None = None
    pct_required: bool | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _experience_range(self) -> "ProtocolUpdate":
        check_experience_range(self.min_experience, self.max_experience)
        return self


class ProtocolResponse(CamelModel):
    id: int
    title: str
    category: str
    target_goal: str
    target_gender: str | None = None
    min_experience: int
    max_experience: int | None = None
    protocol_steps: list[Any]
    duration: str | None = None
    warnings: str | None = None
    pct_required: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ========== 知识条目 ==========


class KnowledgeEntryCreate(CamelModel):
    category: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    tags: list[str] | None = None
    priority: int = Field(default=1, ge=1, le=5)
    is_active: bool = True


class KnowledgeEntryUpdate(CamelModel):
    category: str | None = Field(default=None, min_length=1, max_length=100)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    priority: int | None = Field(default=None, ge=1, le=5)
    is_active: bool | None = None


class KnowledgeEntryResponse(CamelModel):
    id: int
    category: str
    title: str
    content: str
    tags: list[str] | None = None
    priority: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
