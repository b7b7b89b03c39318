"""用户画像 Schema"""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class ProfileCreate(CamelModel):
    """创建画像请求"""

    session_id: str = Field(..., min_length=1, max_length=100)
    gender: str = Field(..., min_length=1)
    goal: str = Field(..., min_length=1)
    preferences: list[str] = Field(default_factory=list)
    age: int = Field(..., ge=0, le=130)
    experience: int = Field(..., ge=0, description="训练经验（年）")


class ProfileResponse(CamelModel):
    """画像响应"""

    id: int
    session_id: str
    gender: str
    goal: str
    preferences: list[str] | None = None
    age: int
    experience: int
    created_at: datetime
