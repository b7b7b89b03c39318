"""系统设置 Schema"""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class SettingUpsert(CamelModel):
    """写入设置请求"""

    key: str = Field(..., min_length=1, max_length=100)
    value: str
    description: str | None = None
    category: str | None = None


class SettingResponse(CamelModel):
    """设置响应"""

    id: int
    key: str
    value: str
    description: str | None = None
    category: str
    updated_at: datetime
