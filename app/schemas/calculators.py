"""计算器 Schema"""

from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel


class TmbRequest(CamelModel):
    """基础代谢（Harris-Benedict）计算请求"""

    session_id: str = Field(..., min_length=1)
    age: float = Field(..., gt=0)
    weight: float = Field(..., gt=0, description="体重 kg")
    height: float = Field(..., gt=0, description="身高 cm")
    gender: str
    activity_level: str = "sedentario"


class MacrosRequest(CamelModel):
    """宏量营养素分配请求"""

    session_id: str = Field(..., min_length=1)
    calories: float = Field(..., gt=0)
    objective: str
    weight: float = Field(..., gt=0)


class CaloriesRequest(CamelModel):
    """热量调整请求"""

    session_id: str = Field(..., min_length=1)
    objective: str
    current_calories: float = Field(..., gt=0)
    weight: float = Field(..., gt=0)
    target_weight: float | None = Field(default=None, gt=0)


class CalculationResponse(CamelModel):
    """已保存的计算记录"""

    id: int
    session_id: str
    calculation_type: str
    inputs: dict[str, Any]
    results: dict[str, Any]
    timestamp: datetime
