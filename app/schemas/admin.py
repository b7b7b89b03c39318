"""管理后台 Schema"""

from datetime import datetime

from pydantic import Field

from app.schemas.calculators import CalculationResponse
from app.schemas.common import CamelModel
from app.schemas.conversation import ConversationTurnResponse
from app.schemas.profile import ProfileResponse


class LoginRequest(CamelModel):
    """登录请求（缺失字段由服务层返回 400）"""

    username: str | None = None
    password: str | None = None


class LoginResponse(CamelModel):
    id: int
    username: str
    last_login: datetime | None = None


class ObjectiveCount(CamelModel):
    objective: str
    count: int


class ApiUsageSummary(CamelModel):
    """最近 24 小时 API 用量"""

    tokens_used_24h: int = Field(alias="tokensUsed24h")
    estimated_cost_24h: str = Field(alias="estimatedCost24h")
    request_count_24h: int = Field(alias="requestCount24h")


class DashboardStats(CamelModel):
    """仪表盘统计"""

    total_users: int
    total_conversations: int
    active_users_today: int
    users_by_objective: list[ObjectiveCount]
    api_usage: ApiUsageSummary


class UserDetail(CamelModel):
    """用户详情（画像 + 对话 + 计算记录）"""

    user: ProfileResponse
    conversations: list[ConversationTurnResponse]
    calculations: list[CalculationResponse]


class DayUsage(CamelModel):
    requests: int = 0
    tokens: int = 0
    cost: float = 0.0


class AnalyticsResponse(CamelModel):
    """用量分析"""

    usage_by_day: dict[str, DayUsage]
    users_by_objective: list[ObjectiveCount]
    total_requests: int
    total_tokens: int
    total_cost: float
