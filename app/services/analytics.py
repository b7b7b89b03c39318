"""管理后台统计服务"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.repositories.conversation import ConversationRepository
from app.repositories.usage import ApiUsageRepository, CalculationRepository
from app.repositories.user import UserRepository
from app.schemas.admin import (
    AnalyticsResponse,
    ApiUsageSummary,
    DashboardStats,
    DayUsage,
    ObjectiveCount,
    UserDetail,
)
from app.schemas.calculators import CalculationResponse
from app.schemas.conversation import ConversationTurnResponse
from app.schemas.profile import ProfileResponse
from app.services.profile import ProfileService

DEFAULT_ANALYTICS_DAYS = 30


def _parse_cost(value: str | None) -> float:
    try:
        return float(value or 0)
    except ValueError:
        return 0.0


class AnalyticsService:
    """统计服务"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.conversations = ConversationRepository(db)
        self.usage = ApiUsageRepository(db)
        self.calculations = CalculationRepository(db)

    async def users_by_objective(self) -> list[ObjectiveCount]:
        return [ObjectiveCount(objective=goal, count=count) for goal, count in await self.users.count_by_goal()]

    async def dashboard(self, cost_per_1k_tokens: float) -> DashboardStats:
        """仪表盘：总量、今日活跃、目标分布、最近 24 小时 API 用量"""
        now = utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        recent = await self.usage.list_between(now - timedelta(days=1), now)
        tokens = sum(item.tokens_used or 0 for item in recent)

        return DashboardStats(
            total_users=await self.users.count(),
            total_conversations=await self.conversations.count(),
            active_users_today=await self.users.count_created_since(today),
            users_by_objective=await self.users_by_objective(),
            api_usage=ApiUsageSummary(
                tokens_used_24h=tokens,
                estimated_cost_24h=f"{tokens / 1000 * cost_per_1k_tokens:.4f}",
                request_count_24h=len(recent),
            ),
        )

    async def analytics(self, start: datetime | None = None, end: datetime | None = None) -> AnalyticsResponse:
        """按天汇总 API 用量，默认最近 30 天"""
        end = to_naive_utc(end) or utcnow()
        start = to_naive_utc(start) or end - timedelta(days=DEFAULT_ANALYTICS_DAYS)
        records = await self.usage.list_between(start, end)

        by_day: dict[str, DayUsage] = defaultdict(DayUsage)
        for record in records:
            day = by_day[record.timestamp.date().isoformat()]
            day.requests += 1
            day.tokens += record.tokens_used or 0
            day.cost += _parse_cost(record.cost)

        return AnalyticsResponse(
            usage_by_day=dict(by_day),
            users_by_objective=await self.users_by_objective(),
            total_requests=len(records),
            total_tokens=sum(r.tokens_used or 0 for r in records),
            total_cost=sum(_parse_cost(r.cost) for r in records),
        )

    async def list_users(self) -> list[ProfileResponse]:
        return [ProfileResponse.model_validate(u) for u in await self.users.list_recent()]

    async def user_detail(self, session_id: str) -> UserDetail:
        user = await ProfileService(self.db).get_profile(session_id)
        turns = await self.conversations.list_by_session(session_id)
        calculations = await self.calculations.list_by_session(session_id)
        return UserDetail(
            user=ProfileResponse.model_validate(user),
            conversations=[ConversationTurnResponse.model_validate(t) for t in turns],
            calculations=[CalculationResponse.model_validate(c) for c in calculations],
        )

    async def list_conversations(
        self,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ConversationTurnResponse]:
        """全部对话；给出 search 时按内容搜索并应用时间范围"""
        if search:
            turns = await self.conversations.search(search, to_naive_utc(start), to_naive_utc(end))
        else:
            turns = await self.conversations.list_recent()
        return [ConversationTurnResponse.model_validate(t) for t in turns]


def to_naive_utc(value: datetime | None) -> datetime | None:
    """带时区的查询参数统一转换为 naive UTC，与存储格式一致"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
