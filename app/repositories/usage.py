"""API 用量与计算器记录 Repository"""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.usage import ApiUsage, UserCalculation
from app.repositories.base import BaseRepository


class ApiUsageRepository(BaseRepository[ApiUsage]):
    """API 用量数据访问"""

    model = ApiUsage

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def record(self, session_id: str, endpoint: str, tokens_used: int, cost: str) -> ApiUsage:
        usage = ApiUsage(
            session_id=session_id,
            endpoint=endpoint,
            tokens_used=tokens_used,
            cost=cost,
        )
        return await self.create(usage)

    async def list_between(self, start: datetime | None = None, end: datetime | None = None) -> list[ApiUsage]:
        """时间范围内的调用记录，最新在前"""
        stmt = select(ApiUsage)
        if start is not None:
            stmt = stmt.where(ApiUsage.timestamp >= start)
        if end is not None:
            stmt = stmt.where(ApiUsage.timestamp <= end)
        result = await self.session.execute(stmt.order_by(ApiUsage.timestamp.desc(), ApiUsage.id.desc()))
        return list(result.scalars().all())


class CalculationRepository(BaseRepository[UserCalculation]):
    """计算器记录数据访问"""

    model = UserCalculation

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def save(
        self,
        session_id: str,
        calculation_type: str,
        inputs: dict[str, Any],
        results: dict[str, Any],
    ) -> UserCalculation:
        calculation = UserCalculation(
            session_id=session_id,
            calculation_type=calculation_type,
            inputs=inputs,
            results=results,
        )
        return await self.create(calculation)

    async def list_by_session(self, session_id: str) -> list[UserCalculation]:
        """会话的计算记录，最新在前"""
        result = await self.session.execute(
            select(UserCalculation)
            .where(UserCalculation.session_id == session_id)
            .order_by(UserCalculation.timestamp.desc(), UserCalculation.id.desc())
        )
        return list(result.scalars().all())
