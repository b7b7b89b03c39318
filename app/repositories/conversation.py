"""对话 Repository"""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.conversation import ConversationTurn
from app.repositories.base import BaseRepository


class ConversationRepository(BaseRepository[ConversationTurn]):
    """对话数据访问（只追加）"""

    model = ConversationTurn

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def list_by_session(self, session_id: str) -> list[ConversationTurn]:
        """会话内全部消息，按时间正序"""
        result = await self.session.execute(
            select(ConversationTurn)
            .where(ConversationTurn.session_id == session_id)
            .order_by(ConversationTurn.timestamp, ConversationTurn.id)
        )
        return list(result.scalars().all())

    async def add_turn(
        self,
        session_id: str,
        message: str,
        sender: str,
        tokens_used: int = 0,
    ) -> ConversationTurn:
        turn = ConversationTurn(
            session_id=session_id,
            message=message,
            sender=sender,
            tokens_used=tokens_used,
        )
        return await self.create(turn)

    async def list_recent(self) -> list[ConversationTurn]:
        """全部消息，最新在前"""
        result = await self.session.execute(
            select(ConversationTurn).order_by(ConversationTurn.timestamp.desc(), ConversationTurn.id.desc())
        )
        return list(result.scalars().all())

    async def search(
        self,
        query: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ConversationTurn]:
        """按消息内容模糊搜索（大小写不敏感），可选时间范围"""
        stmt = select(ConversationTurn).where(
            func.lower(ConversationTurn.message).contains(query.lower(), autoescape=True)
        )
        if start is not None:
            stmt = stmt.where(ConversationTurn.timestamp >= start)
        if end is not None:
            stmt = stmt.where(ConversationTurn.timestamp <= end)
        stmt = stmt.order_by(ConversationTurn.timestamp.desc(), ConversationTurn.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
