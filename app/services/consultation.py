"""咨询编排服务

画像 + 知识库 + 对话历史 -> 提示词 -> Gemini -> 持久化。
同一请求内各步骤顺序 await：知识库查询 -> 构建提示词 -> 调用 API -> 写库。
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import UpstreamError, raise_upstream_error
from app.core.gemini import GeminiClient, GenerationResult
from app.core.logging import get_logger
from app.models.conversation import ConversationTurn, Sender
from app.models.user import User
from app.prompts.consultation import (
    ANALYSIS_TEMPLATE,
    CHAT_TEMPLATE,
    CONSULTATION_TEMPLATE,
    DEFAULT_CONSULTATION_QUESTION,
    EMPTY_RESPONSE_MESSAGE,
    FALLBACK_SYSTEM_PROMPT,
    format_history,
    format_knowledge,
    format_products,
    format_profile,
    format_protocols,
)
from app.repositories.conversation import ConversationRepository
from app.repositories.usage import ApiUsageRepository
from app.services.config_cache import ConfigCache
from app.services.profile import ProfileService
from app.services.settings import DEFAULT_WELCOME_MESSAGE

logger = get_logger("services.consultation")

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_COST_PER_1K_TOKENS = 0.002


class ConsultationService:
    """咨询编排"""

    def __init__(self, db: AsyncSession, cache: ConfigCache, llm: GeminiClient):
        self.db = db
        self.cache = cache
        self.llm = llm
        self.profiles = ProfileService(db)
        self.conversations = ConversationRepository(db)
        self.usage = ApiUsageRepository(db)

    # ========== 内部工具 ==========

    @staticmethod
    def _profile_block(user: User) -> str:
        return format_profile(user.gender, user.goal, user.preferences, user.age, user.experience)

    async def _history(self, session_id: str) -> list[tuple[str, str]]:
        turns = await self.conversations.list_by_session(session_id)
        return [(turn.sender, turn.message) for turn in turns]

    async def _generate(self, prompt: str, default_temperature: float = 0.7) -> GenerationResult:
        """读取当前 AI 配置并调用生成接口"""
        system_prompt = await self.cache.get("ai_system_prompt", FALLBACK_SYSTEM_PROMPT)
        temperature = await self.cache.get_float("ai_temperature", default_temperature)
        model = await self.cache.get("ai_model", DEFAULT_MODEL)
        return await self.llm.generate_content(model, system_prompt, temperature, prompt)

    async def _usage_cost(self, tokens_used: int) -> str:
        cost_per_1k = await self.cache.get_float("api_cost_per_1k_tokens", DEFAULT_COST_PER_1K_TOKENS)
        return f"{tokens_used / 1000 * cost_per_1k:.6f}"

    async def _save_ai_turn(self, session_id: str, endpoint: str, result: GenerationResult, text: str) -> ConversationTurn:
        # 先读缓存再写库，缓存刷新不夹在未提交的写操作中间
        cost = await self._usage_cost(result.tokens_used)
        turn = await self.conversations.add_turn(session_id, text, Sender.AI.value, tokens_used=result.tokens_used)
        await self.usage.record(session_id, endpoint, result.tokens_used, cost)
        await self.db.commit()
        return turn

    async def _save_user_turn(self, session_id: str, message: str) -> None:
        # 先提交用户消息，上游失败时也保留
        await self.conversations.add_turn(session_id, message, Sender.USER.value)
        await self.db.commit()

    # ========== 对外操作 ==========

    async def list_history(self, session_id: str) -> list[ConversationTurn]:
        return await self.conversations.list_by_session(session_id)

    async def chat(self, session_id: str, message: str) -> ConversationTurn:
        """自由对话

        Raises:
            AppError: 画像不存在 404，上游失败 500
        """
        user = await self.profiles.get_profile(session_id)
        await self._save_user_turn(session_id, message)

        history = await self._history(session_id)
        knowledge = await self.cache.get_active_knowledge()
        prompt = CHAT_TEMPLATE.format(
            profile=self._profile_block(user),
            history=format_history(history),
            knowledge=format_knowledge(knowledge),
            question=message,
        )

        try:
            result = await self._generate(prompt)
        except UpstreamError as e:
            logger.error("聊天生成失败", session_id=session_id, error=str(e))
            raise_upstream_error(cause=e)

        turn = await self._save_ai_turn(session_id, "chat", result, result.text or EMPTY_RESPONSE_MESSAGE)
        logger.info("聊天回复已保存", session_id=session_id, tokens_used=result.tokens_used)
        return turn

    async def analysis(self, session_id: str) -> ConversationTurn:
        """初始画像分析，保存为第一条 AI 消息；上游失败时使用欢迎语"""
        user = await self.profiles.get_profile(session_id)
        welcome = await self.cache.get("welcome_message", DEFAULT_WELCOME_MESSAGE)
        prompt = ANALYSIS_TEMPLATE.format(profile=self._profile_block(user))

        try:
            result = await self._generate(prompt, default_temperature=0.8)
        except UpstreamError as e:
            logger.warning("初始分析生成失败，使用欢迎语", session_id=session_id, error=str(e))
            turn = await self.conversations.add_turn(session_id, welcome, Sender.AI.value)
            await self.db.commit()
            return turn

        return await self._save_ai_turn(session_id, "analysis", result, result.text or welcome)

    async def consult(self, session_id: str, message: str | None = None) -> ConversationTurn:
        """结构化咨询：按画像定向的方案（直接查库）+ 产品 + 知识条目 + 历史"""
        user = await self.profiles.get_profile(session_id)
        if message:
            await self._save_user_turn(session_id, message)

        protocols = await self.cache.get_protocols_by_profile(user.goal, user.gender, user.experience)
        products = await self.cache.get_active_products()
        knowledge = await self.cache.get_active_knowledge()
        history = await self._history(session_id)

        prompt = CONSULTATION_TEMPLATE.format(
            profile=self._profile_block(user),
            protocols=format_protocols(protocols),
            products=format_products(products),
            knowledge=format_knowledge(knowledge),
            history=format_history(history),
            question=message or DEFAULT_CONSULTATION_QUESTION,
        )

        try:
            result = await self._generate(prompt)
        except UpstreamError as e:
            logger.error("咨询生成失败", session_id=session_id, error=str(e))
            raise_upstream_error(cause=e)

        turn = await self._save_ai_turn(session_id, "consultation", result, result.text or EMPTY_RESPONSE_MESSAGE)
        logger.info(
            "咨询回复已保存",
            session_id=session_id,
            protocols=len(protocols),
            tokens_used=result.tokens_used,
        )
        return turn

    async def transcript(self, session_id: str) -> str:
        """纯文本对话记录（画像 + 全部消息）"""
        user = await self.profiles.get_profile(session_id)
        turns = await self.list_history(session_id)
        app_name = await self.cache.get("app_name", "IMPÉRIO PHARMA")

        lines = [
            f"{app_name} - Consulta",
            f"Sessão: {session_id}",
            f"Gerado em: {datetime.now().strftime('%d/%m/%Y %H:%M')}",
            "",
            "PERFIL:",
            self._profile_block(user),
            "",
            "CONVERSA:",
        ]
        for turn in turns:
            speaker = "Você" if turn.sender == Sender.USER.value else "IA"
            lines.append(f"[{turn.timestamp.strftime('%d/%m/%Y %H:%M')}] {speaker}: {turn.message}")
            lines.append("")
        return "\n".join(lines)
