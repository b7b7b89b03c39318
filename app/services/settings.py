"""系统设置服务

负责默认设置的初始化与管理后台的读写。
写入不主动失效 ConfigCache，新值在 settings 层 TTL 到期后可见。
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.repositories.setting import SettingRepository
from app.schemas.settings import SettingResponse, SettingUpsert

logger = get_logger("services.settings")

DEFAULT_SYSTEM_PROMPT = """Você é um assistente especializado em protocolos ergogênicos do Império Pharma.

INSTRUÇÕES CRÍTICAS:
- SEMPRE responda em português brasileiro (PT-BR)
- Foque EXCLUSIVAMENTE em protocolos ergogênicos
- Seja profissional, científico e responsável
- Sempre inclua avisos de segurança e recomendações médicas

ESTRUTURA DE RESPOSTA:
1. 📊 ANÁLISE: Análise do perfil do usuário
2. 🎯 PROTOCOLO: Recomendações específicas baseadas em evidências
3. 🛡️ SUPORTE: Orientações durante o protocolo
4. 🔄 PCT: Terapia pós-ciclo quando aplicável
5. ⚠️ AVISOS: Orientações de segurança e consulta médica

Mantenha respostas concisas, científicas e sempre em português brasileiro."""

DEFAULT_WELCOME_MESSAGE = (
    "Bem-vindo ao sistema de consultoria em protocolos ergogênicos. Como posso ajudá-lo hoje?"
)

# (key, value, description, category)
DEFAULT_SETTINGS: list[tuple[str, str, str, str]] = [
    ("ai_system_prompt", DEFAULT_SYSTEM_PROMPT, "Instruções do sistema para a IA", "ai"),
    ("ai_temperature", "0.7", "Temperatura da IA (0.0 - 1.0)", "ai"),
    ("ai_model", "gemini-2.5-flash", "Modelo de IA a ser usado", "ai"),
    ("rate_limit_minutes", "1", "Janela de tempo para rate limiting (minutos)", "security"),
    ("rate_limit_requests", "10", "Número máximo de requisições por janela", "security"),
    ("app_name", "IMPÉRIO PHARMA", "Nome da aplicação", "general"),
    ("app_subtitle", "Consultoria em Protocolos Ergogênicos", "Subtítulo da aplicação", "general"),
    ("welcome_message", DEFAULT_WELCOME_MESSAGE, "Mensagem de boas-vindas", "general"),
    ("api_cost_per_1k_tokens", "0.002", "Custo por 1000 tokens da API", "billing"),
]


class SettingsService:
    """系统设置服务"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = SettingRepository(db)

    async def list_settings(self) -> list[SettingResponse]:
        rows = await self.repo.list_ordered()
        return [SettingResponse.model_validate(row) for row in rows]

    async def set_setting(self, data: SettingUpsert) -> SettingResponse:
        """按 key upsert"""
        setting = await self.repo.upsert(
            key=data.key,
            value=data.value,
            description=data.description,
            category=data.category,
        )
        await self.db.commit()
        logger.info("系统设置已更新", key=data.key)
        return SettingResponse.model_validate(setting)

    async def seed_defaults(self) -> int:
        """写入缺失的默认设置，已存在的 key 不覆盖

        Returns:
            新写入的条数
        """
        created = 0
        for key, value, description, category in DEFAULT_SETTINGS:
            if await self.repo.get_by_key(key) is None:
                await self.repo.upsert(key, value, description=description, category=category)
                created += 1
        await self.db.commit()
        if created:
            logger.info("默认系统设置已初始化", created=created)
        return created
