"""咨询提示词模板

模板使用 str.format 占位符，内容为巴西葡萄牙语（面向终端用户）。
"""

from collections.abc import Sequence

from app.schemas.knowledge import KnowledgeEntryResponse, ProductResponse, ProtocolResponse

HISTORY_WINDOW = 5

FALLBACK_SYSTEM_PROMPT = "Você é um assistente especializado em protocolos ergogênicos."
EMPTY_RESPONSE_MESSAGE = "Desculpe, não consegui processar sua solicitação. Tente novamente."
DEFAULT_CONSULTATION_QUESTION = (
    "Monte uma consulta completa e personalizada para o meu perfil com base nos protocolos disponíveis."
)

PROFILE_BLOCK = """- Gênero: {gender}
- Objetivo: {goal}
- Preferências: {preferences}
- Idade: {age} anos
- Experiência: {experience} anos"""

CHAT_TEMPLATE = """
PERFIL DO USUÁRIO:
{profile}

HISTÓRICO DA CONVERSA:
{history}
{knowledge}
PERGUNTA ATUAL: {question}

Responda em português brasileiro com base no perfil e histórico fornecidos."""

ANALYSIS_TEMPLATE = """Analise este perfil de usuário e forneça uma análise inicial personalizada:

PERFIL:
{profile}

Forneça uma análise completa seguindo a estrutura de resposta padrão."""

CONSULTATION_TEMPLATE = """CONSULTA ESTRUTURADA

PERFIL DO USUÁRIO:
{profile}

PROTOCOLOS INDICADOS PARA ESTE PERFIL:
{protocols}

PRODUTOS DISPONÍVEIS:
{products}
{knowledge}
HISTÓRICO DA CONVERSA:
{history}

SOLICITAÇÃO: {question}

Baseie a resposta apenas nos protocolos e produtos listados, respeitando avisos e contraindicações.
Responda em português brasileiro seguindo a estrutura de resposta padrão."""


def format_profile(gender: str, goal: str, preferences: Sequence[str] | None, age: int, experience: int) -> str:
    return PROFILE_BLOCK.format(
        gender=gender,
        goal=goal,
        preferences=", ".join(preferences or []),
        age=age,
        experience=experience,
    )


def format_history(turns: Sequence[tuple[str, str]]) -> str:
    """最近 HISTORY_WINDOW 条消息，每行 sender: message"""
    return "\n".join(f"{sender}: {message}" for sender, message in turns[-HISTORY_WINDOW:])


def format_knowledge(entries: Sequence[KnowledgeEntryResponse]) -> str:
    """知识条目块；无条目时为空行"""
    if not entries:
        return ""
    lines = [f"- [{entry.category}] {entry.title}: {entry.content}" for entry in entries]
    return "\nDIRETRIZES DA BASE DE CONHECIMENTO:\n" + "\n".join(lines) + "\n"


def format_protocols(protocols: Sequence[ProtocolResponse]) -> str:
    if not protocols:
        return "Nenhum protocolo cadastrado para este perfil."

    blocks = []
    for protocol in protocols:
        steps = "\n".join(f"  {i}. {step}" for i, step in enumerate(protocol.protocol_steps, start=1))
        lines = [f"* {protocol.title} ({protocol.category})"]
        if protocol.duration:
            lines.append(f"  Duração: {protocol.duration}")
        if steps:
            lines.append(f"  Etapas:\n{steps}")
        if protocol.warnings:
            lines.append(f"  Avisos: {protocol.warnings}")
        lines.append(f"  PCT necessária: {'sim' if protocol.pct_required else 'não'}")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def format_products(products: Sequence[ProductResponse]) -> str:
    if not products:
        return "Nenhum produto cadastrado."

    blocks = []
    for product in products:
        lines = [f"* {product.name} ({product.category})"]
        if product.description:
            lines.append(f"  Descrição: {product.description}")
        if product.dosage_info:
            lines.append(f"  Dosagem: {product.dosage_info}")
        if product.contraindications:
            lines.append(f"  Contraindicações: {product.contraindications}")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)
