"""聊天、初始分析与结构化咨询 API 测试（假 Gemini 客户端）"""

import pytest

from app.core.errors import UPSTREAM_ERROR_MESSAGE, UpstreamError
from app.models import KnowledgeEntry, Product, Protocol
from app.prompts.consultation import DEFAULT_CONSULTATION_QUESTION
from app.repositories.usage import ApiUsageRepository
from app.services.settings import DEFAULT_SYSTEM_PROMPT, DEFAULT_WELCOME_MESSAGE
from tests.conftest import PROFILE_PAYLOAD


async def _usage(session_factory):
    async with session_factory() as session:
        return await ApiUsageRepository(session).list_between()


async def _history(client, session_id: str = "sess-1") -> list[dict]:
    response = await client.get(f"/api/conversations/{session_id}")
    assert response.status_code == 200
    return response.json()


class TestChat:
    @pytest.mark.anyio
    async def test_unknown_session_is_404(self, client, fake_llm):
        response = await client.post("/api/chat", json={"sessionId": "nao-existe", "message": "Oi"})
        assert response.status_code == 404
        assert response.json()["error"] == "Usuário não encontrado"
        assert fake_llm.calls == []

    @pytest.mark.anyio
    async def test_reply_is_persisted_with_usage(self, client, profile, fake_llm, session_factory):
        response = await client.post("/api/chat", json={"sessionId": "sess-1", "message": "Qual dose inicial?"})

        assert response.status_code == 200
        body = response.json()
        assert body["sender"] == "ai"
        assert body["message"] == "Resposta da IA"
        assert body["tokensUsed"] == 120

        history = await _history(client)
        assert [(t["sender"], t["message"]) for t in history] == [
            ("user", "Qual dose inicial?"),
            ("ai", "Resposta da IA"),
        ]

        usage = await _usage(session_factory)
        assert len(usage) == 1
        assert usage[0].endpoint == "chat"
        assert usage[0].tokens_used == 120
        assert usage[0].cost == "0.000240"

    @pytest.mark.anyio
    async def test_prompt_uses_settings_and_profile(self, client, profile, fake_llm):
        await client.post("/api/chat", json={"sessionId": "sess-1", "message": "Posso usar oral?"})

        call = fake_llm.calls[0]
        assert call["model"] == "gemini-2.5-flash"
        assert call["temperature"] == 0.7
        assert call["system_instruction"] == DEFAULT_SYSTEM_PROMPT
        assert "Objetivo: cutting" in call["prompt"]
        assert "user: Posso usar oral?" in call["prompt"]
        assert "PERGUNTA ATUAL: Posso usar oral?" in call["prompt"]

    @pytest.mark.anyio
    async def test_active_knowledge_in_prompt(self, client, profile, fake_llm, session_factory):
        async with session_factory() as session:
            session.add(KnowledgeEntry(category="seguranca", title="Exames", content="Faça exames de sangue"))
            session.add(KnowledgeEntry(category="seguranca", title="Oculto", content="x", is_active=False))
            await session.commit()

        await client.post("/api/chat", json={"sessionId": "sess-1", "message": "Oi"})

        prompt = fake_llm.calls[0]["prompt"]
        assert "[seguranca] Exames: Faça exames de sangue" in prompt
        assert "Oculto" not in prompt

    @pytest.mark.anyio
    async def test_upstream_failure_is_500_and_keeps_user_turn(self, client, profile, fake_llm, session_factory):
        fake_llm.error = UpstreamError("Gemini 调用超时")

        response = await client.post("/api/chat", json={"sessionId": "sess-1", "message": "Oi"})

        assert response.status_code == 500
        assert response.json()["error"] == UPSTREAM_ERROR_MESSAGE
        history = await _history(client)
        assert [(t["sender"], t["message"]) for t in history] == [("user", "Oi")]
        assert await _usage(session_factory) == []

    @pytest.mark.anyio
    async def test_empty_message_is_400(self, client, profile):
        response = await client.post("/api/chat", json={"sessionId": "sess-1", "message": ""})
        assert response.status_code == 400


class TestAnalysis:
    @pytest.mark.anyio
    async def test_analysis_saved_as_ai_turn(self, client, profile, fake_llm, session_factory):
        fake_llm.text = "Análise inicial"

        response = await client.post("/api/analysis", json={"sessionId": "sess-1"})

        assert response.status_code == 200
        assert response.json()["message"] == "Análise inicial"
        assert [t["sender"] for t in await _history(client)] == ["ai"]
        assert (await _usage(session_factory))[0].endpoint == "analysis"

    @pytest.mark.anyio
    async def test_upstream_failure_falls_back_to_welcome(self, client, profile, fake_llm, session_factory):
        fake_llm.error = UpstreamError("boom")

        response = await client.post("/api/analysis", json={"sessionId": "sess-1"})

        assert response.status_code == 200
        assert response.json()["message"] == DEFAULT_WELCOME_MESSAGE
        assert response.json()["tokensUsed"] == 0
        assert await _usage(session_factory) == []


class TestConsultation:
    @pytest.fixture
    async def catalog(self, session_factory):
        async with session_factory() as session:
            session.add(
                Protocol(
                    title="Cutting feminino",
                    category="cutting",
                    target_goal="cutting",
                    target_gender="female",
                    min_experience=1,
                    protocol_steps=["Oxandrolona 10mg/dia"],
                    duration="8 semanas",
                    pct_required=True,
                )
            )
            session.add(
                Protocol(
                    title="Bulking masculino",
                    category="bulking",
                    target_goal="bulking",
                    target_gender="male",
                    protocol_steps=["Enantato"],
                )
            )
            session.add(Product(name="Oxandrolona", category="oral", dosage_info="5-10mg"))
            await session.commit()

    @pytest.mark.anyio
    async def test_prompt_contains_matching_protocols(self, client, profile, catalog, fake_llm):
        response = await client.post("/api/consultation", json={"sessionId": "sess-1"})

        assert response.status_code == 200
        prompt = fake_llm.calls[0]["prompt"]
        assert "Cutting feminino" in prompt
        assert "1. Oxandrolona 10mg/dia" in prompt
        assert "PCT necessária: sim" in prompt
        assert "Bulking masculino" not in prompt
        assert "Dosagem: 5-10mg" in prompt
        assert f"SOLICITAÇÃO: {DEFAULT_CONSULTATION_QUESTION}" in prompt

    @pytest.mark.anyio
    async def test_masculino_profile_gets_male_protocols(self, client, catalog, fake_llm):
        payload = {**PROFILE_PAYLOAD, "sessionId": "sess-m", "gender": "masculino", "goal": "bulking"}
        assert (await client.post("/api/profile", json=payload)).status_code == 200

        response = await client.post("/api/consultation", json={"sessionId": "sess-m"})

        assert response.status_code == 200
        prompt = fake_llm.calls[0]["prompt"]
        assert "Bulking masculino" in prompt
        assert "Cutting feminino" not in prompt

    @pytest.mark.anyio
    async def test_without_message_only_ai_turn_saved(self, client, profile, catalog):
        await client.post("/api/consultation", json={"sessionId": "sess-1"})
        assert [t["sender"] for t in await _history(client)] == ["ai"]

    @pytest.mark.anyio
    async def test_with_message_saves_both_turns(self, client, profile, catalog, fake_llm):
        await client.post("/api/consultation", json={"sessionId": "sess-1", "message": "Quero secar"})

        assert "SOLICITAÇÃO: Quero secar" in fake_llm.calls[0]["prompt"]
        assert [t["sender"] for t in await _history(client)] == ["user", "ai"]

    @pytest.mark.anyio
    async def test_no_matching_protocols(self, client, profile, fake_llm):
        await client.post("/api/consultation", json={"sessionId": "sess-1"})
        assert "Nenhum protocolo cadastrado para este perfil." in fake_llm.calls[0]["prompt"]


class TestConsultationRateLimit:
    @pytest.mark.anyio
    async def test_chat_and_consultation_share_limit(self, client):
        for i in range(10):
            path = "/api/chat" if i % 2 == 0 else "/api/consultation"
            response = await client.post(path, json={"sessionId": "nao-existe", "message": "Oi"})
            assert response.status_code == 404

        response = await client.post("/api/consultation", json={"sessionId": "nao-existe"})
        assert response.status_code == 429
        assert response.json()["error"] == "Muitas solicitações. Tente novamente em 1 minuto."
        assert int(response.headers["Retry-After"]) >= 1

    @pytest.mark.anyio
    async def test_analysis_is_not_limited(self, client):
        for _ in range(11):
            await client.post("/api/chat", json={"sessionId": "nao-existe", "message": "Oi"})

        response = await client.post("/api/analysis", json={"sessionId": "nao-existe"})
        assert response.status_code == 404


class TestDownload:
    @pytest.mark.anyio
    async def test_transcript(self, client, profile):
        await client.post("/api/chat", json={"sessionId": "sess-1", "message": "Oi"})

        response = await client.get("/api/consultation/sess-1/download")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'filename="consulta-sess-1.txt"' in response.headers["content-disposition"]
        assert "Sessão: sess-1" in response.text
        assert "Você: Oi" in response.text
        assert "IA: Resposta da IA" in response.text

    @pytest.mark.anyio
    async def test_unknown_session_is_404(self, client):
        response = await client.get("/api/consultation/nao-existe/download")
        assert response.status_code == 404
