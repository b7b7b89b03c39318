"""Gemini 生成式 API 客户端

直接调用 Generative Language REST 接口:
    POST {base_url}/models/{model}:generateContent

每次调用有明确的客户端超时，超时 / 网络错误 / 非 2xx / 无法解析的响应
统一抛出 UpstreamError，由上层决定降级或返回 500，不做自动重试。
"""

from dataclasses import dataclass
from typing import Any

import httpx

from app.core.errors import UpstreamError
from app.core.logging import get_logger

logger = get_logger("gemini")


@dataclass(frozen=True)
class GenerationResult:
    """生成结果"""

    text: str
    tokens_used: int = 0


class GeminiClient:
    """Gemini REST 客户端

    Args:
        api_key: API Key（为空时每次调用都会失败并记录日志）
        base_url: API 根地址，如 https://generativelanguage.googleapis.com/v1beta
        timeout: 单次调用超时（秒）
        transport: 自定义传输层（测试时传入 httpx.MockTransport）
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def build_payload(system_instruction: str, temperature: float, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    @staticmethod
    def parse_response(data: dict[str, Any]) -> GenerationResult:
        """从响应中提取文本与 token 用量"""
        candidates = data.get("candidates") or []
        text = ""
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))

        usage = data.get("usageMetadata") or {}
        tokens = usage.get("totalTokenCount") or 0
        return GenerationResult(text=text, tokens_used=int(tokens))

    async def generate_content(
        self,
        model: str,
        system_instruction: str,
        temperature: float,
        prompt: str,
    ) -> GenerationResult:
        """调用 generateContent

        Raises:
            UpstreamError: 调用失败或响应无法解析
        """
        if not self.api_key:
            raise UpstreamError("Gemini API Key 未配置")

        url = f"{self.base_url}/models/{model}:generateContent"
        payload = self.build_payload(system_instruction, temperature, prompt)

        try:
            response = await self._client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Gemini 调用超时 ({self.timeout}s)") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini 网络错误: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(f"Gemini 返回错误状态码: {response.status_code} - {response.text[:200]}")

        try:
            result = self.parse_response(response.json())
        except (ValueError, AttributeError, TypeError) as e:
            raise UpstreamError("Gemini 响应无法解析") from e

        logger.debug("Gemini 调用完成", model=model, tokens_used=result.tokens_used, chars=len(result.text))
        return result
