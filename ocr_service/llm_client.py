from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import SemanticServiceError
from .semantic.prompts import SYSTEM_PROMPT

logger = logging.getLogger("ocr_service")


class ChatCompletionClient:
    """Minimal OpenAI-compatible chat completion client (one system + one user message)."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 30.0,
        temperature: float = 0.1,
        max_tokens: int = 150,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._url = (base_url or "").rstrip("/") + "/chat/completions"
        self.model = model
        self.temperature = float(temperature)
        self.max_tokens = int(max_tokens)
        timeout = httpx.Timeout(float(timeout_seconds), connect=5.0)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        self._client = httpx.AsyncClient(timeout=timeout, limits=limits, transport=transport)

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "ChatCompletionClient":
        return cls(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout_seconds=settings.openai_timeout_seconds,
            **kwargs,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete(self, prompt: str) -> str:
        if not self._api_key:
            raise SemanticServiceError("OPENAI_API_KEY environment variable not set")

        payload: Dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            resp = await self._client.post(self._url, json=payload, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Chat completion returned HTTP %s", status)
            raise SemanticServiceError(f"language model returned HTTP {status}") from e
        except httpx.RequestError as e:
            logger.warning("Chat completion request failed: %s", e)
            raise SemanticServiceError(f"language model request failed: {e}") from e

        try:
            data = resp.json()
            choices = data.get("choices") or []
        except (ValueError, AttributeError) as e:
            raise SemanticServiceError("malformed language model response") from e
        if not choices:
            raise SemanticServiceError("no response from language model")

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise SemanticServiceError("malformed language model response") from e
        return str(content or "").strip()
