"""OpenAI-compatible LLM client.

This wraps the `openai` Python SDK and provides a minimal interface for chat completions.
Transport failures are translated into `eduforge.errors` types so callers never depend on the
SDK's exception hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

import openai
from openai import OpenAI

from eduforge.config import Settings
from eduforge.errors import AIRateLimitedError, AIServiceError
from eduforge.logging import get_logger, log_exception

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


class LLMClient:
    """LLM client using OpenAI-compatible Chat Completions API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        if not settings.openai_api_key:
            raise ValueError(
                "Missing EDUFORGE_OPENAI_API_KEY. "
                "Set it in environment variables or a .env file."
            )

        self._client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)

    def complete(self, messages: Sequence[ChatMessage], *, temperature: float = 0.7) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages.
            temperature: Sampling temperature.

        Returns:
            Assistant message content.

        Raises:
            AIRateLimitedError: The provider answered HTTP 429.
            AIServiceError: Any other transport or API failure.
        """

        payload: list[dict[str, str]] = [{"role": m.role, "content": m.content} for m in messages]
        logger.debug("LLM request", extra={"model": self._settings.openai_model, "messages": len(payload)})
        try:
            resp = self._client.chat.completions.create(
                model=self._settings.openai_model,
                messages=payload,
                temperature=temperature,
                max_tokens=self._settings.ai_max_tokens,
                timeout=self._settings.openai_timeout_s,
            )
        except openai.RateLimitError as exc:
            raise AIRateLimitedError(f"provider rate limited: {exc}") from exc
        except openai.APIError as exc:
            log_exception(logger, "LLM request failed", model=self._settings.openai_model)
            raise AIServiceError(f"provider error: {exc}") from exc

        choice = resp.choices[0]
        if not choice.message or choice.message.content is None:
            return ""
        return choice.message.content

