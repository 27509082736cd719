"""OpenAI-compatible chat provider (/v1/chat/completions)."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from dochelper.exceptions import LlmError
from dochelper.llm.base import BaseChatModel, post_json

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig
    from dochelper.types import ChatMessage

__all__ = ["OpenAICompatChatModel"]

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatChatModel(BaseChatModel):
    """Chat provider for any OpenAI-compatible chat completions endpoint.

    Config fields used::

        [llm]
        provider = "openai"
        model = "gpt-4o-mini"
        api_key_env = "OPENAI_API_KEY"   # env var name; empty = no auth
        base_url = ""                     # empty = https://api.openai.com/v1
    """

    def __init__(self, config: DocHelperConfig) -> None:
        self._model = config.llm.model
        self._base_url = (config.llm.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._max_tokens = config.llm.max_tokens
        self._timeout = config.llm.timeout

        self._api_key: str | None = None
        if config.llm.api_key_env:
            self._api_key = os.environ.get(config.llm.api_key_env)
            if not self._api_key:
                logger.warning(
                    "API key env var %s is not set; requests may fail",
                    config.llm.api_key_env,
                )

    def chat(self, messages: list[ChatMessage], temperature: float = 0.6) -> str:
        url = f"{self._base_url}/chat/completions"
        payload = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.text} for m in messages],
            "temperature": temperature,
            "max_tokens": self._max_tokens,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        logger.info("Sending %d messages to %s (%s)", len(messages), self._base_url, self._model)
        data = post_json(url, payload, headers=headers, timeout=self._timeout)

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LlmError(f"Unexpected response format from {url}: missing choices") from e
        if not isinstance(text, str) or not text.strip():
            raise LlmError(f"Chat API returned an empty reply from {url}")
        return text
