"""Ollama chat provider using the /api/chat endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dochelper.exceptions import LlmError
from dochelper.llm.base import BaseChatModel, post_json

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig
    from dochelper.types import ChatMessage

__all__ = ["OllamaChatModel"]

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaChatModel(BaseChatModel):
    """Chat provider using a local Ollama instance (non-streaming).

    Config fields used::

        [llm]
        provider = "ollama"
        model = "llama3.2"
        base_url = ""           # empty = http://localhost:11434
    """

    def __init__(self, config: DocHelperConfig) -> None:
        self._model = config.llm.model
        self._base_url = (config.llm.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._max_tokens = config.llm.max_tokens
        self._timeout = config.llm.timeout

    def chat(self, messages: list[ChatMessage], temperature: float = 0.6) -> str:
        url = f"{self._base_url}/api/chat"
        payload = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.text} for m in messages],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": self._max_tokens},
        }
        logger.info("Sending %d messages to Ollama (%s)", len(messages), self._model)
        data = post_json(url, payload, timeout=self._timeout)

        try:
            text = data["message"]["content"]
        except (KeyError, TypeError) as e:
            raise LlmError(f"Unexpected response format from {url}: missing message content") from e
        if not isinstance(text, str) or not text.strip():
            raise LlmError(f"Ollama returned an empty reply from {url}")
        return text
