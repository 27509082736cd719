"""YandexGPT chat provider (Foundation Models completion API)."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from dochelper.exceptions import LlmError
from dochelper.llm.base import BaseChatModel, post_json

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig
    from dochelper.types import ChatMessage

__all__ = ["YandexChatModel"]

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://llm.api.cloud.yandex.net"


class YandexChatModel(BaseChatModel):
    """Chat provider for YandexGPT.

    Config fields used::

        [llm]
        provider = "yandex"
        model = "yandexgpt-lite"
        api_key_env = "YANDEX_API_KEY"
        folder_id_env = "YANDEX_FOLDER_ID"
    """

    def __init__(self, config: DocHelperConfig) -> None:
        self._model = config.llm.model
        self._base_url = (config.llm.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._max_tokens = config.llm.max_tokens
        self._timeout = config.llm.timeout
        self._api_key = os.environ.get(config.llm.api_key_env or "YANDEX_API_KEY", "")
        self._folder_id = os.environ.get(config.llm.folder_id_env, "")

        if not self._api_key or not self._folder_id:
            logger.warning("YandexGPT API key or folder id is not set; requests may fail")

    @property
    def model_uri(self) -> str:
        return f"gpt://{self._folder_id}/{self._model}/latest"

    def chat(self, messages: list[ChatMessage], temperature: float = 0.6) -> str:
        url = f"{self._base_url}/foundationModels/v1/completion"
        payload = {
            "modelUri": self.model_uri,
            "completionOptions": {
                "stream": False,
                "temperature": temperature,
                "maxTokens": str(self._max_tokens),
            },
            "messages": [{"role": m.role, "text": m.text} for m in messages],
        }
        headers = {
            "Authorization": f"Api-Key {self._api_key}",
            "x-folder-id": self._folder_id,
        }
        logger.info("Sending %d messages to YandexGPT (%s)", len(messages), self._model)
        data = post_json(url, payload, headers=headers, timeout=self._timeout)

        try:
            text = data["result"]["alternatives"][0]["message"]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise LlmError(f"Unexpected response format from {url}: missing alternatives") from e
        if not isinstance(text, str) or not text.strip():
            raise LlmError("YandexGPT returned an empty reply")
        return text
