"""OpenAI-compatible embedding provider.

Works with any server implementing the OpenAI /v1/embeddings API:
OpenAI, LiteLLM proxy, vLLM, Ollama (OpenAI-compat mode), etc.
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from dochelper.embed.base import BaseEmbedder
from dochelper.exceptions import TransientEmbeddingError

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["OpenAICompatEmbedder"]

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatEmbedder(BaseEmbedder):
    """Embedding provider using any OpenAI-compatible /v1/embeddings endpoint.

    Supports both cloud APIs (with API key) and local servers (without API key).

    Config fields used::

        [embedding]
        model = "text-embedding-3-small"
        provider = "openai"
        api_key_env = "OPENAI_API_KEY"   # env var name; empty = no auth
        base_url = ""                     # empty = https://api.openai.com/v1
    """

    def __init__(self, config: DocHelperConfig) -> None:
        super().__init__(config)
        self._model = config.embedding.model
        self._base_url = (config.embedding.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._timeout = config.embedding.timeout

        self._api_key: str | None = None
        if config.embedding.api_key_env:
            self._api_key = os.environ.get(config.embedding.api_key_env)
            if not self._api_key:
                logger.warning(
                    "API key env var %s is not set; requests may fail",
                    config.embedding.api_key_env,
                )

    def _request_embedding(self, text: str) -> list[float]:
        url = f"{self._base_url}/embeddings"
        payload = json.dumps({"model": self._model, "input": text}).encode("utf-8")

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = Request(url, data=payload, headers=headers)

        try:
            with urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise TransientEmbeddingError(f"Embedding API returned invalid JSON from {url}") from e
        except HTTPError as e:
            raise TransientEmbeddingError(
                f"Embedding API error (HTTP {e.code}): {e.reason}"
            ) from e
        except (ConnectionError, URLError, TimeoutError) as e:
            raise TransientEmbeddingError(
                f"Embedding API not reachable at {self._base_url}. Error: {e}"
            ) from e

        try:
            embedding = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise TransientEmbeddingError(
                f"Unexpected response format from {url}: missing 'embedding' field"
            ) from e
        if not isinstance(embedding, list):
            raise TransientEmbeddingError(f"Unexpected response format from {url}")
        return [float(x) for x in embedding]
