"""Ollama embedding provider using the /api/embeddings endpoint.

Default provider for dochelper — uses locally running Ollama with nomic-embed-text.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from dochelper.embed.base import BaseEmbedder
from dochelper.exceptions import TransientEmbeddingError

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["OllamaEmbedder"]

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaEmbedder(BaseEmbedder):
    """Embedding provider using a local Ollama instance.

    Calls ``/api/embeddings`` with ``{"model", "prompt"}`` and reads the
    ``embedding`` field of the response. Default model is
    ``nomic-embed-text`` (768 dimensions).

    Config fields used::

        [embedding]
        model = "nomic-embed-text"
        provider = "ollama"
        base_url = ""           # empty = http://localhost:11434
        timeout = 120
    """

    def __init__(self, config: DocHelperConfig) -> None:
        super().__init__(config)
        self._model = config.embedding.model
        self._base_url = (config.embedding.base_url or _DEFAULT_BASE_URL).rstrip("/")
        self._timeout = config.embedding.timeout

    def _request_embedding(self, text: str) -> list[float]:
        url = f"{self._base_url}/api/embeddings"
        payload = json.dumps({"model": self._model, "prompt": text}).encode("utf-8")
        req = Request(url, data=payload, headers={"Content-Type": "application/json"})

        try:
            with urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise TransientEmbeddingError(f"Ollama returned invalid JSON from {url}") from e
        except HTTPError as e:
            raise TransientEmbeddingError(f"Ollama API error (HTTP {e.code}): {e.reason}") from e
        except (ConnectionError, URLError, TimeoutError) as e:
            raise TransientEmbeddingError(
                f"Ollama not reachable at {self._base_url}. Is Ollama running? Error: {e}"
            ) from e

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list):
            raise TransientEmbeddingError(
                f"Unexpected response format from {url}: missing 'embedding' field"
            )
        return [float(x) for x in embedding]
