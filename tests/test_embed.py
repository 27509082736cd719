"""Tests for dochelper.embed — retry wrapper and the concrete providers."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from dochelper.config import DocHelperConfig
from dochelper.embed.base import BaseEmbedder
from dochelper.embed.chromadb_embed import ChromaDBEmbedder
from dochelper.embed.ollama import OllamaEmbedder
from dochelper.embed.openai_compat import OpenAICompatEmbedder
from dochelper.exceptions import (
    EmbeddingError,
    TerminalEmbeddingError,
    TransientEmbeddingError,
)
from dochelper.types import Chunk, EmbeddedChunk

# --- Helpers ---

_FAKE_VECTOR = [0.1, 0.2, 0.3, 0.4, 0.5]


def _make_config(**embedding: object) -> DocHelperConfig:
    config = DocHelperConfig()
    config.embedding.backoff_seconds = 0.0
    for key, value in embedding.items():
        setattr(config.embedding, key, value)
    return config


def _ollama_response(embedding: list[float]) -> bytes:
    return json.dumps({"embedding": embedding}).encode("utf-8")


def _openai_response(embedding: list[float]) -> bytes:
    data = [{"object": "embedding", "index": 0, "embedding": embedding}]
    return json.dumps({"object": "list", "data": data, "model": "test"}).encode("utf-8")


class _FakeResponse:
    """Minimal mock for urllib.request.urlopen return value."""

    def __init__(self, data: bytes, status: int = 200) -> None:
        self._data = data
        self.status = status

    def read(self) -> bytes:
        return self._data

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *args: object) -> None:
        pass


class ScriptedEmbedder(BaseEmbedder):
    """Fails ``failures`` times, then returns a fixed vector."""

    def __init__(self, config: DocHelperConfig, failures: int = 0) -> None:
        super().__init__(config)
        self.failures = failures
        self.calls: list[str] = []

    def _request_embedding(self, text: str) -> list[float]:
        self.calls.append(text)
        if len(self.calls) <= self.failures:
            raise TransientEmbeddingError("connection reset")
        return list(_FAKE_VECTOR)


# --- Retry wrapper ---


class TestGenerateEmbedding:
    def test_success_first_try(self):
        embedder = ScriptedEmbedder(_make_config())
        assert embedder.generate_embedding("hello") == _FAKE_VECTOR
        assert len(embedder.calls) == 1

    def test_two_failures_then_success_uses_three_attempts(self):
        embedder = ScriptedEmbedder(_make_config(), failures=2)
        with patch("dochelper.embed.base.time.sleep") as sleep:
            vector = embedder.generate_embedding("hello", max_retries=3)
        assert vector == _FAKE_VECTOR
        assert len(embedder.calls) == 3
        assert sleep.call_count == 2

    def test_exhausted_retries_raise_terminal(self):
        embedder = ScriptedEmbedder(_make_config(), failures=5)
        with (
            patch("dochelper.embed.base.time.sleep"),
            pytest.raises(TerminalEmbeddingError, match="after 3 attempt"),
        ):
            embedder.generate_embedding("hello", max_retries=3)
        assert len(embedder.calls) == 3

    def test_terminal_is_an_embedding_error(self):
        embedder = ScriptedEmbedder(_make_config(max_retries=1), failures=1)
        with pytest.raises(EmbeddingError):
            embedder.generate_embedding("hello")

    def test_linear_backoff(self):
        embedder = ScriptedEmbedder(_make_config(backoff_seconds=1.0), failures=2)
        with patch("dochelper.embed.base.time.sleep") as sleep:
            embedder.generate_embedding("hello", max_retries=3)
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_uses_configured_retries(self):
        embedder = ScriptedEmbedder(_make_config(max_retries=2), failures=5)
        with pytest.raises(TerminalEmbeddingError):
            embedder.generate_embedding("hello")
        assert len(embedder.calls) == 2

    def test_zero_retries_rejected(self):
        embedder = ScriptedEmbedder(_make_config())
        with pytest.raises(EmbeddingError, match="max_retries"):
            embedder.generate_embedding("hello", max_retries=0)
        assert embedder.calls == []

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_input_makes_no_request(self, text: str):
        embedder = ScriptedEmbedder(_make_config())
        assert embedder.generate_embedding(text) == []
        assert embedder.calls == []

    def test_long_input_truncated(self):
        embedder = ScriptedEmbedder(_make_config(max_input_chars=8000))
        embedder.generate_embedding("a" * 9000)
        assert len(embedder.calls[0]) == 8000

    def test_dimension_learned_from_first_response(self):
        embedder = ScriptedEmbedder(_make_config())
        embedder.generate_embedding("hello")
        assert embedder.dimension == len(_FAKE_VECTOR)

    def test_dimension_mismatch_is_retried_then_terminal(self):
        embedder = ScriptedEmbedder(_make_config(dimension=768, max_retries=2))
        with pytest.raises(TerminalEmbeddingError, match="dimension"):
            embedder.generate_embedding("hello")
        assert len(embedder.calls) == 2

    def test_embed_chunk(self):
        embedder = ScriptedEmbedder(_make_config())
        chunk = Chunk(chunk_id="c1", document_path="README.md", content="text", sequence_index=0)
        embedded = embedder.embed_chunk(chunk)
        assert isinstance(embedded, EmbeddedChunk)
        assert embedded.chunk is chunk
        assert embedded.embedding == tuple(_FAKE_VECTOR)


# --- OllamaEmbedder ---


class TestOllamaEmbedder:
    def test_request_payload(self):
        embedder = OllamaEmbedder(_make_config())
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(_ollama_response(_FAKE_VECTOR))
            vector = embedder.embed_query("what is this?")

        assert vector == _FAKE_VECTOR
        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "http://localhost:11434/api/embeddings"
        body = json.loads(req.data)
        assert body == {"model": "nomic-embed-text", "prompt": "what is this?"}

    def test_custom_base_url(self):
        embedder = OllamaEmbedder(_make_config(base_url="http://gpu-box:11434/"))
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(_ollama_response(_FAKE_VECTOR))
            embedder.embed_query("x")
        assert mock_urlopen.call_args[0][0].full_url == "http://gpu-box:11434/api/embeddings"

    def test_connection_error_retried(self):
        embedder = OllamaEmbedder(_make_config(max_retries=3))
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.side_effect = [
                URLError("refused"),
                URLError("refused"),
                _FakeResponse(_ollama_response(_FAKE_VECTOR)),
            ]
            vector = embedder.embed_query("x")
        assert vector == _FAKE_VECTOR
        assert mock_urlopen.call_count == 3

    def test_http_error_terminal_after_retries(self):
        embedder = OllamaEmbedder(_make_config(max_retries=2))
        error = HTTPError("http://localhost:11434", 500, "Server Error", MagicMock(), None)
        with patch("dochelper.embed.ollama.urlopen", side_effect=error) as mock_urlopen:
            with pytest.raises(TerminalEmbeddingError, match="HTTP 500"):
                embedder.embed_query("x")
        assert mock_urlopen.call_count == 2

    def test_missing_embedding_field(self):
        embedder = OllamaEmbedder(_make_config(max_retries=1))
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(b'{"error": "model not found"}')
            with pytest.raises(TerminalEmbeddingError, match="embedding"):
                embedder.embed_query("x")

    def test_invalid_json(self):
        embedder = OllamaEmbedder(_make_config(max_retries=1))
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(b"<html>")
            with pytest.raises(TerminalEmbeddingError, match="invalid JSON"):
                embedder.embed_query("x")

    def test_empty_vector_rejected(self):
        embedder = OllamaEmbedder(_make_config(max_retries=1))
        with patch("dochelper.embed.ollama.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(_ollama_response([]))
            with pytest.raises(TerminalEmbeddingError, match="empty vector"):
                embedder.embed_query("x")


# --- OpenAICompatEmbedder ---


class TestOpenAICompatEmbedder:
    def test_request_with_api_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TEST_EMBED_KEY", "sk-test")
        embedder = OpenAICompatEmbedder(
            _make_config(model="text-embedding-3-small", api_key_env="TEST_EMBED_KEY")
        )
        with patch("dochelper.embed.openai_compat.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(_openai_response(_FAKE_VECTOR))
            vector = embedder.embed_query("hello")

        assert vector == _FAKE_VECTOR
        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "https://api.openai.com/v1/embeddings"
        assert req.get_header("Authorization") == "Bearer sk-test"
        assert json.loads(req.data) == {"model": "text-embedding-3-small", "input": "hello"}

    def test_no_auth_header_without_key(self):
        embedder = OpenAICompatEmbedder(_make_config(base_url="http://localhost:8080/v1"))
        with patch("dochelper.embed.openai_compat.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(_openai_response(_FAKE_VECTOR))
            embedder.embed_query("hello")
        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "http://localhost:8080/v1/embeddings"
        assert req.get_header("Authorization") is None

    def test_malformed_response(self):
        embedder = OpenAICompatEmbedder(_make_config(max_retries=1))
        with patch("dochelper.embed.openai_compat.urlopen") as mock_urlopen:
            mock_urlopen.return_value = _FakeResponse(b'{"data": []}')
            with pytest.raises(TerminalEmbeddingError):
                embedder.embed_query("hello")


# --- ChromaDBEmbedder ---


def _mock_ef(texts):
    """Mock ChromaDB DefaultEmbeddingFunction returning 384-dim vectors."""
    return [[0.1] * 384 for _ in texts]


class TestChromaDBEmbedder:
    def test_is_base_embedder(self):
        with patch("dochelper.embed.chromadb_embed.DefaultEmbeddingFunction") as mock_cls:
            mock_cls.return_value = MagicMock(side_effect=_mock_ef)
            embedder = ChromaDBEmbedder(_make_config(model="all-MiniLM-L6-v2"))
        assert isinstance(embedder, BaseEmbedder)

    def test_embed_query(self):
        with patch("dochelper.embed.chromadb_embed.DefaultEmbeddingFunction") as mock_cls:
            mock_cls.return_value = MagicMock(side_effect=_mock_ef)
            embedder = ChromaDBEmbedder(_make_config(model="all-MiniLM-L6-v2"))
        vector = embedder.embed_query("GPIO configuration")
        assert len(vector) == 384
        assert embedder.dimension == 384

    def test_init_failure_raises_embedding_error(self):
        with patch("dochelper.embed.chromadb_embed.DefaultEmbeddingFunction") as mock_cls:
            mock_cls.side_effect = RuntimeError("onnxruntime missing")
            with pytest.raises(EmbeddingError, match="Failed to initialize"):
                ChromaDBEmbedder(_make_config())

    def test_call_failure_is_retried(self):
        calls: list[list[str]] = []

        def _flaky(texts):
            calls.append(texts)
            if len(calls) == 1:
                raise RuntimeError("session busy")
            return _mock_ef(texts)

        with patch("dochelper.embed.chromadb_embed.DefaultEmbeddingFunction") as mock_cls:
            mock_cls.return_value = MagicMock(side_effect=_flaky)
            embedder = ChromaDBEmbedder(_make_config(model="all-MiniLM-L6-v2"))
        assert len(embedder.embed_query("hello")) == 384
        assert len(calls) == 2
