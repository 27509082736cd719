"""Chat models — provider interface and concrete providers."""

from dochelper.llm.base import BaseChatModel
from dochelper.llm.ollama import OllamaChatModel
from dochelper.llm.openai_compat import OpenAICompatChatModel
from dochelper.llm.yandex import YandexChatModel
from dochelper.registry import default_registry

__all__ = ["BaseChatModel", "OllamaChatModel", "OpenAICompatChatModel", "YandexChatModel"]

# Register built-in chat providers
default_registry.register("llm", "ollama", lambda cfg: OllamaChatModel(cfg))
default_registry.register("llm", "openai", lambda cfg: OpenAICompatChatModel(cfg))
default_registry.register("llm", "yandex", lambda cfg: YandexChatModel(cfg))
