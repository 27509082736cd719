"""Abstract base class for chat model providers."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from dochelper.exceptions import LlmError

if TYPE_CHECKING:
    from dochelper.types import ChatMessage

__all__ = ["BaseChatModel", "post_json"]

logger = logging.getLogger(__name__)


def post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: int = 180,
) -> Any:
    """POST a JSON body and decode the JSON response.

    Raises:
        LlmError: On connection errors, HTTP errors or invalid JSON.
    """
    all_headers = {"Content-Type": "application/json", **(headers or {})}
    req = Request(url, data=json.dumps(payload).encode("utf-8"), headers=all_headers)

    try:
        with urlopen(req, timeout=timeout) as resp:
            body = resp.read()
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise LlmError(f"Chat API returned invalid JSON from {url}") from e
    except HTTPError as e:
        raise LlmError(f"Chat API error (HTTP {e.code}): {e.reason}") from e
    except (ConnectionError, URLError, TimeoutError) as e:
        raise LlmError(f"Chat API not reachable at {url}. Error: {e}") from e


class BaseChatModel(ABC):
    """Base class for all chat model providers.

    Subclasses send an ordered list of role-tagged messages and return the
    model's text reply.
    """

    @abstractmethod
    def chat(self, messages: list[ChatMessage], temperature: float = 0.6) -> str:
        """Generate a reply for a conversation.

        Args:
            messages: Ordered messages with roles system, user, assistant.
            temperature: Sampling randomness.

        Returns:
            The reply text.

        Raises:
            LlmError: If the request fails or the reply is malformed or empty.
        """
