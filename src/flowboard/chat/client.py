"""Chat backend clients.

A backend takes the transcript plus the task context and answers with
either a rate-limit/quota signal or a raw event-stream body. Decoding the
body is the session's job, not the backend's.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import HTTP_STATUS_PAYMENT_REQUIRED, HTTP_STATUS_RATE_LIMITED
from ..llm.models import ChatMessage
from .models import ReplyStatus

logger = logging.getLogger(__name__)


class ChatBackendError(RuntimeError):
    """The chat backend answered with an unexpected error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ChatReply:
    """Backend answer to one chat request."""

    status: ReplyStatus
    body: AsyncIterator[bytes] | None = None

    @classmethod
    def streaming(cls, body: AsyncIterator[bytes]) -> "ChatReply":
        return cls(status=ReplyStatus.STREAMING, body=body)


def build_payload(messages: Sequence[ChatMessage], task_context: str) -> dict[str, Any]:
    """Request body understood by the chat gateway."""
    return {
        "messages": [message.model_dump() for message in messages],
        "taskContext": task_context,
    }


class ChatBackend(ABC):
    """Abstract chat backend."""

    @abstractmethod
    def open_stream(
        self,
        messages: Sequence[ChatMessage],
        task_context: str
    ) -> AbstractAsyncContextManager[ChatReply]:
        """Send one chat request.

        Used as ``async with backend.open_stream(...) as reply``; the reply
        body is only readable inside the block.

        Raises:
            ChatBackendError: For error responses other than rate limit/quota
            httpx.HTTPError: For transport failures
        """

    async def close(self) -> None:
        """Release network resources."""

    async def __aenter__(self) -> "ChatBackend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class HttpChatBackend(ChatBackend):
    """Chat backend reached over HTTP.

    Hidden design decisions:
    - Request payload shape and authentication header
    - Mapping of HTTP error statuses onto reply statuses
    - Connection pooling (one httpx client per backend)
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float | None = 60.0,
        client: httpx.AsyncClient | None = None
    ):
        """Initialize the backend.

        Args:
            url: Full URL of the chat endpoint
            api_key: Optional bearer token
            timeout: Connect/read timeout in seconds (None disables it)
            client: Optional pre-configured httpx client (owned by the caller)
        """
        self._url = url
        self._headers = {"Content-Type": "application/json"}
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    @asynccontextmanager
    async def open_stream(
        self,
        messages: Sequence[ChatMessage],
        task_context: str
    ) -> AsyncIterator[ChatReply]:
        payload = build_payload(messages, task_context)
        logger.debug("POST %s with %d messages", self._url, len(messages))

        async with self._client.stream(
            "POST", self._url, json=payload, headers=self._headers
        ) as response:
            if response.status_code == HTTP_STATUS_RATE_LIMITED:
                yield ChatReply(status=ReplyStatus.RATE_LIMITED)
                return
            if response.status_code == HTTP_STATUS_PAYMENT_REQUIRED:
                yield ChatReply(status=ReplyStatus.QUOTA_EXHAUSTED)
                return
            if response.is_error:
                detail = (await response.aread()).decode("utf-8", errors="replace")
                raise ChatBackendError(
                    f"Chat backend returned {response.status_code}: {detail[:200]}",
                    status_code=response.status_code,
                )
            yield ChatReply.streaming(response.aiter_bytes())

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
