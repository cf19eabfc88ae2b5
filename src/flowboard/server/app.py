"""FastAPI chat gateway.

Adds the assistant system prompt (with the user's task list) in front of
the conversation, forwards it to the LLM provider and relays the reply as
an event stream. Upstream throttling becomes 429 and exhausted credits
become 402, both with a JSON error envelope, so the client can show a
canned message instead of opening the stream.
"""

import logging
from collections.abc import AsyncIterator
from typing import Literal

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import HTTP_STATUS_PAYMENT_REQUIRED, HTTP_STATUS_RATE_LIMITED
from ..llm import (
    ChatMessage,
    LLMProvider,
    LLMProviderError,
    LLMQuotaExceededError,
    LLMRateLimitError,
)
from ..prompts import build_system_prompt
from .sse import DONE_EVENT, encode_delta

logger = logging.getLogger(__name__)


class IncomingMessage(BaseModel):
    """A transcript entry sent by the client."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Body of ``POST /chat``."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[IncomingMessage] = Field(min_length=1)
    task_context: str = Field(default="", alias="taskContext")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _relay(first: str | None, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    if first:
        yield encode_delta(first)
    try:
        async for chunk in rest:
            yield encode_delta(chunk)
    except Exception:
        # Headers are already sent; the client sees a dropped connection.
        logger.exception("Upstream stream failed mid-response")
        raise
    yield DONE_EVENT


def create_app(llm: LLMProvider | None = None, model: str | None = None) -> FastAPI:
    """Build the gateway application.

    Args:
        llm: Provider used for completions; None makes /chat answer 500
        model: Optional model override passed to the provider

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(title="FlowBoard Chat Gateway")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.llm = llm

    @app.post("/chat")
    async def chat(request: ChatRequest):
        """Stream an assistant reply for the conversation."""
        provider: LLMProvider | None = app.state.llm
        if provider is None:
            logger.error("Chat request received but no LLM provider is configured")
            return _error(500, "LLM provider is not configured")

        messages = [
            ChatMessage(role="system", content=build_system_prompt(request.task_context)),
            *(ChatMessage(role=m.role, content=m.content) for m in request.messages),
        ]

        # Upstream errors surface on the first chunk, before any header is sent.
        stream = await provider.chat_completion_stream(messages, model=model)
        try:
            first: str | None = await stream.__anext__()
        except StopAsyncIteration:
            first = None
        except LLMRateLimitError:
            logger.warning("Upstream rate limit hit")
            return _error(HTTP_STATUS_RATE_LIMITED, "Rate limited")
        except LLMQuotaExceededError:
            logger.warning("Upstream credits exhausted")
            return _error(HTTP_STATUS_PAYMENT_REQUIRED, "Payment required")
        except LLMProviderError as e:
            logger.error("AI gateway error: %s", e)
            return _error(500, "AI error")

        return StreamingResponse(
            _relay(first, stream),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True, "llm_configured": app.state.llm is not None}

    return app
