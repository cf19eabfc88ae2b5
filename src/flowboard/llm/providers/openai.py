from collections.abc import AsyncIterator
from typing import Any

import openai
from openai import AsyncOpenAI

from ..base import LLMProvider
from ..errors import LLMProviderError, LLMQuotaExceededError, LLMRateLimitError
from ..models import ChatMessage

# Error code OpenAI-compatible APIs attach to a 429 when the account is empty
INSUFFICIENT_QUOTA_CODE = "insufficient_quota"


def _translate_error(error: openai.APIError) -> LLMProviderError:
    """Map an OpenAI SDK error onto the provider-neutral error types."""
    status_code = getattr(error, "status_code", None)
    code = getattr(error, "code", None)

    if status_code == 402 or code == INSUFFICIENT_QUOTA_CODE:
        return LLMQuotaExceededError(str(error), status_code=status_code)
    if isinstance(error, openai.RateLimitError):
        return LLMRateLimitError(str(error), status_code=status_code)
    return LLMProviderError(str(error), status_code=status_code)


class OpenAIProvider(LLMProvider):
    """OpenAI-compatible LLM provider.

    Works against api.openai.com and any gateway speaking the Chat
    Completions protocol (DeepSeek, hosted proxies) via ``base_url``.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - SDK error translation
    - Authentication mechanism
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: API key for the endpoint
            model: Default model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def _build_request(
        self,
        messages: list[ChatMessage],
        model: str | None,
        temperature: float,
        max_tokens: int | None,
        **kwargs: Any
    ) -> dict[str, Any]:
        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens
        return request_params

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> AsyncIterator[str]:
        """Generate a streaming chat completion.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            Async iterator over the reply's text chunks
        """
        request_params = self._build_request(messages, model, temperature, max_tokens, **kwargs)
        return self._stream_generator(request_params)

    async def _stream_generator(self, request_params: dict[str, Any]) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(**request_params, stream=True)
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except openai.APIError as e:
            raise _translate_error(e) from e

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
