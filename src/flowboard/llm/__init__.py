from .base import LLMProvider
from .errors import LLMProviderError, LLMQuotaExceededError, LLMRateLimitError
from .factory import create_llm_provider
from .models import ChatMessage
from .providers import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMQuotaExceededError",
    "LLMRateLimitError",
    "create_llm_provider",
    "ChatMessage",
    "OpenAIProvider",
]
