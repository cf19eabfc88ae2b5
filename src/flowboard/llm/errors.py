"""Provider-neutral LLM errors.

Providers translate their SDK exceptions into these so callers can tell a
rate limit from an exhausted quota without importing any SDK.
"""


class LLMProviderError(RuntimeError):
    """The upstream model API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMRateLimitError(LLMProviderError):
    """The upstream API is throttling requests."""


class LLMQuotaExceededError(LLMProviderError):
    """The account behind the upstream API has run out of credits."""
