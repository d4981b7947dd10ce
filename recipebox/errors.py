"""
Error taxonomy for the recipe search core.

- ValidationError: the caller passed an empty or invalid query. Raised
  synchronously by SearchOrchestrator before any I/O.
- ProviderError: the remote recipe API failed (timeout, network error,
  non-2xx status, malformed payload). Recovered by falling back to the cache.
- ProviderQuotaError: the remote API refused the call because the daily quota
  or rate limit was hit (HTTP 402 / 429).
- StoreError: the local recipe store failed to read or write.
"""

from typing import Optional


class RecipeBoxError(Exception):
    """Base class for all recipebox errors."""


class ValidationError(RecipeBoxError, ValueError):
    """Raised when a search query or limit is invalid."""


class ProviderError(RecipeBoxError):
    """
    Raised by a recipe provider when a remote call fails.

    Attributes:
        cause: The underlying exception, if any
        status_code: HTTP status code returned by the provider, if any
    """

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class ProviderQuotaError(ProviderError):
    """Raised when the provider reports an exhausted quota or rate limit."""


class StoreError(RecipeBoxError):
    """Raised when the local recipe store cannot complete an operation."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
