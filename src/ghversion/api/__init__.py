"""HTTP client base and the error hierarchy every remote service error derives from."""

from ghversion.api.base import (
    APIAuthError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    BaseAPIClient,
)

__all__ = [
    "APIError",
    "APIAuthError",
    "APINotFoundError",
    "APIRateLimitError",
    "BaseAPIClient",
]
