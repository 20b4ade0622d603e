"""Shared HTTP client plumbing for remote git hosting services.

A service client subclasses ``BaseAPIClient``, points the ``_*_cls``
attributes at its own exception types and gets uniform status-code mapping,
lazy ``httpx.Client`` lifetime handling and request accounting.
"""

from __future__ import annotations

from typing import Any, Self

import httpx


class APIError(Exception):
    """Any failure talking to a remote service."""

    pass


class APIAuthError(APIError):
    """The service rejected the credentials (401)."""

    pass


class APINotFoundError(APIError):
    """The repository, commit, path or comparison does not exist (404)."""

    pass


class APIRateLimitError(APIError):
    """The service is throttling requests.

    Attributes:
        retry_after: Seconds the service asked us to wait, if it said.
    """

    def __init__(self, retry_after: int | None = None, message: str | None = None) -> None:
        self.retry_after = retry_after
        if message is None:
            message = "Rate limit exceeded"
            if retry_after is not None:
                message += f". Retry after {retry_after}s"
        super().__init__(message)


def _parse_retry_after(value: str | None) -> int | None:
    """Return Retry-After as whole seconds; HTTP-dates and junk give None."""
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class BaseAPIClient:
    """Base for service clients.

    Subclasses provide ``_get_client()`` and set:
        - _error_cls: fallback error for unexpected statuses
        - _auth_error_cls, _not_found_cls, _rate_limit_cls: specific errors
        - _error_message_key: JSON key holding the service's error text
        - _api_name: service name used in messages
    """

    _error_cls: type[APIError] = APIError
    _auth_error_cls: type[APIAuthError] = APIAuthError
    _not_found_cls: type[APINotFoundError] = APINotFoundError
    _rate_limit_cls: type[APIRateLimitError] = APIRateLimitError
    _error_message_key: str = "message"
    _api_name: str = "API"

    def __init__(self) -> None:
        self._client: httpx.Client | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool, if one was opened."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> Any:
        """Return the decoded JSON body of a 200, or raise the mapped error."""
        status = response.status_code
        if status == 200:
            return response.json()

        message = self._error_message(response)
        if status == 401:
            self._on_auth_failure()
            raise self._auth_error_cls(f"Authentication failed: {message}")
        if status == 404:
            raise self._not_found_cls(f"Resource not found: {message}")
        if self._is_rate_limited(response):
            raise self._rate_limit_error(response)
        raise self._error_cls(f"{self._api_name} API error ({status}): {message}")

    def _error_message(self, response: httpx.Response) -> str:
        try:
            return str(response.json().get(self._error_message_key, "Unknown error"))
        except (ValueError, AttributeError):
            return response.text or "Unknown error"

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        return response.status_code == 429

    def _rate_limit_error(self, response: httpx.Response) -> APIRateLimitError:
        """Build the rate-limit error, honouring a numeric Retry-After header."""
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        return self._rate_limit_cls(retry_after=retry_after)

    def _on_auth_failure(self) -> None:
        """Hook run before an auth error is raised."""

    def _record_api_call(self, api_call_type: str) -> None:
        """Count a request against the active resolution statistics."""
        from ghversion.statistics import ResolutionStatistics

        stats = ResolutionStatistics.get_current()
        if stats is not None:
            stats.record_api_call(api_call_type)
