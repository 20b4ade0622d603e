"""GitHub REST API client."""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ghversion.api import (
    APIAuthError,
    APIError,
    APINotFoundError,
    APIRateLimitError,
    BaseAPIClient,
)
from ghversion.github.models import GitHubCommit, GitHubComparison, GitHubContent

logger = logging.getLogger(__name__)


def _parse_reset(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (ValueError, OverflowError, OSError):
        return None


class GitHubError(APIError):
    """Base exception for GitHub API errors."""

    pass


class GitHubAuthError(GitHubError, APIAuthError):
    """Authentication error (bad credentials or token)."""

    pass


class GitHubNotFoundError(GitHubError, APINotFoundError):
    """Repository, commit, path or comparison not found."""

    pass


class GitHubRateLimitError(GitHubError, APIRateLimitError):
    """Rate limit exceeded.

    Attributes:
        reset_at: When the primary rate limit window resets, if GitHub said.
    """

    def __init__(
        self,
        retry_after: int | None = None,
        reset_at: datetime | None = None,
    ) -> None:
        self.reset_at = reset_at
        message = "GitHub rate limit exceeded"
        if retry_after is not None:
            message += f"; retry after {retry_after}s"
        elif reset_at is not None:
            message += f"; resets at {reset_at:%Y-%m-%d %H:%M:%S} UTC"
        super().__init__(retry_after=retry_after, message=message)


class GitHubClient(BaseAPIClient):
    """Client for the GitHub REST API (v3).

    Only the three queries needed for version calculation are exposed:
    path-filtered commit history, file content at a revision, and commit
    comparison. Credentials are either a login plus password/token (HTTP
    basic auth) or a token alone (Bearer).
    """

    BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0
    DEFAULT_PER_PAGE = 100
    API_VERSION = "2022-11-28"
    USER_AGENT = "ghversion"

    _error_cls = GitHubError
    _auth_error_cls = GitHubAuthError
    _not_found_cls = GitHubNotFoundError
    _rate_limit_cls = GitHubRateLimitError
    _error_message_key = "message"
    _api_name = "GitHub"

    def __init__(
        self,
        token: str | None = None,
        login: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: Access token (or password when used with a login).
                If not provided, reads from config.
            login: GitHub login. When set, basic auth is used.
            base_url: API root, for GitHub Enterprise installs.
            timeout: Request timeout in seconds.
            per_page: Page size for commit listings (1-100).
        """
        super().__init__()

        if token is None:
            from ghversion.config import get_config

            cfg = get_config()
            token = cfg.github.token
            login = login or cfg.github.login

        self.token = token
        if not self.token:
            raise GitHubAuthError(
                "GitHub access token not provided. Use --accesstoken or configure "
                "token in ghversion.ini."
            )
        if not 1 <= per_page <= 100:
            raise ValueError(f"per_page must be between 1 and 100, got {per_page}")

        self.login = login
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.per_page = per_page
        self._timeout = timeout

    def _get_client(self) -> httpx.Client:
        """Get or create the authenticated HTTP client."""
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self.API_VERSION,
                "User-Agent": self.USER_AGENT,
            }
            auth: tuple[str, str] | None = None
            if self.login:
                auth = (self.login, self.token or "")
            else:
                headers["Authorization"] = f"Bearer {self.token}"

            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self._timeout,
                headers=headers,
                auth=auth,
            )
        return self._client

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        """GitHub signals primary rate limits with 403 and a zero remaining count."""
        if response.status_code == 429:
            return True
        return (
            response.status_code == 403
            and response.headers.get("X-RateLimit-Remaining") == "0"
        )

    def _rate_limit_error(self, response: httpx.Response) -> APIRateLimitError:
        """Attach the X-RateLimit-Reset time (epoch seconds) when present."""
        error = super()._rate_limit_error(response)
        reset_at = _parse_reset(response.headers.get("X-RateLimit-Reset"))
        return GitHubRateLimitError(retry_after=error.retry_after, reset_at=reset_at)

    def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Issue a GET request, mapping transport failures to GitHubError."""
        try:
            return self._get_client().get(url, params=params)
        except httpx.RequestError as e:
            raise GitHubError(f"Connection error: {e}") from e

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    def iter_commits(
        self,
        owner: str,
        repo: str,
        path: str,
        sha: str,
    ) -> Iterator[GitHubCommit]:
        """Iterate over commits touching a path, newest first.

        Pages are fetched lazily as the iterator is advanced, following the
        ``Link: rel="next"`` header.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Repository-relative file path (POSIX separators).
            sha: Commit to start listing from.

        Yields:
            Commits that modified the path and are reachable from ``sha``.
        """
        url = f"{self._repo_path(owner, repo)}/commits"
        page = 1

        while True:
            self._record_api_call("github_commits")
            response = self._get(
                url,
                params={"sha": sha, "path": path, "per_page": self.per_page, "page": page},
            )
            data = self._handle_response(response)
            if not isinstance(data, list):
                raise GitHubError("Unexpected response listing commits: expected an array")

            logger.debug("Fetched commit page %d for %s (%d commits)", page, path, len(data))

            try:
                commits = [self._parse_commit(item) for item in data]
            except (ValidationError, KeyError, TypeError, AttributeError) as e:
                raise GitHubError(f"Failed to parse commit response: {e}") from e

            yield from commits

            if not data or "next" not in response.links:
                break

            page += 1

    @staticmethod
    def _parse_commit(item: dict[str, Any]) -> GitHubCommit:
        commit_data = item.get("commit") or {}
        author = commit_data.get("committer") or commit_data.get("author") or {}
        return GitHubCommit(
            sha=item["sha"],
            message=commit_data.get("message", ""),
            author_name=author.get("name"),
            committed_at=author.get("date"),
            html_url=item.get("html_url"),
        )

    def get_content(self, owner: str, repo: str, path: str, ref: str) -> GitHubContent:
        """Get a file's content as of a given revision.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Repository-relative file path.
            ref: Commit SHA (or branch/tag) to read the file at.

        Returns:
            The decoded file content.

        Raises:
            GitHubNotFoundError: If the file does not exist at ``ref``.
            GitHubError: If the path is not a regular file or cannot be decoded.
        """
        self._record_api_call("github_content")
        url = f"{self._repo_path(owner, repo)}/contents/{quote(path)}"
        data = self._handle_response(self._get(url, params={"ref": ref}))

        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitHubError(f"{path} at {ref[:7]} is not a file")

        encoding = data.get("encoding", "base64")
        raw = data.get("content") or ""
        try:
            if encoding == "base64":
                text = base64.b64decode(raw).decode("utf-8-sig")
            else:
                text = raw
        except (binascii.Error, UnicodeDecodeError) as e:
            raise GitHubError(f"Failed to decode {path} at {ref[:7]}: {e}") from e

        return GitHubContent(path=path, ref=ref, sha=data.get("sha"), text=text)

    def compare(self, owner: str, repo: str, base: str, head: str) -> GitHubComparison:
        """Compare two commits.

        Args:
            owner: Repository owner.
            repo: Repository name.
            base: Base commit SHA.
            head: Head commit SHA.

        Returns:
            Comparison including the ahead-by count of ``head`` relative to ``base``.
        """
        self._record_api_call("github_compare")
        url = f"{self._repo_path(owner, repo)}/compare/{quote(base)}...{quote(head)}"
        # Only the counts are needed, so keep the embedded commit list small
        data = self._handle_response(self._get(url, params={"per_page": 1}))

        try:
            return GitHubComparison(
                base_sha=base,
                head_sha=head,
                status=data.get("status"),
                ahead_by=data["ahead_by"],
                behind_by=data.get("behind_by", 0),
                total_commits=data.get("total_commits", 0),
            )
        except (ValidationError, KeyError, AttributeError) as e:
            raise GitHubError(f"Failed to parse comparison response: {e}") from e
