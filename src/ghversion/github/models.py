"""Data models for GitHub API responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class GitHubCommit(BaseModel):
    """A commit from the GitHub commits listing."""

    sha: str
    message: str = ""
    author_name: str | None = None
    committed_at: datetime | None = None
    html_url: str | None = None

    @property
    def short_sha(self) -> str:
        """Get the abbreviated SHA for display."""
        return self.sha[:7]


class GitHubComparison(BaseModel):
    """Result of comparing two commits."""

    base_sha: str
    head_sha: str
    status: str | None = None  # "ahead", "behind", "identical", "diverged"
    ahead_by: int = Field(ge=0)
    behind_by: int = Field(default=0, ge=0)
    total_commits: int = 0


class GitHubContent(BaseModel):
    """A file's decoded content at a given revision."""

    path: str
    ref: str
    sha: str | None = None  # blob SHA
    text: str
