"""Version file history: commit listing and anchor detection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from ghversion.api import APIError
from ghversion.versioning.errors import HistoryUnavailableError
from ghversion.versioning.models import HeightAnchor, VersionConfig

if TYPE_CHECKING:
    from ghversion.github import GitHubClient, GitHubCommit

logger = logging.getLogger(__name__)


def commits_touching(
    client: GitHubClient,
    owner: str,
    repo: str,
    path: str,
    from_commit: str,
) -> Iterator[GitHubCommit]:
    """Iterate over commits that modified ``path``, newest first.

    The listing is lazy: further pages are only requested as the caller
    advances, so a consumer that stops early saves the remaining requests.

    Raises:
        HistoryUnavailableError: If the repository, commit or path cannot be
            listed.
    """
    try:
        yield from client.iter_commits(owner, repo, path, from_commit)
    except APIError as e:
        raise HistoryUnavailableError(
            f"Cannot list history of {path} in {owner}/{repo} at {from_commit[:7]}: {e}"
        ) from e


def find_anchor(
    commits: Iterable[GitHubCommit],
    working_major_minor: tuple[int, int],
    load_config: Callable[[str], VersionConfig | None],
) -> HeightAnchor:
    """Find the commit git height is counted from.

    Walks the version file's history newest first and stops at the first
    commit whose major.minor differs from the working version. The commit
    seen just before it is the anchor. If that differing commit is the very
    first one, or the history is empty, the version is treated as brand new.

    Args:
        commits: Commits touching the version file, newest first.
        working_major_minor: (major, minor) of the working-tree version.
        load_config: Returns the version file's configuration as of a commit
            SHA, or None if it cannot be read as one.

    Returns:
        The anchor commit, or a new-file signal.
    """
    previous_commit: str | None = None

    for commit in commits:
        config = load_config(commit.sha)
        commit_version = config.version if config is not None else None

        if commit_version is None or commit_version.major_minor != working_major_minor:
            logger.debug(
                "Version changed at %s (%s), anchor is %s",
                commit.sha[:7],
                commit_version,
                previous_commit[:7] if previous_commit else "new file",
            )
            if previous_commit is None:
                return HeightAnchor.new_file()
            return HeightAnchor.found(previous_commit)

        previous_commit = commit.sha

    # Same version throughout, or no commits at all
    if previous_commit is None:
        return HeightAnchor.new_file()
    return HeightAnchor.found(previous_commit)
