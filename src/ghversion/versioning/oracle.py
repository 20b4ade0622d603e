"""Version calculation against the GitHub API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from ghversion.api import APIError
from ghversion.github import GitHubClient, GitHubNotFoundError
from ghversion.versioning.errors import (
    HistoryUnavailableError,
    VersionFileNotFoundError,
    VersionFormatError,
)
from ghversion.versioning.height import assemble_version, calculate_height
from ghversion.versioning.history import commits_touching, find_anchor
from ghversion.versioning.models import (
    HeightAnchor,
    ResolvedSemVer,
    ResolvedVersion,
    VersionConfig,
)
from ghversion.versioning.repository import (
    find_repository_root,
    relative_posix_path,
    truncated_commit_id,
)
from ghversion.versioning.version_file import get_version_from_content, resolve_version

logger = logging.getLogger(__name__)


class VersionResult(BaseModel):
    """The computed version for a commit, with how it was derived."""

    model_config = ConfigDict(frozen=True)

    semver: ResolvedSemVer
    resolved: ResolvedVersion
    version_file_path: str  # repository-relative path queried on GitHub
    anchor: HeightAnchor
    commit_sha: str

    @property
    def version(self) -> str:
        return self.semver.version

    @property
    def truncated_commit_id(self) -> int:
        return truncated_commit_id(self.commit_sha)


class VersionOracle:
    """Compute NerdBank.GitVersioning-compatible versions from GitHub history."""

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        """Initialize the oracle.

        Args:
            client: Authenticated GitHub client.
            owner: Repository owner.
            repo: Repository name.
            progress_callback: Optional callback for progress updates.
                Signature: (stage: str, current: int, total: int)
        """
        self.client = client
        self.owner = owner
        self.repo = repo
        self._progress = progress_callback or (lambda *args: None)

    def get_version(
        self,
        commit_sha: str,
        project_path: str | Path = ".",
        repo_root: str | Path | None = None,
    ) -> VersionResult:
        """Compute the version of a commit.

        Args:
            commit_sha: SHA of the commit being versioned.
            project_path: Project directory (or a file in it) in the local
                working tree.
            repo_root: Root of the working tree. Defaults to the nearest
                directory containing ``.git``, else the project directory.

        Returns:
            The computed version.

        Raises:
            VersionFileNotFoundError: If no version file applies.
            VersionFormatError: If the version file has no usable version.
            MissingInheritanceTargetError: If inheritance cannot be resolved.
            HistoryUnavailableError: If the history cannot be read.
            IncomparableCommitsError: If the height cannot be computed.
        """
        # Step 1: Resolve the working-tree version file
        self._progress("Reading version file...", 0, 0)
        resolved = resolve_version(project_path)
        if resolved is None:
            raise VersionFileNotFoundError(Path(project_path).resolve())
        working_version = resolved.version
        if working_version is None:
            raise VersionFormatError("No version is defined.", resolved.file_path)

        # Step 2: Locate the version file within the repository
        root = self._repository_root(project_path, repo_root)
        version_file_path = relative_posix_path(resolved.version_file, root)
        logger.debug("Version %s defined by %s", working_version, version_file_path)

        # Step 3: Walk the file's history to the last major.minor change
        self._progress(f"Walking history of {version_file_path}...", 0, 0)
        commits = commits_touching(
            self.client, self.owner, self.repo, version_file_path, commit_sha
        )
        anchor = find_anchor(
            commits,
            working_version.major_minor,
            lambda sha: self._load_config_at(version_file_path, sha),
        )

        # Step 4: Measure height from the anchor
        self._progress("Calculating git height...", 0, 0)
        height = calculate_height(anchor, commit_sha, self._ahead_by)
        semver = assemble_version(resolved, height)

        return VersionResult(
            semver=semver,
            resolved=resolved,
            version_file_path=version_file_path,
            anchor=anchor,
            commit_sha=commit_sha,
        )

    @staticmethod
    def _repository_root(project_path: str | Path, repo_root: str | Path | None) -> Path:
        if repo_root is not None:
            return Path(repo_root).resolve()
        root = find_repository_root(project_path)
        if root is not None:
            return root
        project = Path(project_path).resolve()
        return project.parent if project.is_file() else project

    def _load_config_at(self, path: str, commit_sha: str) -> VersionConfig | None:
        try:
            content = self.client.get_content(self.owner, self.repo, path, commit_sha)
        except GitHubNotFoundError:
            # Deleted in this commit; counts as a version change
            logger.debug("%s does not exist at %s", path, commit_sha[:7])
            return None
        except APIError as e:
            raise HistoryUnavailableError(
                f"Cannot read {path} at {commit_sha[:7]} in {self.owner}/{self.repo}: {e}"
            ) from e
        return get_version_from_content(content.text, path)

    def _ahead_by(self, base: str, head: str) -> int:
        return self.client.compare(self.owner, self.repo, base, head).ahead_by
