"""Tests for history walking and anchor detection."""

from unittest.mock import MagicMock

import pytest

from ghversion.github import GitHubCommit, GitHubError, GitHubNotFoundError
from ghversion.versioning import (
    HeightAnchor,
    HistoryUnavailableError,
    VersionConfig,
    commits_touching,
    find_anchor,
)


def commits(*shas: str) -> list[GitHubCommit]:
    return [GitHubCommit(sha=sha) for sha in shas]


def config_loader(versions: dict[str, str | None]) -> MagicMock:
    """Build a load_config callable returning the given version per commit."""

    def load(sha: str) -> VersionConfig | None:
        version = versions[sha]
        if version is None:
            return None
        return VersionConfig.model_validate({"version": version})

    return MagicMock(side_effect=load)


class TestFindAnchor:
    """Tests for finding the commit height is measured from."""

    def test_anchor_before_divergence(self) -> None:
        """Test the anchor is the commit just newer than the version change."""
        loader = config_loader({"C3": "1.3", "C2": "1.3", "C1": "1.2"})

        anchor = find_anchor(commits("C3", "C2", "C1"), (1, 3), loader)

        assert anchor == HeightAnchor.found("C2")

    def test_empty_history_is_new_file(self) -> None:
        """Test no history at all means a brand new file."""
        loader = config_loader({})

        anchor = find_anchor([], (1, 0), loader)

        assert anchor.is_new_file
        loader.assert_not_called()

    def test_first_commit_differs_is_new_file(self) -> None:
        """Test a divergence at the newest commit collapses to new file."""
        loader = config_loader({"C2": "2.0", "C1": "1.0"})

        anchor = find_anchor(commits("C2", "C1"), (3, 0), loader)

        assert anchor == HeightAnchor.new_file()
        assert loader.call_count == 1

    def test_same_version_throughout_anchors_oldest(self) -> None:
        """Test an unchanged version anchors at the commit that introduced the file."""
        loader = config_loader({"C3": "1.3-beta", "C2": "1.3.1", "C1": "1.3"})

        anchor = find_anchor(commits("C3", "C2", "C1"), (1, 3), loader)

        assert anchor == HeightAnchor.found("C1")

    def test_single_matching_commit(self) -> None:
        """Test a single commit with the working version anchors at that commit."""
        loader = config_loader({"C1": "1.3"})

        anchor = find_anchor(commits("C1"), (1, 3), loader)

        assert anchor == HeightAnchor.found("C1")

    def test_patch_changes_ignored(self) -> None:
        """Test only major.minor differences count as a version change."""
        loader = config_loader({"C2": "1.3.5", "C1": "1.3.0"})

        anchor = find_anchor(commits("C2", "C1"), (1, 3), loader)

        assert anchor == HeightAnchor.found("C1")

    def test_stops_at_first_divergence(self) -> None:
        """Test older commits are never read once a change is found."""
        loader = config_loader({"C4": "2.1", "C3": "2.0", "C2": "1.0", "C1": "1.0"})

        def history():
            yield from commits("C4", "C3")
            raise AssertionError("history consumed past the divergence")

        anchor = find_anchor(history(), (2, 1), loader)

        assert anchor == HeightAnchor.found("C4")
        assert [call.args[0] for call in loader.call_args_list] == ["C4", "C3"]

    def test_unreadable_config_counts_as_change(self) -> None:
        """Test a commit without a usable version is a divergence."""
        loader = config_loader({"C2": "1.0", "C1": None})

        anchor = find_anchor(commits("C2", "C1"), (1, 0), loader)

        assert anchor == HeightAnchor.found("C2")


class TestCommitsTouching:
    """Tests for the history walker."""

    def test_passes_through(self) -> None:
        """Test commits are forwarded from the client in order."""
        client = MagicMock()
        client.iter_commits.return_value = iter(commits("C3", "C2", "C1"))

        result = list(commits_touching(client, "octo", "repo", "version.json", "C3"))

        assert [c.sha for c in result] == ["C3", "C2", "C1"]
        client.iter_commits.assert_called_once_with("octo", "repo", "version.json", "C3")

    def test_lazy(self) -> None:
        """Test nothing is requested until iteration starts."""
        client = MagicMock()

        walker = commits_touching(client, "octo", "repo", "version.json", "C3")

        client.iter_commits.assert_not_called()
        client.iter_commits.return_value = iter([])
        assert list(walker) == []

    def test_not_found_becomes_history_unavailable(self) -> None:
        """Test a missing repository or commit is surfaced distinctly."""
        client = MagicMock()
        client.iter_commits.side_effect = GitHubNotFoundError("Resource not found")

        with pytest.raises(HistoryUnavailableError, match="version.json in octo/repo"):
            list(commits_touching(client, "octo", "repo", "version.json", "abcdef123"))

    def test_error_mid_iteration(self) -> None:
        """Test an error on a later page is also surfaced."""

        def pages():
            yield GitHubCommit(sha="C2")
            raise GitHubError("Connection error: timed out")

        client = MagicMock()
        client.iter_commits.return_value = pages()

        walker = commits_touching(client, "octo", "repo", "version.json", "C2")
        assert next(walker).sha == "C2"
        with pytest.raises(HistoryUnavailableError):
            next(walker)
