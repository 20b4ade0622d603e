"""Exceptions raised while resolving a version."""

from __future__ import annotations

from pathlib import Path


class VersioningError(Exception):
    """Base exception for version resolution failures."""

    pass


class VersionFileNotFoundError(VersioningError):
    """No version.json or version.txt exists in the directory or its ancestors."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        super().__init__(
            f"No version.json or version.txt found in {self.directory} or any parent directory"
        )


class VersionFormatError(VersioningError):
    """A version file exists but its version cannot be parsed."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{self.path}: {message}"
        super().__init__(message)


class MissingInheritanceTargetError(VersioningError):
    """A version.json inherits from a parent directory but none defines a version."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(
            f'"{self.path}" inherits from a parent directory version.json file but none exists.'
        )


class HistoryUnavailableError(VersioningError):
    """The commit history (or file content) for a path could not be retrieved."""

    pass


class IncomparableCommitsError(VersioningError):
    """Two commits cannot be related by an ahead-by count."""

    def __init__(self, base: str, head: str, reason: str = "") -> None:
        self.base = base
        self.head = head
        message = f"Cannot compare {base[:7]}...{head[:7]}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
