"""Working-tree path helpers and commit identifiers."""

from __future__ import annotations

from pathlib import Path


def find_repository_root(start: str | Path) -> Path | None:
    """Find the nearest directory at or above ``start`` that holds ``.git``.

    ``.git`` may be a directory or, for worktrees and submodules, a file.
    """
    directory = Path(start).resolve()
    if directory.is_file():
        directory = directory.parent
    for candidate in (directory, *directory.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def relative_posix_path(path: str | Path, root: str | Path) -> str:
    """Express ``path`` relative to ``root`` with forward slashes.

    Raises:
        ValueError: If ``path`` is not inside ``root``.
    """
    absolute = Path(path).resolve()
    root_path = Path(root).resolve()
    try:
        relative = absolute.relative_to(root_path)
    except ValueError:
        raise ValueError(f"{absolute} is not inside the repository root {root_path}") from None
    return relative.as_posix()


def truncated_commit_id(commit_sha: str) -> int:
    """Identify a commit with a 16-bit integer.

    Takes the first 2 bytes of the commit ID (the first 4 characters of its
    hex-encoded SHA) and reads them as a little-endian unsigned integer.

    Raises:
        ValueError: If the SHA is shorter than 4 characters or not hex.
    """
    prefix = commit_sha[:4]
    if len(prefix) < 4:
        raise ValueError(f"Commit SHA too short: {commit_sha!r}")
    return int.from_bytes(bytes.fromhex(prefix), "little")
