"""Git height calculation and version assembly."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ghversion.api import APIError
from ghversion.versioning.errors import IncomparableCommitsError, VersionFormatError
from ghversion.versioning.models import HeightAnchor, ResolvedSemVer, ResolvedVersion

logger = logging.getLogger(__name__)


def calculate_height(
    anchor: HeightAnchor,
    target_commit: str,
    ahead_by: Callable[[str, str], int],
) -> int:
    """Calculate the git height of ``target_commit``.

    The anchor commit itself has height 1, so the target's height is its
    ahead-by distance from the anchor plus one. A brand-new version file
    always has height 1 and needs no comparison.

    Args:
        anchor: Result of the anchor search.
        target_commit: SHA of the commit being versioned.
        ahead_by: Returns the number of commits reachable from the second
            SHA but not from the first.

    Raises:
        IncomparableCommitsError: If the commits cannot be compared.
    """
    anchor_sha = anchor.commit_sha
    if anchor.is_new_file or anchor_sha is None:
        return 1

    try:
        distance = ahead_by(anchor_sha, target_commit)
    except APIError as e:
        raise IncomparableCommitsError(anchor_sha, target_commit, str(e)) from e

    if distance < 0:
        raise IncomparableCommitsError(
            anchor_sha, target_commit, f"negative ahead-by count {distance}"
        )

    logger.debug("%s is %d commits ahead of %s", target_commit[:7], distance, anchor_sha[:7])
    return distance + 1


def assemble_version(resolved: ResolvedVersion, height: int) -> ResolvedSemVer:
    """Combine the resolved major.minor with a git height.

    The prerelease suffix is carried through untouched.

    Raises:
        VersionFormatError: If the resolved configuration has no version.
    """
    version = resolved.version
    if version is None:
        raise VersionFormatError("No version is defined.", resolved.file_path)
    return ResolvedSemVer(
        major=version.major,
        minor=version.minor,
        height=height,
        prerelease=version.prerelease,
    )
