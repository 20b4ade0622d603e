"""Version resolution: version files, history anchors and git height."""

from ghversion.versioning.errors import (
    HistoryUnavailableError,
    IncomparableCommitsError,
    MissingInheritanceTargetError,
    VersionFileNotFoundError,
    VersionFormatError,
    VersioningError,
)
from ghversion.versioning.height import assemble_version, calculate_height
from ghversion.versioning.history import commits_touching, find_anchor
from ghversion.versioning.models import (
    AnchorKind,
    HeightAnchor,
    ResolvedSemVer,
    ResolvedVersion,
    SemanticVersion,
    VersionConfig,
    format_version,
)
from ghversion.versioning.oracle import VersionOracle, VersionResult
from ghversion.versioning.version_file import (
    JSON_FILE_NAME,
    TXT_FILE_NAME,
    get_version_from_content,
    is_version_defined,
    resolve_version,
)

__all__ = [
    # Errors
    "VersioningError",
    "VersionFileNotFoundError",
    "VersionFormatError",
    "MissingInheritanceTargetError",
    "HistoryUnavailableError",
    "IncomparableCommitsError",
    # Models
    "SemanticVersion",
    "VersionConfig",
    "ResolvedVersion",
    "AnchorKind",
    "HeightAnchor",
    "ResolvedSemVer",
    "format_version",
    # Resolution
    "JSON_FILE_NAME",
    "TXT_FILE_NAME",
    "resolve_version",
    "is_version_defined",
    "get_version_from_content",
    "commits_touching",
    "find_anchor",
    "calculate_height",
    "assemble_version",
    "VersionOracle",
    "VersionResult",
]
