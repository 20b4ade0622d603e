"""Locating and reading version.json / version.txt files.

A project's version comes from the nearest version file in its directory or
any ancestor directory. At each directory the legacy ``version.txt`` is
checked before ``version.json``. A ``version.json`` with ``"inherit": true``
supplies only overrides, which are merged onto the nearest ancestor's fully
resolved configuration.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ghversion.versioning.errors import MissingInheritanceTargetError, VersionFormatError
from ghversion.versioning.models import ResolvedVersion, SemanticVersion, VersionConfig

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)

TXT_FILE_NAME = "version.txt"
JSON_FILE_NAME = "version.json"


@dataclass(frozen=True)
class _FoundFile:
    directory: Path
    file_name: str
    config: VersionConfig

    @property
    def path(self) -> Path:
        return self.directory / self.file_name


def read_version_txt(content: str, path: Path | None = None) -> VersionConfig:
    """Parse the legacy two-line version.txt format.

    Line 1 holds ``major.minor[.patch]``; the optional line 2 holds a
    prerelease tag, which gets a leading hyphen if it lacks one.

    Args:
        content: The file content.
        path: File path, used in error messages.

    Returns:
        The parsed configuration.

    Raises:
        VersionFormatError: If the version cannot be parsed.
    """
    lines = content.splitlines()
    version_line = lines[0].strip() if lines else ""
    prerelease = lines[1].strip() if len(lines) > 1 else ""
    if prerelease and not prerelease.startswith("-"):
        # SemVer requires that prerelease suffixes begin with a hyphen
        prerelease = "-" + prerelease

    version = SemanticVersion.try_parse(version_line + prerelease)
    if version is None:
        raise VersionFormatError("Unrecognized version format.", path)
    return VersionConfig(version=version)


def _load_json_object(content: str) -> dict[str, Any] | None:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.debug("Ignoring malformed version.json: %s", e)
        return None
    if not isinstance(data, dict):
        logger.debug("Ignoring version.json whose root is not an object")
        return None
    return data


def read_version_json(content: str) -> VersionConfig | None:
    """Parse version.json content.

    Returns:
        The parsed configuration, or None if the content is not a valid
        version.json document.
    """
    data = _load_json_object(content)
    if data is None:
        return None
    try:
        return VersionConfig.model_validate(data)
    except ValidationError as e:
        logger.debug("Ignoring invalid version.json: %s", e)
        return None


def get_version_from_content(content: str, file_name: str = JSON_FILE_NAME) -> VersionConfig | None:
    """Parse version file content fetched from a repository revision.

    The file name selects the format. The same leniency rules as for local
    files apply: a malformed version.json gives None while a malformed
    version.txt raises VersionFormatError.
    """
    if Path(file_name).name == TXT_FILE_NAME:
        return read_version_txt(content, Path(file_name))
    return read_version_json(content)


def _read_directory(directory: Path) -> _FoundFile | None:
    """Read the version file at one directory level, if there is a usable one."""
    txt_path = directory / TXT_FILE_NAME
    if txt_path.is_file():
        config = read_version_txt(txt_path.read_text(encoding="utf-8-sig"), txt_path)
        return _FoundFile(directory, TXT_FILE_NAME, config)

    json_path = directory / JSON_FILE_NAME
    if json_path.is_file():
        config = read_version_json(json_path.read_text(encoding="utf-8-sig"))
        if config is not None:
            return _FoundFile(directory, JSON_FILE_NAME, config)
        logger.debug("Skipping unreadable %s", json_path)

    return None


def _normalize_directory(project_directory: str | Path | None) -> Path:
    if project_directory is None or str(project_directory) == "":
        raise ValueError("project_directory must not be empty")
    path = Path(project_directory).resolve()
    if path.is_file():
        path = path.parent
    return path


def merge_configs(base: _M, override: _M) -> _M:
    """Overlay the fields explicitly set in ``override`` onto ``base``.

    Nested sections merge field by field; versions, lists and scalars
    replace.
    """
    updates: dict[str, Any] = {}
    for name in override.model_fields_set:
        value = getattr(override, name)
        current = getattr(base, name)
        if (
            isinstance(value, BaseModel)
            and not isinstance(value, SemanticVersion)
            and type(current) is type(value)
        ):
            value = merge_configs(current, value)
        updates[name] = value
    return base.model_copy(update=updates)


def resolve_version(project_directory: str | Path) -> ResolvedVersion | None:
    """Find and read the version file that applies to a project directory.

    Walks from ``project_directory`` up to the filesystem root. The first
    directory holding a usable version file wins. Inheriting version.json
    files are collected on the way up and merged, outermost first, onto the
    first non-inheriting configuration found above them.

    Args:
        project_directory: Directory (or file inside it) to start from.

    Returns:
        The resolved version, or None if no version file exists.

    Raises:
        ValueError: If ``project_directory`` is empty.
        VersionFormatError: If a version.txt on the way cannot be parsed.
        MissingInheritanceTargetError: If an inheriting version.json has no
            ancestor version file to inherit from.
    """
    directory: Path | None = _normalize_directory(project_directory)
    inheriting: list[_FoundFile] = []

    while directory is not None:
        found = _read_directory(directory)
        if found is not None:
            if found.file_name == JSON_FILE_NAME and found.config.inherit:
                logger.debug("%s inherits from a parent directory", found.path)
                inheriting.append(found)
            else:
                return _build_resolved(found, inheriting)

        parent = directory.parent
        directory = parent if parent != directory else None

    if inheriting:
        raise MissingInheritanceTargetError(inheriting[-1].path)
    return None


def _build_resolved(base: _FoundFile, inheriting: list[_FoundFile]) -> ResolvedVersion:
    config = base.config
    version_file = base.path
    for child in reversed(inheriting):
        config = merge_configs(config, child.config)
        if "version" in child.config.model_fields_set:
            version_file = child.path

    nearest = inheriting[0] if inheriting else base
    logger.debug("Resolved version %s from %s", config.version, nearest.path)
    return ResolvedVersion(
        config=config,
        found_directory=nearest.directory,
        file_name=nearest.file_name,
        version_file=version_file,
    )


def is_version_defined(project_directory: str | Path) -> bool:
    """Check whether a version file applies to the directory or an ancestor."""
    return resolve_version(project_directory) is not None
