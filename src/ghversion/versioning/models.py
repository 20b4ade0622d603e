"""Data models for version files and resolved versions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

# major.minor[.patch[.revision]][-prerelease][+buildmetadata]
_SEMVER_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)"
    r"(?:\.(?P<patch>\d+))?(?:\.(?P<revision>\d+))?"
    r"(?P<prerelease>-[\da-z\-]+(?:\.[\da-z\-]+)*)?"
    r"(?P<build>\+[\da-z\-]+(?:\.[\da-z\-]+)*)?$",
    re.IGNORECASE,
)

_NUMERIC_VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+){1,3}$")


class SemanticVersion(BaseModel):
    """A version as written in a version file.

    Only major and minor drive height calculation; patch and revision are
    accepted for compatibility but are otherwise derived, not stored.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int | None = Field(default=None, ge=0)
    revision: int | None = Field(default=None, ge=0)
    prerelease: str = ""
    build_metadata: str = ""

    @model_validator(mode="before")
    @classmethod
    def _parse_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            match = _SEMVER_PATTERN.match(data.strip())
            if match is None:
                raise ValueError(f'The value "{data}" is not a valid semantic version.')
            return {
                "major": int(match["major"]),
                "minor": int(match["minor"]),
                "patch": int(match["patch"]) if match["patch"] else None,
                "revision": int(match["revision"]) if match["revision"] else None,
                "prerelease": match["prerelease"] or "",
                "build_metadata": match["build"] or "",
            }
        return data

    @model_serializer
    def _serialize(self) -> str:
        return str(self)

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse a version string, raising ValueError if it is malformed."""
        if _SEMVER_PATTERN.match(text.strip()) is None:
            raise ValueError(f'The value "{text}" is not a valid semantic version.')
        return cls.model_validate(text)

    @classmethod
    def try_parse(cls, text: str | None) -> SemanticVersion | None:
        """Parse a version string, returning None if it is malformed."""
        if not text:
            return None
        try:
            return cls.parse(text)
        except ValueError:
            return None

    @property
    def major_minor(self) -> tuple[int, int]:
        """The (major, minor) pair that versions are compared on."""
        return (self.major, self.minor)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}"
        if self.patch is not None:
            text += f".{self.patch}"
            if self.revision is not None:
                text += f".{self.revision}"
        return text + self.prerelease + self.build_metadata


class _VersionFileModel(BaseModel):
    """Base for version.json sections: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AssemblyVersionOptions(_VersionFileModel):
    """The assemblyVersion setting, either "1.2" or {"version": ..., "precision": ...}."""

    version: str | None = None
    precision: str | None = None  # major, minor, build or revision

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"version": data}
        return data

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str | None) -> str | None:
        if value is not None and not _NUMERIC_VERSION_PATTERN.match(value):
            raise ValueError(f'"{value}" is not a valid assembly version')
        return value

    @field_validator("precision")
    @classmethod
    def _check_precision(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.lower()
        if value not in ("major", "minor", "build", "revision"):
            raise ValueError(f'"{value}" is not a valid version precision')
        return value


class NuGetPackageVersionOptions(_VersionFileModel):
    """The nugetPackageVersion setting."""

    sem_ver: float | None = None


class CloudBuildCommitIdOptions(_VersionFileModel):
    """The cloudBuild.buildNumber.includeCommitId setting."""

    when: str | None = None  # always, nonPublicReleaseOnly, never
    where: str | None = None  # buildMetadata, fourthVersionComponent


class CloudBuildNumberOptions(_VersionFileModel):
    """The cloudBuild.buildNumber setting."""

    enabled: bool | None = None
    include_commit_id: CloudBuildCommitIdOptions | None = None


class CloudBuildOptions(_VersionFileModel):
    """The cloudBuild setting."""

    set_version_variables: bool | None = None
    set_all_variables: bool | None = None
    build_number: CloudBuildNumberOptions | None = None


class ReleaseOptions(_VersionFileModel):
    """The release setting."""

    branch_name: str | None = None
    version_increment: str | None = None  # major, minor, build
    first_unstable_tag: str | None = None


class VersionConfig(_VersionFileModel):
    """Contents of a version.json (or version.txt) file.

    Only ``version`` and ``inherit`` take part in resolution; the remaining
    fields are policy settings that are parsed, merged and reported but do
    not affect the computed version.
    """

    schema_: str | None = Field(default=None, alias="$schema")
    version: SemanticVersion | None = None
    inherit: bool = False
    assembly_version: AssemblyVersionOptions | None = None
    version_height_offset: int | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "versionHeightOffset", "buildNumberOffset", "version_height_offset"
        ),
        serialization_alias="versionHeightOffset",
    )
    nuget_package_version: NuGetPackageVersionOptions | None = None
    public_release_ref_spec: list[str] | None = None
    cloud_build: CloudBuildOptions | None = None
    release: ReleaseOptions | None = None

    @property
    def prerelease(self) -> str:
        """Get the prerelease suffix (e.g. "-beta"), or an empty string."""
        return self.version.prerelease if self.version else ""


class ResolvedVersion(BaseModel):
    """A fully merged version config plus where it was found."""

    model_config = ConfigDict(frozen=True)

    config: VersionConfig
    found_directory: Path
    file_name: str
    version_file: Path  # the file that supplied the version field

    @property
    def version(self) -> SemanticVersion | None:
        """Get the resolved version."""
        return self.config.version

    @property
    def file_path(self) -> Path:
        """Get the path of the nearest version file."""
        return self.found_directory / self.file_name


class AnchorKind(Enum):
    """How git height is measured for a version file."""

    FOUND = "found"
    NEW_FILE = "new_file"


@dataclass(frozen=True)
class HeightAnchor:
    """The commit height is counted from, or a brand-new-file signal."""

    kind: AnchorKind
    commit_sha: str | None = None

    def __post_init__(self) -> None:
        if self.kind is AnchorKind.FOUND and not self.commit_sha:
            raise ValueError("A found anchor requires a commit SHA")
        if self.kind is AnchorKind.NEW_FILE and self.commit_sha is not None:
            raise ValueError("A new-file anchor has no commit SHA")

    @classmethod
    def found(cls, commit_sha: str) -> HeightAnchor:
        return cls(AnchorKind.FOUND, commit_sha)

    @classmethod
    def new_file(cls) -> HeightAnchor:
        return cls(AnchorKind.NEW_FILE)

    @property
    def is_new_file(self) -> bool:
        return self.kind is AnchorKind.NEW_FILE


class ResolvedSemVer(BaseModel):
    """The computed version for a commit."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    height: int = Field(ge=1)
    prerelease: str = ""

    @property
    def version(self) -> str:
        """Get the version as major.minor.height."""
        return format_version(self.major, self.minor, self.height)

    @property
    def semver2(self) -> str:
        """Get the version with the prerelease suffix appended."""
        return self.version + self.prerelease

    def __str__(self) -> str:
        return self.version


def format_version(major: int, minor: int, height: int) -> str:
    """Format a three-part version from major, minor and git height."""
    return f"{major}.{minor}.{height}"
