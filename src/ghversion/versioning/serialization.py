"""JSON output for version configurations.

Which optional fields are written is controlled by explicit toggles rather
than by inspecting the model at runtime.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ghversion.versioning.models import VersionConfig

SCHEMA_URL = (
    "https://raw.githubusercontent.com/dotnet/Nerdbank.GitVersioning/main/"
    "src/NerdBank.GitVersioning/version.schema.json"
)

# Values NerdBank.GitVersioning assumes when a field is omitted
DEFAULT_VALUES: dict[str, Any] = {
    "inherit": False,
    "assemblyVersion": {"precision": "minor"},
    "versionHeightOffset": 0,
    "nugetPackageVersion": {"semVer": 1.0},
    "publicReleaseRefSpec": [],
    "cloudBuild": {
        "setVersionVariables": True,
        "setAllVariables": False,
        "buildNumber": {
            "enabled": False,
            "includeCommitId": {"when": "nonPublicReleaseOnly", "where": "buildMetadata"},
        },
    },
    "release": {
        "branchName": "v{version}",
        "versionIncrement": "minor",
        "firstUnstableTag": "alpha",
    },
}


@dataclass(frozen=True)
class SerializationOptions:
    """Toggles for which optional fields are written.

    Attributes:
        include_defaults: Write every field, filling omitted ones with their
            default values. When off, fields equal to their default are
            dropped.
        include_schema: Write the ``$schema`` property.
    """

    include_defaults: bool = False
    include_schema: bool = False


def _with_defaults(defaults: dict[str, Any], values: dict[str, Any]) -> dict[str, Any]:
    result = dict(defaults)
    for key, value in values.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _with_defaults(result[key], value)
        else:
            result[key] = value
    return result


def _without_defaults(values: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in values.items():
        default = defaults.get(key)
        if isinstance(value, dict) and isinstance(default, dict):
            value = _without_defaults(value, default)
            if not value:
                continue
        elif key in defaults and value == default:
            continue
        result[key] = value
    return result


def config_to_dict(
    config: VersionConfig,
    options: SerializationOptions | None = None,
) -> dict[str, Any]:
    """Convert a configuration to a version.json-shaped dictionary."""
    options = options or SerializationOptions()
    values = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    schema = values.pop("$schema", None)

    if options.include_defaults:
        values = _with_defaults(DEFAULT_VALUES, values)
    else:
        values = _without_defaults(values, DEFAULT_VALUES)

    if options.include_schema:
        return {"$schema": schema or SCHEMA_URL, **values}
    return values


def config_to_json(
    config: VersionConfig,
    options: SerializationOptions | None = None,
    indent: int = 2,
) -> str:
    """Serialize a configuration as version.json text."""
    return json.dumps(config_to_dict(config, options), indent=indent)
