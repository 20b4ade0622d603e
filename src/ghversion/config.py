"""Application settings for ghversion.

Settings come from an INI file (preferred) or a YAML file. String values may
reference environment variables as ``${VAR}`` or ``$VAR``; a reference to an
unset variable leaves the setting unconfigured.
"""

from __future__ import annotations

import configparser
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

CONFIG_DIR_NAME = ".ghversion"
INI_FILE_NAME = "ghversion.ini"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class GitHubConfig(BaseModel):
    """[github] section: credentials and API endpoint."""

    login: str | None = None
    token: str | None = None
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    per_page: int = Field(default=100, ge=1, le=100)


class OptionsConfig(BaseModel):
    """[options] section: defaults for the calculate command."""

    project: str = "."
    repo_root: str | None = None
    format: Literal["text", "json"] = "text"


class AppConfig(BaseModel):
    """All application settings."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    options: OptionsConfig = Field(default_factory=OptionsConfig)


_config: AppConfig | None = None
_config_path: Path | None = None


def get_config_paths() -> list[Path]:
    """List candidate config files, highest priority first.

    INI files in the working directory and in ``~/.ghversion`` come before
    the YAML alternatives.
    """
    cwd = Path.cwd()
    home_dir = Path.home() / CONFIG_DIR_NAME
    return [
        cwd / INI_FILE_NAME,
        home_dir / INI_FILE_NAME,
        cwd / "ghversion.yaml",
        cwd / "ghversion.yml",
        cwd / ".ghversion.yaml",
        cwd / ".ghversion.yml",
        home_dir / "config.yaml",
        home_dir / "config.yml",
    ]


def find_config_file() -> Path | None:
    """Return the first candidate config file that exists, if any."""
    return next((path for path in get_config_paths() if path.exists()), None)


def _expand_env_vars(value: Any) -> Any:
    """Substitute environment variables in strings, recursing into containers."""
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(
            lambda match: os.environ.get(match.group(1) or match.group(2), ""), value
        )
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _load_ini_config(path: Path) -> dict[str, Any]:
    """Read the INI sections that correspond to AppConfig fields.

    Only keys the models know are taken. Numbers that do not parse are
    skipped so the default applies.
    """
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")

    config: dict[str, Any] = {}
    for section, field_info in AppConfig.model_fields.items():
        if not parser.has_section(section):
            continue
        model = field_info.annotation
        values: dict[str, Any] = {}
        for key, key_info in model.model_fields.items():
            raw = parser.get(section, key, fallback="").strip()
            if not raw:
                continue
            if key_info.annotation in (int, float):
                try:
                    values[key] = key_info.annotation(raw)
                except ValueError:
                    continue
            else:
                values[key] = raw
        if values:
            config[section] = values
    return config


def _load_yaml_config(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _drop_empty(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _drop_empty(item) for key, item in value.items() if item != ""}
    return value


def load_config(path: Path | None = None) -> AppConfig:
    """Load settings from ``path``, or from the first config file found.

    Without a config file the defaults are used.
    """
    global _config, _config_path

    if path is None:
        path = find_config_file()

    if path is None or not path.exists():
        _config, _config_path = AppConfig(), None
        return _config

    if path.suffix in (".ini", ".cfg"):
        raw_config = _load_ini_config(path)
    else:
        raw_config = _load_yaml_config(path)

    _config = AppConfig.model_validate(_drop_empty(_expand_env_vars(raw_config)))
    _config_path = path
    return _config


def get_config_path() -> Path | None:
    """Return the file the current settings were loaded from, if any."""
    return _config_path


def get_config() -> AppConfig:
    """Return the current settings, loading them on first use."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded settings so the next get_config() reloads them."""
    global _config, _config_path
    _config = None
    _config_path = None


def get_config_dir() -> Path:
    """Return ``~/.ghversion``, creating it if needed."""
    config_dir = Path.home() / CONFIG_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


DEFAULT_INI_TEMPLATE = """\
# ghversion configuration
# Values may reference environment variables with ${{VAR}} syntax

[github]
# Login for basic auth; leave empty to send the token as a bearer token
login = {login}
# Personal access token with read access to the repository
token = {token}
# API root; change for GitHub Enterprise (e.g. https://github.example.com/api/v3)
api_url = https://api.github.com
# Request timeout in seconds
timeout = 30
# Commits per page of history (1-100)
per_page = 100

[options]
# Project directory to read version.json / version.txt from
project = .
# Working tree root (default: nearest directory containing .git)
# repo_root =
# Output format: text or json
format = text
"""


def save_default_config(
    path: Path | None = None,
    login: str = "",
    token: str = "",
) -> Path:
    """Write a commented INI config file.

    Args:
        path: Destination. Defaults to ./ghversion.ini.
        login: GitHub login; defaults to a ${GITHUB_LOGIN} reference.
        token: Access token; defaults to a ${GITHUB_TOKEN} reference.

    Returns:
        The path written.
    """
    if path is None:
        path = Path.cwd() / INI_FILE_NAME

    content = DEFAULT_INI_TEMPLATE.format(
        login=login or "${GITHUB_LOGIN}",
        token=token or "${GITHUB_TOKEN}",
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
