"""Tests for the configuration module."""

import configparser
import os
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from ghversion.config import (
    AppConfig,
    GitHubConfig,
    OptionsConfig,
    _expand_env_vars,
    get_config_path,
    get_config_paths,
    load_config,
    reset_config,
    save_default_config,
)


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


def write_temp(content: str, suffix: str) -> Path:
    with tempfile.NamedTemporaryFile(
        mode="w", suffix=suffix, delete=False, encoding="utf-8"
    ) as f:
        f.write(content)
        return Path(f.name)


class TestConfigModels:
    """Tests for configuration models."""

    def test_github_config_defaults(self) -> None:
        """Test GitHubConfig has correct defaults."""
        cfg = GitHubConfig()
        assert cfg.login is None
        assert cfg.token is None
        assert cfg.api_url == "https://api.github.com"
        assert cfg.timeout == 30.0
        assert cfg.per_page == 100

    def test_options_config_defaults(self) -> None:
        """Test OptionsConfig has correct defaults."""
        cfg = OptionsConfig()
        assert cfg.project == "."
        assert cfg.repo_root is None
        assert cfg.format == "text"

    def test_app_config_defaults(self) -> None:
        """Test AppConfig has correct defaults."""
        cfg = AppConfig()
        assert isinstance(cfg.github, GitHubConfig)
        assert isinstance(cfg.options, OptionsConfig)

    def test_per_page_limit(self) -> None:
        """Test page sizes above GitHub's maximum are rejected."""
        with pytest.raises(ValidationError):
            GitHubConfig(per_page=500)

    def test_invalid_format(self) -> None:
        """Test only known output formats are accepted."""
        with pytest.raises(ValidationError):
            OptionsConfig(format="xml")


class TestEnvVarExpansion:
    """Tests for environment variable expansion."""

    def test_expand_simple_var(self) -> None:
        """Test expanding ${VAR} syntax."""
        os.environ["TEST_VAR"] = "test_value"
        try:
            result = _expand_env_vars("prefix_${TEST_VAR}_suffix")
            assert result == "prefix_test_value_suffix"
        finally:
            del os.environ["TEST_VAR"]

    def test_expand_dollar_var(self) -> None:
        """Test expanding $VAR syntax."""
        os.environ["TEST_VAR"] = "test_value"
        try:
            result = _expand_env_vars("prefix_$TEST_VAR")
            assert result == "prefix_test_value"
        finally:
            del os.environ["TEST_VAR"]

    def test_expand_missing_var(self) -> None:
        """Test expanding missing variable returns empty string."""
        result = _expand_env_vars("${NONEXISTENT_VAR_12345}")
        assert result == ""

    def test_expand_nested(self) -> None:
        """Test expanding variables in dicts and lists."""
        os.environ["TEST_VAR"] = "test_value"
        try:
            result = _expand_env_vars({"key": ["${TEST_VAR}", "static"], "n": 3})
            assert result == {"key": ["test_value", "static"], "n": 3}
        finally:
            del os.environ["TEST_VAR"]


class TestConfigLoading:
    """Tests for configuration loading."""

    def test_load_nonexistent_file(self) -> None:
        """Test loading returns defaults when no config file exists."""
        cfg = load_config(Path("/nonexistent/ghversion.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.github.per_page == 100
        assert get_config_path() is None

    def test_load_yaml(self) -> None:
        """Test loading configuration from YAML file."""
        temp_path = write_temp(
            """
github:
  login: octocat
  api_url: https://github.example.com/api/v3
  per_page: 50

options:
  format: json
""",
            ".yaml",
        )
        try:
            cfg = load_config(temp_path)
            assert cfg.github.login == "octocat"
            assert cfg.github.api_url == "https://github.example.com/api/v3"
            assert cfg.github.per_page == 50
            assert cfg.options.format == "json"
            # Default values should still be present
            assert cfg.github.timeout == 30.0
            assert cfg.options.project == "."
            assert get_config_path() == temp_path
        finally:
            temp_path.unlink()

    def test_load_ini(self) -> None:
        """Test loading configuration from INI file."""
        temp_path = write_temp(
            """
[github]
login = octocat
token = ghp_test_token
timeout = 10
per_page = 25

[options]
project = src/app
repo_root = /work/repo
format = json
""",
            ".ini",
        )
        try:
            cfg = load_config(temp_path)
            assert cfg.github.login == "octocat"
            assert cfg.github.token == "ghp_test_token"
            assert cfg.github.timeout == 10.0
            assert cfg.github.per_page == 25
            assert cfg.options.project == "src/app"
            assert cfg.options.repo_root == "/work/repo"
            assert cfg.options.format == "json"
        finally:
            temp_path.unlink()

    def test_load_ini_env_token(self) -> None:
        """Test tokens can come from the environment."""
        temp_path = write_temp("[github]\ntoken = ${GHVERSION_TEST_TOKEN}\n", ".ini")
        os.environ["GHVERSION_TEST_TOKEN"] = "from_env"
        try:
            cfg = load_config(temp_path)
            assert cfg.github.token == "from_env"
        finally:
            del os.environ["GHVERSION_TEST_TOKEN"]
            temp_path.unlink()

    def test_unset_env_var_means_unset(self) -> None:
        """Test a reference to a missing variable leaves the value unset."""
        temp_path = write_temp(
            "[github]\nlogin = ${NONEXISTENT_VAR_12345}\ntoken = ${NONEXISTENT_VAR_12345}\n",
            ".ini",
        )
        try:
            cfg = load_config(temp_path)
            assert cfg.github.login is None
            assert cfg.github.token is None
        finally:
            temp_path.unlink()

    def test_load_ini_bad_number(self) -> None:
        """Test unparseable numbers keep their defaults."""
        temp_path = write_temp("[github]\ntimeout = soon\nper_page = lots\n", ".ini")
        try:
            cfg = load_config(temp_path)
            assert cfg.github.timeout == 30.0
            assert cfg.github.per_page == 100
        finally:
            temp_path.unlink()


class TestConfigPaths:
    """Tests for configuration path handling."""

    def test_get_config_paths_not_empty(self) -> None:
        """Test that config paths list is not empty."""
        assert len(get_config_paths()) > 0

    def test_get_config_paths_includes_cwd(self) -> None:
        """Test that config paths include current directory."""
        cwd = Path.cwd()
        assert any(p.parent == cwd for p in get_config_paths())

    def test_get_config_paths_includes_home(self) -> None:
        """Test that config paths include home directory."""
        home = Path.home()
        assert any(str(home) in str(p) for p in get_config_paths())

    def test_ini_before_yaml(self) -> None:
        """Test INI files take priority over YAML files."""
        suffixes = [p.suffix for p in get_config_paths()]
        assert suffixes.index(".ini") < suffixes.index(".yaml")


class TestDefaultConfig:
    """Tests for default config generation."""

    def test_save_default_config(self) -> None:
        """Test saving default INI config creates valid file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "ghversion.ini"
            result_path = save_default_config(config_path)

            assert result_path == config_path
            assert config_path.exists()

            parser = configparser.ConfigParser(interpolation=None)
            parser.read(config_path)
            assert parser.has_section("github")
            assert parser.has_section("options")
            assert parser.get("github", "token") == "${GITHUB_TOKEN}"

    def test_save_default_config_with_values(self) -> None:
        """Test saving config with actual values loads back."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "ghversion.ini"
            save_default_config(config_path, login="octocat", token="ghp_abc")

            cfg = load_config(config_path)
            assert cfg.github.login == "octocat"
            assert cfg.github.token == "ghp_abc"
            assert cfg.github.api_url == "https://api.github.com"
            assert cfg.options.format == "text"
