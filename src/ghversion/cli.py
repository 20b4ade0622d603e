"""Command-line interface for ghversion."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from ghversion import __version__
from ghversion.config import get_config

if TYPE_CHECKING:
    from ghversion.versioning import VersionResult

# Load environment variables from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)

# Return codes
OK = 0
ERROR = 1
EXCEPTION = 2
CANCELLED = 130

EXTENDED_HELP = """
Uses the GitHub API to calculate a build number for a commit, using similar
rules to NerdBank.GitVersioning. Only a subset of features is supported.
"""


def _configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )
    # Keep HTTP client chatter out of -v output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@click.group(epilog=EXTENDED_HELP)
@click.version_option(version=__version__, prog_name="ghversion")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (no progress, only results)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """ghversion - NerdBank.GitVersioning compatible versions from the GitHub API."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose)


@main.command()
@click.argument("owner")
@click.argument("repo")
@click.argument("commit")
@click.option(
    "-p",
    "--project",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="The path to the project or project directory (default: current directory)",
)
@click.option("-l", "--login", envvar="GITHUB_LOGIN", default=None, help="GitHub login")
@click.option(
    "-a",
    "--accesstoken",
    "token",
    envvar=["GITHUB_TOKEN", "GH_TOKEN"],
    default=None,
    help="GitHub password or access token",
)
@click.option(
    "--repo-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Working tree root (default: nearest directory containing .git)",
)
@click.option("--api-url", default=None, help="GitHub API root (for GitHub Enterprise)")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Output format (default: from config or text)",
)
@click.pass_context
def calculate(
    ctx: click.Context,
    owner: str,
    repo: str,
    commit: str,
    project: Path | None,
    login: str | None,
    token: str | None,
    repo_root: Path | None,
    api_url: str | None,
    format: str | None,
) -> None:
    """Calculate the version of COMMIT in the OWNER/REPO repository."""
    from ghversion.api import APIError
    from ghversion.github import GitHubClient
    from ghversion.statistics import ResolutionStatistics
    from ghversion.versioning import VersioningError, VersionOracle

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)
    cfg = get_config()

    for name, value in (("repository owner", owner), ("repository name", repo), ("commit SHA", commit)):
        if not value.strip():
            err_console.print(f"[red]Error:[/red] The {name} is required")
            sys.exit(ERROR)

    # Use CLI options or config defaults
    if project is None:
        project = Path(cfg.options.project)
    if repo_root is None and cfg.options.repo_root:
        repo_root = Path(cfg.options.repo_root)
    if format is None:
        format = cfg.options.format

    stats = ResolutionStatistics()
    stats.start()

    try:
        with GitHubClient(
            token=token or cfg.github.token,
            login=login or cfg.github.login,
            base_url=api_url or cfg.github.api_url,
            timeout=cfg.github.timeout,
            per_page=cfg.github.per_page,
        ) as client:
            if quiet:
                oracle = VersionOracle(client, owner, repo)
                result = oracle.get_version(commit, project, repo_root)
            else:
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    console=err_console,
                    transient=True,
                ) as progress:
                    task = progress.add_task("Connecting to GitHub...", total=None)

                    def progress_callback(stage: str, current: int, total: int) -> None:
                        progress.update(task, description=stage)
                        stats.start_phase(stage.rstrip("."))

                    oracle = VersionOracle(client, owner, repo, progress_callback=progress_callback)
                    result = oracle.get_version(commit, project, repo_root)

    except (VersioningError, APIError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        sys.exit(ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(CANCELLED)
    finally:
        stats.stop()
        ResolutionStatistics.reset_current()

    if format == "json":
        _output_json(result)
    else:
        console.print(f"Version: {result.version}", highlight=False)

    if verbose:
        _output_details(result)
        stats.print_summary(err_console)


def _output_json(result: VersionResult) -> None:
    """Output the computed version as JSON."""
    output = {
        "version": result.version,
        "semVer2": result.semver.semver2,
        "major": result.semver.major,
        "minor": result.semver.minor,
        "height": result.semver.height,
        "prerelease": result.semver.prerelease or None,
        "commit": result.commit_sha,
        "truncatedCommitId": result.truncated_commit_id,
        "versionFile": result.version_file_path,
        "anchorCommit": result.anchor.commit_sha,
        "newVersionFile": result.anchor.is_new_file,
    }
    console.print_json(json.dumps(output))


def _output_details(result: VersionResult) -> None:
    """Explain how the version was derived."""
    err_console.print()
    err_console.print(f"[dim]Version file:[/dim] {result.version_file_path}")
    if result.anchor.is_new_file:
        err_console.print("[dim]Anchor:[/dim] (new version, height starts at 1)")
    else:
        err_console.print(f"[dim]Anchor:[/dim] {result.anchor.commit_sha}")
    err_console.print(f"[dim]Height:[/dim] {result.semver.height}")
    if result.semver.prerelease:
        err_console.print(f"[dim]SemVer 2:[/dim] {result.semver.semver2}")


@main.command()
@click.argument(
    "path",
    type=click.Path(exists=True, path_type=Path),
    default=Path("."),
)
@click.option("--include-defaults", is_flag=True, help="Show default values of omitted settings")
@click.option("--include-schema", is_flag=True, help="Include the $schema property")
def locate(path: Path, include_defaults: bool, include_schema: bool) -> None:
    """Show the version file that applies to PATH and its effective settings."""
    from ghversion.versioning import VersioningError, resolve_version
    from ghversion.versioning.serialization import SerializationOptions, config_to_json

    try:
        resolved = resolve_version(path)
    except VersioningError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        sys.exit(ERROR)

    if resolved is None:
        err_console.print(
            f"[red]Error:[/red] No version.json or version.txt found in {path.resolve()} "
            "or any parent directory",
            highlight=False,
        )
        sys.exit(ERROR)

    console.print(f"[dim]Version file:[/dim] {resolved.file_path}", highlight=False)
    if resolved.version_file != resolved.file_path:
        console.print(f"[dim]Version defined in:[/dim] {resolved.version_file}", highlight=False)

    options = SerializationOptions(
        include_defaults=include_defaults,
        include_schema=include_schema,
    )
    console.print_json(config_to_json(resolved.config, options))


@main.group()
def config() -> None:
    """Manage ghversion configuration."""
    pass


@config.command(name="show")
def config_show() -> None:
    """Show current configuration."""
    from ghversion.config import find_config_file

    cfg = get_config()
    config_file = find_config_file()

    console.print("[bold]Current Configuration[/bold]")
    console.print()

    if config_file:
        console.print(f"[dim]Config file:[/dim] {config_file}")
    else:
        console.print("[dim]Config file:[/dim] (none - using defaults)")
    console.print()

    console.print("[bold]GitHub:[/bold]")
    login = cfg.github.login or "(from GITHUB_LOGIN env or --login)"
    token = "(set)" if cfg.github.token else "(from GITHUB_TOKEN env or --accesstoken)"
    console.print(f"  API URL: {cfg.github.api_url}")
    console.print(f"  Login: {login}")
    console.print(f"  Token: {token}")
    console.print(f"  Timeout: {cfg.github.timeout:g} seconds")
    console.print(f"  Page size: {cfg.github.per_page}")
    console.print()

    console.print("[bold]Options:[/bold]")
    console.print(f"  Project: {cfg.options.project}")
    console.print(f"  Repository root: {cfg.options.repo_root or '(auto-detect)'}")
    console.print(f"  Format: {cfg.options.format}")


@config.command(name="path")
def config_path() -> None:
    """Show configuration file paths."""
    from ghversion.config import find_config_file, get_config_paths

    console.print("[bold]Configuration paths (in priority order):[/bold]")
    config_file = find_config_file()

    for path in get_config_paths():
        if path.exists():
            if path == config_file:
                console.print(f"  [green]{path}[/green] (active)")
            else:
                console.print(f"  {path} (exists)")
        else:
            console.print(f"  [dim]{path}[/dim]")

    console.print()
    console.print("[bold]Other paths:[/bold]")
    console.print(f"  .env file: {Path.cwd() / '.env'}")


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(force: bool) -> None:
    """Create a default configuration file."""
    from ghversion.config import get_config_dir, save_default_config

    config_path = get_config_dir() / "ghversion.ini"

    if config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
        console.print("Use --force to overwrite.")
        sys.exit(ERROR)

    save_default_config(config_path)
    console.print(f"[green]Created config file:[/green] {config_path}")
    console.print("Edit this file to customize your settings.")


def run() -> None:
    """Console entry point with ghversion's exit codes.

    Usage errors exit with 1 and unexpected exceptions with 2.
    """
    try:
        rv = main.main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(ERROR)
    except click.exceptions.Abort:
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(CANCELLED)
    except Exception as e:
        err_console.print(f"[red]Unexpected error:[/red] {e!r}", highlight=False)
        err_console.print_exception()
        sys.exit(EXCEPTION)
    sys.exit(rv if isinstance(rv, int) else OK)


if __name__ == "__main__":
    run()
