"""ghversion - NerdBank.GitVersioning compatible versions from the GitHub API."""

from ghversion._version import __version__

__all__ = ["__version__"]
