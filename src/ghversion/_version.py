"""Version information for ghversion.

The installed distribution's metadata is authoritative; a source checkout
that has not been installed reports the development base version.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# Base version - bump this manually for releases
BASE_VERSION = "0.3.0"


def get_version() -> str:
    """Get the full version string.

    Returns:
        Version string in format "MAJOR.MINOR.PATCH" (e.g., "0.3.0").
    """
    try:
        return version("ghversion")
    except PackageNotFoundError:
        return BASE_VERSION


# Calculate version once at import time
__version__ = get_version()
