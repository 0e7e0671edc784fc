"""Version information for the portal authorization core.

Reads the installed distribution metadata, or pyproject.toml when running
from a source checkout.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "portal-authz"


def get_version() -> str:
    """Get the package version (e.g., "0.1.0")."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        # src/api/infrastructure/version.py -> repository root
        pyproject_path = Path(__file__).parents[3] / "pyproject.toml"

        with open(pyproject_path, "rb") as f:
            pyproject_data = tomllib.load(f)

        return pyproject_data["project"]["version"]


def get_user_agent() -> str:
    """User-Agent sent with outgoing relationship store requests."""
    return f"{DISTRIBUTION_NAME}/{__version__}"


__version__ = get_version()
