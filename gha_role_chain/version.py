"""Version utility to read from environment or pyproject.toml"""

import os
import tomllib
from importlib import metadata
from pathlib import Path


def get_version() -> str:
    """
    Read version from BUILD_VERSION, the source tree's pyproject.toml, or the installed distribution.

    Priority:
    1. BUILD_VERSION environment variable (set by release builds from the git tag)
    2. pyproject.toml project.version (source checkout)
    3. Installed package metadata
    4. "unknown" as fallback

    Returns:
        str: Version string (e.g., "0.3.0")
    """
    if build_version := os.getenv("BUILD_VERSION"):
        return build_version

    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data.get("project", {}).get("version", "unknown")

    try:
        return metadata.version("gha-role-chain")
    except metadata.PackageNotFoundError:
        return "unknown"


__version__ = get_version()
