"""Version info - read from package metadata (single source of truth in pyproject.toml)."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("halite-py")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"
