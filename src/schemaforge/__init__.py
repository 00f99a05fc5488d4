"""
schemaforge - Cross-dialect database metadata and DDL generation
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("schemaforge")
except PackageNotFoundError:
    # Package not installed, fallback to the version declared in pyproject.toml
    __version__ = "0.6.0"

from .database.metadata import MetadataFacade
from .config.settings import Settings, get_settings

__all__ = ["MetadataFacade", "Settings", "get_settings", "__version__"]
