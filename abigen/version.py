"""
abigen.version: release version of the package.

The installed distribution metadata wins; a source checkout that was never
installed reports BASE_VERSION. No subprocess or VCS lookup is made, so the
version (and the header of generated modules) depends only on the release.
"""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Keep in step with pyproject.toml.
BASE_VERSION = "0.3.0"

_PKG_NAME = "cairo-abigen"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        return _pkg_version(_PKG_NAME)
    except PackageNotFoundError:
        return BASE_VERSION


__version__ = get_version()

__all__ = ["__version__", "get_version", "BASE_VERSION"]
