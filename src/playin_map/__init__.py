"""
playin_map
==========

Viewport-driven venue aggregation for the Play'In sports map.
"""

from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("playin-map")
except PackageNotFoundError:  # pragma: no cover - occurs in local dev before install
    __version__ = "0.0.0"

__all__ = ["__version__"]
