from __future__ import annotations

"""Package metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("scpDetector")
except PackageNotFoundError:  # pragma: no cover - package not installed
    __version__ = "1.0.0"

__all__ = ["__version__"]
