"""Command line package; ``main`` is the console-script entry point."""

from __future__ import annotations

from typing import Any

__all__ = ["cli", "main"]


def __getattr__(name: str) -> Any:
    # Importing click and the detector stack is deferred until first use.
    if name == "cli":
        from .__main__ import cli

        return cli
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main() -> None:
    """Run the ``scpDetector`` command group."""
    from .__main__ import main as run

    run()
