"""Command-line interface for kclserver."""

from __future__ import annotations

from typing import Iterable, Optional

from kclserver.cli.arguments import build_parser
from kclserver.cli.runner import CLIRunner

__all__ = ["build_parser", "CLIRunner", "main"]


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code.
    """
    return CLIRunner().run(argv)
