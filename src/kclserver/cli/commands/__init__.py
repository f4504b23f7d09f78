"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kclserver.config.models import KclServerConfig


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: "KclServerConfig") -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded kclserver configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# Import command implementations for convenience
# ruff: noqa: E402
from kclserver.cli.commands.resolve import CommandCommand, ResolveCommand
from kclserver.cli.commands.status import StatusCommand

__all__ = [
    "Command",
    "CommandCommand",
    "ResolveCommand",
    "StatusCommand",
]
