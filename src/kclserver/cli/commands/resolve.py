"""Resolve and command command implementations."""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from typing import TYPE_CHECKING, Callable, Optional

from kclserver.cli.commands import Command
from kclserver.cli.exit_codes import EXIT_BOOTSTRAP_FAILURE, EXIT_SUCCESS
from kclserver.core.logging import get_logger
from kclserver.errors import ResolverError
from kclserver.extension import LANGUAGE_SERVER_ID, KclLanguageServer, LanguageServerCommand
from kclserver.host import LocalWorktree, LoggingStatusReporter

if TYPE_CHECKING:
    from kclserver.config.models import KclServerConfig

LOGGER = get_logger(__name__)

ServerFactory = Callable[["KclServerConfig"], KclLanguageServer]


def default_server_factory(config: "KclServerConfig") -> KclLanguageServer:
    return KclLanguageServer.from_config(config, status_reporter=LoggingStatusReporter())


class ResolveCommand(Command):
    """Locates or installs the language server and prints its path."""

    def __init__(self, server_factory: Optional[ServerFactory] = None):
        self._server_factory = server_factory or default_server_factory

    @property
    def name(self) -> str:
        return "resolve"

    def execute(self, args: Namespace, config: "KclServerConfig") -> int:
        command = self._language_server_command(args, config)
        if command is None:
            return EXIT_BOOTSTRAP_FAILURE
        self._print(command)
        return EXIT_SUCCESS

    def _language_server_command(
        self, args: Namespace, config: "KclServerConfig"
    ) -> Optional[LanguageServerCommand]:
        server = self._server_factory(config)
        worktree = LocalWorktree(getattr(args, "path", "."))
        try:
            return server.language_server_command(LANGUAGE_SERVER_ID, worktree)
        except (ResolverError, ValueError) as e:
            LOGGER.debug(f"Resolution failed: {e!r}")
            print(f"Error: {e}", file=sys.stderr)
            return None

    def _print(self, command: LanguageServerCommand) -> None:
        print(command.command)


class CommandCommand(ResolveCommand):
    """Prints the full launch command as JSON."""

    @property
    def name(self) -> str:
        return "command"

    def _print(self, command: LanguageServerCommand) -> None:
        print(json.dumps(command.to_dict(), indent=2))
