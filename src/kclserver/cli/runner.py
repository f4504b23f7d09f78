"""CLI runner orchestration.

This module handles command dispatch and execution for the kclserver CLI.
"""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from kclserver.cli.arguments import build_parser
from kclserver.cli.commands import Command, CommandCommand, ResolveCommand, StatusCommand
from kclserver.cli.commands.resolve import ServerFactory
from kclserver.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from kclserver.config import ConfigError, load_config
from kclserver.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get kclserver version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("kclserver")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from kclserver import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self, server_factory: Optional[ServerFactory] = None) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.commands: Dict[str, Command] = {
            cmd.name: cmd
            for cmd in (
                ResolveCommand(server_factory),
                CommandCommand(server_factory),
                StatusCommand(version=self._version),
            )
        }

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list = list(argv)
            if "--help" in argv_list or "-h" in argv_list:
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        args = self.parser.parse_args(argv_list)

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = self.commands.get(getattr(args, "command", None) or "")
        if command is None:
            # No command specified - show help
            self.parser.print_help()
            return EXIT_SUCCESS

        try:
            config = load_config(
                Path(args.path),
                cli_config_path=args.config,
                cli_overrides=self._cli_overrides(args),
            )
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID_USAGE

        return command.execute(args, config)

    def _cli_overrides(self, args: Namespace) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        install_dir = getattr(args, "install_dir", None)
        if install_dir:
            overrides["install_dir"] = install_dir
        return overrides
