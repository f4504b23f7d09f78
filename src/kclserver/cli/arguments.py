"""Argument parser construction for kclserver CLI.

This module builds the argument parser with subcommands:
- kclserver resolve - Locate or install the language server and print its path
- kclserver command - Print the language server launch command as JSON
- kclserver status  - Show platform, install directory and installed versions
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show kclserver version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to a config file (default: .kclserver.yml in the project).",
    )


def _add_project_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory (default: current directory).",
    )


def _add_install_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--install-dir",
        metavar="DIR",
        help="Directory to install language server versions into.",
    )


def _build_resolve_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'resolve' subcommand parser."""
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Locate or install kcl-language-server and print its path.",
        description=(
            "Look for kcl-language-server on PATH, otherwise install the "
            "latest release for this platform and print the binary path."
        ),
    )
    _add_install_options(resolve_parser)
    _add_project_argument(resolve_parser)


def _build_command_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'command' subcommand parser."""
    command_parser = subparsers.add_parser(
        "command",
        help="Print the language server launch command as JSON.",
        description=(
            "Resolve kcl-language-server like 'resolve' and print the command, "
            "arguments and environment an editor should launch."
        ),
    )
    _add_install_options(command_parser)
    _add_project_argument(command_parser)


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'status' subcommand parser."""
    status_parser = subparsers.add_parser(
        "status",
        help="Show platform and installation status.",
        description="Show platform, install directory and installed versions. Never downloads.",
    )
    _add_install_options(status_parser)
    _add_project_argument(status_parser)


def build_parser() -> argparse.ArgumentParser:
    """Build the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="kclserver",
        description="kclserver - locate or install the KCL language server.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )
    _build_resolve_parser(subparsers)
    _build_command_parser(subparsers)
    _build_status_parser(subparsers)

    return parser
