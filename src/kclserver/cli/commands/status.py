"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING

from kclserver.bootstrap.paths import BINARY_NAME, KclServerPaths
from kclserver.bootstrap.platform import arch_token, current_platform
from kclserver.bootstrap.validation import ToolStatus, validate_binary
from kclserver.cli.commands import Command
from kclserver.cli.exit_codes import EXIT_SUCCESS
from kclserver.errors import UnsupportedArchitectureError
from kclserver.host import LocalWorktree

if TYPE_CHECKING:
    from kclserver.config.models import KclServerConfig


class StatusCommand(Command):
    """Shows platform and installation status without touching the network."""

    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace, config: "KclServerConfig") -> int:
        """Execute the status command.

        Returns:
            Exit code (always 0 for status).
        """
        paths = KclServerPaths(config.home, install_dir=config.install_dir)

        print(f"kclserver version: {self._version}")
        try:
            platform_info = current_platform()
        except ValueError as e:
            print(f"Platform: {e}")
        else:
            try:
                arch_token(platform_info.arch)
                supported = "supported"
            except UnsupportedArchitectureError as e:
                supported = str(e)
            print(f"Platform: {platform_info} ({supported})")
        print(f"Repository: {config.repository}")
        print(f"Install directory: {paths.work_dir}")
        print()

        on_path = LocalWorktree(getattr(args, "path", ".")).which(BINARY_NAME)
        print(f"{BINARY_NAME} on PATH: {on_path or 'not found'}")

        versions = paths.installed_versions()
        print("Installed versions:")
        if not versions:
            print("  none")
        for version in versions:
            status = validate_binary(paths.binary_path(version))
            if status == ToolStatus.PRESENT:
                status_str = "installed"
            else:
                status_str = status.value.replace("_", " ")
            print(f"  {version}: {status_str} ({paths.binary_path(version)})")

        return EXIT_SUCCESS
