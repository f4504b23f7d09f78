"""Language server command construction for editor hosts.

The host asks for a command to spawn; the command is the resolved binary
with no arguments and an empty environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from kclserver.bootstrap.download import download_file
from kclserver.bootstrap.paths import KclServerPaths
from kclserver.bootstrap.platform import PlatformInfo, current_platform
from kclserver.bootstrap.releases import latest_github_release
from kclserver.config.models import KclServerConfig
from kclserver.resolver import (
    BinaryResolver,
    LanguageServerId,
    StatusReporter,
    Worktree,
)

LANGUAGE_SERVER_ID = "kcl-language-server"


@dataclass
class LanguageServerCommand:
    """A process invocation for the host to run."""

    command: str
    args: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
        }


def build_resolver(
    config: KclServerConfig,
    status_reporter: Optional[StatusReporter] = None,
) -> BinaryResolver:
    """Create a resolver wired to the configured install dir and release source."""
    paths = KclServerPaths(config.home, install_dir=config.install_dir)
    release_fetcher = partial(
        latest_github_release,
        api_url=config.api_url,
        token=config.github_token,
        timeout=config.timeout,
    )
    downloader = partial(download_file, timeout=config.timeout)
    return BinaryResolver(
        paths,
        status_reporter=status_reporter,
        release_fetcher=release_fetcher,
        downloader=downloader,
        repository=config.repository,
    )


class KclLanguageServer:
    """Produces launch commands for the KCL language server.

    Holds a single resolver so the resolved path is reused across requests.
    """

    def __init__(
        self,
        resolver: BinaryResolver,
        platform_provider: Callable[[], PlatformInfo] = current_platform,
    ) -> None:
        self.resolver = resolver
        self._platform_provider = platform_provider

    @classmethod
    def from_config(
        cls,
        config: KclServerConfig,
        status_reporter: Optional[StatusReporter] = None,
    ) -> "KclLanguageServer":
        return cls(build_resolver(config, status_reporter))

    def language_server_command(
        self,
        server_id: LanguageServerId,
        worktree: Worktree,
    ) -> LanguageServerCommand:
        """Resolve the binary and wrap it in a launch command.

        Raises:
            ResolverError: If the binary cannot be located or installed.
        """
        platform_info = self._platform_provider()
        binary = self.resolver.resolve(server_id, worktree, platform_info)
        return LanguageServerCommand(command=str(binary))
