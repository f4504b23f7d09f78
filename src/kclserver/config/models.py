"""Configuration model for kclserver."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from kclserver.bootstrap.paths import get_kclserver_home
from kclserver.bootstrap.releases import GITHUB_API_BASE, KCL_REPOSITORY


@dataclass
class KclServerConfig:
    """Resolved kclserver configuration.

    Attributes:
        home: kclserver home directory (config and default install location).
        install_dir: Working directory for version directories; defaults to
            ``<home>/bin`` when None.
        repository: GitHub repository releases are looked up in.
        api_url: GitHub API base URL.
        github_token: Optional token for the GitHub API.
        timeout: Network timeout in seconds; None leaves the transport default.
    """

    home: Path = field(default_factory=get_kclserver_home)
    install_dir: Optional[Path] = None
    repository: str = KCL_REPOSITORY
    api_url: str = GITHUB_API_BASE
    github_token: Optional[str] = None
    timeout: Optional[float] = None

    # Where the configuration was read from, for diagnostics
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
