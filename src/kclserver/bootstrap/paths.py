"""Path management for the kclserver install directory.

Handles the ~/.kclserver directory structure and path resolution.
The language server is unpacked under ~/.kclserver/bin/kcl-language-server-{version}/.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, List, Optional

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".kclserver"

# Environment variable to override home directory
KCLSERVER_HOME_ENV = "KCLSERVER_HOME"

TOOL_NAME = "kcl"
BINARY_NAME = "kcl-language-server"

# Location of the binary inside an extracted kclvm archive
_BINARY_SUBPATH = ("kclvm", "bin", BINARY_NAME)


def get_kclserver_home() -> Path:
    """Get the kclserver home directory path.

    Resolution order:
    1. KCLSERVER_HOME environment variable (if set)
    2. ~/.kclserver (default)
    """
    env_home = os.environ.get(KCLSERVER_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


def version_dir_name(version: str) -> str:
    """Return the deterministic directory name for a release version.

    Example: "kcl-language-server-v0.11.0"
    """
    return f"{TOOL_NAME}-language-server-{version}"


@dataclass
class KclServerPaths:
    """Manages paths within the kclserver home directory.

    Directory structure:
        ~/.kclserver/
            bin/                                   - Resolver working directory
                kcl-language-server-{version}/
                    kclvm/bin/kcl-language-server  - Language server binary
            config/                                - Configuration files

    ``work_dir`` can point elsewhere (``install_dir`` config key); everything
    in it that is not the current version directory is removed after a fresh
    install, so it must not be shared with other tools.
    """

    home: Path
    install_dir: Optional[Path] = None

    _BIN_DIR: ClassVar[str] = "bin"
    _CONFIG_DIR: ClassVar[str] = "config"

    @classmethod
    def default(cls) -> "KclServerPaths":
        """Create paths from the default kclserver home."""
        return cls(get_kclserver_home())

    @property
    def work_dir(self) -> Path:
        """Directory holding version directories."""
        if self.install_dir is not None:
            return self.install_dir
        return self.home / self._BIN_DIR

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files."""
        return self.home / self._CONFIG_DIR

    def version_dir(self, version: str) -> Path:
        """Get the directory a given release version is unpacked into."""
        return self.work_dir / version_dir_name(version)

    def binary_path(self, version: str) -> Path:
        """Get the expected language server binary for a release version."""
        return self.version_dir(version).joinpath(*_BINARY_SUBPATH)

    def ensure_directories(self) -> None:
        """Create the working directory if it doesn't exist."""
        self.work_dir.mkdir(parents=True, exist_ok=True)

    def installed_versions(self) -> List[str]:
        """Return versions that have a directory in the working directory.

        Version directories are matched by name only; the binary inside may
        be missing if an earlier install was interrupted.
        """
        if not self.work_dir.is_dir():
            return []
        prefix = version_dir_name("")
        return sorted(
            entry.name[len(prefix):]
            for entry in self.work_dir.iterdir()
            if entry.is_dir() and entry.name.startswith(prefix)
        )
