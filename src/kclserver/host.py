"""Host collaborators for running the resolver outside an editor."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional, Union

from kclserver.core.logging import get_logger
from kclserver.resolver import InstallationStatus, LanguageServerId, Worktree

LOGGER = get_logger(__name__)


class LocalWorktree(Worktree):
    """A worktree rooted at a local directory, using the process PATH.

    Args:
        root: Project root directory.
        search_path: PATH-style string to search instead of the environment's.
    """

    def __init__(self, root: Union[str, Path] = ".", search_path: Optional[str] = None) -> None:
        self.root = Path(root)
        self._search_path = search_path

    def which(self, name: str) -> Optional[str]:
        path = self._search_path if self._search_path is not None else os.environ.get("PATH")
        return shutil.which(name, path=path)


class LoggingStatusReporter:
    """Status reporter that writes installation progress to the log."""

    _MESSAGES = {
        InstallationStatus.CHECKING_FOR_UPDATE: "checking for update",
        InstallationStatus.DOWNLOADING: "downloading",
    }

    def __call__(self, server_id: LanguageServerId, status: InstallationStatus) -> None:
        LOGGER.info(f"{server_id}: {self._MESSAGES.get(status, status.value)}")
