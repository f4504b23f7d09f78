"""Resolution of the kcl-language-server binary.

A :class:`BinaryResolver` answers one question: which executable should be
launched as the KCL language server? In order it tries

1. the worktree's PATH lookup, so a user-managed install always wins,
2. the path it resolved on an earlier call, if that file still exists,
3. the latest GitHub release of kcl-lang/kcl, installing it into a version
   directory under the working directory when it is not already there.

Network and filesystem collaborators are injected so a host (or a test) can
replace them.
"""

from __future__ import annotations

import shutil
import tarfile
import zipfile
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from kclserver.bootstrap.download import ArchiveKind, download_file, make_executable
from kclserver.bootstrap.paths import BINARY_NAME, KclServerPaths, version_dir_name
from kclserver.bootstrap.platform import PlatformInfo, arch_token, os_token
from kclserver.bootstrap.releases import KCL_REPOSITORY, Release, latest_github_release
from kclserver.bootstrap.validation import is_regular_file
from kclserver.core.logging import get_logger
from kclserver.errors import (
    AssetNotFoundError,
    DirectoryListError,
    DownloadError,
    MakeExecutableError,
    ReleaseLookupError,
    ResolverError,
)

LOGGER = get_logger(__name__)

LanguageServerId = str


class InstallationStatus(str, Enum):
    """Progress signals sent to the host while installing."""

    CHECKING_FOR_UPDATE = "checking_for_update"
    DOWNLOADING = "downloading"


class Worktree(ABC):
    """The host's view of the active project."""

    @abstractmethod
    def which(self, name: str) -> Optional[str]:
        """Return the path of an executable on the search path, or None."""


StatusReporter = Callable[[LanguageServerId, InstallationStatus], None]
ReleaseFetcher = Callable[..., Release]
Downloader = Callable[[str, Path, ArchiveKind], None]


def asset_name(version: str, platform_info: PlatformInfo) -> str:
    """Compute the release asset name for a version and platform.

    Windows archives carry no architecture suffix, but the architecture must
    still be a supported one.

    Raises:
        UnsupportedArchitectureError: If the architecture has no artifact.
    """
    os_name = os_token(platform_info.os)
    arch_name = arch_token(platform_info.arch)
    if platform_info.is_windows:
        return f"kclvm-{version}-{os_name}.zip"
    return f"kclvm-{version}-{os_name}-{arch_name}.tar.gz"


def archive_kind(platform_info: PlatformInfo) -> ArchiveKind:
    """Archive format of the release asset for a platform."""
    return ArchiveKind.ZIP if platform_info.is_windows else ArchiveKind.GZIP_TAR


class BinaryResolver:
    """Locates or installs the language server binary.

    One instance is meant to live as long as the host process; it remembers
    the last resolved path between calls. Calls are not synchronised.
    """

    def __init__(
        self,
        paths: KclServerPaths,
        status_reporter: Optional[StatusReporter] = None,
        release_fetcher: ReleaseFetcher = latest_github_release,
        downloader: Downloader = download_file,
        chmod_executable: Callable[[Path], None] = make_executable,
        repository: str = KCL_REPOSITORY,
    ) -> None:
        self._paths = paths
        self._status_reporter = status_reporter
        self._release_fetcher = release_fetcher
        self._downloader = downloader
        self._chmod_executable = chmod_executable
        self._repository = repository
        self._cached_binary_path: Optional[Path] = None

    @property
    def paths(self) -> KclServerPaths:
        return self._paths

    @property
    def cached_binary_path(self) -> Optional[Path]:
        """The path committed by the last successful resolution, if any."""
        return self._cached_binary_path

    def resolve(
        self,
        server_id: LanguageServerId,
        worktree: Worktree,
        platform_info: PlatformInfo,
    ) -> Path:
        """Return the path of the language server executable.

        Raises:
            ResolverError: One of its subclasses, describing the failed step.
        """
        path = worktree.which(BINARY_NAME)
        if path:
            LOGGER.debug(f"Using {BINARY_NAME} from PATH: {path}")
            return Path(path)

        cached = self._cached_binary_path
        if cached is not None:
            if is_regular_file(cached):
                LOGGER.debug(f"Using cached {BINARY_NAME}: {cached}")
                return cached
            LOGGER.info(f"Cached {BINARY_NAME} at {cached} is gone, reinstalling")

        # Fails for unsupported architectures before touching the network.
        arch_token(platform_info.arch)

        self._report(server_id, InstallationStatus.CHECKING_FOR_UPDATE)
        release = self._latest_release()

        name = asset_name(release.version, platform_info)
        asset = release.find_asset(name)
        if asset is None:
            raise AssetNotFoundError(name)

        version_dir = self._paths.version_dir(release.version)
        binary_path = self._paths.binary_path(release.version)

        if is_regular_file(binary_path):
            LOGGER.debug(f"{BINARY_NAME} {release.version} already installed at {binary_path}")
        else:
            self._report(server_id, InstallationStatus.DOWNLOADING)
            self._install(asset.download_url, version_dir, archive_kind(platform_info))

            try:
                self._chmod_executable(binary_path)
            except OSError as e:
                raise MakeExecutableError(
                    f"failed to make {binary_path} executable: {e}"
                ) from e

            self.remove_stale_versions(release.version)
            LOGGER.info(f"Installed {BINARY_NAME} {release.version} to {binary_path}")

        self._cached_binary_path = binary_path
        return binary_path

    def remove_stale_versions(self, current_version: str) -> List[Path]:
        """Remove every working directory entry except the current version.

        Individual removal failures are ignored; they only leave disk clutter.

        Returns:
            The entries that were removed.

        Raises:
            DirectoryListError: If the working directory cannot be listed.
        """
        keep = version_dir_name(current_version)
        work_dir = self._paths.work_dir
        try:
            entries = list(work_dir.iterdir())
        except OSError as e:
            raise DirectoryListError(
                f"failed to list working directory {work_dir}: {e}"
            ) from e

        removed = []
        for entry in entries:
            if entry.name == keep:
                continue
            try:
                _remove_entry(entry)
            except OSError as e:
                LOGGER.debug(f"Could not remove stale entry {entry}: {e}")
                continue
            removed.append(entry)
            LOGGER.debug(f"Removed stale entry {entry}")
        return removed

    def _latest_release(self) -> Release:
        try:
            release = self._release_fetcher(
                self._repository, require_assets=True, pre_release=False
            )
        except ResolverError:
            raise
        except (OSError, ValueError, KeyError) as e:
            raise ReleaseLookupError(
                f"failed to fetch latest release of {self._repository}: {e}"
            ) from e
        if release is None:
            raise ReleaseLookupError(f"no qualifying release found for {self._repository}")
        LOGGER.debug(f"Latest release of {self._repository}: {release.version}")
        return release

    def _install(self, url: str, version_dir: Path, kind: ArchiveKind) -> None:
        LOGGER.info(f"Downloading {url}")
        try:
            self._downloader(url, version_dir, kind)
        except (OSError, EOFError, ValueError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise DownloadError(f"failed to download file: {e}") from e

    def _report(self, server_id: LanguageServerId, status: InstallationStatus) -> None:
        if self._status_reporter is None:
            return
        try:
            self._status_reporter(server_id, status)
        except Exception as e:
            LOGGER.debug(f"Status reporter failed for {status.value}: {e}")


def _remove_entry(entry: Union[str, Path]) -> None:
    entry = Path(entry)
    if entry.is_dir() and not entry.is_symlink():
        shutil.rmtree(entry)
    else:
        entry.unlink()
