"""Error taxonomy for binary resolution.

Every failure of :meth:`kclserver.resolver.BinaryResolver.resolve` is one of
the subclasses below. None of them is retried internally; a later call starts
over from the PATH lookup.
"""

from __future__ import annotations


class ResolverError(Exception):
    """Base class for all binary resolution failures."""

    pass


class UnsupportedArchitectureError(ResolverError):
    """The host architecture has no corresponding release artifact."""

    def __init__(self, arch: str):
        super().__init__(f"unsupported architecture: {arch}")
        self.arch = arch


class ReleaseLookupError(ResolverError):
    """Release metadata could not be fetched or no release qualified."""

    pass


class AssetNotFoundError(ResolverError):
    """The computed asset name is missing from the release's asset list."""

    def __init__(self, asset_name: str):
        super().__init__(f"no asset found matching {asset_name!r}")
        self.asset_name = asset_name


class DownloadError(ResolverError):
    """Fetching or unpacking the release archive failed."""

    pass


class MakeExecutableError(ResolverError):
    """Setting the executable bits on the extracted binary failed."""

    pass


class DirectoryListError(ResolverError):
    """The resolver's working directory could not be listed during cleanup."""

    pass
