"""
Bootstrap module for kcl-language-server binary management.

This module handles:
- Platform detection and release asset tokens
- Install directory management (~/.kclserver/bin/)
- GitHub release discovery
- Archive download and extraction
- Binary validation
"""

from kclserver.bootstrap.download import ArchiveKind, download_file, make_executable
from kclserver.bootstrap.paths import get_kclserver_home, KclServerPaths
from kclserver.bootstrap.platform import (
    Architecture,
    Os,
    PlatformInfo,
    current_platform,
)
from kclserver.bootstrap.releases import Asset, Release, latest_github_release
from kclserver.bootstrap.validation import validate_binary, ToolStatus

__all__ = [
    "ArchiveKind",
    "download_file",
    "make_executable",
    "get_kclserver_home",
    "KclServerPaths",
    "Architecture",
    "Os",
    "PlatformInfo",
    "current_platform",
    "Asset",
    "Release",
    "latest_github_release",
    "validate_binary",
    "ToolStatus",
]
