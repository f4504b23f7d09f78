"""Platform detection and release-name tokens.

The host reports an (OS, architecture) pair. KCL release archives are named
with lowercase OS tokens (darwin, linux, windows) and the architecture tokens
``arm64`` and ``amd64``.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum

from kclserver.errors import UnsupportedArchitectureError


class Os(str, Enum):
    """Operating systems a host can report."""

    MAC = "mac"
    LINUX = "linux"
    WINDOWS = "windows"


class Architecture(str, Enum):
    """CPU architectures a host can report."""

    AARCH64 = "aarch64"
    X86 = "x86"
    X86_64 = "x86_64"


# Raw platform.system() values, lowercased
_SYSTEM_MAP = {
    "darwin": Os.MAC,
    "linux": Os.LINUX,
    "windows": Os.WINDOWS,
}

# Raw platform.machine() values, lowercased
_MACHINE_MAP = {
    "arm64": Architecture.AARCH64,
    "aarch64": Architecture.AARCH64,
    "x86": Architecture.X86,
    "i386": Architecture.X86,
    "i686": Architecture.X86,
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
}


@dataclass(frozen=True)
class PlatformInfo:
    """Information about the platform the language server will run on.

    Attributes:
        os: Operating system.
        arch: CPU architecture.
    """

    os: Os
    arch: Architecture

    @property
    def is_windows(self) -> bool:
        return self.os is Os.WINDOWS

    def __str__(self) -> str:
        return f"{self.os.value}-{self.arch.value}"


def os_token(os_: Os) -> str:
    """Return the lowercase OS token used in release asset names."""
    if os_ is Os.MAC:
        return "darwin"
    elif os_ is Os.LINUX:
        return "linux"
    elif os_ is Os.WINDOWS:
        return "windows"
    raise AssertionError(f"unhandled operating system: {os_!r}")


def arch_token(arch: Architecture) -> str:
    """Return the architecture token used in release asset names.

    Raises:
        UnsupportedArchitectureError: For ``x86_64``; upstream only publishes
            ``arm64`` and ``amd64`` artifacts.
    """
    if arch is Architecture.AARCH64:
        return "arm64"
    elif arch is Architecture.X86:
        return "amd64"
    elif arch is Architecture.X86_64:
        raise UnsupportedArchitectureError(arch.value)
    raise AssertionError(f"unhandled architecture: {arch!r}")


def detect_os() -> Os:
    """Detect the current operating system.

    Raises:
        ValueError: If the OS is not supported.
    """
    system = platform.system()
    detected = _SYSTEM_MAP.get(system.lower())
    if detected is None:
        raise ValueError(
            f"Unsupported operating system: {system}. "
            f"Supported: {', '.join(sorted(_SYSTEM_MAP))}"
        )
    return detected


def detect_arch() -> Architecture:
    """Detect the current CPU architecture.

    Raises:
        ValueError: If the machine type is not recognised.
    """
    machine = platform.machine()
    detected = _MACHINE_MAP.get(machine.lower())
    if detected is None:
        raise ValueError(
            f"Unsupported architecture: {machine}. "
            f"Supported: {', '.join(sorted(_MACHINE_MAP))}"
        )
    return detected


def current_platform() -> PlatformInfo:
    """Detect and return the current platform.

    Raises:
        ValueError: If the OS or machine type is not recognised.
    """
    return PlatformInfo(os=detect_os(), arch=detect_arch())
