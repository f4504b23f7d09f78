"""Binary validation for installed language servers."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class ToolStatus(str, Enum):
    """Status of a tool binary."""

    PRESENT = "present"
    MISSING = "missing"
    NOT_EXECUTABLE = "not_executable"


def is_regular_file(path: Path) -> bool:
    """Check that a path exists and is a regular file (following symlinks)."""
    try:
        return path.is_file()
    except OSError:
        return False


def validate_binary(path: Path) -> ToolStatus:
    """Validate a single tool binary.

    Args:
        path: Path to the tool binary.

    Returns:
        ToolStatus indicating whether the tool is present and executable.
    """
    if not is_regular_file(path):
        return ToolStatus.MISSING

    if not os.access(path, os.X_OK):
        return ToolStatus.NOT_EXECUTABLE

    return ToolStatus.PRESENT
