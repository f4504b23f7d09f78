"""Configuration validation for kclserver.

Unknown keys are reported as warnings with a close-match suggestion; values
of the wrong type are errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Type, Union

from kclserver.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        msg = f"{self.message} in {self.source}"
        if self.suggestion:
            msg += f" (did you mean '{self.suggestion}'?)"
        return msg


# Expected value types per top-level key
KEY_TYPES: Dict[str, Union[Type[Any], Tuple[Type[Any], ...]]] = {
    "install_dir": str,
    "repository": str,
    "api_url": str,
    "github_token": str,
    "timeout": (int, float),
}

VALID_TOP_LEVEL_KEYS: Set[str] = set(KEY_TYPES)


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Args:
        data: Config dictionary to validate.
        source: Source file path for issue messages.

    Returns:
        List of validation issues.
    """
    issues: List[ConfigValidationIssue] = []

    if not isinstance(data, dict):
        issues.append(ConfigValidationIssue(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return issues

    for key, value in data.items():
        if key not in KEY_TYPES:
            issue = ConfigValidationIssue(
                message=f"Unknown top-level key '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest_key(str(key), VALID_TOP_LEVEL_KEYS),
            )
            issues.append(issue)
            LOGGER.warning(str(issue))
            continue

        if value is None:
            continue

        expected = KEY_TYPES[key]
        # bool is an int subclass but never a valid timeout
        if isinstance(value, bool) or not isinstance(value, expected):
            issues.append(ConfigValidationIssue(
                message=f"'{key}' must be {_type_name(expected)}, got {type(value).__name__}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))

    timeout = data.get("timeout")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout <= 0:
        issues.append(ConfigValidationIssue(
            message="'timeout' must be positive",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="timeout",
        ))

    repository = data.get("repository")
    if isinstance(repository, str) and repository.count("/") != 1:
        issues.append(ConfigValidationIssue(
            message=f"'repository' must look like 'owner/name', got '{repository}'",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="repository",
        ))

    api_url = data.get("api_url")
    if isinstance(api_url, str) and not api_url.startswith("https://"):
        issues.append(ConfigValidationIssue(
            message=f"'api_url' must be an HTTPS URL, got '{api_url}'",
            source=source,
            severity=ValidationSeverity.ERROR,
            key="api_url",
        ))

    return issues


def _type_name(expected: Union[Type[Any], Tuple[Type[Any], ...]]) -> str:
    if expected == (int, float):
        return "a number"
    if expected is str:
        return "a string"
    return str(expected)


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def validate_install_dir(
    install_dir: Path,
    protected: Dict[str, Path],
    source: str,
) -> List[ConfigValidationIssue]:
    """Reject install directories that would expose user files to cleanup.

    Every entry in the install directory other than the current version is
    deleted after an install, so it may not be, or contain, any of the
    ``protected`` directories.

    Args:
        install_dir: The resolved install directory.
        protected: Directories to keep out of reach, by description.
        source: Source description for issue messages.
    """
    issues: List[ConfigValidationIssue] = []
    target = install_dir.resolve()
    for label, path in protected.items():
        guarded = path.resolve()
        if target == guarded or target in guarded.parents:
            issues.append(ConfigValidationIssue(
                message=f"'install_dir' {install_dir} must not be or contain the {label} ({path})",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="install_dir",
            ))
    return issues
