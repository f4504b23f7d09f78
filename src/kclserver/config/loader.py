"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.kclserver.yml)
- Global config (~/.kclserver/config/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from kclserver.bootstrap.paths import get_kclserver_home
from kclserver.config.models import KclServerConfig
from kclserver.config.validation import (
    ValidationSeverity,
    validate_config,
    validate_install_dir,
)
from kclserver.core.logging import get_logger

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".kclserver.yml", ".kclserver.yaml", "kclserver.yml", "kclserver.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Fallback for github_token when the config does not set one
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> KclServerConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.kclserver.yml)
    3. Global config (~/.kclserver/config/config.yml)
    4. Built-in defaults

    Args:
        project_root: Project root directory for finding .kclserver.yml.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged KclServerConfig instance.

    Raises:
        ConfigError: If a config file is missing, unparseable or invalid, or
            if install_dir would put the project or home directory in reach
            of stale-version cleanup.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path is not None:
        merged = merge_configs(merged, _load_layer(global_path))
        sources.append(f"global:{global_path}")
        LOGGER.debug(f"Loaded global config from {global_path}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_layer(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")
    else:
        project_path = find_project_config(project_root)
        if project_path is not None:
            merged = merge_configs(merged, _load_layer(project_path))
            sources.append(f"project:{project_path}")
            LOGGER.debug(f"Loaded project config from {project_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        _raise_on_errors(validate_config(cli_overrides, source="cli"))
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged, project_root)
    config._config_sources = sources

    if config.install_dir is not None:
        _raise_on_errors(validate_install_dir(
            config.install_dir,
            {
                "project directory": project_root,
                "home directory": Path.home(),
                "kclserver home": config.home,
            },
            source=", ".join(sources),
        ))

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    _raise_on_errors(validate_config(data, source=str(path)))
    return data


def _raise_on_errors(issues) -> None:
    errors = [issue for issue in issues if issue.severity == ValidationSeverity.ERROR]
    if errors:
        raise ConfigError("; ".join(str(issue) for issue in errors))


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Searches for .kclserver.yml, .kclserver.yaml, kclserver.yml, kclserver.yaml
    in the project root directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    """Find global config at ~/.kclserver/config/config.yml.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = get_kclserver_home() / "config" / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two config dicts, with overlay taking precedence.

    None values in the overlay do not replace values in the base.
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if overlay_value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def dict_to_config(data: Dict[str, Any], project_root: Path) -> KclServerConfig:
    """Convert a merged, validated config dict to a KclServerConfig.

    Relative ``install_dir`` values are resolved against the project root.
    """
    config = KclServerConfig()

    install_dir = data.get("install_dir")
    if install_dir:
        path = Path(install_dir).expanduser()
        config.install_dir = path if path.is_absolute() else project_root / path

    if data.get("repository"):
        config.repository = data["repository"]
    if data.get("api_url"):
        config.api_url = data["api_url"]

    config.github_token = data.get("github_token") or os.environ.get(GITHUB_TOKEN_ENV) or None

    timeout = data.get("timeout")
    if timeout is not None:
        config.timeout = float(timeout)

    return config
