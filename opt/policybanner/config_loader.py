"""
Configuration Loader for the PolicyBanner updater.

This module builds the run configuration from:
- Built-in defaults
- An optional JSON file (missing file is not an error)
- Environment variables
- Explicit overrides (command line)
"""

import os
import json
import logging
from dataclasses import fields
from typing import Dict, Any, Optional

from .config import BannerConfig

logger = logging.getLogger(__name__)

# --- Configuration File Path ---
CONFIG_FILE_PATH = '/Library/Application Support/PolicyBanner/config.json'

# --- Environment Variables ---
DEBUG_ENV_VAR = 'POLICYBANNER_DEBUG'

_MODE_KEYS = ('log_file_mode', 'bundle_mode')
_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _config_keys():
    return {f.name for f in fields(BannerConfig)}


def _load_config_file(path: str) -> Dict[str, Any]:
    """
    Load configuration values from a JSON file.

    Args:
        path: Path of the JSON configuration file

    Returns:
        dict: Known keys from the file, or an empty dict if the file is
            missing or unreadable
    """
    if not os.path.exists(path):
        return {}

    try:
        with open(path, 'r') as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Error loading config from {path}: {e}")
        return {}

    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring config at {path}: expected a JSON object")
        return {}

    known = _config_keys()
    values = {}
    for key, value in loaded.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key '{key}' in {path}")
            continue
        values[key] = value
    return values


def _load_environment() -> Dict[str, Any]:
    """Read configuration overrides from the environment."""
    values = {}
    debug = os.environ.get(DEBUG_ENV_VAR)
    if debug is not None:
        values['verbose'] = _parse_flag(debug)
    return values


def _parse_mode(key: str, value) -> int:
    """Accept permission bits as an int or an octal string like '755'."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid {key}: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        raise ValueError(f"Invalid {key}: {value!r} is not an octal mode")


def _parse_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _normalize(values: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce loosely typed values (JSON, CLI) to the dataclass field types."""
    try:
        return _coerce(values)
    except TypeError as e:
        raise ValueError(f"Invalid config value: {e}")


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(values)

    for key in _MODE_KEYS:
        if key in normalized:
            normalized[key] = _parse_mode(key, normalized[key])

    if 'preboot_command' in normalized:
        command = normalized['preboot_command']
        if isinstance(command, str):
            command = command.split()
        if not command:
            raise ValueError("preboot_command must not be empty")
        normalized['preboot_command'] = tuple(str(part) for part in command)

    timeout = normalized.get('preboot_timeout')
    if timeout is not None:
        timeout = float(timeout)
        if timeout <= 0:
            raise ValueError(f"preboot_timeout must be positive, got {timeout}")
        normalized['preboot_timeout'] = timeout

    if 'marker_check_max_version' in normalized:
        normalized['marker_check_max_version'] = int(normalized['marker_check_max_version'])

    if 'verbose' in normalized:
        normalized['verbose'] = _parse_flag(normalized['verbose'])

    return normalized


def load_config(config_path: Optional[str] = None, **overrides) -> BannerConfig:
    """
    Build the run configuration.

    Later sources win: defaults, then the JSON file, then the environment,
    then explicit overrides. Overrides set to None are ignored.

    Args:
        config_path: JSON configuration file (defaults to CONFIG_FILE_PATH)
        **overrides: Field values taking precedence over everything else

    Returns:
        BannerConfig: The immutable configuration for this run

    Raises:
        ValueError: If a value cannot be converted or an override is unknown
    """
    known = _config_keys()
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    values.update(_load_config_file(config_path or CONFIG_FILE_PATH))
    values.update(_load_environment())
    values.update({k: v for k, v in overrides.items() if v is not None})

    return BannerConfig(**_normalize(values))
