"""
Configuration loading and logging setup.
"""

import json
import logging
from typing import Any, Dict, Optional

from .core.exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    'log_level': 'INFO',
    'rest_host': '0.0.0.0',
    'rest_port': 8000,
    'sample_data': False,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge a JSON config file and explicit overrides onto the defaults."""
    config = dict(DEFAULT_CONFIG)

    if path:
        try:
            with open(path, 'r') as f:
                loaded = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration in {path} must be a JSON object")
        config.update(_check_keys(loaded))

    if overrides:
        config.update(_check_keys({k: v for k, v in overrides.items() if v is not None}))

    # getLevelName maps a known name to its number and echoes unknown ones back as text
    if not isinstance(logging.getLevelName(str(config['log_level']).upper()), int):
        raise ConfigurationError(f"Unknown log level: {config['log_level']}")
    if not isinstance(config['rest_port'], int) or not 0 < config['rest_port'] < 65536:
        raise ConfigurationError(f"Invalid REST port: {config['rest_port']}")

    return config


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _check_keys(values: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(values) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            details={'keys': sorted(unknown)}
        )
    return values
