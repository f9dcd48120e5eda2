"""Runtime configuration: YAML config file and CLI overrides applied onto Constants.

Precedence: CLI arguments, then the config file, then built-in defaults.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from constants import Constants, _load_yaml_config

logger = logging.getLogger(__name__)

# Config key -> Constants attribute
_CONFIG_KEYS = {
    "packagist_url": "REGISTRY_URL_PACKAGIST",
    "pypi_url": "REGISTRY_URL_PYPI",
    "github_api_url": "GITHUB_API_BASE",
    "request_timeout": "REQUEST_TIMEOUT",
    "requirements_file": "REQUIREMENTS_FILE",
}


def apply_config(cfg: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply known config keys onto Constants and return what was applied.

    Unknown keys are logged and ignored; an invalid ``request_timeout`` keeps
    the current value.
    """
    applied: Dict[str, Any] = {}
    for key, value in cfg.items():
        attr = _CONFIG_KEYS.get(key)
        if attr is None:
            logger.warning("Ignoring unknown config key '%s'", key)
            continue
        if value is None or value == "":
            continue
        if attr == "REQUEST_TIMEOUT":
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Invalid request_timeout %r; keeping %s", value, Constants.REQUEST_TIMEOUT)
                continue
            if value <= 0:
                logger.warning("request_timeout must be positive; keeping %s", Constants.REQUEST_TIMEOUT)
                continue
        setattr(Constants, attr, value)
        applied[key] = value
    return applied


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the config file (explicit path or default location) and apply it."""
    cfg = _load_yaml_config(path)
    if path and not cfg:
        logger.debug("No settings loaded from %s", path)
    return apply_config(cfg)


def apply_cli_overrides(args) -> None:
    """Apply CLI arguments that take precedence over the config file."""
    if getattr(args, "REQUIREMENTS_FILE", None):
        Constants.REQUIREMENTS_FILE = args.REQUIREMENTS_FILE
