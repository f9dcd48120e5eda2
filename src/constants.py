"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    PARSE_ERROR = 3
    NO_MATCH = 4


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    COMPOSER = "composer"
    PIP = "pip"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_PACKAGIST = "https://packagist.org"
    REGISTRY_URL_PYPI = "https://pypi.org"
    SUPPORTED_PACKAGES = [
        PackageManagers.COMPOSER.value,
        PackageManagers.PIP.value,
    ]
    COMPOSER_JSON_FILE = "composer.json"
    COMPOSER_LOCK_FILE = "composer.lock"
    REQUIREMENTS_FILE = "requirements.txt"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "dephub"

    # Repository API constants
    GITHUB_API_BASE = "https://api.github.com"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    SUPPORTED_GIT_HOSTS = ["github.com"]

    ENV_LOG_LEVEL = "DEPHUB_LOG_LEVEL"
    DEFAULT_CONFIG_PATHS = [
        os.path.join("~", ".config", "dephub", "dephub.yml"),
        os.path.join("~", ".config", "dephub", "dephub.yaml"),
    ]


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config file from ``path`` or the first default location.

    Returns an empty dict when no file exists; malformed files are logged and
    ignored so a bad config never blocks version checks.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    candidates = [path] if path else Constants.DEFAULT_CONFIG_PATHS
    for candidate in candidates:
        full = os.path.expanduser(candidate)
        if not os.path.isfile(full):
            continue
        try:
            with open(full, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", full, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", full)
            return {}
        return data
    return {}
