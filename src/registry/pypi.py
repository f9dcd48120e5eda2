"""PyPI registry client over the JSON API (https://pypi.org/pypi/<name>/json)."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from constants import Constants
from common.http_client import get_json

logger = logging.getLogger(__name__)


@dataclass
class PipPackageVersion:
    """One release and its distribution files."""
    version: str
    files: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def yanked(self) -> bool:
        return bool(self.files) and all(f.get("yanked") for f in self.files)


@dataclass
class PipPackage:
    """Package metadata; ``releases`` keeps the registry's key order."""
    info: Dict[str, Any]
    releases: List[PipPackageVersion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipPackage":
        releases = data.get("releases") or {}
        return cls(
            info=data.get("info") or {},
            releases=[PipPackageVersion(version=v, files=list(files or []))
                      for v, files in releases.items()],
        )

    @property
    def name(self) -> str:
        return self.info.get("name", "")

    @property
    def author(self) -> str:
        return self.info.get("author") or self.info.get("maintainer") or ""

    @property
    def release_url(self) -> str:
        return self.info.get("release_url") or self.info.get("package_url") or ""

    @property
    def latest(self) -> str:
        return self.info.get("version", "")


class PyPIClient:
    """Client for a PyPI compatible JSON API.

    Args:
        base_url: API root (defaults to Constants.REGISTRY_URL_PYPI)
        session: Optional requests session
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or Constants.REGISTRY_URL_PYPI).rstrip("/")
        self.session = session

    def release(self, name: str, version: str = "") -> PipPackage:
        """Fetch package metadata, or a specific release when ``version`` is set.

        Raises:
            RegistryError: non-2xx response or undecodable body
        """
        if not name:
            raise ValueError("package name is required and can't be empty")
        if version:
            url = f"{self.base_url}/pypi/{name}/{version}/json"
        else:
            url = f"{self.base_url}/pypi/{name}/json"
        logger.debug("Fetching PyPI metadata for %s %s", name, version or "(all releases)")
        return PipPackage.from_dict(get_json(url, context="pypi", session=self.session))

    def package(self, name: str) -> PipPackage:
        """Shortcut for ``release(name)``."""
        return self.release(name)
