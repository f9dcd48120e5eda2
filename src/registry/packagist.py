"""Packagist registry client.

Packagist is the main Composer repository; its public API is documented at
https://packagist.org/apidoc. Only read-only endpoints are wrapped here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests

from constants import Constants
from common.errors import RegistryError
from common.http_client import get_json

logger = logging.getLogger(__name__)

_MINIFIED_FORMAT = "composer/2.0"
_UNSET = "__unset"


@dataclass
class VersionMeta:
    """One release of a package as listed in the metadata endpoint."""
    name: str
    version: str
    version_normalized: str = ""
    description: str = ""
    homepage: str = ""
    time: str = ""
    type: str = ""
    license: List[str] = field(default_factory=list)
    authors: List[Dict[str, str]] = field(default_factory=list)
    source: Dict[str, str] = field(default_factory=dict)
    dist: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionMeta":
        return cls(
            name=data.get("name", ""),
            version=str(data.get("version", "")),
            version_normalized=data.get("version_normalized", ""),
            description=data.get("description") or "",
            homepage=data.get("homepage") or "",
            time=data.get("time") or "",
            type=data.get("type") or "",
            license=list(data.get("license") or []),
            authors=[a for a in data.get("authors") or [] if isinstance(a, dict)],
            source=data.get("source") if isinstance(data.get("source"), dict) else {},
            dist=data.get("dist") if isinstance(data.get("dist"), dict) else {},
        )

    @property
    def author(self) -> str:
        """First listed author, falling back to the package name."""
        if self.authors and self.authors[0].get("name"):
            return self.authors[0]["name"]
        return self.name

    @property
    def source_url(self) -> str:
        return self.source.get("url", "")


@dataclass
class Advisory:
    """A known security vulnerability."""
    package_name: str
    remote_id: str = ""
    title: str = ""
    link: str = ""
    cve: str = ""
    affected_versions: str = ""
    source: str = ""
    reported_at: str = ""
    composer_repository: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Advisory":
        return cls(
            package_name=data.get("packageName", ""),
            remote_id=data.get("remoteId", ""),
            title=data.get("title", ""),
            link=data.get("link") or "",
            cve=data.get("cve") or "",
            affected_versions=data.get("affectedVersions", ""),
            source=data.get("source", ""),
            reported_at=data.get("reportedAt", ""),
            composer_repository=data.get("composerRepository", ""),
        )

    def affected_versions_normalized(self) -> str:
        """Affected range usable as a Composer constraint.

        Advisories sometimes separate alternatives with a single '|'.
        """
        if "||" not in self.affected_versions and "|" in self.affected_versions:
            return self.affected_versions.replace("|", "||")
        return self.affected_versions


def expand_minified(versions: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Expand a 'composer/2.0' minified version list.

    Each entry only carries the keys that changed since the previous one; the
    '__unset' marker removes a key.
    """
    expanded: List[Dict[str, Any]] = []
    previous: Dict[str, Any] = {}
    for entry in versions:
        current = dict(previous)
        for key, value in entry.items():
            if value == _UNSET:
                current.pop(key, None)
            else:
                current[key] = value
        expanded.append(current)
        previous = current
    return expanded


class PackagistClient:
    """Read-only client for a Packagist compatible repository.

    Args:
        base_url: Repository root (defaults to Constants.REGISTRY_URL_PACKAGIST)
        session: Optional requests session
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or Constants.REGISTRY_URL_PACKAGIST).rstrip("/")
        self.session = session

    def _get(self, route: str, params: Any = None) -> Any:
        data = get_json(f"{self.base_url}/{route}", context="packagist", session=self.session, params=params)
        if isinstance(data, dict) and data.get("status") and data.get("message"):
            raise RegistryError(f"packagist api responded with error '{data['message']}'")
        return data

    def list_packages(self, vendor: Optional[str] = None, package_type: Optional[str] = None) -> List[str]:
        """List package names, optionally filtered by vendor or type.

        Without filters the whole repository is listed; the response is huge.
        """
        params = {k: v for k, v in (("vendor", vendor), ("type", package_type)) if v}
        data = self._get("packages/list.json", params=params or None)
        return list(data.get("packageNames") or [])

    def search(
        self,
        query: str,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
        tags: Optional[Sequence[str]] = None,
        package_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Search packages; returns the raw page ('results', 'total', 'next')."""
        if not query:
            raise ValueError("'query' is required for search request")
        params: List[Any] = [("q", query)]
        if per_page:
            params.append(("per_page", per_page))
        if page:
            params.append(("page", page))
        for tag in tags or ():
            params.append(("tags[]", tag))
        if package_type:
            params.append(("type", package_type))
        return self._get("search.json", params=params)

    def meta(self, vendor: str, package: str) -> Dict[str, List[VersionMeta]]:
        """Fetch release metadata keyed by package name, newest release first.

        The response may also list packages that 'replace' the requested one.
        """
        if not vendor or not package:
            raise ValueError("'vendor' and 'package' are required for meta request")
        logger.debug("Fetching Packagist metadata for %s/%s", vendor, package)
        data = self._get(f"p2/{vendor}/{package}.json")
        minified = data.get("minified") == _MINIFIED_FORMAT
        result: Dict[str, List[VersionMeta]] = {}
        for name, versions in (data.get("packages") or {}).items():
            if isinstance(versions, dict):
                versions = list(versions.values())
            if minified:
                versions = expand_minified(versions)
            result[name] = [VersionMeta.from_dict(v) for v in versions if isinstance(v, dict)]
        return result

    def data(self, vendor: str, package: str) -> Dict[str, Any]:
        """Fetch the full package document (downloads, dependents, GitHub stats).

        Packagist caches this endpoint for twelve hours; prefer ``meta`` for
        release lists.
        """
        if not vendor or not package:
            raise ValueError("'vendor' and 'package' are required for data request")
        return self._get(f"packages/{vendor}/{package}.json").get("package") or {}

    def stats(self) -> Dict[str, Any]:
        """Global repository statistics ('downloads', 'packages', 'versions')."""
        return self._get("statistics.json").get("totals") or {}

    def security_advisories(self, packages: Sequence[str]) -> Dict[str, List[Advisory]]:
        """Fetch known advisories for 'vendor/package' names."""
        if not packages:
            raise ValueError("'packages' must contain at least one package name")
        data = self._get("api/security-advisories/", params=[("packages[]", p) for p in packages])
        advisories = data.get("advisories") or {}
        # An empty result is serialized as a list instead of an object.
        if isinstance(advisories, list):
            return {}
        return {
            name: [Advisory.from_dict(a) for a in items if isinstance(a, dict)]
            for name, items in advisories.items()
        }
