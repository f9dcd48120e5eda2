"""Update checkers: compare declared constraints with registry releases."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from common.errors import RegistryError
from common.logging_utils import extra_context
from manifests import Constraint, Requirement
from registry.packagist import PackagistClient
from registry.pypi import PyPIClient
from versioning import (
    ConstraintParseError,
    Constraints,
    Ecosystem,
    Version,
    VersionParseError,
    parse_constraint,
    parse_version,
)

logger = logging.getLogger(__name__)


@dataclass
class Update:
    """An available release for a package."""
    name: str
    version: str
    author: str
    url: str
    current_version: str = ""
    current_constraint: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# (parsed version, author, url) for one registry release.
Release = Tuple[Version, str, str]


class UpdatesChecker:
    """Common update logic; subclasses provide registry access.

    ``_releases`` must return releases newest first. Releases whose version
    does not parse in the ecosystem grammar (e.g. 'dev-master') are skipped.
    """

    ecosystem: ClassVar[Ecosystem]

    def _releases(self, name: str) -> List[Tuple[str, str, str]]:
        raise NotImplementedError

    def _parsed_releases(self, name: str) -> List[Release]:
        parsed: List[Release] = []
        for raw, author, url in self._releases(name):
            try:
                parsed.append((parse_version(raw, self.ecosystem), author, url))
            except VersionParseError:
                logger.debug("Skipping unsupported release %s %s", name, raw)
        # Stable sort: registry order decides among equal segments.
        parsed.sort(key=lambda r: r[0].segments, reverse=True)
        return parsed

    def _lookup(self, name: str) -> Optional[List[Release]]:
        try:
            return self._parsed_releases(name)
        except (RegistryError, ValueError) as exc:
            logger.warning(
                "Unable to fetch releases for %s: %s", name, exc,
                extra=extra_context(event="lookup", component="checker", outcome="skipped", package_name=name),
            )
            return None

    def _constraint(self, item: Constraint) -> Optional[Constraints]:
        try:
            return parse_constraint(item.version, self.ecosystem)
        except ConstraintParseError as exc:
            logger.warning("Skipping %s: %s", item.name, exc)
            return None

    def last_updates(self, constraints: Sequence[Constraint], incompatible_only: bool = False) -> List[Update]:
        """Report the newest release of every constrained package.

        Packages whose declared constraint does not parse are skipped. With
        ``incompatible_only`` packages whose newest release already satisfies
        the declared constraint are left out.

        Raises:
            ValueError: ``constraints`` is empty
        """
        if not constraints:
            raise ValueError("no packages provided")
        updates: List[Update] = []
        for item in constraints:
            parsed = self._constraint(item)
            if parsed is None:
                continue
            releases = self._lookup(item.name)
            if not releases:
                continue
            version, author, url = releases[0]
            if incompatible_only and parsed.match(version):
                logger.debug("%s %s satisfies %s", item.name, version.raw, item.version)
                continue
            updates.append(Update(
                name=item.name,
                version=version.raw,
                author=author,
                url=url,
                current_constraint=item.version,
            ))
        return updates

    def compatible_updates(self, constraints: Sequence[Constraint], requirements: Sequence[Requirement]) -> List[Update]:
        """Report the newest release above the locked version that still
        satisfies the declared constraint.

        Packages without a locked requirement are ignored.

        Raises:
            ValueError: ``constraints`` or ``requirements`` is empty
        """
        if not constraints or not requirements:
            raise ValueError("no packages provided")
        locked = {r.name.lower(): r.version for r in requirements}
        updates: List[Update] = []
        for item in constraints:
            current = locked.get(item.name.lower())
            if current is None:
                continue
            parsed = self._constraint(item)
            if parsed is None:
                continue
            try:
                newer = parse_constraint(">" + current, self.ecosystem)
            except ConstraintParseError:
                logger.warning("Skipping %s: unsupported locked version %r", item.name, current)
                continue
            releases = self._lookup(item.name)
            if not releases:
                continue
            for version, author, url in releases:
                if newer.match(version) and parsed.match(version):
                    updates.append(Update(
                        name=item.name,
                        version=version.raw,
                        author=author,
                        url=url,
                        current_version=current,
                        current_constraint=item.version,
                    ))
                    break
        return updates


class ComposerUpdatesChecker(UpdatesChecker):
    """Update checker backed by Packagist."""

    ecosystem = Ecosystem.COMPOSER

    def __init__(self, client: Optional[PackagistClient] = None):
        self.client = client or PackagistClient()

    def _releases(self, name: str) -> List[Tuple[str, str, str]]:
        vendor, sep, package = name.partition("/")
        if not sep or not vendor or not package or "/" in package:
            # Platform requirements such as 'php' or 'ext-json' land here too.
            raise ValueError(f"package name {name!r} does not follow the 'vendor/name' format")
        versions = self.client.meta(vendor, package).get(name.lower(), [])
        return [(v.version, v.author, v.source_url) for v in versions]


class PipUpdatesChecker(UpdatesChecker):
    """Update checker backed by PyPI."""

    ecosystem = Ecosystem.PIP

    def __init__(self, client: Optional[PyPIClient] = None):
        self.client = client or PyPIClient()

    def _releases(self, name: str) -> List[Tuple[str, str, str]]:
        package = self.client.package(name)
        author = package.author or name
        url = package.release_url
        return [(r.version, author, url) for r in reversed(package.releases) if not r.yanked]
