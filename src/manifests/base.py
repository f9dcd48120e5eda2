"""Shared types for manifest parsers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from repository.fetchers import FileFetcher


@dataclass(frozen=True)
class Constraint:
    """One declared dependency and its raw constraint (e.g. 'monolog/monolog', '^2.0')."""
    name: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Requirement:
    """One locked dependency.

    ``base`` marks top level requirements (declared directly in the manifest).
    """
    name: str
    version: str
    base: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DependencyParser:
    """Base class for ecosystem manifest parsers."""

    def __init__(self, fetcher: FileFetcher):
        self.fetcher = fetcher

    def constraints(self) -> List[Constraint]:
        """Return declared dependencies with their constraints."""
        raise NotImplementedError

    def requirements(self) -> List[Requirement]:
        """Return locked dependencies, or an empty list when unsupported."""
        raise NotImplementedError
