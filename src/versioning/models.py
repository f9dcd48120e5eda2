"""Data models for versions and constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, ClassVar, Tuple


class Ecosystem(Enum):
    """Enum for supported ecosystems."""
    COMPOSER = "composer"
    PIP = "pip"


class Wildcard(IntEnum):
    """Position of the first wildcarded (or omitted) segment in a clause."""
    NONE = -1
    MAJOR = 0
    MINOR = 1
    PATCH = 2


@dataclass(frozen=True)
class Version:
    """A fixed release version (e.g. '1.0.3' or 'v3.2').

    Pre-release and build metadata are kept for reference only; they never
    take part in comparisons.
    """
    major: int
    minor: int
    patch: int
    raw: str
    prerelease: str = ""
    build: str = ""

    ecosystem: ClassVar[Ecosystem]

    @property
    def segments(self) -> Tuple[int, int, int]:
        """Return (major, minor, patch)."""
        return (self.major, self.minor, self.patch)

    def match(self, constraint: "Constraints") -> bool:
        """Return True if this version satisfies the constraint."""
        return constraint.match(self)

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ComposerVersion(Version):
    """Version parsed with the Composer grammar."""
    ecosystem: ClassVar[Ecosystem] = Ecosystem.COMPOSER


@dataclass(frozen=True)
class PipVersion(Version):
    """Version parsed with the PIP grammar (allows a 4th numeric segment)."""
    ecosystem: ClassVar[Ecosystem] = Ecosystem.PIP


# Operator check function: returns True if the version satisfies the clause.
CompareFunc = Callable[[Version, "UnaryConstraint"], bool]


@dataclass(frozen=True)
class UnaryConstraint:
    """A single operator+version clause (e.g. '<=7.2' out of '>=1.2||<=7.2')."""
    operator: str
    wildcard: Wildcard
    version: Version  # reference version, wildcarded segments forced to 0
    raw: str  # literal reference text as written in the clause
    compare: CompareFunc = field(repr=False, compare=False)

    def match(self, version: Version) -> bool:
        return self.compare(version, self)

    def __str__(self) -> str:
        return f"{self.operator}{self.raw}"


@dataclass(frozen=True)
class Constraints:
    """A full constraint expression (e.g. '>=7.2||7.*').

    Subclasses define how clauses are grouped in ``_match``; ``match`` is the
    single entry point and refuses versions from another ecosystem.
    """
    raw: str

    ecosystem: ClassVar[Ecosystem]

    def match(self, version: Version) -> bool:
        """Return True if ``version`` satisfies this expression.

        Raises:
            TypeError: ``version`` belongs to a different ecosystem
        """
        if version.ecosystem is not self.ecosystem:
            raise TypeError(
                f"cannot match a {version.ecosystem.value} version against "
                f"{self.ecosystem.value} constraints"
            )
        return self._match(version)

    def _match(self, version: Version) -> bool:
        raise NotImplementedError

    @property
    def value(self) -> str:
        """Constraint text exactly as parsed."""
        return self.raw

    def __str__(self) -> str:
        return self.raw
