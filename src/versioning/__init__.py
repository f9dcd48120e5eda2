"""Version and constraint parsing/matching for Composer and PIP."""

from .engine import match, parse_constraint, parse_version, satisfies, to_ecosystem
from .errors import ConstraintParseError, VersionParseError, VersioningError
from .models import (
    ComposerVersion,
    Constraints,
    Ecosystem,
    PipVersion,
    UnaryConstraint,
    Version,
    Wildcard,
)

__all__ = [
    "ComposerVersion",
    "ConstraintParseError",
    "Constraints",
    "Ecosystem",
    "PipVersion",
    "UnaryConstraint",
    "Version",
    "VersionParseError",
    "VersioningError",
    "Wildcard",
    "match",
    "parse_constraint",
    "parse_version",
    "satisfies",
    "to_ecosystem",
]
