"""Composer versions and constraints.

Constraint expressions are OR-of-ANDs: '||' separates alternatives, commas or
whitespace separate the clauses that must all hold inside one alternative
(https://getcomposer.org/doc/articles/versions.md#version-range).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Tuple

from . import compare
from .errors import ConstraintParseError
from .grammar import build_grammar, parse_clause, parse_version as _parse_version
from .models import ComposerVersion, Constraints, Ecosystem, UnaryConstraint, Version

OPERATORS = {
    "": compare.equal,
    "=": compare.equal,
    "==": compare.equal,
    "!=": compare.not_equal,
    ">": compare.greater,
    "<": compare.less,
    ">=": compare.greater_equal,
    "<=": compare.less_equal,
    "~": compare.tilde,
    "^": compare.caret,
}

GRAMMAR = build_grammar(Ecosystem.COMPOSER, ComposerVersion, OPERATORS, segments=3)

_OR_SEPARATOR = "||"
_AND_SEPARATOR = re.compile(r"[,\s]+")


@dataclass(frozen=True)
class ComposerConstraints(Constraints):
    """Constraints implementation for the Composer package manager."""
    groups: Tuple[Tuple[UnaryConstraint, ...], ...] = ()

    ecosystem: ClassVar[Ecosystem] = Ecosystem.COMPOSER

    def _match(self, version: Version) -> bool:
        return any(all(clause.match(version) for clause in group) for group in self.groups)


def parse_version(raw: str) -> ComposerVersion:
    """Parse a Composer version such as 'v1.2.3-beta'."""
    return _parse_version(GRAMMAR, raw)


def parse_constraints(raw: str) -> ComposerConstraints:
    """Parse a Composer constraint expression such as '>=1.2,<2.0 || 3.*'.

    Raises:
        ConstraintParseError: any alternative is empty or any clause is invalid
    """
    groups = []
    for alternative in raw.split(_OR_SEPARATOR):
        tokens = [t for t in _AND_SEPARATOR.split(alternative) if t]
        if not tokens:
            raise ConstraintParseError(
                f"constraint not supported: {alternative!r}", raw, alternative
            )
        groups.append(tuple(parse_clause(GRAMMAR, token, raw) for token in tokens))
    return ComposerConstraints(raw=raw, groups=tuple(groups))
