"""PIP versions and constraints.

PIP has no OR operator: a specifier set is a comma separated list of clauses
that must all hold (https://peps.python.org/pep-0440/#version-specifiers).
Versions may carry a 4th numeric segment which is accepted but not compared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple

from . import compare
from .grammar import build_grammar, parse_clause, parse_version as _parse_version
from .models import Constraints, Ecosystem, PipVersion, UnaryConstraint, Version

OPERATORS = {
    "": compare.equal,
    "==": compare.equal,
    "===": compare.arbitrary_equal,
    "!=": compare.not_equal,
    ">": compare.greater,
    "<": compare.less,
    ">=": compare.greater_equal,
    "<=": compare.less_equal,
    "~=": compare.tilde,
}

GRAMMAR = build_grammar(Ecosystem.PIP, PipVersion, OPERATORS, segments=4)

_AND_SEPARATOR = ","


@dataclass(frozen=True)
class PipConstraints(Constraints):
    """Constraints implementation for the PIP package manager."""
    clauses: Tuple[UnaryConstraint, ...] = ()

    ecosystem: ClassVar[Ecosystem] = Ecosystem.PIP

    def _match(self, version: Version) -> bool:
        return all(clause.match(version) for clause in self.clauses)


def parse_version(raw: str) -> PipVersion:
    """Parse a PIP version such as '1.2.3.4' or 'v2.0'."""
    return _parse_version(GRAMMAR, raw)


def parse_constraints(raw: str) -> PipConstraints:
    """Parse a PIP specifier set such as '>=1.2.3,<=1.4.0,!=1.2.17'.

    Raises:
        ConstraintParseError: any clause (including an empty one) is invalid
    """
    clauses = tuple(parse_clause(GRAMMAR, token, raw) for token in raw.split(_AND_SEPARATOR))
    return PipConstraints(raw=raw, clauses=clauses)
