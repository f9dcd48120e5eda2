"""Ecosystem-parameterized entry points for parsing and matching.

Parsing never shares state between calls, so callers may parse and match from
any number of threads. Callers that re-check the same constraint often should
memoize the parsed object themselves, keyed on the raw string.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple, Union

from . import composer, pip
from .models import Constraints, Ecosystem, Version

_ENGINES: Dict[Ecosystem, Tuple[Callable[[str], Version], Callable[[str], Constraints]]] = {
    Ecosystem.COMPOSER: (composer.parse_version, composer.parse_constraints),
    Ecosystem.PIP: (pip.parse_version, pip.parse_constraints),
}


def to_ecosystem(value: Union[Ecosystem, str]) -> Ecosystem:
    """Coerce 'composer'/'pip' (any case) or an Ecosystem member."""
    if isinstance(value, Ecosystem):
        return value
    try:
        return Ecosystem(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"unsupported ecosystem: {value!r}") from None


def parse_version(raw: str, ecosystem: Union[Ecosystem, str]) -> Version:
    """Parse a raw version string with the ecosystem's grammar.

    Raises:
        VersionParseError: the text does not match the version grammar
    """
    return _ENGINES[to_ecosystem(ecosystem)][0](raw)


def parse_constraint(raw: str, ecosystem: Union[Ecosystem, str]) -> Constraints:
    """Parse a raw constraint expression with the ecosystem's grammar.

    Raises:
        ConstraintParseError: any clause is malformed
    """
    return _ENGINES[to_ecosystem(ecosystem)][1](raw)


def match(version: Version, constraint: Constraints) -> bool:
    """Return True if ``version`` satisfies ``constraint``.

    Both values must come from the same ecosystem.

    Raises:
        TypeError: the version and constraint ecosystems differ
    """
    return constraint.match(version)


def satisfies(version: str, constraint: str, ecosystem: Union[Ecosystem, str]) -> bool:
    """Parse both raw strings and match them."""
    return match(parse_version(version, ecosystem), parse_constraint(constraint, ecosystem))
