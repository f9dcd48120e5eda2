"""Version and constraint grammars plus wildcard normalization helpers.

Both ecosystems share the same grammar shape and differ only in their operator
tables and the number of numeric segments they accept. A ``Grammar`` is built
once per ecosystem at import time and never mutated afterwards.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Pattern, Tuple, Type

from .errors import ConstraintParseError, VersionParseError
from .models import CompareFunc, Ecosystem, UnaryConstraint, Version, Wildcard

WILDCARD_TOKENS = frozenset({"*", "x", "X"})
MAX_SEGMENT = sys.maxsize

_IDENT = r"[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*"
_SUFFIX = rf"(?:-(?P<prerelease>{_IDENT}))?(?:\+(?P<build>{_IDENT}))?"
_NUMBER = r"[0-9]+"
_WILDCARD_SEGMENT = r"(?:[0-9]+|[xX*])"
_SEGMENT_NAMES = ("major", "minor", "patch", "extra")


@dataclass(frozen=True)
class Grammar:
    """Compiled per-ecosystem parser configuration."""
    ecosystem: Ecosystem
    version_cls: Type[Version]
    operators: Mapping[str, CompareFunc]
    version_rgx: Pattern[str]
    constraint_rgx: Pattern[str]


def _segments_pattern(segment: str, count: int) -> str:
    """Return 'major(.minor)?(.patch)?...' with ``count`` named segments."""
    parts = [f"(?P<major>{segment})"]
    for name in _SEGMENT_NAMES[1:count]:
        parts.append(rf"(?:\.(?P<{name}>{segment}))?")
    return "".join(parts)


def _check_operator_order(alternation: str, tokens) -> None:
    """Reject an operator alternation where one token shadows a longer one.

    The regex alternation tries tokens left to right, so '<' placed before
    '<=' would make '<=1.0' parse as '<' followed by garbage. Every token must
    be consumed whole by the compiled alternation.
    """
    rgx = re.compile(alternation)
    for token in tokens:
        found = rgx.match(token)
        if found is None or found.group(0) != token:
            shadow = found.group(0) if found else ""
            raise ValueError(f"operator {shadow!r} shadows {token!r}")


def build_grammar(
    ecosystem: Ecosystem,
    version_cls: Type[Version],
    operators: Mapping[str, CompareFunc],
    segments: int = 3,
) -> Grammar:
    """Compile the version and constraint expressions for one ecosystem.

    Args:
        ecosystem: Ecosystem the grammar belongs to
        version_cls: Version subclass produced by the parser
        operators: Operator token to check function; '' is the default operator
        segments: Number of dot-separated numeric segments accepted

    Returns:
        Immutable Grammar
    """
    if "" not in operators:
        raise ValueError("operator table must define the empty (default) operator")
    tokens = sorted((t for t in operators if t), key=len, reverse=True)
    ops = "|".join(re.escape(t) for t in tokens)
    _check_operator_order(ops, tokens)

    version_rgx = re.compile(rf"v?{_segments_pattern(_NUMBER, segments)}{_SUFFIX}")
    constraint_rgx = re.compile(
        rf"\s*(?P<operator>{ops})?\s*"
        rf"(?P<version>v?{_segments_pattern(_WILDCARD_SEGMENT, segments)}{_SUFFIX})\s*",
        re.IGNORECASE,
    )
    return Grammar(
        ecosystem=ecosystem,
        version_cls=version_cls,
        operators=MappingProxyType(dict(operators)),
        version_rgx=version_rgx,
        constraint_rgx=constraint_rgx,
    )


def _segment(text: Optional[str], raw: str) -> int:
    if text is None:
        return 0
    # int() refuses very long digit strings, so reject those before converting.
    if len(text.lstrip("0")) > len(str(MAX_SEGMENT)):
        raise VersionParseError(f"segment parse error: {text[:20]!r}... is out of range", raw)
    value = int(text, 10)
    if value > MAX_SEGMENT:
        raise VersionParseError(f"segment parse error: {text!r} is out of range", raw)
    return value


def parse_version(grammar: Grammar, raw: str) -> Version:
    """Parse ``raw`` with the grammar's anchored version expression."""
    matches = grammar.version_rgx.fullmatch(raw.lower())
    if matches is None:
        raise VersionParseError(f"version {raw!r} is not supported", raw)
    return grammar.version_cls(
        major=_segment(matches.group("major"), raw),
        minor=_segment(matches.group("minor"), raw),
        patch=_segment(matches.group("patch"), raw),
        raw=raw,
        prerelease=matches.group("prerelease") or "",
        build=matches.group("build") or "",
    )


def normalize_wildcard(matches: re.Match) -> Tuple[Wildcard, str]:
    """Find the wildcard position and rebuild a concrete reference version.

    The first wildcarded or omitted segment (scanning major, minor, patch)
    fixes the position; it and every later segment become 0.
    """
    groups = matches.groupdict()
    segments = [groups["major"], groups["minor"], groups["patch"]]

    wildcard = Wildcard.NONE
    for position in (Wildcard.MAJOR, Wildcard.MINOR, Wildcard.PATCH):
        if segments[position] is None or segments[position] in WILDCARD_TOKENS:
            wildcard = position
            break

    if wildcard is Wildcard.NONE:
        numbers = list(segments)
        extra = groups.get("extra")
        if extra is not None and extra not in WILDCARD_TOKENS:
            numbers.append(extra)
    else:
        numbers = [s if i < wildcard else "0" for i, s in enumerate(segments)]

    reference = ".".join(numbers)
    if groups["prerelease"]:
        reference += "-" + groups["prerelease"]
    return wildcard, reference


def parse_clause(grammar: Grammar, token: str, expression: str) -> UnaryConstraint:
    """Parse one unary clause such as '>=1.2.*'.

    Args:
        grammar: Ecosystem grammar
        token: The clause text
        expression: Whole constraint expression, kept on errors

    Raises:
        ConstraintParseError: clause or its reference version is invalid
    """
    matches = grammar.constraint_rgx.fullmatch(token)
    if matches is None:
        raise ConstraintParseError(f"constraint not supported: {token!r}", expression, token)

    operator = matches.group("operator") or ""
    wildcard, reference = normalize_wildcard(matches)
    try:
        version = parse_version(grammar, reference)
    except VersionParseError as exc:
        raise ConstraintParseError(
            f"constraint not supported: {token!r} ({exc})", expression, token
        ) from exc

    return UnaryConstraint(
        operator=operator,
        wildcard=wildcard,
        version=version,
        raw=matches.group("version"),
        compare=grammar.operators[operator],
    )
