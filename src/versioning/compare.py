"""Comparison primitives shared by the Composer and PIP operator tables.

Each function has the ``CompareFunc`` signature ``(version, clause) -> bool``
and reads only the numeric segments, except ``arbitrary_equal`` which compares
raw text.
"""

from __future__ import annotations

from .models import UnaryConstraint, Version, Wildcard

_ZERO = (0, 0, 0)


def equal(version: Version, clause: UnaryConstraint) -> bool:
    ref = clause.version
    if clause.wildcard is Wildcard.NONE:
        return version.segments == ref.segments
    if clause.wildcard is Wildcard.MAJOR:
        return True
    if clause.wildcard is Wildcard.MINOR:
        return version.major == ref.major
    return version.major == ref.major and version.minor == ref.minor


def not_equal(version: Version, clause: UnaryConstraint) -> bool:
    return not equal(version, clause)


def greater(version: Version, clause: UnaryConstraint) -> bool:
    # Wildcards are ignored, forced-zero segments compare as written.
    return version.segments > clause.version.segments


def less(version: Version, clause: UnaryConstraint) -> bool:
    return version.segments < clause.version.segments


def greater_equal(version: Version, clause: UnaryConstraint) -> bool:
    return equal(version, clause) or greater(version, clause)


def less_equal(version: Version, clause: UnaryConstraint) -> bool:
    return equal(version, clause) or less(version, clause)


def tilde(version: Version, clause: UnaryConstraint) -> bool:
    """Composer '~' and PIP '~=': pin the major segment, allow newer minors.

    '~*' and '~0.0.0' accept anything at or above the reference.
    """
    if less(version, clause):
        return False
    if clause.wildcard is Wildcard.MAJOR or clause.version.segments == _ZERO:
        return True
    return version.major == clause.version.major


def caret(version: Version, clause: UnaryConstraint) -> bool:
    """Composer '^': a major.minor reference pins the minor segment too."""
    if less(version, clause):
        return False
    if clause.wildcard is Wildcard.PATCH and version.major == clause.version.major:
        return version.minor == clause.version.minor
    return tilde(version, clause)


def arbitrary_equal(version: Version, clause: UnaryConstraint) -> bool:
    """PIP '===': plain string equality, no semantic interpretation."""
    return version.raw == clause.raw
