"""Parse errors raised by the version/constraint engine."""

from __future__ import annotations

from common.errors import DephubError


class VersioningError(DephubError, ValueError):
    """Base class for engine parse failures.

    The offending input is kept on ``raw`` for diagnostics.
    """

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class VersionParseError(VersioningError):
    """Raw text does not match the anchored version grammar."""


class ConstraintParseError(VersioningError):
    """A constraint clause is malformed or its reference version is invalid.

    ``token`` holds the single clause that failed, ``raw`` the whole expression.
    """

    def __init__(self, message: str, raw: str, token: str):
        super().__init__(message, raw)
        self.token = token
