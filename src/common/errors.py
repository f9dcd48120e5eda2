"""Exception hierarchy shared by the engine and its I/O adapters."""

from __future__ import annotations


class DephubError(Exception):
    """Base class for all errors raised by this project."""


class FileNotFoundInSource(DephubError):
    """A dependency file does not exist in the inspected source."""

    def __init__(self, path: str):
        super().__init__(f"dependency file not found: {path}")
        self.path = path


class ManifestError(DephubError):
    """A dependency file exists but its content cannot be decoded."""


class RegistryError(DephubError):
    """A registry or repository API call failed.

    Args:
        message: Human readable description
        status_code: HTTP status code when a response was received
    """

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedSourceError(DephubError):
    """A source address cannot be parsed or its host is not supported."""
