"""Dependency manifest parsers for supported package managers."""

from .base import Constraint, DependencyParser, Requirement
from .composer import ComposerParser
from .pip import PipParser

__all__ = [
    "ComposerParser",
    "Constraint",
    "DependencyParser",
    "PipParser",
    "Requirement",
]
