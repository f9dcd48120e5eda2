"""PIP manifest parser (requirements.txt)."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requirements

from constants import Constants
from repository.fetchers import FileFetcher
from .base import Constraint, DependencyParser, Requirement

logger = logging.getLogger(__name__)

# Constraint used for requirements listed without any specifier.
ANY_VERSION = "*"


def _skip_line(line: str) -> bool:
    """True for lines the constraint engine cannot use.

    Options (-r, -e, --index-url), URLs/paths and environment markers.
    """
    return line.startswith("-") or "/" in line or ";" in line


def parse_requirements_txt(body: str) -> Dict[str, str]:
    """Map package name to its joined specifier (e.g. '>=1.0,<2.0').

    Unparsable lines are logged and skipped; later duplicates win.
    """
    result: Dict[str, str] = {}
    for raw_line in body.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or _skip_line(line):
            continue
        try:
            parsed = list(requirements.parse(line))
        except ValueError as exc:
            logger.warning("Skipping unparsable requirement %r: %s", line, exc)
            continue
        for req in parsed:
            if not req.name:
                continue
            specs = ",".join(f"{op}{ver}" for op, ver in req.specs)
            result[req.name] = specs or ANY_VERSION
    return result


class PipParser(DependencyParser):
    """Reads constraints from a requirements file.

    Args:
        fetcher: Source of file contents
        filename: Requirements file name, 'requirements.txt' when empty
    """

    def __init__(self, fetcher: FileFetcher, filename: Optional[str] = None):
        super().__init__(fetcher)
        self.source_name = filename or Constants.REQUIREMENTS_FILE

    def constraints(self) -> List[Constraint]:
        """Return requirements file dependencies.

        Raises:
            FileNotFoundInSource: the requirements file is missing
        """
        body = self.fetcher.file_content(self.source_name).decode("utf-8", errors="replace")
        return [Constraint(name=name, version=version)
                for name, version in parse_requirements_txt(body).items()]

    def requirements(self) -> List[Requirement]:
        # pip has no lock file, so there is no full locked dependency list.
        return []
