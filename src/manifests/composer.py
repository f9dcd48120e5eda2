"""Composer manifest parser (composer.json, composer.lock)."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from constants import Constants
from common.errors import FileNotFoundInSource, ManifestError
from repository.fetchers import FileFetcher
from .base import Constraint, DependencyParser, Requirement

logger = logging.getLogger(__name__)


class ComposerParser(DependencyParser):
    """Reads constraints from composer.json and locked versions from composer.lock.

    Args:
        fetcher: Source of file contents
        include_dev: Also read require-dev / packages-dev sections
    """

    def __init__(self, fetcher: FileFetcher, include_dev: bool = False):
        super().__init__(fetcher)
        self.include_dev = include_dev

    def _load(self, path: str) -> Dict[str, Any]:
        body = self.fetcher.file_content(path)
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestError(f"unable to parse {path} content: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestError(f"unable to parse {path} content: top level must be an object")
        return data

    def constraints(self) -> List[Constraint]:
        """Return composer.json dependencies.

        Raises:
            FileNotFoundInSource: composer.json is missing
            ManifestError: composer.json is not valid JSON
        """
        data = self._load(Constants.COMPOSER_JSON_FILE)
        sections = ["require"] + (["require-dev"] if self.include_dev else [])
        result: List[Constraint] = []
        for section in sections:
            deps = data.get(section) or {}
            if not isinstance(deps, dict):
                logger.warning("Ignoring malformed '%s' section in %s", section, Constants.COMPOSER_JSON_FILE)
                continue
            for name, version in deps.items():
                result.append(Constraint(name=name, version=str(version)))
        return result

    def requirements(self) -> List[Requirement]:
        """Return composer.lock packages, flagging those declared in composer.json.

        A missing composer.json only disables the ``base`` flag.

        Raises:
            FileNotFoundInSource: composer.lock is missing
            ManifestError: either file is not valid JSON
        """
        try:
            base_names = {c.name for c in self.constraints()}
        except FileNotFoundInSource:
            logger.debug("%s not found; base flags left unset", Constants.COMPOSER_JSON_FILE)
            base_names = set()

        data = self._load(Constants.COMPOSER_LOCK_FILE)
        sections = ["packages"] + (["packages-dev"] if self.include_dev else [])
        result: List[Requirement] = []
        for section in sections:
            for pkg in data.get(section) or []:
                if not isinstance(pkg, dict) or "name" not in pkg:
                    continue
                name = pkg["name"]
                result.append(Requirement(
                    name=name,
                    version=str(pkg.get("version", "")),
                    base=name in base_names,
                ))
        return result
