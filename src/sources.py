"""Dependency sources: a uniform way to read constraints and locked versions.

A source couples a file fetcher (memory, local directory, GitHub) with the
manifest parser of the selected package manager.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Union

from constants import Constants
from common.errors import UnsupportedSourceError
from manifests import ComposerParser, Constraint, DependencyParser, PipParser, Requirement
from repository.fetchers import FileFetcher, GitHubFetcher, LocalFetcher, MemoryFetcher
from repository.github import GitHubClient
from versioning.models import Ecosystem

logger = logging.getLogger(__name__)

# Matches git-compatible addresses such as 'git@github.com:vendor/repo.git'
# or 'https://github.com/vendor/repo.git'.
_GIT_ADDR_RGX = re.compile(
    r"^(?P<protocol>git@|git://|ssh://(?:git@)?|https?://)"
    r"(?P<host>[\w.\-~]+)[:/]"
    r"(?P<name>[\w.\-~]+/[\w.\-~]+?)"
    r"(?:\.git)?/?$"
)


@dataclass(frozen=True)
class GitRepo:
    """Basic repository coordinates."""
    host: str
    vendor: str
    repo: str


def parse_git_address(address: str) -> GitRepo:
    """Parse host, vendor and repository name out of a git address.

    Raises:
        UnsupportedSourceError: the address is malformed or the host unsupported
    """
    matches = _GIT_ADDR_RGX.match(address.strip())
    if matches is None:
        raise UnsupportedSourceError(f"unsupported git repository format {address!r}")
    host = matches.group("host").lower()
    if host not in Constants.SUPPORTED_GIT_HOSTS:
        raise UnsupportedSourceError(f"git source {host!r} is not supported")
    vendor, repo = matches.group("name").split("/", 1)
    return GitRepo(host=host, vendor=vendor, repo=repo)


class DependencySource:
    """Reads project constraints and locked requirements from a file fetcher.

    Args:
        fetcher: File fetcher for the project root
        requirements_file: Requirements file name used for PIP projects
        include_dev: Include Composer dev sections
    """

    def __init__(self, fetcher: FileFetcher, requirements_file: Optional[str] = None, include_dev: bool = False):
        self.fetcher = fetcher
        self.requirements_file = requirements_file
        self.include_dev = include_dev

    def parser(self, ecosystem: Union[Ecosystem, str]) -> DependencyParser:
        ecosystem = Ecosystem(ecosystem)
        if ecosystem is Ecosystem.COMPOSER:
            return ComposerParser(self.fetcher, include_dev=self.include_dev)
        return PipParser(self.fetcher, self.requirements_file)

    def constraints(self, ecosystem: Union[Ecosystem, str]) -> List[Constraint]:
        """Return the project's declared dependency constraints."""
        return self.parser(ecosystem).constraints()

    def requirements(self, ecosystem: Union[Ecosystem, str]) -> List[Requirement]:
        """Return the project's locked dependency versions (if any)."""
        return self.parser(ecosystem).requirements()


def memory_source(files: Mapping[str, Union[bytes, str]], **kwargs) -> DependencySource:
    """Build a source over in-memory file contents keyed by path."""
    return DependencySource(MemoryFetcher(files), **kwargs)


def local_source(path: str, **kwargs) -> DependencySource:
    """Build a source over a local project directory."""
    return DependencySource(LocalFetcher(path), **kwargs)


def git_source(address: str, ref: str = "", client: Optional[GitHubClient] = None, **kwargs) -> DependencySource:
    """Build a source over a remote git repository.

    ``ref`` may be a commit hash, branch or tag; the default branch is used
    when empty. Pass a configured GitHubClient for authenticated requests.
    """
    repo = parse_git_address(address)
    logger.debug("Using git source %s/%s on %s", repo.vendor, repo.repo, repo.host)
    return DependencySource(GitHubFetcher(repo.vendor, repo.repo, ref, client=client), **kwargs)
