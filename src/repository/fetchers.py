"""File fetchers for in-memory, local and remote repositories."""
from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

from common.errors import FileNotFoundInSource, ManifestError
from .github import GitHubClient

logger = logging.getLogger(__name__)


class FileFetcher:
    """Returns raw bytes for a root-relative path."""

    def file_content(self, path: str) -> bytes:
        """Return the file content.

        Raises:
            FileNotFoundInSource: the file does not exist
        """
        raise NotImplementedError


class MemoryFetcher(FileFetcher):
    """Serves file contents from a dict (handy for tests or custom sources)."""

    def __init__(self, files: Mapping[str, Union[bytes, str]]):
        self.files = dict(files)

    def file_content(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundInSource(path)
        content = self.files[path]
        return content.encode("utf-8") if isinstance(content, str) else content


class LocalFetcher(FileFetcher):
    """Reads files relative to a local directory."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def file_content(self, path: str) -> bytes:
        full = os.path.join(self.root, path)
        if not os.path.isfile(full):
            raise FileNotFoundInSource(path)
        try:
            with open(full, "rb") as fh:
                return fh.read()
        except OSError as exc:
            logger.error("IO error: %s", exc)
            raise ManifestError(f"unable to read {full}: {exc}") from exc


class GitHubFetcher(FileFetcher):
    """Fetches files from a GitHub repository at a fixed ref.

    ``owner``/``repo`` follow the '{owner}/{repo}' notation.
    """

    def __init__(self, owner: str, repo: str, ref: str = "", client: Optional[GitHubClient] = None):
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self.client = client or GitHubClient()

    def file_content(self, path: str) -> bytes:
        logger.debug("Fetching %s from github.com/%s/%s@%s", path, self.owner, self.repo, self.ref or "HEAD")
        return self.client.get_file_content(self.owner, self.repo, path, self.ref)
