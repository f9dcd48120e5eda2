"""GitHub API client for reading dependency files out of a repository.

Provides a lightweight REST client over the contents endpoint; optional
authentication comes from the GITHUB_TOKEN environment variable.
"""
from __future__ import annotations

import base64
import binascii
import os
from typing import Dict, Optional
from urllib.parse import quote

import requests

from constants import Constants
from common.errors import FileNotFoundInSource, ManifestError, RegistryError
from common.http_client import get_json


class GitHubClient:
    """Lightweight REST client for GitHub API operations."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub personal access token (defaults to GITHUB_TOKEN env var)
            session: Optional requests session
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)
        self.session = session

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_file_content(self, owner: str, repo: str, path: str, ref: str = "") -> bytes:
        """Fetch a single file from a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Root-relative file path
            ref: Commit hash, branch or tag; default branch when empty

        Raises:
            FileNotFoundInSource: the path does not exist at ``ref``
            ManifestError: the path is a directory or the payload is not a file
            RegistryError: any other API failure
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/contents/{quote(path.lstrip('/'))}"
        params = {"ref": ref} if ref else None
        try:
            data = get_json(
                url, context="github", session=self.session,
                headers=self._get_headers(), params=params,
            )
        except RegistryError as exc:
            if exc.status_code == 404:
                raise FileNotFoundInSource(path) from exc
            raise RegistryError(f"unable to load '{path}' file from github: {exc}", exc.status_code) from exc

        if isinstance(data, list):
            raise ManifestError(f"'{path}' is a directory or not a valid file")
        if not isinstance(data, dict) or data.get("type") != "file":
            raise ManifestError(f"'{path}' is not a regular file")

        content = data.get("content") or ""
        if data.get("encoding", "base64") != "base64":
            return content.encode("utf-8")
        try:
            return base64.b64decode(content)
        except (binascii.Error, ValueError) as exc:
            raise ManifestError(f"unable to decode '{path}' content: {exc}") from exc
