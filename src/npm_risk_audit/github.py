"""Thin async wrapper around the GitHub CLI (`gh api`)."""

from __future__ import annotations

import asyncio
import json
import os
from typing import Optional
from urllib.parse import quote

from .errors import EnumerationError, GitHubAPIError
from .models import RepoDescriptor
from .output import log_debug, log_info


class GitHubClient:
    """Runs `gh api` calls authenticated with an explicit token."""

    PER_PAGE = 100

    def __init__(self, token: str, gh_path: str = 'gh'):
        self.gh_path = gh_path
        # gh reads GH_TOKEN ahead of its stored login
        self.env = {**os.environ, 'GH_TOKEN': token}

    async def _api(self, endpoint: str) -> object:
        """Call `gh api <endpoint>` and return the decoded JSON body."""
        log_debug(f"API call: gh api {endpoint}")
        proc = await asyncio.create_subprocess_exec(
            self.gh_path, 'api',
            '-H', 'Accept: application/vnd.github+json',
            endpoint,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=self.env
        )
        stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            error = stderr.decode(errors='replace').strip()
            log_debug(f"API error for '{endpoint}': {error}")
            raise GitHubAPIError.from_stderr(endpoint, error)

        try:
            return json.loads(stdout.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise GitHubAPIError(endpoint, f"invalid JSON response: {e}") from e

    async def list_user_repos(self, user: str, per_page: Optional[int] = None) -> list[RepoDescriptor]:
        """List every repository owned by `user`, following pagination to the end."""
        per_page = per_page or self.PER_PAGE
        log_info(f"Listing repositories for {user}...")

        repos: list[RepoDescriptor] = []
        page = 1

        while True:
            endpoint = f'users/{quote(user)}/repos?per_page={per_page}&page={page}&type=owner'
            try:
                page_data = await self._api(endpoint)
            except GitHubAPIError as e:
                raise EnumerationError(f"Error listing repositories for {user}: {e.message}") from e

            if not isinstance(page_data, list):
                raise EnumerationError(f"Unexpected response listing repositories for {user}")
            if not page_data:
                break

            repos.extend(RepoDescriptor.from_dict(item) for item in page_data)
            log_debug(f"Fetched page {page}: {len(page_data)} repos (total so far: {len(repos)})")

            if len(page_data) < per_page:
                break

            page += 1

        return repos

    async def get_file_content(self, owner: str, repo: str, path: str) -> dict:
        """
        Fetch a file through the contents API.
        Returns the response object (`content`, `encoding`, ...).
        Raises NotFoundError when the file does not exist.
        """
        endpoint = f'repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}'
        data = await self._api(endpoint)
        if not isinstance(data, dict):
            # A list means `path` is a directory
            return {}
        return data

    async def get_blob(self, owner: str, repo: str, sha: str) -> dict:
        """Fetch a blob by SHA; works for files above the contents-API size limit."""
        endpoint = f'repos/{quote(owner)}/{quote(repo)}/git/blobs/{quote(sha)}'
        data = await self._api(endpoint)
        if not isinstance(data, dict):
            return {}
        return data
