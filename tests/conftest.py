"""Shared test fixtures: an in-memory stand-in for the GitHub client."""

from __future__ import annotations

import base64
import json
from typing import Optional

import pytest

from npm_risk_audit.errors import EnumerationError, GitHubAPIError, NotFoundError
from npm_risk_audit.models import RepoDescriptor


def encode_manifest(pkg: dict) -> dict:
    """Build a contents-API response for a package.json document."""
    text = json.dumps(pkg, indent=2)
    return {
        'type': 'file',
        'encoding': 'base64',
        'content': base64.encodebytes(text.encode('utf-8')).decode('ascii'),
    }


def repo(name: str, owner: str = 'octo', archived: bool = False, fork: bool = False) -> RepoDescriptor:
    return RepoDescriptor(
        full_name=f"{owner}/{name}",
        owner=owner,
        name=name,
        archived=archived,
        fork=fork,
    )


class FakeGitHubClient:
    """Serves repositories and file responses from dictionaries and records calls."""

    def __init__(
        self,
        repos: list[RepoDescriptor],
        files: Optional[dict] = None,
        list_error: Optional[Exception] = None,
        blobs: Optional[dict] = None
    ):
        self.repos = repos
        # "owner/name" -> response dict, or an exception instance to raise
        self.files = files or {}
        self.list_error = list_error
        # sha -> blob response, or an exception instance to raise
        self.blobs = blobs or {}
        self.blob_calls: list[str] = []
        self.list_calls: list[str] = []
        self.fetch_calls: list[str] = []

    async def list_user_repos(self, user: str, per_page: Optional[int] = None) -> list[RepoDescriptor]:
        self.list_calls.append(user)
        if self.list_error:
            raise self.list_error
        return list(self.repos)

    async def get_file_content(self, owner: str, repo: str, path: str) -> dict:
        key = f"{owner}/{repo}"
        self.fetch_calls.append(key)
        response = self.files.get(key)
        if response is None:
            raise NotFoundError(f'repos/{key}/contents/{path}', 'gh: Not Found (HTTP 404)', 404)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_blob(self, owner: str, repo: str, sha: str) -> dict:
        self.blob_calls.append(sha)
        response = self.blobs.get(sha)
        if response is None:
            raise NotFoundError(f'repos/{owner}/{repo}/git/blobs/{sha}', 'gh: Not Found (HTTP 404)', 404)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_client():
    return FakeGitHubClient


@pytest.fixture
def report_file(tmp_path):
    return str(tmp_path / 'scan-report.json')


@pytest.fixture
def server_error():
    return GitHubAPIError('repos/octo/x/contents/package.json', 'gh: Server Error (HTTP 502)', 502)


@pytest.fixture
def listing_error():
    return EnumerationError('Error listing repositories for octo: gh: Server Error (HTTP 500)')
