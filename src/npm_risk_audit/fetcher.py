"""Fetch and decode a repository's root package.json."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional

from .errors import FetchError, FetchErrorKind, GitHubAPIError, NotFoundError, AuthenticationError
from .models import Manifest
from .output import log_debug


MANIFEST_PATH = 'package.json'


@dataclass(frozen=True)
class FetchResult:
    """Either a parsed manifest or the reason there is none."""
    repo: str
    manifest: Optional[Manifest] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.manifest is not None

    @classmethod
    def failure(cls, repo: str, kind: FetchErrorKind, message: str = '') -> FetchResult:
        return cls(repo=repo, error=FetchError(kind=kind, repo=repo, message=message))


def decode_content(content: str, encoding: Optional[str]) -> str:
    """Decode a contents-API payload to text. Raises ValueError on bad input."""
    encoding = (encoding or 'base64').lower()
    if encoding == 'base64':
        # The API wraps base64 at 60 columns
        raw = base64.b64decode(''.join(content.split()), validate=True)
        return raw.decode('utf-8')
    if encoding in ('utf-8', 'utf8'):
        return content
    raise ValueError(f"unsupported content encoding '{encoding}'")


class ManifestFetcher:
    """Retrieves package.json through a GitHubClient."""

    def __init__(self, client, path: str = MANIFEST_PATH):
        self.client = client
        self.path = path

    async def fetch(self, owner: str, repo: str) -> FetchResult:
        full_name = f"{owner}/{repo}"
        try:
            data = await self.client.get_file_content(owner, repo, self.path)
        except NotFoundError:
            return FetchResult.failure(full_name, FetchErrorKind.NOT_FOUND, f"{self.path} not found")
        except AuthenticationError:
            raise
        except GitHubAPIError as e:
            return FetchResult.failure(full_name, FetchErrorKind.TRANSPORT, e.message)

        content = data.get('content')
        if not content and data.get('sha') and data.get('type', 'file') == 'file':
            # Files over 1MB come back without content; the blob API still serves them
            log_debug(f"  {full_name}: {self.path} has no inline content, fetching blob {data['sha'][:8]}")
            try:
                data = await self.client.get_blob(owner, repo, data['sha'])
            except AuthenticationError:
                raise
            except GitHubAPIError as e:
                return FetchResult.failure(full_name, FetchErrorKind.TRANSPORT, e.message)
            content = data.get('content')

        if not content:
            log_debug(f"  {full_name}: no content in response for {self.path}")
            return FetchResult.failure(full_name, FetchErrorKind.NO_CONTENT, f"{self.path} has no decodable content")

        try:
            text = decode_content(content, data.get('encoding'))
        except (ValueError, binascii.Error) as e:
            # UnicodeDecodeError is a ValueError
            return FetchResult.failure(full_name, FetchErrorKind.DECODE, str(e))

        try:
            pkg_data = json.loads(text)
        except json.JSONDecodeError as e:
            return FetchResult.failure(full_name, FetchErrorKind.PARSE, f"invalid JSON in {self.path}: {e}")

        if not isinstance(pkg_data, dict):
            return FetchResult.failure(full_name, FetchErrorKind.PARSE, f"{self.path} is not a JSON object")

        log_debug(f"  {full_name}: parsed {self.path} ({len(text)} bytes)")
        return FetchResult(repo=full_name, manifest=Manifest.from_dict(pkg_data))
