"""Error taxonomy for the audit run."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuditError(Exception):
    """Base class for errors raised by the auditor."""


class ConfigurationError(AuditError):
    """Required configuration is missing or invalid."""


class BlocklistError(AuditError):
    """A blocklist file could not be read or is malformed."""


class GitHubAPIError(AuditError):
    """A `gh api` call exited with an error."""

    def __init__(self, endpoint: str, message: str, status: Optional[int] = None):
        self.endpoint = endpoint
        self.status = status
        self.message = message
        super().__init__(f"{endpoint}: {message}")

    @classmethod
    def from_stderr(cls, endpoint: str, stderr: str) -> GitHubAPIError:
        """Pick the matching subclass from the `(HTTP nnn)` suffix gh prints."""
        message = stderr.strip() or 'gh api failed'
        match = re.search(r'HTTP (\d{3})', message)
        status = int(match.group(1)) if match else None
        if status == 404:
            return NotFoundError(endpoint, message, status)
        if status == 401:
            return AuthenticationError(endpoint, message, status)
        return cls(endpoint, message, status)


class NotFoundError(GitHubAPIError):
    """The requested resource does not exist (HTTP 404)."""


class AuthenticationError(GitHubAPIError):
    """The token was rejected (HTTP 401)."""


class EnumerationError(AuditError):
    """Listing the user's repositories failed."""


class FetchErrorKind(Enum):
    NOT_FOUND = 'not-found'
    NO_CONTENT = 'no-content'
    DECODE = 'decode'
    PARSE = 'parse'
    TRANSPORT = 'transport'


@dataclass(frozen=True)
class FetchError:
    """Why a manifest could not be produced for a repository."""
    kind: FetchErrorKind
    repo: str
    message: str = ''

    @property
    def expected(self) -> bool:
        """True for outcomes that just mean "nothing to audit here"."""
        return self.kind in (FetchErrorKind.NOT_FOUND, FetchErrorKind.NO_CONTENT)
