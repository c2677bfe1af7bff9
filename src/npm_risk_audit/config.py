"""Run configuration: credential, target user and output options."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .errors import ConfigurationError
from .orchestrator import REPORT_FILENAME


TOKEN_ENV = 'GH_PAT_SH_SCAN'
# Accepted when TOKEN_ENV is unset, in this order
FALLBACK_TOKEN_ENVS = ('GH_TOKEN', 'GITHUB_TOKEN')
USER_ENV = 'SCAN_USER'
DEFAULT_USER = 'des-yogi'


@dataclass(frozen=True)
class Settings:
    token: str
    user: str = DEFAULT_USER
    report_path: str = REPORT_FILENAME
    blocklist_path: Optional[str] = None
    match_ranges: bool = False
    concurrency: int = 1

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from the environment. Fail closed if no token is set."""
        environ = os.environ if environ is None else environ

        token = environ.get(TOKEN_ENV, '').strip()
        if not token:
            for name in FALLBACK_TOKEN_ENVS:
                token = environ.get(name, '').strip()
                if token:
                    break
        if not token:
            raise ConfigurationError(
                f"{TOKEN_ENV} environment variable is required. "
                "Set it to a GitHub personal access token with read access to the user's repositories."
            )

        user = environ.get(USER_ENV, '').strip() or DEFAULT_USER
        return cls(token=token, user=user)

    def with_overrides(self, **overrides) -> Settings:
        """Apply command-line values, ignoring options that were not given."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
