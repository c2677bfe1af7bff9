"""Decide whether a declared dependency matches a blocklist entry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .blocklist import Blocklist, DEFAULT_BLOCKLIST
from .models import BlocklistEntry
from .semver import is_vulnerable_in_range


class VersionMatcher(ABC):
    """Policy for blocklist entries that list specific bad versions."""

    name = 'abstract'

    @abstractmethod
    def matches(self, version_range: str, bad_versions: tuple[str, ...]) -> bool:
        ...


class AlwaysMatch(VersionMatcher):
    """Any declared version of a listed package is reported."""

    name = 'any version of a listed package'

    def matches(self, version_range: str, bad_versions: tuple[str, ...]) -> bool:
        return True


class RangeIntersects(VersionMatcher):
    """Reported only when a listed bad version falls inside the declared range."""

    name = 'bad version within declared range'

    def matches(self, version_range: str, bad_versions: tuple[str, ...]) -> bool:
        return any(is_vulnerable_in_range(bad, version_range) for bad in bad_versions)


class DependencyMatcher:
    def __init__(
        self,
        blocklist: Blocklist = DEFAULT_BLOCKLIST,
        version_matcher: Optional[VersionMatcher] = None
    ):
        self.blocklist = blocklist
        self.version_matcher = version_matcher or AlwaysMatch()

    def matches(self, name: str, version_range: str) -> Optional[BlocklistEntry]:
        """Return the blocklist entry `name@version_range` hits, or None."""
        entry = self.blocklist.lookup(name)
        if entry is None:
            return None
        if entry.any_version:
            return entry
        if self.version_matcher.matches(version_range, entry.bad_versions):
            return entry
        return None
