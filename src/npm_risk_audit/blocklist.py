"""Known-bad npm packages and loading of custom blocklists."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Optional

import yaml

from .errors import BlocklistError
from .models import BlocklistEntry, WILDCARD
from .output import log_debug, log_warn


class Blocklist:
    """Read-only table of package name -> BlocklistEntry."""

    def __init__(self, entries: Iterable[BlocklistEntry] = ()):
        table: dict[str, BlocklistEntry] = {}
        for entry in entries:
            if entry.name in table:
                log_warn(f"Duplicate blocklist entry for {entry.name}, keeping the last one")
            table[entry.name] = entry
        self._entries = MappingProxyType(table)

    def lookup(self, name: str) -> Optional[BlocklistEntry]:
        return self._entries.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_BLOCKLIST = Blocklist([
    BlocklistEntry(
        name='shai-hulud',
        reason='Known Shai-Hulud worm package',
        bad_versions=(WILDCARD,),
    ),
    BlocklistEntry(
        name='@shai-hulud/core',
        reason='Known malicious core worm package',
        bad_versions=(WILDCARD,),
    ),
    BlocklistEntry(
        name='lodash-ts-fixer',
        reason='Typosquat used in Shai-Hulud campaigns',
        bad_versions=(WILDCARD,),
    ),
])


def _parse_entry(raw, index: int, source: str) -> BlocklistEntry:
    if not isinstance(raw, dict):
        raise BlocklistError(f"{source}: entry #{index} is not a mapping")

    name = raw.get('name')
    if not isinstance(name, str) or not name.strip():
        raise BlocklistError(f"{source}: entry #{index} has no package name")

    reason = raw.get('reason') or 'Listed as compromised'
    bad_versions = raw.get('badVersions', raw.get('bad_versions', [WILDCARD]))
    if isinstance(bad_versions, str):
        bad_versions = [bad_versions]
    if not isinstance(bad_versions, list) or not bad_versions:
        raise BlocklistError(f"{source}: entry '{name}' needs a non-empty badVersions list")

    # Keep declaration order, drop repeats
    versions = tuple(dict.fromkeys(str(v).strip() for v in bad_versions))
    return BlocklistEntry(name=name.strip(), reason=str(reason), bad_versions=versions)


def load_blocklist(file_path: str) -> Blocklist:
    """
    Load a blocklist from a JSON or YAML file.

    The document is either a list of entries or a mapping with a `packages`
    list. Each entry looks like:

        {"name": "shai-hulud", "reason": "...", "badVersions": ["*"]}

    `badVersions` defaults to ["*"] (every version is bad).
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding='utf-8')
    except OSError as e:
        raise BlocklistError(f"Could not read blocklist {file_path}: {e}") from e

    try:
        if path.suffix.lower() in ('.yml', '.yaml'):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise BlocklistError(f"Could not parse blocklist {file_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get('packages')
    if not isinstance(data, list):
        raise BlocklistError(f"{file_path}: expected a list of packages")

    entries = [_parse_entry(raw, idx, path.name) for idx, raw in enumerate(data, start=1)]
    log_debug(f"Loaded {len(entries)} blocklist entries from {file_path}")
    return Blocklist(entries)
