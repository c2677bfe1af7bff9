"""Semantic version range checking for npm dependency specifiers."""

from __future__ import annotations

import operator
import re
from typing import Optional


Version = tuple[int, int, int]

_VERSION_RE = re.compile(r'^v?=?\s*(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?')

_COMPARATORS = [
    ('>=', operator.ge),
    ('<=', operator.le),
    ('>', operator.gt),
    ('<', operator.lt),
    ('=', operator.eq),
]

# Specifiers that do not name a registry version (git, tarballs, local paths, aliases)
_NON_REGISTRY_PREFIXES = (
    'git', 'http:', 'https:', 'file:', 'link:', 'npm:', 'workspace:', 'github:',
)


def parse_version(version: str) -> Optional[Version]:
    """
    Parse a version string into a (major, minor, patch) tuple.
    Missing or wildcard parts become 0. Returns None if nothing numeric leads.

    Examples:
        "1.2.3" -> (1, 2, 3)
        "v1.2" -> (1, 2, 0)
        "1.2.3-beta.1" -> (1, 2, 3)
    """
    match = _VERSION_RE.match(version.strip())
    if not match or not match.group(1).isdigit():
        return None
    return tuple(
        int(part) if part and part.isdigit() else 0
        for part in match.groups()
    )


def _wildcard_depth(spec: str) -> Optional[int]:
    """Number of leading fixed parts in an x-range ("1.x" -> 1), None if not an x-range."""
    parts = spec.lstrip('v=').split('.')
    for idx, part in enumerate(parts[:3]):
        if part in ('x', 'X', '*'):
            return idx
    if len(parts) < 3 and all(p.isdigit() for p in parts):
        # "1" and "1.2" are partial versions, treated like "1.x" and "1.2.x"
        return len(parts)
    return None


def _fixed_parts(spec: str) -> int:
    """How many leading parts of `spec` are pinned (3 for a full version)."""
    depth = _wildcard_depth(spec)
    return 3 if depth is None else depth


def _bump(ver: Version, idx: int) -> Version:
    """Smallest version above every version sharing `ver[:idx + 1]`."""
    return ver[:idx] + (ver[idx] + 1,) + (0,) * (2 - idx)


def _compare_partial(ver: Version, op: str, spec: str) -> bool:
    """Comparison against a possibly partial version ("<=1.2" means "<1.3.0")."""
    fixed = _fixed_parts(spec)
    if fixed == 0:
        # "<=*", ">=x" and "=*" allow anything, "<*" and ">*" nothing
        return op in ('>=', '<=', '=')
    target = parse_version(spec)
    if not target:
        return False
    if fixed == 3:
        return dict(_COMPARATORS)[op](ver, target)

    upper = _bump(target, fixed - 1)
    if op == '>=':
        return ver >= target
    if op == '<':
        return ver < target
    if op == '<=':
        return ver < upper
    if op == '>':
        return ver >= upper
    return target <= ver < upper


def _satisfies_comparator(ver: Version, comparator: str) -> bool:
    comparator = comparator.strip()
    if comparator in ('', '*', 'x', 'X'):
        return True

    if comparator.startswith('^'):
        spec = comparator[1:]
        fixed = _fixed_parts(spec)
        if fixed == 0:
            return True
        low = parse_version(spec)
        if not low:
            return False
        # Bump the left-most non-zero pinned part, else the last pinned one
        idx = next((i for i in range(fixed) if low[i] != 0), fixed - 1)
        return low <= ver < _bump(low, idx)

    if comparator.startswith('~'):
        spec = comparator[1:].lstrip('>')
        fixed = _fixed_parts(spec)
        if fixed == 0:
            return True
        low = parse_version(spec)
        if not low:
            return False
        # ~1 := >=1.0.0 <2.0.0, ~1.2.3 := >=1.2.3 <1.3.0
        return low <= ver < _bump(low, 0 if fixed == 1 else 1)

    for prefix, _ in _COMPARATORS:
        if comparator.startswith(prefix):
            return _compare_partial(ver, prefix, comparator[len(prefix):])

    return _compare_partial(ver, '=', comparator)


def version_satisfies_range(version: str, range_spec: str) -> bool:
    """
    Check if a concrete version satisfies an npm range specifier.

    Supported: exact ("1.2.3"), caret ("^1.2.3"), tilde ("~1.2.3"),
    comparisons (">=1.2.3 <2.0.0"), x-ranges ("1.x", "1.2.*", "*"),
    hyphen ranges ("1.2.3 - 2.3.4") and unions ("1.x || 3.x").
    """
    range_spec = range_spec.strip()
    ver = parse_version(version)
    if not ver:
        # Not a semver version: only an identical specifier matches
        return version.strip() == range_spec

    if range_spec in ('', '*', 'x', 'X'):
        return True

    if '||' in range_spec:
        return any(
            version_satisfies_range(version, part)
            for part in range_spec.split('||')
        )

    if ' - ' in range_spec:
        low_spec, high_spec = (p.strip() for p in range_spec.split(' - ', 1))
        low = parse_version(low_spec)
        high = parse_version(high_spec)
        if not low or not high:
            return False
        return low <= ver and _satisfies_comparator(ver, f"<={high_spec}")

    # Space separated comparators must all hold; ">= 1.2.3" is glued back first
    glued = re.sub(r'([<>=^~]+)\s+', r'\1', range_spec)
    return all(_satisfies_comparator(ver, part) for part in glued.split())


def is_registry_range(range_spec: str) -> bool:
    """False for dist-tags ("latest") and non-registry specifiers (git URLs, files)."""
    spec = range_spec.strip()
    if spec.startswith(_NON_REGISTRY_PREFIXES) or '/' in spec:
        return False
    if spec in ('', '*', 'x', 'X'):
        return True
    return bool(re.match(r'^[\^~<>=v\d*xX]', spec))


def is_vulnerable_in_range(vulnerable_version: str, package_range: str) -> bool:
    """
    Check if a known bad version could be installed given a package.json range.

    Dist-tags and non-registry specifiers cannot be resolved offline, so they
    are reported as possibly vulnerable.
    """
    if not is_registry_range(package_range):
        return True
    return version_satisfies_range(vulnerable_version, package_range)
