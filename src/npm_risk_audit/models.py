"""Data models for blocklist entries, manifests, findings and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


WILDCARD = '*'

# Hooks npm runs automatically during `npm install`, in execution order
LIFECYCLE_HOOKS = ('preinstall', 'install', 'postinstall', 'prepare')

DEPENDENCY_SECTIONS = (
    'dependencies',
    'devDependencies',
    'peerDependencies',
    'optionalDependencies',
)


@dataclass(frozen=True)
class BlocklistEntry:
    name: str
    reason: str
    bad_versions: tuple[str, ...] = (WILDCARD,)

    @property
    def any_version(self) -> bool:
        return WILDCARD in self.bad_versions


@dataclass(frozen=True)
class RepoDescriptor:
    """A repository as returned by the GitHub repository listing."""
    full_name: str
    owner: str
    name: str
    archived: bool = False
    fork: bool = False

    @property
    def skip_reason(self) -> Optional[str]:
        if self.archived and self.fork:
            return 'archived fork'
        if self.archived:
            return 'archived'
        if self.fork:
            return 'fork'
        return None

    @classmethod
    def from_dict(cls, data: dict) -> RepoDescriptor:
        owner = (data.get('owner') or {}).get('login', '')
        name = data.get('name', '')
        return cls(
            full_name=data.get('full_name') or f"{owner}/{name}",
            owner=owner,
            name=name,
            archived=bool(data.get('archived', False)),
            fork=bool(data.get('fork', False)),
        )


@dataclass
class Manifest:
    """The parts of a package.json the auditor looks at."""
    scripts: dict[str, str] = field(default_factory=dict)
    sections: dict[str, dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Manifest:
        scripts = data.get('scripts')
        if not isinstance(scripts, dict):
            scripts = {}

        sections: dict[str, dict[str, str]] = {}
        for section in DEPENDENCY_SECTIONS:
            deps = data.get(section)
            if not isinstance(deps, dict):
                continue
            sections[section] = {
                name: version
                for name, version in deps.items()
                if isinstance(version, str)
            }

        return cls(
            scripts={k: v for k, v in scripts.items() if isinstance(v, str)},
            sections=sections,
        )


@dataclass(frozen=True)
class LifecycleScriptFinding:
    repo: str
    scripts: dict[str, str]

    type = 'lifecycle-script'

    def describe(self) -> list[str]:
        lines = ['[scripts]']
        for hook, body in self.scripts.items():
            lines.append(f"  - {hook}: {body}")
        return lines

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'repo': self.repo,
            'details': {
                'scripts': dict(self.scripts),
            },
        }


@dataclass(frozen=True)
class CompromisedDependencyFinding:
    repo: str
    section: str
    name: str
    version_range: str
    reason: str
    bad_versions: tuple[str, ...]

    type = 'compromised-dependency'

    def describe(self) -> list[str]:
        bad = ', '.join(self.bad_versions)
        return [
            f"[dependency] {self.section}: {self.name}@{self.version_range}"
            f" - {self.reason} (bad={bad})"
        ]

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'repo': self.repo,
            'details': {
                'section': self.section,
                'name': self.name,
                'versionRange': self.version_range,
                'reason': self.reason,
                'badVersions': list(self.bad_versions),
            },
        }


Finding = Union[LifecycleScriptFinding, CompromisedDependencyFinding]


@dataclass
class ScanReport:
    user: str
    findings: list = field(default_factory=list)
    total_repos: int = 0
    scanned_repos: int = 0
    skipped_repos: int = 0
    missing_manifests: int = 0
    failed_fetches: int = 0
    report_path: Optional[str] = None

    def affected_repositories(self) -> dict[str, int]:
        """Finding count per repository, in first-seen order."""
        counts: dict[str, int] = {}
        for finding in self.findings:
            counts[finding.repo] = counts.get(finding.repo, 0) + 1
        return counts
