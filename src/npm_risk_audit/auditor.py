"""Audit a single package.json for risky hooks and blocklisted dependencies."""

from __future__ import annotations

from typing import Optional

from .matcher import DependencyMatcher
from .models import (
    CompromisedDependencyFinding,
    DEPENDENCY_SECTIONS,
    Finding,
    LIFECYCLE_HOOKS,
    LifecycleScriptFinding,
    Manifest,
)


class RepositoryAuditor:
    def __init__(self, matcher: Optional[DependencyMatcher] = None):
        self.matcher = matcher or DependencyMatcher()

    def find_lifecycle_scripts(self, repo: str, manifest: Manifest) -> Optional[LifecycleScriptFinding]:
        """Bundle every install-time hook with a non-empty body into one finding."""
        hooks = {
            hook: manifest.scripts[hook]
            for hook in LIFECYCLE_HOOKS
            if manifest.scripts.get(hook)
        }
        if not hooks:
            return None
        return LifecycleScriptFinding(repo=repo, scripts=hooks)

    def find_compromised_dependencies(self, repo: str, manifest: Manifest) -> list[CompromisedDependencyFinding]:
        findings = []
        for section in DEPENDENCY_SECTIONS:
            deps = manifest.sections.get(section)
            if not deps:
                continue
            for name, version_range in deps.items():
                entry = self.matcher.matches(name, version_range)
                if entry is None:
                    continue
                findings.append(CompromisedDependencyFinding(
                    repo=repo,
                    section=section,
                    name=name,
                    version_range=version_range,
                    reason=entry.reason,
                    bad_versions=entry.bad_versions,
                ))
        return findings

    def audit(self, repo: str, manifest: Optional[Manifest]) -> list[Finding]:
        """
        Return the findings for one repository's manifest.
        Lifecycle finding first, then dependency findings in section order.
        """
        if manifest is None:
            return []

        findings: list[Finding] = []
        lifecycle = self.find_lifecycle_scripts(repo, manifest)
        if lifecycle:
            findings.append(lifecycle)
        findings.extend(self.find_compromised_dependencies(repo, manifest))
        return findings
