"""Drive the audit over every repository of a user and persist the report."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from .auditor import RepositoryAuditor
from .errors import FetchErrorKind
from .fetcher import FetchResult, ManifestFetcher
from .models import RepoDescriptor, ScanReport
from .output import log_clean, log_debug, log_error, log_findings, log_info, log_scan, log_skip


REPORT_FILENAME = 'scan-report.json'


def write_report(findings: list, file_path: str) -> str:
    """Write findings as a pretty-printed JSON array. Returns the resolved path."""
    path = Path(file_path).resolve()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([finding.to_dict() for finding in findings], f, indent=2, ensure_ascii=False)
        f.write('\n')
    return str(path)


class FleetOrchestrator:
    """Enumerate -> filter -> fetch -> audit -> aggregate, in listing order."""

    def __init__(
        self,
        client,
        auditor: RepositoryAuditor,
        fetcher: ManifestFetcher = None,
        concurrency: int = 1
    ):
        self.client = client
        self.auditor = auditor
        self.fetcher = fetcher or ManifestFetcher(client)
        self.concurrency = max(1, concurrency)
        self.semaphore = asyncio.Semaphore(self.concurrency)

    async def _fetch(self, repo: RepoDescriptor) -> FetchResult:
        async with self.semaphore:
            return await self.fetcher.fetch(repo.owner, repo.name)

    def _record(self, report: ScanReport, repo: RepoDescriptor, result: FetchResult):
        """Log the outcome for one repository and append its findings."""
        if result.error is not None:
            if result.error.kind is FetchErrorKind.NOT_FOUND:
                report.missing_manifests += 1
                log_info(f"{repo.full_name}: package.json not found, skipping")
            elif result.error.expected:
                report.missing_manifests += 1
                log_info(f"{repo.full_name}: {result.error.message}, skipping")
            else:
                report.failed_fetches += 1
                log_error(f"Could not read package.json for {repo.full_name}: {result.error.message}")
            return

        findings = self.auditor.audit(repo.full_name, result.manifest)
        if not findings:
            log_clean(repo.full_name)
            return

        log_findings(repo.full_name, findings)
        report.findings.extend(findings)

    async def run(self, user: str, report_path: str = REPORT_FILENAME) -> ScanReport:
        report = ScanReport(user=user)

        # Enumeration errors are not recovered here
        repos = await self.client.list_user_repos(user)
        report.total_repos = len(repos)
        log_info(f"Total repositories for {user}: {len(repos)}")

        # Fetches may overlap up to `concurrency`; results are consumed in listing order
        tasks: dict[str, asyncio.Task] = {}
        for repo in repos:
            if repo.skip_reason is None:
                tasks[repo.full_name] = asyncio.ensure_future(self._fetch(repo))

        try:
            for repo in repos:
                if repo.skip_reason is not None:
                    report.skipped_repos += 1
                    log_skip(repo.full_name, repo.skip_reason)
                    continue

                log_scan(repo.full_name)
                report.scanned_repos += 1
                result = await tasks[repo.full_name]
                self._record(report, repo, result)
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
            # Collect outcomes of tasks that failed while the run was aborting
            await asyncio.gather(*tasks.values(), return_exceptions=True)

        report.report_path = write_report(report.findings, report_path)
        log_debug(f"Wrote {len(report.findings)} findings to {report.report_path}")
        return report
