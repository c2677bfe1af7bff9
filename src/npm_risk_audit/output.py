"""Console output and logging helpers."""

from __future__ import annotations

import sys

# Global debug flag
DEBUG = False


def set_debug(enabled: bool):
    global DEBUG
    DEBUG = enabled


class Colors:
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    CYAN = '\033[0;36m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    NC = '\033[0m'


RULE = "════════════════════════════════════════════════════════════"


def log_info(msg: str):
    print(f"{Colors.GREEN}[INFO]{Colors.NC} {msg}", file=sys.stderr)


def log_warn(msg: str):
    print(f"{Colors.YELLOW}[WARN]{Colors.NC} {msg}", file=sys.stderr)


def log_error(msg: str):
    print(f"{Colors.RED}[ERROR]{Colors.NC} {msg}", file=sys.stderr)


def log_debug(msg: str):
    if DEBUG:
        print(f"{Colors.DIM}[DEBUG]{Colors.NC} {msg}", file=sys.stderr)


def log_scan(repo: str):
    print(f"{Colors.CYAN}[SCAN]{Colors.NC} {repo}", file=sys.stderr)


def log_skip(repo: str, reason: str):
    print(f"{Colors.DIM}[SKIP]{Colors.NC} {repo} ({reason})", file=sys.stderr)


def log_clean(repo: str):
    print(f"  {Colors.GREEN}[OK]{Colors.NC} {repo}: nothing suspicious found", file=sys.stderr)


def log_findings(repo: str, findings: list):
    """Print the per-finding breakdown for one repository."""
    print(
        f"  {Colors.RED}{Colors.BOLD}[WARN]{Colors.NC} {repo}: "
        f"{len(findings)} finding(s)",
        file=sys.stderr
    )
    for finding in findings:
        for line in finding.describe():
            print(f"    {line}", file=sys.stderr)


def print_header(user: str, blocklist_size: int, matcher: str, output_file: str):
    print("")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")
    print(f"{Colors.BOLD}  NPM RISK AUDIT{Colors.NC}")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")
    print(f"  User:            {Colors.CYAN}{user}{Colors.NC}")
    print(f"  Blocklist:       {Colors.CYAN}{blocklist_size} package(s){Colors.NC}")
    print(f"  Version policy:  {Colors.CYAN}{matcher}{Colors.NC}")
    print(f"  Output:          {Colors.CYAN}{output_file}{Colors.NC}")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")
    print("")


def print_summary(report):
    print("")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")
    print(f"{Colors.BOLD}  SUMMARY{Colors.NC}")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")
    print(f"  Repositories:           {Colors.CYAN}{report.total_repos}{Colors.NC}")
    print(f"  Scanned:                {Colors.CYAN}{report.scanned_repos}{Colors.NC}")
    print(f"  Skipped:                {Colors.CYAN}{report.skipped_repos}{Colors.NC}")
    print(f"  Without package.json:   {Colors.CYAN}{report.missing_manifests}{Colors.NC}")
    if report.failed_fetches:
        print(f"  Fetch errors:           {Colors.YELLOW}{report.failed_fetches}{Colors.NC}")
    print(f"  Total findings:         {Colors.RED}{Colors.BOLD}{len(report.findings)}{Colors.NC}")
    print(f"  Report saved to:        {report.report_path}")
    print(f"{Colors.BOLD}{RULE}{Colors.NC}")

    affected = report.affected_repositories()
    if affected:
        print("")
        print(f"{Colors.BOLD}Affected Repositories:{Colors.NC}")
        for repo, count in affected.items():
            print(f"  ⚠️  {repo} - {count} finding(s)")

    print("")
