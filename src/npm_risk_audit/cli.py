"""Command-line interface for the auditor."""

from __future__ import annotations

import argparse
import asyncio
import shutil
import sys
from typing import Optional

from .auditor import RepositoryAuditor
from .blocklist import DEFAULT_BLOCKLIST, load_blocklist
from .config import Settings, TOKEN_ENV, USER_ENV
from .errors import AuditError, ConfigurationError
from .github import GitHubClient
from .matcher import AlwaysMatch, DependencyMatcher, RangeIntersects
from .orchestrator import FleetOrchestrator, REPORT_FILENAME
from .output import log_error, log_info, log_warn, print_header, print_summary, set_debug


def check_prerequisites():
    """Check that the GitHub CLI is available."""
    if not shutil.which('gh'):
        raise ConfigurationError(
            "GitHub CLI (gh) is required but not installed. "
            "Install it from: https://cli.github.com/"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='npm-risk-audit',
        description=(
            "Audit a GitHub user's repositories for npm install hooks and "
            "known compromised dependencies"
        ),
        epilog=f"The token is read from {TOKEN_ENV}; the default user from {USER_ENV}."
    )
    parser.add_argument(
        '-u', '--user',
        help=f'GitHub user whose repositories are scanned (default: ${USER_ENV} or built-in default)'
    )
    parser.add_argument(
        '-o', '--output',
        help=f'Report file to write (default: {REPORT_FILENAME} in the current directory)'
    )
    parser.add_argument(
        '-b', '--blocklist',
        help='JSON or YAML file with compromised packages (default: built-in list)'
    )
    parser.add_argument(
        '--match-ranges',
        action='store_true',
        default=None,
        help='For entries with specific bad versions, only report ranges that can resolve to one of them'
    )
    parser.add_argument(
        '-c', '--concurrency',
        type=int,
        help='Number of repositories fetched in parallel (default: 1)'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        help='Enable debug output'
    )
    return parser


async def async_main(settings: Settings) -> int:
    """Async entry point."""
    blocklist = load_blocklist(settings.blocklist_path) if settings.blocklist_path else DEFAULT_BLOCKLIST
    version_matcher = RangeIntersects() if settings.match_ranges else AlwaysMatch()
    auditor = RepositoryAuditor(DependencyMatcher(blocklist, version_matcher))

    print_header(settings.user, len(blocklist), version_matcher.name, settings.report_path)
    log_info(f"Scanning user: {settings.user}")

    orchestrator = FleetOrchestrator(
        GitHubClient(settings.token),
        auditor,
        concurrency=settings.concurrency
    )
    report = await orchestrator.run(settings.user, settings.report_path)

    print_summary(report)
    # Findings are informational; they do not fail the run
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    if args.debug:
        set_debug(True)

    try:
        settings = Settings.from_env().with_overrides(
            user=args.user,
            report_path=args.output,
            blocklist_path=args.blocklist,
            match_ranges=args.match_ranges,
            concurrency=args.concurrency,
        )
        if settings.concurrency < 1:
            raise ConfigurationError("--concurrency must be at least 1")
        check_prerequisites()
    except ConfigurationError as e:
        log_error(str(e))
        return 1

    try:
        return asyncio.run(async_main(settings))
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        log_warn("Scan interrupted.")
        return 130
    except AuditError as e:
        log_error(f"Fatal scanner error: {e}")
        return 1
    except Exception as e:
        log_error(f"Fatal scanner error: {type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
