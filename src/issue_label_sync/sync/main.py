"""CLI entrypoint for label reconciliation.

Exit codes:
- 0: the run completed (individual update failures are logged, not fatal)
- 1: the run aborted (fetching issues or labels failed after retries)
- 2: startup error (configuration, credential or mapping document)
- 4: with --strict, at least one issue failed to update
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from issue_label_sync import __version__
from issue_label_sync.sync.config import SyncSettings
from issue_label_sync.sync.labels.mapping import MappingLoadError
from issue_label_sync.sync.labels.resolvers import ResolverFactory
from issue_label_sync.sync.logging import configure_logging
from issue_label_sync.sync.reconciler import LabelReconciler
from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.client import TrackerClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_ABORTED = 1
EXIT_STARTUP_ERROR = 2
EXIT_UPDATES_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="label-sync",
        description="Add canonical system and area labels to tracker issues",
    )
    parser.add_argument(
        "--version", action="version", version=f"issue-label-sync {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Fetch all issues and labels, then add any missing canonical labels",
    )
    reconcile.add_argument(
        "--mode",
        choices=["static", "mapping"],
        default=None,
        help="Label inference mode (overrides LABEL_MODE)",
    )
    reconcile.add_argument(
        "--mapping",
        default=None,
        help="Path to the project label mapping JSON (overrides LABEL_MAPPING_PATH)",
    )
    reconcile.add_argument(
        "--dry-run",
        action="store_true",
        help="Plan and log the updates without sending them",
    )
    reconcile.add_argument(
        "--strict",
        action="store_true",
        help=f"Exit with {EXIT_UPDATES_FAILED} if any issue failed to update",
    )

    return parser


def _apply_overrides(settings: SyncSettings, args: argparse.Namespace) -> SyncSettings:
    update: dict[str, object] = {}
    if args.mode is not None:
        update["label_mode"] = args.mode
    if args.mapping is not None:
        update["label_mapping_path"] = Path(args.mapping)
    return settings.model_copy(update=update) if update else settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SyncSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_STARTUP_ERROR

    settings = _apply_overrides(settings, args)
    configure_logging(settings.log_level)

    if args.command != "reconcile":
        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_STARTUP_ERROR

    try:
        resolver = ResolverFactory.create(settings)
    except MappingLoadError as e:
        logger.error("Label mapping unavailable", extra={"error": str(e)})
        print(str(e), file=sys.stderr)
        return EXIT_STARTUP_ERROR

    tracker = TrackerClient(
        api_key=settings.api_key,
        api_url=settings.api_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    reconciler = LabelReconciler(
        tracker=tracker,
        resolver=resolver,
        retry=RetryPolicy(
            attempts=settings.retry_attempts,
            delay_seconds=settings.retry_delay_seconds,
        ),
        issue_page_size=settings.issue_page_size,
        label_page_size=settings.label_page_size,
        dry_run=args.dry_run,
    )
    try:
        summary = reconciler.run()
    except Exception:
        logger.exception("Reconciliation aborted", extra={"phase": reconciler.phase.value})
        return EXIT_RUN_ABORTED
    finally:
        tracker.close()

    print(
        f"Issues: {summary.issues_total}; planned: {summary.planned}; "
        f"updated: {summary.updated}; failed: {summary.failed}"
        + (" (dry run)" if summary.dry_run else "")
    )
    if args.strict and summary.failed:
        return EXIT_UPDATES_FAILED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
