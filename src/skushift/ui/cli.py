from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from skushift.app import (
    list_pending_transactions,
    load_drafts,
    reassign_variants,
    replay_pending_transactions,
)
from skushift.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from skushift.domain.model import Draft
    from skushift.domain.reassignment import ReassignmentResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reassign variants between catalog entries")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reassign = subparsers.add_parser(
        "reassign",
        help="Replay pending transactions, then reassign variants for the given drafts",
    )
    reassign.add_argument(
        "--drafts",
        type=Path,
        required=True,
        help="JSON file holding an array of product drafts",
    )

    subparsers.add_parser("replay", help="Replay transactions left by an interrupted run")
    subparsers.add_parser("pending", help="List pending transaction keys")

    return parser.parse_args(list(argv))


def _log_result(result: ReassignmentResult) -> None:
    stats = result.statistics
    log.info(
        "Reassignment result: processed=%s, skipped=%s, failed=%s, replayed=%s, "
        "backups=%s, type_changes=%s, slug_renames=%s, deleted=%s",
        result.processed_count,
        result.skipped_count,
        len(result.failures),
        stats.replayed,
        stats.backup_entries_created,
        stats.product_type_changes,
        stats.slug_renames,
        stats.donor_entries_deleted,
    )
    for failure in result.failures:
        log.error("Draft %s failed: %s", failure.identity, failure.error)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    drafts: list[Draft] = []
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        if parsed_args.command == "reassign":
            drafts = load_drafts(parsed_args.drafts)
    except (ValueError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reassign":
            result = reassign_variants(drafts)
        elif parsed_args.command == "replay":
            result = replay_pending_transactions()
        elif parsed_args.command == "pending":
            records = list_pending_transactions()
            for record in records:
                log.info(
                    "Pending transaction %s (draft %s, created %s)",
                    record.key,
                    record.new_draft.identity,
                    record.created_at.isoformat(),
                )
            log.info("%s pending transaction(s)", len(records))
            return
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reassignment")
        sys.exit(1)

    _log_result(result)
    if not result.succeeded:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
