# ruff: noqa: T201

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from signal import SIGINT, getsignal, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from bizname.app import import_path, latest_sync_runs, search_name
from bizname.config import ConfigurationError, configure_logging, get_ingest_config
from bizname.domain.ingest_pipeline import CancellationToken
from bizname.domain.model import RecordKind, RunType, SyncStatus
from bizname.domain.naming import validate_name_format
from bizname.domain.normalization import normalize

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from bizname.domain.model import SyncRun
    from bizname.domain.search import SearchResult

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {parsed}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import business-name extracts and check name availability"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser(
        "import", help="Ingest a fixed-width extract file or directory"
    )
    importer.add_argument("kind", choices=[kind.value for kind in RecordKind], help="Record kind")
    importer.add_argument("path", type=Path, help="Extract file, or a directory of extract files")
    importer.add_argument(
        "--run-type",
        choices=[run_type.value for run_type in RunType],
        default=RunType.FULL.value,
        help="Whether the extract is a full snapshot or an incremental delta",
    )
    importer.add_argument(
        "--workers",
        type=_positive_int,
        help="Number of concurrent upsert workers (defaults to config)",
    )
    importer.add_argument(
        "--batch-size",
        type=_positive_int,
        help="Records per upsert transaction (defaults to config)",
    )

    search = subparsers.add_parser("search", help="Check whether a business name is available")
    search.add_argument("name", help="Business name to check")
    search.add_argument(
        "--entity-type",
        type=str,
        help="Planned entity type (e.g. LLC, CORPORATION) used for suggestions",
    )

    normalize_cmd = subparsers.add_parser("normalize", help="Print the normalized name key")
    normalize_cmd.add_argument("name", help="Business name to normalize")

    subparsers.add_parser("status", help="Show the latest sync run per record kind")

    return parser.parse_args(list(argv))


def _run_import(args: argparse.Namespace) -> int:
    config = get_ingest_config()
    overrides = {
        key: value
        for key, value in (("workers", args.workers), ("batch_size", args.batch_size))
        if value is not None
    }
    config = dataclasses.replace(config, **overrides)

    token = CancellationToken()

    def _cancel(_signal_received: int, _frame: FrameType | None) -> None:
        log.warning("Cancellation requested; finishing in-flight batches")
        token.cancel()

    previous_handler = getsignal(SIGINT)
    signal(SIGINT, _cancel)
    try:
        runs = import_path(
            RecordKind(args.kind),
            args.path,
            run_type=RunType(args.run_type),
            config=config,
            cancel=token,
        )
    finally:
        signal(SIGINT, previous_handler)

    if not runs:
        log.error("Nothing imported from %s", args.path)
        return EXIT_FAILED
    for run in runs:
        print(_describe_run(run))
    if all(run.status is SyncStatus.COMPLETED for run in runs):
        return EXIT_OK
    return EXIT_FAILED


def _run_search(args: argparse.Namespace) -> int:
    validation = validate_name_format(args.name)
    for error in validation.errors:
        print(f"warning: {error}")
    result = search_name(args.name, entity_type=args.entity_type)
    print(_describe_search(result))
    return EXIT_OK


def _run_status() -> int:
    threshold = timedelta(hours=get_ingest_config().stall_hours)
    latest = latest_sync_runs()
    now = datetime.now(UTC)
    for kind in RecordKind:
        run = latest.get(kind)
        if run is None:
            print(f"{kind}: no sync runs")
            continue
        stalled = " STALLED" if run.is_stalled(now=now, threshold=threshold) else ""
        print(f"{_describe_run(run)}{stalled}")
    return EXIT_OK


def _describe_run(run: SyncRun) -> str:
    finished = run.completed_at.isoformat() if run.completed_at else "-"
    line = (
        f"{run.kind}: {run.status} ({run.run_type}) source={run.source_path} "
        f"processed={run.processed} added={run.added} parse_errors={run.parse_errors} "
        f"store_errors={run.store_errors} started={run.started_at.isoformat()} "
        f"finished={finished}"
    )
    if run.error_message:
        line = f"{line} error={run.error_message!r}"
    return line


def _describe_search(result: SearchResult) -> str:
    if result.undetermined:
        verdict = "UNKNOWN"
    else:
        verdict = "AVAILABLE" if result.available else "NOT AVAILABLE"
    lines = [f"{result.query!r} (key {result.normalized_query!r}): {verdict}"]
    for match in result.matches:
        filed = match.relevant_date.isoformat() if match.relevant_date else "-"
        exact = " exact" if match.exact else ""
        lines.append(
            f"  {match.kind} {match.document_number} {match.name} "
            f"[{match.status_label}] filed={filed}{exact}"
        )
    if result.unavailable_kinds:
        skipped = ", ".join(str(kind) for kind in result.unavailable_kinds)
        lines.append(f"  not checked: {skipped}")
    if result.suggestions:
        lines.append("  suggestions: " + "; ".join(result.suggestions))
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "import":
            code = _run_import(parsed_args)
        elif parsed_args.command == "search":
            code = _run_search(parsed_args)
        elif parsed_args.command == "normalize":
            print(normalize(parsed_args.name))
            code = EXIT_OK
        elif parsed_args.command == "status":
            code = _run_status()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILED)

    if code != EXIT_OK:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point: load .env, then run the CLI."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
