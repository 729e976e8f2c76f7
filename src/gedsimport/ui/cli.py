# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from gedsimport.adapters.geds import (
    GedsDownloader,
    collect_geds_documents,
    merge_geds_documents,
)
from gedsimport.app import (
    MAX_URLS_PER_IMPORT,
    RecordCollector,
    fetch_geds_directory,
    import_geds_urls,
)
from gedsimport.config import configure_logging
from gedsimport.domain.errors import GedsImportError
from gedsimport.domain.merge import merge_outcomes

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from gedsimport.domain.model import DirectoryRecords

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import GEDS directory exports")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    download = subparsers.add_parser("download", help="Download one GEDS XML export")
    download.add_argument("url", type=str, help="GEDS profile or XML export URL")
    download.add_argument(
        "--output",
        type=Path,
        required=True,
        help="File the XML export is written to",
    )

    parse = subparsers.add_parser("parse", help="Parse GEDS XML files into import records")
    parse.add_argument("files", type=Path, nargs="+", help="GEDS XML files")
    parse.add_argument(
        "--best-effort",
        action="store_true",
        help="Skip invalid files instead of aborting the whole batch",
    )

    fetch = subparsers.add_parser("fetch", help="Download GEDS URLs and print import records")
    fetch.add_argument(
        "urls",
        type=str,
        nargs="+",
        help=f"GEDS URLs (at most {MAX_URLS_PER_IMPORT})",
    )
    fetch.add_argument(
        "--best-effort",
        action="store_true",
        help="Report failing URLs instead of aborting the whole batch",
    )

    args = parser.parse_args(list(argv))
    if args.command == "fetch" and len(args.urls) > MAX_URLS_PER_IMPORT:
        raise ValueError(f"Maximum {MAX_URLS_PER_IMPORT} URLs allowed per request")
    return args


def _print_records(records: DirectoryRecords) -> None:
    print(json.dumps(records.to_dict(), indent=2, ensure_ascii=False))


def _parse_files(files: Sequence[Path], *, best_effort: bool) -> DirectoryRecords:
    documents = [path.read_text(encoding="utf-8") for path in files]
    if not best_effort:
        return merge_geds_documents(documents)

    outcomes = collect_geds_documents(documents)
    for outcome in outcomes:
        if outcome.error is not None:
            log.warning("Skipping %s: %s", files[outcome.index], outcome.error)
    return merge_outcomes(outcomes)


async def _fetch_best_effort(urls: Sequence[str]) -> DirectoryRecords:
    collector = RecordCollector()
    results = await import_geds_urls(urls, importer=collector)
    for result in results:
        if result.status == "failed":
            log.warning("Skipping %s: %s", result.url, result.error)
    return collector.merged()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "download":
            path = GedsDownloader()(parsed_args.url, parsed_args.output)
            log.info("Saved GEDS export to %s", path)
        elif parsed_args.command == "parse":
            _print_records(_parse_files(parsed_args.files, best_effort=parsed_args.best_effort))
        elif parsed_args.command == "fetch":
            if parsed_args.best_effort:
                records = asyncio.run(_fetch_best_effort(parsed_args.urls))
            else:
                records = asyncio.run(fetch_geds_directory(parsed_args.urls))
            _print_records(records)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except GedsImportError as exc:
        log.error("GEDS import failed: %s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during import")
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
