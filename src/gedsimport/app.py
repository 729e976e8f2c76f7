"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from gedsimport.adapters.geds import (
    GedsDownloader,
    cleanup_temp_file,
    merge_geds_documents,
    parse_geds_xml,
)
from gedsimport.config.storage import get_storage_config
from gedsimport.domain.errors import (
    DownloadCancelledError,
    DownloadTimeoutError,
    FileSizeLimitError,
    GedsImportError,
    InvalidUrlError,
    NetworkError,
    ParseError,
)
from gedsimport.domain.merge import merge_records
from gedsimport.domain.ports.importing import ImportStats

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from gedsimport.config.storage import StorageConfig
    from gedsimport.domain.cancellation import CancellationToken
    from gedsimport.domain.model import DirectoryRecords
    from gedsimport.domain.ports.importing import DirectoryImporter

log = getLogger(__name__)

MAX_URLS_PER_IMPORT = 10


@dataclass(slots=True, frozen=True)
class UrlImportResult:
    """Outcome of importing a single GEDS URL."""

    url: str
    status: Literal["success", "failed"]
    message: str
    stats: ImportStats | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"url": self.url, "status": self.status, "message": self.message}
        if self.stats is not None:
            data["stats"] = {
                "departments": self.stats.departments,
                "people": self.stats.people_created,
                "departmentsCreated": self.stats.departments_created,
                "departmentsReused": self.stats.departments_reused,
                "peopleCreated": self.stats.people_created,
                "peopleSkipped": self.stats.people_skipped,
            }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class RecordCollector:
    """In-memory importer that keeps every batch it is handed."""

    batches: list[DirectoryRecords] = field(default_factory=list)

    def __call__(self, records: DirectoryRecords) -> ImportStats:
        self.batches.append(records)
        return ImportStats(
            departments_created=len(records.departments),
            people_created=len(records.people),
        )

    def merged(self) -> DirectoryRecords:
        return merge_records(self.batches)


def describe_import_error(exc: Exception) -> str:
    """User-facing message for a failed URL import."""

    if isinstance(exc, InvalidUrlError):
        return str(exc)
    if isinstance(exc, DownloadTimeoutError):
        return "Download timed out"
    if isinstance(exc, FileSizeLimitError):
        return "File too large"
    if isinstance(exc, DownloadCancelledError):
        return "Download cancelled"
    if isinstance(exc, NetworkError):
        return f"Network error: {exc}"
    if isinstance(exc, ParseError):
        return f"Parse error: {exc}"
    return str(exc) or "Unknown error"


def _check_url_count(urls: Sequence[str]) -> None:
    if not urls:
        raise ValueError("No URLs provided")
    if len(urls) > MAX_URLS_PER_IMPORT:
        raise ValueError(f"Maximum {MAX_URLS_PER_IMPORT} URLs allowed per request")


def _read_document(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"Invalid GEDS XML: {exc}") from exc


async def import_geds_urls(
    urls: Sequence[str],
    *,
    importer: DirectoryImporter,
    downloader: GedsDownloader | None = None,
    storage: StorageConfig | None = None,
    cancel: CancellationToken | None = None,
) -> list[UrlImportResult]:
    """Download, parse and import each URL in turn, reporting per-URL results.

    A failing URL does not stop the batch; cancellation does. Staged downloads
    are always removed.
    """

    _check_url_count(urls)
    effective_downloader = downloader or GedsDownloader()
    storage_config = storage or get_storage_config()
    log.info("Starting GEDS URL import: urls=%s", len(urls))

    results: list[UrlImportResult] = []
    for index, url in enumerate(urls):
        temp_file = storage_config.download_path(index)
        log.info("Processing GEDS URL %s/%s: %s", index + 1, len(urls), url)
        try:
            await effective_downloader.download(url, temp_file, cancel=cancel)
            parsed = parse_geds_xml(_read_document(temp_file))
            log.info(
                "Parsed GEDS XML: url=%s, departments=%s, people=%s",
                url,
                len(parsed.departments),
                len(parsed.people),
            )
            stats = importer(parsed)
            log.info("Imported GEDS data: url=%s, stats=%s", url, stats)
            results.append(
                UrlImportResult(
                    url=url,
                    status="success",
                    message="Imported successfully",
                    stats=stats,
                )
            )
        except DownloadCancelledError as exc:
            results.append(_failed(url, exc))
            break
        except GedsImportError as exc:
            results.append(_failed(url, exc))
        except Exception as exc:  # noqa: BLE001
            log.exception("Importer failed for GEDS URL %s", url)
            results.append(_failed(url, exc))
        finally:
            cleanup_temp_file(temp_file)

    succeeded = sum(1 for result in results if result.status == "success")
    log.info(
        "GEDS URL import complete: total=%s, success=%s, failed=%s",
        len(urls),
        succeeded,
        len(results) - succeeded,
    )
    return results


async def fetch_geds_directory(
    urls: Sequence[str],
    *,
    downloader: GedsDownloader | None = None,
    storage: StorageConfig | None = None,
    cancel: CancellationToken | None = None,
) -> DirectoryRecords:
    """Download every URL and merge the exports, failing on the first error."""

    _check_url_count(urls)
    effective_downloader = downloader or GedsDownloader()
    storage_config = storage or get_storage_config()

    staged: list[Path] = []
    try:
        for index, url in enumerate(urls):
            temp_file = storage_config.download_path(index)
            staged.append(temp_file)
            await effective_downloader.download(url, temp_file, cancel=cancel)
        documents = [_read_document(path) for path in staged]
    finally:
        for path in staged:
            cleanup_temp_file(path)

    return merge_geds_documents(documents)


def _failed(url: str, exc: Exception) -> UrlImportResult:
    message = describe_import_error(exc)
    log.error("GEDS URL import failed: url=%s, error=%s (%s)", url, message, type(exc).__name__)
    return UrlImportResult(url=url, status="failed", message="Import failed", error=message)
