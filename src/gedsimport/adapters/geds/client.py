"""Bounded HTTPS downloader for GEDS XML exports."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

import httpx

from gedsimport.adapters.http_resilience import ResilientClient
from gedsimport.config.geds import GedsConfig, get_geds_config
from gedsimport.domain.errors import (
    DownloadCancelledError,
    DownloadTimeoutError,
    FileSizeLimitError,
    NetworkError,
)

from .urls import normalize_geds_url, validate_geds_url

if TYPE_CHECKING:
    import os
    from collections.abc import Awaitable, Callable

    from gedsimport.config.http_resilience import ResilienceConfig
    from gedsimport.domain.cancellation import CancellationToken

log = getLogger(__name__)

REDIRECT_STATUSES: Final[frozenset[int]] = frozenset({301, 302, 307})
_MEBIBYTE: Final[int] = 1024 * 1024


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _megabytes(size: int) -> str:
    return f"{size / _MEBIBYTE:g}"


def _declared_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        log.debug("Ignoring non-numeric Content-Length %r", raw)
        return None


def cleanup_temp_file(path: str | os.PathLike[str]) -> None:
    """Delete ``path`` if possible; never raises."""

    try:
        Path(path).unlink()
    except Exception as exc:  # noqa: BLE001
        log.debug("Could not remove temporary file %s: %s", path, exc)


@dataclass(slots=True)
class GedsDownloader:
    """Fetch one GEDS export to disk under timeout and size limits.

    At most one redirect hop is followed. The declared ``Content-Length`` is
    checked before any body bytes are read and the observed size is checked on
    every chunk; partial files are removed whenever a download fails.
    """

    config: GedsConfig = field(default_factory=get_geds_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(
        self,
        url: str,
        dest_path: str | os.PathLike[str],
        *,
        cancel: CancellationToken | None = None,
    ) -> Path:
        return asyncio.run(self.download(url, dest_path, cancel=cancel))

    async def download(
        self,
        url: str,
        dest_path: str | os.PathLike[str],
        *,
        cancel: CancellationToken | None = None,
    ) -> Path:
        normalized = normalize_geds_url(url)
        validate_geds_url(normalized, allowed_domains=self.config.allowed_domains)
        destination = Path(dest_path)
        if cancel is not None and cancel.is_cancelled():
            raise DownloadCancelledError("Download cancelled")

        await self._run_cancellable(self._download_with_timeout(normalized, destination), cancel)
        log.info("Downloaded GEDS XML from %s to %s", normalized, destination)
        return destination

    async def _run_cancellable(
        self,
        operation: Awaitable[None],
        cancel: CancellationToken | None,
    ) -> None:
        if cancel is None:
            await operation
            return

        task = asyncio.ensure_future(operation)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        if task in done:
            task.result()
            return
        log.info("GEDS download cancelled by caller")
        raise DownloadCancelledError("Download cancelled")

    async def _download_with_timeout(self, url: str, destination: Path) -> None:
        timeout = self.config.timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                await self._download(url, destination)
        except (TimeoutError, httpx.TimeoutException) as exc:
            log.warning("GEDS download from %s timed out after %ss", url, timeout)
            raise DownloadTimeoutError(f"Download timed out after {timeout:g} seconds") from exc

    async def _download(self, url: str, destination: Path) -> None:
        async with self.client_factory(self.config.resilience) as client:
            try:
                async with client.stream("GET", url) as response:
                    if response.status_code not in REDIRECT_STATUSES:
                        await self._handle_response(response, destination)
                        return
                    location = response.headers.get("location")
                    if not location:
                        raise NetworkError(
                            "Redirect without location header",
                            status_code=response.status_code,
                        )
                    target = response.url.join(location)
            except httpx.TimeoutException:
                raise
            except httpx.HTTPError as exc:
                raise NetworkError(f"Download failed: {exc}") from exc

            # Single hop only: a second redirect is handled as a terminal response.
            log.info("Following redirect from %s to %s", url, target)
            try:
                async with client.stream("GET", target) as response:
                    await self._handle_response(response, destination)
            except httpx.TimeoutException:
                raise
            except httpx.HTTPError as exc:
                raise NetworkError(f"Redirect failed: {exc}") from exc

    async def _handle_response(self, response: httpx.Response, destination: Path) -> None:
        if response.status_code != httpx.codes.OK:
            raise NetworkError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        max_bytes = self.config.max_bytes
        declared = _declared_length(response)
        if declared is not None and declared > max_bytes:
            raise FileSizeLimitError(
                f"File size ({declared / _MEBIBYTE:.2f}MB) exceeds limit of "
                f"{_megabytes(max_bytes)}MB"
            )

        await self._stream_to_file(response, destination)

    async def _stream_to_file(self, response: httpx.Response, destination: Path) -> None:
        max_bytes = self.config.max_bytes
        received = 0
        try:
            with destination.open("wb") as handle:
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > max_bytes:
                        log.warning(
                            "Aborting GEDS download after %s bytes (limit %s)", received, max_bytes
                        )
                        raise FileSizeLimitError(
                            f"File size exceeds limit of {_megabytes(max_bytes)}MB during download"
                        )
                    handle.write(chunk)
        except httpx.TimeoutException:
            cleanup_temp_file(destination)
            raise
        except (httpx.HTTPError, OSError) as exc:
            cleanup_temp_file(destination)
            raise NetworkError(f"Download failed: {exc}") from exc
        except BaseException:
            # Size limit, timeout and cancellation unwind through here.
            cleanup_temp_file(destination)
            raise
        log.debug("Wrote %s bytes to %s", received, destination)
