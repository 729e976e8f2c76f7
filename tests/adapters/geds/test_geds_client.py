"""Bounded download behaviour against a mocked GEDS endpoint."""

from __future__ import annotations

import asyncio
from collections.abc import Callable  # noqa: TC003
from dataclasses import replace
from pathlib import Path
from typing import Any

import httpx
import pytest

from gedsimport.adapters.geds.client import GedsDownloader, cleanup_temp_file
from gedsimport.config.geds import GedsConfig
from gedsimport.domain.cancellation import CancellationToken
from gedsimport.domain.errors import (
    DownloadCancelledError,
    DownloadTimeoutError,
    FileSizeLimitError,
    InvalidUrlError,
    NetworkError,
)
from tests.helpers.geds import GEDS_URL, ChunkStream, make_client_factory

XML_BODY = b"<?xml version='1.0'?><gedsPerson><firstName>John</firstName></gedsPerson>"


def _downloader(config: GedsConfig, handler: Callable[[httpx.Request], Any]) -> GedsDownloader:
    return GedsDownloader(config=config, client_factory=make_client_factory(handler))


def test_download_writes_body_to_destination(geds_config: GedsConfig, tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=XML_BODY)

    dest = tmp_path / "export.xml"
    result = _downloader(geds_config, handler)(GEDS_URL, dest)

    assert result == dest
    assert dest.read_bytes() == XML_BODY
    assert len(seen) == 1
    assert seen[0].method == "GET"


def test_download_rewrites_profile_url_before_requesting(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, content=XML_BODY)

    _downloader(geds_config, handler)(
        "https://geds-sage.gc.ca/en/GEDS?pgid=015&dn=CN%3Djohn.smith", tmp_path / "out.xml"
    )

    assert seen[0].params["pgid"] == "026"


@pytest.mark.parametrize(
    "url",
    ["http://geds-sage.gc.ca/en/GEDS", "https://example.com/export.xml", "not-a-url"],
)
def test_download_rejects_invalid_urls_without_network_io(
    geds_config: GedsConfig, tmp_path: Path, url: str
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, content=XML_BODY)

    with pytest.raises(InvalidUrlError):
        _downloader(geds_config, handler)(url, tmp_path / "out.xml")

    assert calls == []
    assert not (tmp_path / "out.xml").exists()


@pytest.mark.parametrize("status", [301, 302, 307])
def test_download_follows_a_single_redirect(
    geds_config: GedsConfig, tmp_path: Path, status: int
) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if len(seen) == 1:
            return httpx.Response(status, headers={"Location": "https://mirror.gc.ca/export.xml"})
        return httpx.Response(200, content=XML_BODY)

    dest = tmp_path / "out.xml"
    _downloader(geds_config, handler)(GEDS_URL, dest)

    assert seen == [GEDS_URL, "https://mirror.gc.ca/export.xml"]
    assert dest.read_bytes() == XML_BODY


def test_download_resolves_relative_redirect_location(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if len(seen) == 1:
            return httpx.Response(302, headers={"Location": "/exports/john.xml"})
        return httpx.Response(200, content=XML_BODY)

    _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")

    assert seen[1] == "https://geds-sage.gc.ca/exports/john.xml"


def test_download_does_not_follow_a_second_redirect(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(302, headers={"Location": f"https://geds-sage.gc.ca/hop{len(seen)}"})

    with pytest.raises(NetworkError, match="HTTP 302") as excinfo:
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")

    assert len(seen) == 2
    assert excinfo.value.status_code == 302
    assert not (tmp_path / "out.xml").exists()


def test_download_rejects_redirect_without_location(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(301)

    with pytest.raises(NetworkError, match="Redirect without location header"):
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")


def test_download_reports_non_200_status(geds_config: GedsConfig, tmp_path: Path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(NetworkError, match="HTTP 404: Not Found") as excinfo:
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")

    assert excinfo.value.status_code == 404


def test_download_wraps_transport_failures(geds_config: GedsConfig, tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError, match="Download failed: connection refused"):
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")


def test_download_wraps_redirect_hop_failures(geds_config: GedsConfig, tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "mirror.gc.ca":
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(302, headers={"Location": "https://mirror.gc.ca/export.xml"})

    with pytest.raises(NetworkError, match="Redirect failed: unreachable"):
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml")


def test_download_rejects_declared_size_before_reading_body(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    stream = ChunkStream([b"x" * 10])

    def handler(_request: httpx.Request) -> httpx.Response:
        headers = {"Content-Length": str(geds_config.max_bytes + 1)}
        return httpx.Response(200, headers=headers, stream=stream)

    dest = tmp_path / "out.xml"
    with pytest.raises(FileSizeLimitError, match="exceeds limit"):
        _downloader(geds_config, handler)(GEDS_URL, dest)

    assert stream.served == 0
    assert not dest.exists()


def test_download_enforces_observed_size_without_content_length(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    stream = ChunkStream([b"x" * 400] * 5)

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=stream)

    dest = tmp_path / "out.xml"
    with pytest.raises(FileSizeLimitError, match="during download"):
        _downloader(geds_config, handler)(GEDS_URL, dest)

    assert stream.served == 3
    assert not dest.exists()


def test_download_enforces_observed_size_when_content_length_lies(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Length": "10"},
            stream=ChunkStream([b"x" * 600, b"x" * 600]),
        )

    dest = tmp_path / "out.xml"
    with pytest.raises(FileSizeLimitError):
        _downloader(geds_config, handler)(GEDS_URL, dest)

    assert not dest.exists()


def test_download_accepts_body_exactly_at_limit(geds_config: GedsConfig, tmp_path: Path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream([b"x" * 1000, b"x" * 24]))

    dest = tmp_path / "out.xml"
    _downloader(geds_config, handler)(GEDS_URL, dest)

    assert dest.stat().st_size == geds_config.max_bytes


def test_download_ignores_non_numeric_content_length(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, headers={"Content-Length": "lots"}, stream=ChunkStream([XML_BODY])
        )

    dest = tmp_path / "out.xml"
    _downloader(geds_config, handler)(GEDS_URL, dest)

    assert dest.read_bytes() == XML_BODY


def test_download_removes_partial_file_on_stream_failure(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream([b"<a>", b"</a>"], fail_after=1))

    dest = tmp_path / "out.xml"
    with pytest.raises(NetworkError, match="Download failed"):
        _downloader(geds_config, handler)(GEDS_URL, dest)

    assert not dest.exists()


def test_download_times_out_waiting_for_response(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    config = replace(geds_config, resilience=replace(geds_config.resilience, timeout_seconds=0.05))

    async def handler(_request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, content=XML_BODY)

    with pytest.raises(DownloadTimeoutError, match="timed out"):
        _downloader(config, handler)(GEDS_URL, tmp_path / "out.xml")


def test_download_times_out_mid_stream_and_removes_partial_file(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    config = replace(geds_config, resilience=replace(geds_config.resilience, timeout_seconds=0.05))

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream([b"<a>", b"</a>"], delay=5))

    dest = tmp_path / "out.xml"
    with pytest.raises(DownloadTimeoutError):
        _downloader(config, handler)(GEDS_URL, dest)

    assert not dest.exists()


def test_download_stops_when_cancelled(geds_config: GedsConfig, tmp_path: Path) -> None:
    dest = tmp_path / "out.xml"

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream([b"<a>", b"</a>"], delay=5))

    async def scenario() -> None:
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        await _downloader(geds_config, handler).download(GEDS_URL, dest, cancel=token)

    with pytest.raises(DownloadCancelledError):
        asyncio.run(scenario())

    assert not dest.exists()


def test_download_refuses_an_already_cancelled_token(
    geds_config: GedsConfig, tmp_path: Path
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, content=XML_BODY)

    token = CancellationToken()
    token.cancel()

    with pytest.raises(DownloadCancelledError):
        _downloader(geds_config, handler)(GEDS_URL, tmp_path / "out.xml", cancel=token)

    assert calls == []


def test_download_with_unused_token_completes(geds_config: GedsConfig, tmp_path: Path) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=XML_BODY)

    dest = tmp_path / "out.xml"
    _downloader(geds_config, handler)(GEDS_URL, dest, cancel=CancellationToken())

    assert dest.read_bytes() == XML_BODY


def test_cleanup_removes_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "geds.xml"
    path.write_text("<gedsPerson/>")

    cleanup_temp_file(path)

    assert not path.exists()


def test_cleanup_ignores_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "missing.xml"

    cleanup_temp_file(path)
    cleanup_temp_file(str(path))

    assert not path.exists()


def test_cleanup_ignores_paths_it_cannot_delete(tmp_path: Path) -> None:
    directory = tmp_path / "not-a-file"
    directory.mkdir()

    cleanup_temp_file(directory)

    assert directory.exists()


def test_cleanup_swallows_permission_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "locked.xml"
    path.write_text("<gedsPerson/>")

    def deny(*_args: object, **_kwargs: object) -> None:
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "unlink", deny)

    cleanup_temp_file(path)

    assert path.exists()
