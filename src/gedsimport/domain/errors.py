"""Error taxonomy of the GEDS import pipeline."""

from __future__ import annotations


class GedsImportError(RuntimeError):
    """Base class for every failure surfaced by the import pipeline."""


class InvalidUrlError(GedsImportError):
    """Raised when a source URL fails format, protocol, or domain checks."""


class DownloadTimeoutError(GedsImportError):
    """Raised when a download does not complete within the configured time."""


class DownloadCancelledError(GedsImportError):
    """Raised when a caller cancels an in-flight download."""


class FileSizeLimitError(GedsImportError):
    """Raised when the declared or observed body size exceeds the limit."""


class NetworkError(GedsImportError):
    """Raised on non-200 responses, broken redirects, or transport failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(GedsImportError):
    """Raised when a GEDS XML document cannot be turned into directory records."""

    def __init__(self, message: str, *, document_index: int | None = None) -> None:
        super().__init__(message)
        self.document_index = document_index

    def for_document(self, index: int) -> ParseError:
        """Return a copy of this error attributed to the ``index``-th document."""

        return ParseError(f"Document {index}: {self}", document_index=index)
