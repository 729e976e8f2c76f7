"""Public interface for the GEDS export adapter."""

from __future__ import annotations

from .client import GedsDownloader, cleanup_temp_file
from .schema import GedsPersonRecord
from .translator import collect_geds_documents, merge_geds_documents, parse_geds_xml
from .urls import normalize_geds_url, validate_geds_url

__all__ = [
    "GedsDownloader",
    "GedsPersonRecord",
    "cleanup_temp_file",
    "collect_geds_documents",
    "merge_geds_documents",
    "normalize_geds_url",
    "parse_geds_xml",
    "validate_geds_url",
]
