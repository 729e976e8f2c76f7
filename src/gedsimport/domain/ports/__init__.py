"""Domain port definitions for adapters."""

from __future__ import annotations

from .importing import DirectoryImporter, ImportStats

__all__ = ["DirectoryImporter", "ImportStats"]
