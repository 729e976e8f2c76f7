"""Ports for handing parsed directory records to the persistence side."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gedsimport.domain.model import DirectoryRecords


@dataclass(slots=True, frozen=True)
class ImportStats:
    """Counts reported by an importer after applying one batch of records."""

    departments_created: int = 0
    departments_reused: int = 0
    people_created: int = 0
    people_skipped: int = 0

    @property
    def departments(self) -> int:
        return self.departments_created + self.departments_reused


@runtime_checkable
class DirectoryImporter(Protocol):
    """Callable port that turns directory records into organization rows."""

    def __call__(self, records: DirectoryRecords) -> ImportStats: ...


__all__ = ["DirectoryImporter", "ImportStats"]
