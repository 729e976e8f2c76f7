"""Public domain model surface."""

from __future__ import annotations

from gedsimport.domain.model.directory import (
    PATH_SEPARATOR,
    Department,
    DirectoryRecords,
    Person,
    path_depth,
)

__all__ = [
    "PATH_SEPARATOR",
    "Department",
    "DirectoryRecords",
    "Person",
    "path_depth",
]
