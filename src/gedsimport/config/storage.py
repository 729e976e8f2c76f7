"""Staging storage configuration helpers."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "gedsimport"
DOWNLOAD_PREFIX: Final[str] = "geds"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def download_path(self, index: int, *, ensure: bool = True) -> Path:
        """Return a distinct staging path for the ``index``-th download of a run."""

        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        stamp = datetime.now(tz=UTC).strftime("%Y%m%d%H%M%S%f")
        return base / f"{DOWNLOAD_PREFIX}-{stamp}-{os.getpid()}-{index}.xml"


def _default_data_dir() -> Path:
    return Path(tempfile.gettempdir()) / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("GEDSIMPORT_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)
