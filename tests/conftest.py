from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from gedsimport.config.storage import StorageConfig
from tests.helpers.geds import load_fixture

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GEDS_TIMEOUT_SECONDS", "GEDS_MAX_BYTES", "GEDS_USER_AGENT", "GEDSIMPORT_DATA_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def john_smith_xml() -> str:
    return load_fixture("john_smith.xml")


@pytest.fixture
def francois_cote_xml() -> str:
    return load_fixture("francois_cote.xml")


@pytest.fixture
def jane_doe_xml() -> str:
    return load_fixture("jane_doe.xml")


@pytest.fixture
def alex_martin_xml() -> str:
    return load_fixture("alex_martin.xml")


@pytest.fixture
def staging(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=tmp_path / "staging")
