# tests/conftest.py

from datetime import datetime
from pathlib import Path

import pytest

from daykeeper.dates import DateKey
from daykeeper.storage import TaskStore


@pytest.fixture()
def now() -> datetime:
    """Fixed wall clock: 15 June 2024, 10:30"""
    return datetime(2024, 6, 15, 10, 30)


@pytest.fixture()
def day() -> DateKey:
    return DateKey(2024, 6, 15)


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.json")


@pytest.fixture()
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    """Data directory for CLI runs, with colors off so output is plain"""
    path = tmp_path / "keeper"
    monkeypatch.setenv("DAYKEEPER_HOME", str(path))
    monkeypatch.setenv("NO_COLOR", "1")
    return path
