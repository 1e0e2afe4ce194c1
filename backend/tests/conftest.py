"""Pytest fixtures and configuration."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Set environment variables before importing app modules
os.environ["STORAGE_BACKEND"] = "local"
os.environ["COUNTER_PROFILE"] = "main"
os.environ["DEMO_MODE"] = "true"

from valueboard.core.config import COUNTER_PROFILES, reset_settings  # noqa: E402
from valueboard.repositories.local_repo import LocalDao  # noqa: E402
from valueboard.schemas.collections import (  # noqa: E402
    Collection,
    FieldType,
    SchemaField,
)


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Re-read settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for local backend data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def local_dao(temp_data_dir: Path) -> LocalDao:
    return LocalDao(temp_data_dir)


@pytest.fixture
def main_profile():
    return COUNTER_PROFILES["main"]


@pytest.fixture
def public_profile():
    return COUNTER_PROFILES["public"]


@pytest.fixture
def migrated_dao(local_dao: LocalDao, main_profile) -> LocalDao:
    """Local DAO with the seed migration applied using the main counter profile."""
    from migrations.m_20251020_001_value_quarters_and_counters import upgrade

    upgrade(local_dao, main_profile)
    return local_dao


@pytest.fixture
def sample_collection() -> Collection:
    """A small collection with a unique text field and an optional number."""
    return Collection(
        name="samples",
        list_rule="",
        view_rule="",
        schema_fields=[
            SchemaField(name="code", type=FieldType.TEXT, required=True),
            SchemaField(name="amount", type=FieldType.NUMBER),
        ],
        indexes=["CREATE UNIQUE INDEX idx_samples_code ON samples (code)"],
    )


@pytest.fixture
def mock_firestore_db() -> MagicMock:
    """Mock Firestore client; every collection() call returns the same chain."""
    db = MagicMock()
    db.collection.return_value.document.return_value.get.return_value.exists = False
    db.collection.return_value.where.return_value.limit.return_value.stream.return_value = []
    db.collection.return_value.where.return_value.stream.return_value = []
    db.collection.return_value.limit.return_value.stream.return_value = []
    return db


@pytest.fixture
def api_client(migrated_dao: LocalDao) -> Generator[TestClient, None, None]:
    """Test client serving the migrated local DAO."""
    from valueboard.api.routes import get_dao
    from valueboard.main import app

    app.dependency_overrides[get_dao] = lambda: migrated_dao
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_dao, None)
