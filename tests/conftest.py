"""Shared fixtures: an isolated SQLite database and an in-memory file store."""

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="budget-intake-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["LOG_FILE"] = str(_TMP / "logs" / "test.log")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from budget_intake.api.dependencies import get_file_service  # noqa: E402
from budget_intake.core.db import Base, engine  # noqa: E402
from budget_intake.services.file_service import FileService  # noqa: E402
from main import app  # noqa: E402


class InMemoryStorage:
    """Storage backend keeping objects in a dict, standing in for S3."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}

    def upload_fileobj(self, key: str, data: bytes) -> None:
        self.objects[key] = data

    def download_fileobj(self, key: str) -> bytes:
        return self.objects[key]


@pytest.fixture
def storage() -> InMemoryStorage:
    """A fresh in-memory storage backend."""
    return InMemoryStorage()


@pytest.fixture
def client(storage: InMemoryStorage):
    """TestClient over an empty database, with uploads going to the in-memory store."""
    Base.metadata.drop_all(engine)
    app.dependency_overrides[get_file_service] = lambda: FileService(storage)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
