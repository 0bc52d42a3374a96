"""FileService: document and job-output storage on top of an S3-style backend."""

import uuid
from pathlib import Path
from typing import Protocol


class StorageBackend(Protocol):
    """The subset of S3FileService that FileService relies on."""

    def upload_fileobj(self, key: str, data: bytes) -> None: ...

    def download_fileobj(self, key: str) -> bytes: ...


class FileService:
    """Service for file operations using S3 as backend."""

    def __init__(self, backend: StorageBackend) -> None:
        """Initialize FileService with a storage backend (normally S3FileService)."""
        self.backend = backend

    def save_file(self, key: str, data: bytes | str) -> None:
        """Save a file under the given key."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.backend.upload_fileobj(key, data)

    def get_file(self, key: str) -> bytes:
        """Retrieve a file by key; a missing key raises ``KeyError``."""
        return self.backend.download_fileobj(key)

    def save_upload(self, filename: str, data: bytes) -> tuple[str, str, str]:
        """Store an uploaded document and return job_id, input key and output key."""
        job_id = str(uuid.uuid4())
        suffix = Path(filename or "").suffix.lower() or ".bin"
        in_key = f"jobs/{job_id}{suffix}"
        out_key = f"jobs/{job_id}_out.csv"
        self.save_file(in_key, data)
        return job_id, in_key, out_key
