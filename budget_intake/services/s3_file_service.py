"""S3-compatible object storage for uploaded documents and job outputs."""

import boto3
from botocore.exceptions import ClientError

from budget_intake.core.settings import Settings, get_settings
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.storage")

MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}
MISSING_KEY_CODES = {"404", "NoSuchKey", "NotFound"}


class StorageKeyError(KeyError):
    """Raised when a requested object is not in the bucket."""


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3FileService:
    """Reads and writes intake objects in one bucket, creating it on first use."""

    def __init__(self, client: object | None = None, settings: Settings | None = None) -> None:
        """Connect to the configured endpoint (or use ``client``) and make sure the bucket exists."""
        settings = settings or get_settings()
        self.s3 = client or boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
        )
        self.bucket = settings.s3_bucket
        self.ensure_bucket()

    def ensure_bucket(self) -> None:
        """Create the bucket when it does not exist; other S3 errors propagate."""
        try:
            self.s3.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            if _error_code(exc) not in MISSING_BUCKET_CODES:
                raise
            logger.info(f"Creating bucket {self.bucket}")
            self.s3.create_bucket(Bucket=self.bucket)

    def upload_fileobj(self, key: str, data: bytes) -> None:
        self.s3.put_object(Bucket=self.bucket, Key=str(key), Body=data)
        logger.debug(f"Stored {len(data)} bytes at {key}")

    def download_fileobj(self, key: str) -> bytes:
        """Return the object's bytes; a missing key raises ``StorageKeyError``."""
        try:
            obj = self.s3.get_object(Bucket=self.bucket, Key=str(key))
        except ClientError as exc:
            if _error_code(exc) in MISSING_KEY_CODES:
                raise StorageKeyError(key) from exc
            raise
        return obj["Body"].read()
