"""Configuration and environment settings for the budget intake service."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CLASSIFIER_ORDER = [
    "explicit",
    "merchant_default",
    "keyword_rule",
    "transaction_type",
    "vendor_table",
]


class Settings(BaseSettings):
    """Application settings for the budget intake service."""

    database_url: str = "sqlite:///budget_intake.db"
    log_file: str = "logs/budget_intake.log"
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    fiscal_year: int | None = None
    duplicate_total_tolerance: float = 0.50
    score_history_days: int = 90
    ocr_language: str = "eng"
    tesseract_cmd: str | None = None
    pdf_max_pages: int = 3
    classifier_order: list[str] = DEFAULT_CLASSIFIER_ORDER
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: str | None = None
    s3_bucket: str = "budget-intake"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
