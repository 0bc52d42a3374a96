"""FastAPI dependencies for DI (settings, DB, stores, file service).

Tests override ``get_file_service`` to swap the S3 backend for an in-memory one.
"""

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from budget_intake.core.db import DBHelper, SessionLocal, get_db
from budget_intake.core.settings import Settings, get_settings
from budget_intake.services.file_service import FileService
from budget_intake.services.s3_file_service import S3FileService
from budget_intake.services.stores import HistoryStore, RuleStore


def get_app_settings() -> Settings:
    """Provide application settings for dependency injection."""
    return get_settings()


def get_db_conn() -> Generator[DBHelper, None, None]:
    """Provide a job bookkeeping helper, closing its session after the request."""
    db = get_db()
    try:
        yield db
    finally:
        db.close()


def get_session() -> Generator[Session, None, None]:
    """Provide a SQLAlchemy session scoped to the request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_rule_store(session: Session = Depends(get_session)) -> RuleStore:
    """Provide the categorization rule store."""
    return RuleStore(session)


def get_history_store(session: Session = Depends(get_session)) -> HistoryStore:
    """Provide the score history store."""
    return HistoryStore(session)


def get_file_service(settings: Settings = Depends(get_app_settings)) -> FileService:
    """Provide a FileService backed by S3."""
    return FileService(S3FileService(settings=settings))
