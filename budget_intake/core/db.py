"""DB connection and helpers for the budget intake service."""

from typing import Any

from sqlalchemy import Column, Integer, String, Text, create_engine, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from budget_intake.core.utils import utcnow_iso

Base = declarative_base()


class Job(Base):
    """A background document ingestion job."""

    __tablename__ = "jobs"
    id = Column(String, primary_key=True)
    status = Column(String, nullable=False)
    kind = Column(String, nullable=False, default="statement")
    created_at = Column(String, nullable=False)
    completed_at = Column(String, nullable=True)
    input_path = Column(String, nullable=False)
    output_path = Column(String, nullable=False)
    error = Column(Text, nullable=True)


class CategorizationRuleRow(Base):
    """One entry of the user's ordered categorization rule list."""

    __tablename__ = "categorization_rules"
    position = Column(Integer, primary_key=True)
    match = Column(String, nullable=True)
    category = Column(String, nullable=True)
    merchant = Column(String, nullable=True)
    default_category = Column(String, nullable=True)


class ScoreHistoryRow(Base):
    """One day's financial health score."""

    __tablename__ = "score_history"
    date = Column(String, primary_key=True)
    score = Column(Integer, nullable=False)


def get_engine() -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    from budget_intake.core.settings import get_settings

    url = get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create all tables if they do not exist yet."""
    Base.metadata.create_all(engine)


def get_db() -> "DBHelper":
    """Get a DBHelper instance using a SQLAlchemy session."""
    session = SessionLocal()
    return DBHelper(session)


class DBHelper:
    """Helper class for job bookkeeping using SQLAlchemy."""

    def __init__(self, session: Session) -> None:
        """Initialize the DBHelper with a SQLAlchemy session."""
        self.session = session

    def create_job(self, job_id: str, kind: str, input_path: str, output_path: str) -> None:
        """Insert a pending job row."""
        self.session.add(
            Job(
                id=job_id,
                status="pending",
                kind=kind,
                created_at=utcnow_iso(),
                input_path=input_path,
                output_path=output_path,
            )
        )
        self.session.commit()

    def set_job_status(self, job_id: str, status: str, error: str | None = None) -> None:
        """Move a job to a new status, stamping completion for terminal states."""
        values: dict[str, Any] = {"status": status}
        if status in ("completed", "error"):
            values["completed_at"] = utcnow_iso()
        if error is not None:
            values["error"] = error
        self.session.execute(update(Job).where(Job.id == job_id).values(**values))
        self.session.commit()

    def get_job(self, job_id: str) -> Job | None:
        """Fetch the job row by id."""
        return self.session.execute(select(Job).where(Job.id == job_id)).scalar_one_or_none()

    def get_job_status(self, job_id: str) -> dict[str, Any] | None:
        """Retrieve the status and metadata for a job by its ID using SQLAlchemy."""
        job = self.get_job(job_id)
        if not job:
            return None
        return {
            "status": job.status,
            "kind": job.kind,
            "created_at": job.created_at,
            "completed_at": job.completed_at,
            "error": job.error,
        }

    def get_job_output_path(self, job_id: str) -> str | None:
        """Retrieve the output key for a completed job."""
        job = self.get_job(job_id)
        if not job or job.status != "completed":
            return None
        return job.output_path

    def close(self) -> None:
        """Close the SQLAlchemy session."""
        self.session.close()
