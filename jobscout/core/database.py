"""
Database models for JobScout.

Uses SQLAlchemy for ORM. Resume text is stored in the database alongside
its metadata; parsed sections are kept as JSON.
"""

from typing import Optional
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime,
    Text, JSON, Index, UniqueConstraint, create_engine
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from .config import get_settings
from .utils import new_id


Base = declarative_base()


# ============================================================================
# Resumes
# ============================================================================

class UserResume(Base):
    """A resume in a user's library."""

    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(255), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    format = Column(String(20), nullable=False, default="text")  # markdown, text

    # Content is authoritative; sections are derived from it
    content = Column(Text, nullable=False)
    file_size = Column(Integer, default=0)  # UTF-8 bytes
    sections = Column(JSON)

    is_master = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(String(32), nullable=False)  # ISO-8601 instant
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_resumes_user_created", "user_id", "created_at"),
    )


# ============================================================================
# Jobs
# ============================================================================

class SavedJob(Base):
    """Job saved by a user, with scoring and application tracking."""

    __tablename__ = "jobs"

    row_id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(255), nullable=False, index=True)
    job_id = Column(String(255), nullable=False)  # ID assigned at discovery

    # Core info
    title = Column(String(500), nullable=False)
    company = Column(String(255), nullable=False)
    location = Column(String(255))
    salary = Column(String(100))
    description = Column(Text)
    requirements = Column(JSON)
    url = Column(String(1000), nullable=False)
    source = Column(String(20), default="manual")  # firecrawl, adzuna, manual
    discovered_at = Column(String(32))

    # Scoring
    score = Column(Float)
    score_breakdown = Column(JSON)
    reasoning = Column(Text)
    gaps = Column(JSON)
    priority = Column(String(10), index=True)  # high, medium, low

    # Tracking
    application_status = Column(String(20), index=True)
    status_updated_at = Column(String(32))
    notes = Column(Text)
    tailored_resume = Column(JSON)

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_jobs_user_job"),
    )


# ============================================================================
# Profiles
# ============================================================================

class Profile(Base):
    """One profile per user."""

    __tablename__ = "profiles"

    user_id = Column(String(255), primary_key=True)

    name = Column(String(255), default="")
    professional_background = Column(Text, default="")
    skills = Column(JSON)
    salary_min = Column(Integer, default=0)
    salary_max = Column(Integer, default=0)
    preferred_locations = Column(JSON)
    job_preferences = Column(JSON)
    deal_breakers = Column(Text, default="")
    company_preferences = Column(Text)
    scoring_weights = Column(JSON)
    created_via = Column(String(10))  # chat, form

    updated_at = Column(String(32))


# ============================================================================
# Engine & Sessions
# ============================================================================

def create_session_factory(url: Optional[str] = None, echo: Optional[bool] = None) -> sessionmaker:
    """
    Create the engine, make sure tables exist, and return a session factory.

    Args:
        url: SQLAlchemy URL. Defaults to the DB_URL setting.
        echo: Log SQL statements. Defaults to the DB_ECHO setting.
    """
    db_settings = get_settings().database
    url = url or db_settings.url
    echo = db_settings.echo if echo is None else echo

    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url == "sqlite://":
            # Single shared connection so every session sees the same database
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, echo=echo, **kwargs)
    Base.metadata.create_all(engine)

    return sessionmaker(bind=engine, expire_on_commit=False)
