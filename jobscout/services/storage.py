"""
Storage Service

Persists the user's resume library, saved jobs and profile.

- ResumeStore: upload, list, read, rename, edit and delete resumes.
  Sections are parsed on upload and re-parsed whenever content changes.
- JobStore: save discovered jobs, merge scores from the matching agent,
  track application status and notes, keep a tailored resume per job,
  dashboard metrics.
- ProfileStore: one profile per user, upserted.

Every query is scoped by user_id. Database errors are logged and reported
as None / False / [] so callers can map them to a failed response.
"""

import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from jobscout.core.database import Profile, SavedJob, UserResume
from jobscout.core.jobs import (
    SCORE_FIELDS, compute_job_metrics, filter_new_jobs, merge_job_scores
)
from jobscout.core.profile import validate_scoring_weights
from jobscout.core.resume import (
    create_resume_with_sections, parse_resume_sections, validate_resume_size
)
from jobscout.core.schemas import (
    ApplicationStatus, Job, JobMetrics, PriorityLevel, Resume, ResumeFormat,
    ResumeSections, ResumeSummary, ScoringWeights, TailoredResume, UserProfile
)
from jobscout.core.utils import Clock, IdFactory, byte_length, iso_timestamp, new_id

logger = logging.getLogger(__name__)


class _Store:
    """Shared session handling."""

    def __init__(self, session_factory: sessionmaker, clock: Optional[Clock] = None):
        self._session_factory = session_factory
        self._clock = clock

    def _now(self) -> str:
        return iso_timestamp(self._clock)

    def _write(self, action: str, fn: Callable[[Session], bool]) -> bool:
        """Run ``fn`` in a transaction. Commits only if it returns True."""
        with self._session_factory() as session:
            try:
                ok = fn(session)
                if ok:
                    session.commit()
                else:
                    session.rollback()
                return ok
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Error {action}: {e}")
                return False


# ============================================================================
# Resumes
# ============================================================================

def _sections_from_row(row: UserResume) -> Optional[ResumeSections]:
    return ResumeSections(**row.sections) if row.sections is not None else None


class ResumeStore(_Store):
    """Resume library backed by the ``resumes`` table."""

    def __init__(self, session_factory: sessionmaker, clock: Optional[Clock] = None,
                 id_factory: Optional[IdFactory] = None):
        super().__init__(session_factory, clock)
        self._id_factory = id_factory or new_id

    def upload_resume(self, user_id: str, name: str, content: str,
                      format: ResumeFormat) -> Optional[Resume]:
        """
        Save a new resume and its parsed sections.

        Args:
            user_id: Owner
            name: Display name
            content: Resume text
            format: Markdown or plain text

        Returns:
            The stored Resume, or None if the database write failed

        Raises:
            ValueError: If the content is over the size limit
        """
        if not validate_resume_size(content):
            raise ValueError("Resume content exceeds the maximum size")

        resume = create_resume_with_sections(
            name, content, format, id_factory=self._id_factory, clock=self._clock
        )

        row = UserResume(
            id=resume.id,
            user_id=user_id,
            name=resume.name,
            format=resume.format.value,
            content=resume.content,
            file_size=byte_length(content),
            sections=resume.sections.dict(exclude_none=True),
            is_master=True,
            created_at=resume.uploaded_at,
        )

        with self._session_factory() as session:
            try:
                session.add(row)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Error saving resume: {e}")
                return None

        logger.info(f"Uploaded resume {resume.id} ({resume.format.value}, "
                   f"sections: {resume.sections.present()})")
        return resume

    def get_resumes(self, user_id: str) -> List[ResumeSummary]:
        """All of a user's resumes, newest first, without content."""
        with self._session_factory() as session:
            try:
                rows = (
                    session.query(UserResume)
                    .filter(UserResume.user_id == user_id)
                    .order_by(UserResume.created_at.desc())
                    .all()
                )
            except SQLAlchemyError as e:
                logger.error(f"Error fetching resumes: {e}")
                return []

            return [
                ResumeSummary(
                    id=row.id,
                    name=row.name,
                    uploaded_at=row.created_at,
                    format=row.format,
                    file_size=row.file_size or 0,
                    sections=_sections_from_row(row),
                )
                for row in rows
            ]

    def _get_row(self, session: Session, user_id: str, resume_id: str) -> Optional[UserResume]:
        return (
            session.query(UserResume)
            .filter(UserResume.id == resume_id, UserResume.user_id == user_id)
            .one_or_none()
        )

    def get_resume_content(self, user_id: str, resume_id: str) -> Optional[str]:
        """Raw content of a resume, or None if not found."""
        resume = self.get_resume_by_id(user_id, resume_id)
        return resume.content if resume else None

    def get_resume_by_id(self, user_id: str, resume_id: str) -> Optional[Resume]:
        """Full resume with content, or None if not found."""
        with self._session_factory() as session:
            try:
                row = self._get_row(session, user_id, resume_id)
            except SQLAlchemyError as e:
                logger.error(f"Error fetching resume {resume_id}: {e}")
                return None

            if row is None:
                return None

            return Resume(
                id=row.id,
                name=row.name,
                content=row.content,
                uploaded_at=row.created_at,
                format=row.format,
                sections=_sections_from_row(row),
            )

    def update_resume(self, user_id: str, resume_id: str, name: Optional[str] = None,
                      content: Optional[str] = None) -> bool:
        """
        Rename a resume and/or replace its content in one transaction.

        New content gets its sections re-parsed and its size recorded. Nothing
        is written unless every change can be applied.

        Raises:
            ValueError: If the new content is over the size limit
        """
        if content is not None and not validate_resume_size(content):
            raise ValueError("Resume content exceeds the maximum size")

        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, resume_id)
            if row is None:
                logger.warning(f"Cannot update resume: resume {resume_id} not found")
                return False
            if name is not None:
                row.name = name
            if content is not None:
                row.content = content
                row.file_size = byte_length(content)
                row.sections = parse_resume_sections(content).dict(exclude_none=True)
            return True

        return self._write("updating resume", apply)

    def update_resume_name(self, user_id: str, resume_id: str, name: str) -> bool:
        """Rename a resume."""
        return self.update_resume(user_id, resume_id, name=name)

    def update_resume_content(self, user_id: str, resume_id: str, content: str) -> bool:
        """
        Replace a resume's content and re-parse its sections.

        Raises:
            ValueError: If the new content is over the size limit
        """
        return self.update_resume(user_id, resume_id, content=content)

    def delete_resume(self, user_id: str, resume_id: str) -> bool:
        """Delete a resume. False if it does not exist."""
        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, resume_id)
            if row is None:
                logger.warning(f"Cannot delete resume: resume {resume_id} not found")
                return False
            session.delete(row)
            return True

        return self._write("deleting resume", apply)


# ============================================================================
# Jobs
# ============================================================================

def _job_from_row(row: SavedJob) -> Job:
    return Job(
        id=row.job_id,
        title=row.title,
        company=row.company,
        location=row.location or "",
        salary=row.salary,
        description=row.description or "",
        requirements=row.requirements or [],
        url=row.url,
        source=row.source,
        discovered_at=row.discovered_at or "",
        score=row.score,
        score_breakdown=row.score_breakdown,
        reasoning=row.reasoning,
        gaps=row.gaps,
        priority=row.priority,
        application_status=row.application_status,
        status_updated_at=row.status_updated_at,
        notes=row.notes,
        tailored_resume=row.tailored_resume,
    )


def _row_from_job(user_id: str, job: Job) -> SavedJob:
    return SavedJob(
        user_id=user_id,
        job_id=job.id,
        title=job.title,
        company=job.company,
        location=job.location,
        salary=job.salary,
        description=job.description,
        requirements=list(job.requirements),
        url=job.url,
        source=job.source.value,
        discovered_at=job.discovered_at,
        score=job.score,
        score_breakdown=job.score_breakdown.dict() if job.score_breakdown else None,
        reasoning=job.reasoning,
        gaps=job.gaps,
        priority=job.priority.value if job.priority else None,
        application_status=job.application_status.value if job.application_status else None,
        status_updated_at=job.status_updated_at,
        notes=job.notes,
        tailored_resume=job.tailored_resume.dict() if job.tailored_resume else None,
    )


class JobStore(_Store):
    """Saved jobs backed by the ``jobs`` table."""

    def _query(self, session: Session, user_id: str):
        return session.query(SavedJob).filter(SavedJob.user_id == user_id)

    def _get_row(self, session: Session, user_id: str, job_id: str) -> Optional[SavedJob]:
        return self._query(session, user_id).filter(SavedJob.job_id == job_id).one_or_none()

    def _fetch(self, user_id: str, *criteria) -> List[Job]:
        with self._session_factory() as session:
            try:
                rows = (
                    self._query(session, user_id)
                    .filter(*criteria)
                    .order_by(SavedJob.discovered_at.desc())
                    .all()
                )
            except SQLAlchemyError as e:
                logger.error(f"Error fetching jobs: {e}")
                return []
            return [_job_from_row(row) for row in rows]

    def get_jobs(self, user_id: str) -> List[Job]:
        """All saved jobs, most recently discovered first."""
        return self._fetch(user_id)

    def get_job_by_id(self, user_id: str, job_id: str) -> Optional[Job]:
        with self._session_factory() as session:
            try:
                row = self._get_row(session, user_id, job_id)
            except SQLAlchemyError as e:
                logger.error(f"Error fetching job {job_id}: {e}")
                return None
            return _job_from_row(row) if row else None

    def get_jobs_by_status(self, user_id: str, status: ApplicationStatus) -> List[Job]:
        return self._fetch(user_id, SavedJob.application_status == ApplicationStatus(status).value)

    def get_jobs_by_priority(self, user_id: str, priority: PriorityLevel) -> List[Job]:
        return self._fetch(user_id, SavedJob.priority == PriorityLevel(priority).value)

    def get_scored_jobs(self, user_id: str) -> List[Job]:
        return self._fetch(user_id, SavedJob.score.isnot(None))

    def save_jobs(self, user_id: str, jobs: List[Job]) -> Optional[int]:
        """
        Save jobs, skipping any the user already has.

        Returns:
            Number of jobs added, or None if the database write failed
        """
        added: List[Job] = []

        def apply(session: Session) -> bool:
            existing = [_job_from_row(row) for row in self._query(session, user_id).all()]
            added.extend(filter_new_jobs(existing, jobs))
            session.add_all(_row_from_job(user_id, job) for job in added)
            return True

        if not self._write("saving jobs", apply):
            return None

        if not added:
            logger.info("No new unique jobs to add")
        else:
            logger.info(f"Saved {len(added)} new jobs for user {user_id}")
        return len(added)

    def update_job_status(self, user_id: str, job_id: str, status: ApplicationStatus) -> bool:
        """Set the application status and stamp when it changed."""
        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, job_id)
            if row is None:
                logger.warning(f"Cannot update status: job {job_id} not found")
                return False
            row.application_status = ApplicationStatus(status).value
            row.status_updated_at = self._now()
            return True

        return self._write("updating job status", apply)

    def update_job_notes(self, user_id: str, job_id: str, notes: str) -> bool:
        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, job_id)
            if row is None:
                logger.warning(f"Cannot update notes: job {job_id} not found")
                return False
            row.notes = notes
            return True

        return self._write("updating job notes", apply)

    def update_jobs_with_scores(self, user_id: str, scored_jobs: List[Job]) -> bool:
        """
        Merge scoring data from the matching agent into saved jobs.

        Jobs the user has not saved are ignored.
        """
        def apply(session: Session) -> bool:
            ids = [job.id for job in scored_jobs]
            rows = {
                row.job_id: row
                for row in self._query(session, user_id).filter(SavedJob.job_id.in_(ids))
            }
            for job_id in ids:
                if job_id not in rows:
                    logger.warning(f"Skipping score for unsaved job {job_id}")

            merged = merge_job_scores([_job_from_row(row) for row in rows.values()], scored_jobs)
            for job in merged:
                row, scored_row = rows[job.id], _row_from_job(user_id, job)
                for name in SCORE_FIELDS:
                    setattr(row, name, getattr(scored_row, name))
            return True

        return self._write("updating job scores", apply)

    def save_job_resume(self, user_id: str, job_id: str,
                        tailored_resume: Optional[TailoredResume]) -> bool:
        """Attach a tailored resume to a saved job. None removes it."""
        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, job_id)
            if row is None:
                logger.warning(f"Cannot save tailored resume: job {job_id} not found")
                return False
            row.tailored_resume = tailored_resume.dict() if tailored_resume else None
            return True

        if not self._write("saving tailored resume", apply):
            return False

        logger.info(f"Saved tailored resume for job {job_id}")
        return True

    def delete_job(self, user_id: str, job_id: str) -> bool:
        def apply(session: Session) -> bool:
            row = self._get_row(session, user_id, job_id)
            if row is None:
                logger.warning(f"Cannot delete: job {job_id} not found")
                return False
            session.delete(row)
            return True

        return self._write("deleting job", apply)

    def get_metrics(self, user_id: str) -> JobMetrics:
        """Dashboard metrics over all of a user's saved jobs."""
        return compute_job_metrics(self.get_jobs(user_id))


# ============================================================================
# Profiles
# ============================================================================

class ProfileStore(_Store):
    """User profiles backed by the ``profiles`` table."""

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        with self._session_factory() as session:
            try:
                row = session.get(Profile, user_id)
            except SQLAlchemyError as e:
                logger.error(f"Error fetching profile: {e}")
                return None

            if row is None:
                return None

            return UserProfile(
                name=row.name or "",
                professional_background=row.professional_background or "",
                skills=row.skills or [],
                salary_min=row.salary_min or 0,
                salary_max=row.salary_max or 0,
                preferred_locations=row.preferred_locations or [],
                job_preferences=row.job_preferences or [],
                deal_breakers=row.deal_breakers or "",
                company_preferences=row.company_preferences,
                scoring_weights=ScoringWeights(**(row.scoring_weights or {})),
                updated_at=row.updated_at or "",
                created_via=row.created_via,
            )

    def has_profile(self, user_id: str) -> bool:
        return self.get_profile(user_id) is not None

    def save_profile(self, user_id: str, profile: UserProfile) -> Optional[UserProfile]:
        """
        Create or replace the user's profile.

        Returns:
            The saved profile with a fresh updated_at, or None on database error

        Raises:
            ValueError: If the scoring weights do not sum to 100
        """
        if not validate_scoring_weights(profile.scoring_weights):
            raise ValueError("Scoring weights must sum to 100")

        saved = profile.copy(update={"updated_at": self._now()})

        def apply(session: Session) -> bool:
            row = session.get(Profile, user_id) or Profile(user_id=user_id)
            row.name = saved.name
            row.professional_background = saved.professional_background
            row.skills = list(saved.skills)
            row.salary_min = saved.salary_min
            row.salary_max = saved.salary_max
            row.preferred_locations = list(saved.preferred_locations)
            row.job_preferences = list(saved.job_preferences)
            row.deal_breakers = saved.deal_breakers
            row.company_preferences = saved.company_preferences
            row.scoring_weights = saved.scoring_weights.dict()
            row.created_via = saved.created_via.value if saved.created_via else None
            row.updated_at = saved.updated_at
            session.add(row)
            return True

        if not self._write("saving profile", apply):
            return None

        logger.info(f"Saved profile for user {user_id}")
        return saved

    def delete_profile(self, user_id: str) -> bool:
        def apply(session: Session) -> bool:
            row = session.get(Profile, user_id)
            if row is None:
                return False
            session.delete(row)
            return True

        return self._write("deleting profile", apply)
