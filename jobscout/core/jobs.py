"""
Job helpers: priority buckets, scored/saved checks, merging agent scores
into a saved job list, and the dashboard metrics over a job collection.
"""

from typing import Dict, Iterable, List, Optional

from jobscout.core.schemas import Job, JobMetrics, JobSource, PriorityLevel
from jobscout.core.utils import Clock, iso_timestamp


HIGH_PRIORITY_SCORE = 85
MEDIUM_PRIORITY_SCORE = 70

SCORE_FIELDS = ("score", "score_breakdown", "reasoning", "gaps", "priority")


def calculate_priority(score: float) -> PriorityLevel:
    """
    Priority level for a fit score.

    High: >=85, Medium: 70-84, Low: <70
    """
    if score >= HIGH_PRIORITY_SCORE:
        return PriorityLevel.HIGH
    if score >= MEDIUM_PRIORITY_SCORE:
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW


def is_job_scored(job: Job) -> bool:
    """A job counts as scored once it has both a score and a breakdown."""
    return job.score is not None and job.score_breakdown is not None


def is_job_saved(job: Job) -> bool:
    """A job is saved once the user has given it an application status."""
    return job.application_status is not None


def create_job(
    id: str,
    title: str,
    company: str,
    location: str,
    description: str,
    requirements: List[str],
    url: str,
    source: JobSource,
    salary: Optional[str] = None,
    clock: Optional[Clock] = None
) -> Job:
    """Create a Job stamped with its discovery time."""
    return Job(
        id=id,
        title=title,
        company=company,
        location=location,
        salary=salary,
        description=description,
        requirements=list(requirements),
        url=url,
        source=source,
        discovered_at=iso_timestamp(clock),
    )


def filter_new_jobs(existing: Iterable[Job], new_jobs: Iterable[Job]) -> List[Job]:
    """Jobs from ``new_jobs`` whose id is not already in ``existing``.

    Duplicates inside ``new_jobs`` itself are dropped too; first one wins.
    """
    seen = {job.id for job in existing}
    unique = []

    for job in new_jobs:
        if job.id in seen:
            continue
        seen.add(job.id)
        unique.append(job)

    return unique


def merge_job_scores(existing: List[Job], scored: Iterable[Job]) -> List[Job]:
    """
    Copy scoring data onto existing jobs with matching ids.

    Only the scoring fields are taken from ``scored``; tracking fields
    (status, notes) on the existing jobs are left alone. Jobs without a
    scored counterpart are returned unchanged.
    """
    scored_by_id: Dict[str, Job] = {job.id: job for job in scored}
    merged = []

    for job in existing:
        match = scored_by_id.get(job.id)
        if match is None:
            merged.append(job)
            continue

        updates = {name: getattr(match, name) for name in SCORE_FIELDS}
        merged.append(job.copy(update=updates))

    return merged


def compute_job_metrics(jobs: List[Job]) -> JobMetrics:
    """
    Dashboard aggregates for a job list.

    - total, high and medium priority counts
    - average score over scored jobs only (0.0 when none are scored)
    - last update: latest status change, or discovery time for jobs
      never touched by the user
    """
    high = medium = scored = 0
    score_total = 0.0
    last_updated: Optional[str] = None

    for job in jobs:
        if job.priority == PriorityLevel.HIGH:
            high += 1
        elif job.priority == PriorityLevel.MEDIUM:
            medium += 1

        if job.score is not None:
            scored += 1
            score_total += job.score

        # ISO-8601 UTC instants sort lexically
        stamp = job.status_updated_at or job.discovered_at
        if stamp and (last_updated is None or stamp > last_updated):
            last_updated = stamp

    return JobMetrics(
        total_jobs=len(jobs),
        high_priority_count=high,
        medium_priority_count=medium,
        scored_count=scored,
        average_score=score_total / scored if scored else 0.0,
        last_updated=last_updated,
    )
