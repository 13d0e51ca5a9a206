"""
Pydantic schemas for resumes, jobs and user profiles.

These schemas ensure:
1. Uploaded resumes and saved jobs are validated
2. Optional fields stay distinguishable from empty ones
3. API responses are consistent
"""

from typing import Optional, List, Any
from enum import Enum
from pydantic import BaseModel, Field


# ============================================================================
# Enums
# ============================================================================

class ResumeFormat(str, Enum):
    """Structural format of an uploaded resume."""

    MARKDOWN = "markdown"
    TEXT = "text"


class JobSource(str, Enum):
    """Where a job posting was discovered."""

    FIRECRAWL = "firecrawl"
    ADZUNA = "adzuna"
    MANUAL = "manual"


class ApplicationStatus(str, Enum):
    """User-tracked application status of a saved job."""

    SAVED = "saved"
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"


class PriorityLevel(str, Enum):
    """Priority bucket derived from a job's fit score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProfileOrigin(str, Enum):
    """How a profile was created."""

    CHAT = "chat"
    FORM = "form"


class ResumeChangeType(str, Enum):
    """Kind of edit made when tailoring a resume to a job."""

    REORDER = "reorder"
    KEYWORD = "keyword"
    EMPHASIS = "emphasis"
    SUMMARY = "summary"
    TRIM = "trim"
    SECTION_MOVE = "section_move"


# ============================================================================
# Resumes
# ============================================================================

class ResumeSections(BaseModel):
    """Sections parsed out of a resume.

    ``None`` means no heading for the section was found. An empty string
    means the heading exists but nothing follows it.
    """

    summary: Optional[str] = None
    experience: Optional[str] = None
    skills: Optional[str] = None
    education: Optional[str] = None
    other: Optional[str] = None  # Not produced by the parser

    def present(self) -> List[str]:
        """Names of the sections that were found."""
        return [name for name, value in self.dict().items() if value is not None]


class Resume(BaseModel):
    """A resume in the user's library."""

    id: str
    name: str
    content: str
    uploaded_at: str  # ISO-8601 UTC instant
    format: ResumeFormat
    sections: Optional[ResumeSections] = None


class ResumeSummary(BaseModel):
    """Resume listing entry, returned without its content."""

    id: str
    name: str
    uploaded_at: str
    format: ResumeFormat
    file_size: int = 0
    sections: Optional[ResumeSections] = None


# ============================================================================
# Jobs
# ============================================================================

class ScoreBreakdown(BaseModel):
    """Points awarded per scoring category."""

    salary_match: float = 0
    location_fit: float = 0
    company_appeal: float = 0
    role_match: float = 0
    requirements_fit: float = 0


class ResumeChange(BaseModel):
    """One edit made to the master resume while tailoring it."""

    type: ResumeChangeType
    description: str

    class Config:
        use_enum_values = True


class MatchAnalysis(BaseModel):
    """How well a tailored resume covers a job's requirements."""

    alignment_score: float = Field(ge=0, le=100)
    addressed_requirements: List[str] = Field(default_factory=list)
    remaining_gaps: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class TargetJob(BaseModel):
    id: str
    title: str
    company: str


class TailoredResume(BaseModel):
    """A resume rewritten for one job, generated from a master resume."""

    content: str  # Markdown
    master_resume_name: str
    target_job: Optional[TargetJob] = None
    generated_at: Optional[str] = None  # ISO-8601 UTC instant
    changes: List[ResumeChange] = Field(default_factory=list)
    match_analysis: Optional[MatchAnalysis] = None


class Job(BaseModel):
    """A job posting discovered by the agent, optionally scored and tracked."""

    # Identity
    id: str
    title: str
    company: str
    location: str
    salary: Optional[str] = None

    # Posting
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    url: str
    source: JobSource = JobSource.MANUAL
    discovered_at: str  # ISO-8601 UTC instant

    # Scoring (added by the matching agent)
    score: Optional[float] = Field(default=None, ge=0, le=100)
    score_breakdown: Optional[ScoreBreakdown] = None
    reasoning: Optional[str] = None
    gaps: Optional[List[str]] = None
    priority: Optional[PriorityLevel] = None

    # Application tracking (added by the user)
    application_status: Optional[ApplicationStatus] = None
    status_updated_at: Optional[str] = None
    notes: Optional[str] = None
    tailored_resume: Optional[TailoredResume] = None


class JobMetrics(BaseModel):
    """Dashboard aggregates over a job collection."""

    total_jobs: int = 0
    high_priority_count: int = 0
    medium_priority_count: int = 0
    scored_count: int = 0
    average_score: float = 0.0
    last_updated: Optional[str] = None


# ============================================================================
# User Profile
# ============================================================================

class ScoringWeights(BaseModel):
    """Weights for the five scoring categories. Must sum to 100."""

    salary_match: int = 30
    location_fit: int = 20
    company_appeal: int = 25
    role_match: int = 15
    requirements_fit: int = 10


class UserProfile(BaseModel):
    """Professional information and job search preferences."""

    name: str = ""
    professional_background: str = ""
    skills: List[str] = Field(default_factory=list)
    salary_min: int = 0
    salary_max: int = 0
    preferred_locations: List[str] = Field(default_factory=list)
    job_preferences: List[str] = Field(default_factory=list)
    deal_breakers: str = ""
    company_preferences: Optional[str] = None
    scoring_weights: ScoringWeights = Field(default_factory=ScoringWeights)
    updated_at: str = ""
    created_via: Optional[ProfileOrigin] = None


# ============================================================================
# API Response Schemas
# ============================================================================

class APIResponse(BaseModel):
    """Standard API response wrapper."""

    success: bool
    message: str = ""
    data: Optional[Any] = None
    errors: Optional[List[str]] = None
