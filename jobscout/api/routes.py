"""
FastAPI Routes for JobScout

REST endpoints for the resume library, saved jobs and the user profile.
The caller's identity comes from the X-User-Id header.

Run with: uvicorn jobscout.api.routes:app --reload
"""

from typing import Optional, List
from datetime import datetime, timezone
from functools import lru_cache
import logging

from fastapi import FastAPI, HTTPException, Depends, Header, UploadFile, File, Form
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.orm import sessionmaker

from jobscout import __version__
from jobscout.core.config import get_settings
from jobscout.core.database import create_session_factory
from jobscout.core.resume import format_resume_size, get_resume_format, validate_resume_size
from jobscout.core.schemas import (
    APIResponse, ApplicationStatus, Job, PriorityLevel, ResumeFormat, TailoredResume,
    UserProfile
)
from jobscout.services.storage import JobStore, ProfileStore, ResumeStore

logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI App Setup
# ============================================================================

app = FastAPI(
    title="JobScout API",
    description="Resume library, saved jobs and profile for the job search assistant",
    version=__version__
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache()
def get_session_factory() -> sessionmaker:
    """Session factory for the configured database, created on first use."""
    return create_session_factory()


def get_resume_store(session_factory: sessionmaker = Depends(get_session_factory)) -> ResumeStore:
    return ResumeStore(session_factory)


def get_job_store(session_factory: sessionmaker = Depends(get_session_factory)) -> JobStore:
    return JobStore(session_factory)


def get_profile_store(session_factory: sessionmaker = Depends(get_session_factory)) -> ProfileStore:
    return ProfileStore(session_factory)


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Authenticated user id, or 401."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


def check_resume_size(content: str):
    """413 if the resume is over the configured limit."""
    if not validate_resume_size(content):
        limit = get_settings().resume.max_size_bytes
        raise HTTPException(
            status_code=413,
            detail=f"Resume is {format_resume_size(content)}; the limit is {limit // 1024} KB"
        )


# ============================================================================
# Request Models
# ============================================================================

class ResumeUpdateRequest(BaseModel):
    """Rename and/or edit a resume."""
    name: Optional[str] = None
    content: Optional[str] = None


class SaveJobsRequest(BaseModel):
    """Jobs picked by the agent or the user."""
    jobs: List[Job]


class JobStatusRequest(BaseModel):
    """New application status."""
    status: ApplicationStatus


class JobNotesRequest(BaseModel):
    notes: str


class JobUpdateRequest(BaseModel):
    """Notes and/or a tailored resume for a saved job."""
    notes: Optional[str] = None
    tailored_resume: Optional[TailoredResume] = None


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__
    }


# ============================================================================
# Resume Endpoints
# ============================================================================

@app.get("/resumes")
def list_resumes(user_id: str = Depends(get_user_id),
                 store: ResumeStore = Depends(get_resume_store)):
    """All resumes for the user, newest first, without content."""
    resumes = store.get_resumes(user_id)
    return {"resumes": [r.dict() for r in resumes]}


@app.post("/resumes/upload")
async def upload_resume(
    name: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    format: Optional[ResumeFormat] = Form(None),
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_user_id),
    store: ResumeStore = Depends(get_resume_store)
):
    """
    Upload a resume.

    Either send the text as ``content`` or attach a ``file``. Without an
    explicit ``format``, an attached file's extension decides it.
    """
    if content is None and file is not None:
        try:
            content = (await file.read()).decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="Resume file must be UTF-8 text")
        format = format or get_resume_format(file.filename or "")
        name = name or file.filename

    if not name or not content or not format:
        raise HTTPException(status_code=400, detail="Missing required fields")

    check_resume_size(content)

    logger.info(f"Uploading resume '{name}' for user {user_id} ({format_resume_size(content)})")
    resume = store.upload_resume(user_id, name, content, format)

    if not resume:
        raise HTTPException(status_code=500, detail="Failed to upload resume")

    return {"success": True, "resume": resume.dict()}


@app.get("/resumes/{resume_id}")
def get_resume(resume_id: str,
               user_id: str = Depends(get_user_id),
               store: ResumeStore = Depends(get_resume_store)):
    """Resume content, for editing."""
    content = store.get_resume_content(user_id, resume_id)

    if content is None:
        raise HTTPException(status_code=404, detail="Resume not found")

    return {"content": content}


@app.patch("/resumes/{resume_id}", response_model=APIResponse)
def update_resume(resume_id: str, request: ResumeUpdateRequest,
                  user_id: str = Depends(get_user_id),
                  store: ResumeStore = Depends(get_resume_store)):
    """Update resume name and/or content. Content changes re-parse sections."""
    if request.content is not None:
        check_resume_size(request.content)

    if not store.update_resume(user_id, resume_id, name=request.name, content=request.content):
        raise HTTPException(status_code=500, detail="Failed to update resume")

    return APIResponse(success=True)


@app.delete("/resumes/{resume_id}", response_model=APIResponse)
def delete_resume(resume_id: str,
                  user_id: str = Depends(get_user_id),
                  store: ResumeStore = Depends(get_resume_store)):
    """Delete a resume."""
    if not store.delete_resume(user_id, resume_id):
        raise HTTPException(status_code=500, detail="Failed to delete resume")

    return APIResponse(success=True)


# ============================================================================
# Job Endpoints
# ============================================================================

@app.get("/jobs")
def list_jobs(status: Optional[ApplicationStatus] = None,
              priority: Optional[PriorityLevel] = None,
              user_id: str = Depends(get_user_id),
              store: JobStore = Depends(get_job_store)):
    """Saved jobs, optionally filtered by application status or priority."""
    if status is not None:
        jobs = store.get_jobs_by_status(user_id, status)
    elif priority is not None:
        jobs = store.get_jobs_by_priority(user_id, priority)
    else:
        jobs = store.get_jobs(user_id)

    return {"jobs": [job.dict() for job in jobs], "total": len(jobs)}


@app.get("/jobs/metrics")
def job_metrics(user_id: str = Depends(get_user_id),
                store: JobStore = Depends(get_job_store)):
    """Dashboard metrics over the user's saved jobs."""
    return store.get_metrics(user_id).dict()


@app.post("/jobs/save")
def save_jobs(request: SaveJobsRequest,
              user_id: str = Depends(get_user_id),
              store: JobStore = Depends(get_job_store)):
    """Save jobs. Jobs the user already has are skipped."""
    added = store.save_jobs(user_id, request.jobs)

    if added is None:
        raise HTTPException(status_code=500, detail="Failed to save jobs")

    return {"success": True, "count": added}


@app.post("/jobs/score", response_model=APIResponse)
def score_jobs(request: SaveJobsRequest,
               user_id: str = Depends(get_user_id),
               store: JobStore = Depends(get_job_store)):
    """Merge scores from the matching agent into saved jobs."""
    if not store.update_jobs_with_scores(user_id, request.jobs):
        raise HTTPException(status_code=500, detail="Failed to update job scores")

    return APIResponse(success=True)


@app.patch("/jobs/{job_id}/status", response_model=APIResponse)
def update_job_status(job_id: str, request: JobStatusRequest,
                      user_id: str = Depends(get_user_id),
                      store: JobStore = Depends(get_job_store)):
    """Update a job's application status."""
    if not store.update_job_status(user_id, job_id, request.status):
        raise HTTPException(status_code=404, detail="Job not found")

    return APIResponse(success=True)


@app.patch("/jobs/{job_id}/notes", response_model=APIResponse)
def update_job_notes(job_id: str, request: JobNotesRequest,
                     user_id: str = Depends(get_user_id),
                     store: JobStore = Depends(get_job_store)):
    if not store.update_job_notes(user_id, job_id, request.notes):
        raise HTTPException(status_code=404, detail="Job not found")

    return APIResponse(success=True)


@app.patch("/jobs/{job_id}", response_model=APIResponse)
def update_job(job_id: str, request: JobUpdateRequest,
               user_id: str = Depends(get_user_id),
               store: JobStore = Depends(get_job_store)):
    """Update a saved job's notes and/or attach a tailored resume."""
    if store.get_job_by_id(user_id, job_id) is None:
        raise HTTPException(status_code=404, detail="Job not found")

    if request.notes is not None:
        if not store.update_job_notes(user_id, job_id, request.notes):
            raise HTTPException(status_code=500, detail="Failed to update job notes")

    if request.tailored_resume is not None:
        if not store.save_job_resume(user_id, job_id, request.tailored_resume):
            raise HTTPException(status_code=500, detail="Failed to save tailored resume")

    return APIResponse(success=True)


@app.delete("/jobs/{job_id}", response_model=APIResponse)
def delete_job(job_id: str,
               user_id: str = Depends(get_user_id),
               store: JobStore = Depends(get_job_store)):
    if not store.delete_job(user_id, job_id):
        raise HTTPException(status_code=404, detail="Job not found")

    return APIResponse(success=True)


# ============================================================================
# Profile Endpoints
# ============================================================================

@app.get("/profile")
def get_profile(user_id: str = Depends(get_user_id),
                store: ProfileStore = Depends(get_profile_store)):
    profile = store.get_profile(user_id)

    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    return {"profile": profile.dict()}


@app.post("/profile")
def save_profile(profile: UserProfile,
                 user_id: str = Depends(get_user_id),
                 store: ProfileStore = Depends(get_profile_store)):
    """Create or replace the user's profile."""
    try:
        saved = store.save_profile(user_id, profile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if saved is None:
        raise HTTPException(status_code=500, detail="Failed to save profile")

    return {"success": True, "profile": saved.dict()}


# ============================================================================
# Startup Event
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize on startup."""
    logger.info(f"{get_settings().app_name} API starting up...")
