"""Request and response bodies of the HTTP API (camelCase JSON)."""

from typing import List, Optional

from pydantic import Field, model_validator

from jobboard.domain.models import (
    Application,
    DomainModel,
    Job,
    JobType,
    Profile,
    SavedJob,
    UserRole,
    UserStatus,
)

# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------


class JobCreateRequest(DomainModel):
    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    skills: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    experience_required: Optional[int] = Field(None, ge=0)
    job_type: JobType = JobType.FULL_TIME

    @model_validator(mode="after")
    def check_salary_range(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("salaryMin must not exceed salaryMax")
        return self


class StatusUpdateRequest(DomainModel):
    """Body of every status PATCH. The value is validated by the service."""

    status: str


class ProfileUpdateRequest(DomainModel):
    headline: Optional[str] = Field(None, max_length=255)
    experience: Optional[int] = Field(None, ge=0)
    skills: Optional[str] = None
    resume_url: Optional[str] = None


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------


class RecommendedJob(Job):
    score: int


class SearchResult(Job):
    match_score: int
    match_percentage: int


class JobSummary(DomainModel):
    id: int
    title: str
    company: str
    skills: Optional[str] = None
    location: Optional[str] = None


class CandidateMatch(DomainModel):
    profile_id: int
    user_id: int
    name: str
    email: str
    headline: Optional[str] = None
    experience: Optional[int] = None
    skills: Optional[str] = None
    resume_url: Optional[str] = None
    match_score: int


class MatchedCandidatesResponse(DomainModel):
    job: JobSummary
    candidates: List[CandidateMatch]
    total_matches: int


class UserSummary(DomainModel):
    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus


class ApplicationWithJob(Application):
    job: Optional[Job] = None


class Applicant(Application):
    applicant: Optional[UserSummary] = None
    profile: Optional[Profile] = None


class SavedJobEntry(SavedJob):
    job: Job


class AdminJob(Job):
    recruiter_name: Optional[str] = None
    recruiter_email: Optional[str] = None
    recruiter_status: Optional[UserStatus] = None


class UnreadCount(DomainModel):
    count: int


class ReadAllResult(DomainModel):
    updated: int


class DeleteJobResponse(DomainModel):
    message: str
    job_id: int
    job_title: str


class ErrorResponse(DomainModel):
    detail: str
    error: str
