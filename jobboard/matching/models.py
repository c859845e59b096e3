"""Data models for the matching engine.

Plain dataclasses: the engine is pure and these never touch the database.
"""

from dataclasses import dataclass
from typing import Optional

from jobboard.domain.models import Job, JobType, Profile, User


@dataclass
class SearchFilters:
    """Ad-hoc filters for job search.

    Text filters count as supplied when they contain a non-blank value;
    numeric filters count as supplied when they are not None.

    Attributes:
        keyword: Substring looked up in title, description, skills, company and location
        location: Substring of the job location
        skills: Comma-separated skill tokens, each looked up in the job's skills
        min_exp / max_exp: Inclusive range for the job's required experience (years)
        min_salary / max_salary: Range that must overlap the job's salary range
        job_type: Exact job type
    """

    keyword: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[str] = None
    min_exp: Optional[int] = None
    max_exp: Optional[int] = None
    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    job_type: Optional[JobType] = None

    @property
    def has_experience_range(self) -> bool:
        return self.min_exp is not None or self.max_exp is not None

    @property
    def has_salary_range(self) -> bool:
        return self.min_salary is not None or self.max_salary is not None


@dataclass
class ScoredJob:
    """A job paired with its match score against one candidate."""

    job: Job
    score: int


@dataclass
class ScoredCandidate:
    """A job seeker's profile paired with its match score against one job."""

    profile: Profile
    user: User
    score: int


@dataclass
class SearchHit:
    """A job's search relevance.

    Attributes:
        job: The scored job
        score: Absolute points accumulated from the filters
        match_percentage: score normalized against the maximum achievable, 0-100
    """

    job: Job
    score: int
    match_percentage: int
