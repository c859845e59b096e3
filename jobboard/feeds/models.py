"""Shapes of feed entries and import results."""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import Field, field_validator

from jobboard.domain.models import DomainModel, JobType


class FeedJob(DomainModel):
    """One job as published in a feed. Keys may be camelCase or snake_case."""

    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    skills: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    experience_required: Optional[int] = Field(None, ge=0)
    job_type: JobType = JobType.FULL_TIME

    @field_validator("title", "company")
    @classmethod
    def strip_required(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("skills", mode="before")
    @classmethod
    def join_skill_list(cls, v):
        """Feeds sometimes publish skills as a list."""
        if isinstance(v, list):
            return ", ".join(str(item).strip() for item in v if str(item).strip())
        return v


@dataclass
class ImportResult:
    """Outcome of one feed import run."""

    fetched: int = 0
    created: int = 0
    skipped_existing: int = 0
    invalid: int = 0
    job_ids: List[int] = field(default_factory=list)
