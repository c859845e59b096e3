"""Builders for users, profiles and jobs, plus an in-memory live connection.

Each builder opens and commits its own session, so tests read like a
sequence of facts about the board.
"""

import json
from typing import Any, Dict, List, Optional

from jobboard.auth import Actor
from jobboard.domain.models import Job, JobStatus, JobType, Profile, User, UserRole, UserStatus
from jobboard.persistence import JobRepository, ProfileRepository, UserRepository, get_session


def make_user(
    name: str = "Jane Seeker",
    email: Optional[str] = None,
    role: UserRole = UserRole.JOBSEEKER,
    status: UserStatus = UserStatus.ACTIVE,
) -> User:
    email = email or f"{name.lower().replace(' ', '.')}@example.com"
    with get_session() as session:
        return UserRepository(session).create(name=name, email=email, role=role, status=status)


def make_profile(user_id: int, skills: Optional[str] = "python, sql", **fields: Any) -> Profile:
    fields.setdefault("resume_url", "https://files.example.com/resume.pdf")
    with get_session() as session:
        return ProfileRepository(session).save(user_id, skills=skills, **fields)


def make_jobseeker(name: str, skills: Optional[str] = "python, sql", **profile_fields: Any) -> User:
    user = make_user(name=name)
    make_profile(user.id, skills=skills, **profile_fields)
    return user


def make_job(
    posted_by: Optional[int],
    title: str = "Backend Engineer",
    company: str = "Acme",
    skills: Optional[str] = "python, sql",
    status: JobStatus = JobStatus.OPEN,
    **fields: Any,
) -> Job:
    fields.setdefault("description", f"{title} at {company}")
    fields.setdefault("job_type", JobType.FULL_TIME)
    with get_session() as session:
        return JobRepository(session).create(
            title=title,
            company=company,
            skills=skills,
            posted_by=posted_by,
            status=status,
            **fields,
        )


def get_job(job_id: int) -> Optional[Job]:
    with get_session() as session:
        return JobRepository(session).get(job_id)


def get_user(user_id: int) -> Optional[User]:
    with get_session() as session:
        return UserRepository(session).get(user_id)


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=user.role)


class FakeConnection:
    """Collects frames sent to it. Set ``broken`` to make sends fail."""

    def __init__(self, broken: bool = False):
        self.sent: List[str] = []
        self.broken = broken

    async def send_text(self, data: str) -> None:
        if self.broken:
            raise ConnectionError("connection reset")
        self.sent.append(data)

    @property
    def frames(self) -> List[Dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]

    def events(self, name: str) -> List[Any]:
        """Data of every received frame with the given event name."""
        return [frame["data"] for frame in self.frames if frame["event"] == name]
