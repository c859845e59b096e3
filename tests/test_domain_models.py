"""Unit tests for domain models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from jobboard.domain.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    JobType,
    Notification,
    NotificationType,
    Profile,
    User,
    UserRole,
    UserStatus,
)


def job(**overrides):
    fields = {
        "id": 1,
        "title": "Backend Engineer",
        "company": "Acme",
        "description": "APIs",
        "created_at": datetime(2026, 1, 5, 12, 0, 0),
    }
    fields.update(overrides)
    return Job(**fields)


class TestJob:
    """Tests for Job model."""

    def test_defaults(self):
        posting = job()

        assert posting.status == JobStatus.OPEN
        assert posting.job_type == JobType.FULL_TIME
        assert posting.posted_by is None
        assert posting.is_open

    def test_naive_datetime_becomes_utc(self):
        assert job().created_at.tzinfo == timezone.utc

    def test_wire_format_is_camel_case(self):
        wire = job(posted_by=3, salary_min=10, job_type=JobType.PART_TIME).to_wire()

        assert wire["postedBy"] == 3
        assert wire["salaryMin"] == 10
        assert wire["jobType"] == "part-time"
        assert wire["createdAt"].startswith("2026-01-05T12:00:00")
        assert "posted_by" not in wire

    def test_accepts_camel_case_input(self):
        posting = Job.model_validate(
            {"id": 1, "title": "t", "company": "c", "description": "d", "createdAt": "2026-01-05T12:00:00Z", "postedBy": 9}
        )
        assert posting.posted_by == 9

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            job(status="archived")


class TestUserAndProfile:
    def test_suspended(self):
        user = User(id=1, name="Jo", email="jo@example.com", status=UserStatus.SUSPENDED, created_at=datetime(2026, 1, 1))
        assert user.is_suspended
        assert user.role == UserRole.JOBSEEKER

    @pytest.mark.parametrize(
        "resume_url,expected",
        [(None, False), ("", False), ("   ", False), ("https://cv.example.com/jo.pdf", True)],
    )
    def test_has_resume(self, resume_url, expected):
        assert Profile(id=1, user_id=1, resume_url=resume_url).has_resume is expected


class TestApplicationStatus:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("pending", ApplicationStatus.PENDING),
            ("Approved", ApplicationStatus.APPROVED),
            (" accepted ", ApplicationStatus.APPROVED),
            ("REJECTED", ApplicationStatus.REJECTED),
        ],
    )
    def test_parse(self, value, expected):
        assert ApplicationStatus.parse(value) == expected

    @pytest.mark.parametrize("value", ["", "maybe", None])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(ValueError):
            ApplicationStatus.parse(value)

    def test_application_defaults_to_pending(self):
        application = Application(id=1, applicant_id=2, job_id=3, applied_at=datetime(2026, 1, 1))
        assert application.status == ApplicationStatus.PENDING
        assert application.to_wire()["applicantId"] == 2


class TestNotification:
    def test_wire_format(self):
        notification = Notification(
            id=1,
            user_id=2,
            type=NotificationType.RECOMMENDED_JOB,
            message="✨ 100% Match!",
            data={"jobId": 3, "matchScore": 100},
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )

        wire = notification.to_wire()

        assert wire["type"] == "recommendedJob"
        assert wire["isRead"] is False
        assert wire["data"] == {"jobId": 3, "matchScore": 100}
