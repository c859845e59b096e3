"""Test helper utilities for job board tests."""

from .factories import (
    FakeConnection,
    actor_for,
    get_job,
    get_user,
    make_job,
    make_jobseeker,
    make_profile,
    make_user,
)

__all__ = [
    "FakeConnection",
    "actor_for",
    "get_job",
    "get_user",
    "make_job",
    "make_jobseeker",
    "make_profile",
    "make_user",
]
