"""Supplemental job feed import."""

from .exceptions import FeedError, FeedFetchError, FeedFormatError
from .importer import FeedImporter
from .models import FeedJob, ImportResult
from .scheduler import FeedScheduler

__all__ = [
    "FeedError",
    "FeedFetchError",
    "FeedFormatError",
    "FeedImporter",
    "FeedJob",
    "FeedScheduler",
    "ImportResult",
]
