"""Exceptions raised while reading a job feed."""

from typing import Optional


class FeedError(Exception):
    """Base exception for feed import errors."""

    pass


class FeedFetchError(FeedError):
    """The feed source could not be read.

    ``status_code`` is the HTTP status for URL sources, 0 for connection
    failures and None for file sources.
    """

    def __init__(self, message: str, source: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class FeedFormatError(FeedError):
    """The feed was read but is not a JSON array of objects."""

    pass
