"""Import externally published jobs into the board.

A feed is a JSON array of job objects read from a local file or an http(s)
URL. Entries whose (title, company) pair already exists are skipped, the
rest are saved as open jobs with no owning recruiter and announced to every
connected client as ``job:new``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from jobboard.domain.models import JobStatus
from jobboard.logging import get_logger, log_context
from jobboard.persistence import JobRepository, get_session
from jobboard.realtime import Broadcaster, events

from .exceptions import FeedFetchError, FeedFormatError
from .models import FeedJob, ImportResult

logger = get_logger(__name__, component="feeds")

USER_AGENT = "JobBoardFeedImporter/1.0"


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


class FeedImporter:
    """Reads one feed source and saves its new jobs."""

    def __init__(
        self,
        source: str,
        broadcaster: Optional[Broadcaster] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        if not source or not source.strip():
            raise ValueError("Feed source must not be empty")
        self.source = source.strip()
        self.broadcaster = broadcaster
        self.timeout = timeout
        self._http = session or requests.Session()
        self._http.headers.update({"User-Agent": USER_AGENT})

    def fetch(self) -> List[Dict[str, Any]]:
        """
        Read the raw feed entries.

        Raises:
            FeedFetchError: If the source can't be read
            FeedFormatError: If the content isn't a JSON array of objects
        """
        data = self._fetch_url() if is_url(self.source) else self._read_file()

        if not isinstance(data, list):
            raise FeedFormatError(f"Expected a JSON array, got {type(data).__name__}")
        return [entry for entry in data if isinstance(entry, dict)]

    def run_once(self) -> ImportResult:
        """
        Fetch the feed and save every job not already on the board.

        Returns:
            ImportResult with per-outcome counts
        """
        result = ImportResult()

        with log_context(feed_source=self.source):
            entries = self.fetch()
            result.fetched = len(entries)

            jobs: List[FeedJob] = []
            for index, entry in enumerate(entries):
                try:
                    jobs.append(FeedJob.model_validate(entry))
                except PydanticValidationError as e:
                    result.invalid += 1
                    logger.warning(
                        f"Skipping invalid feed entry at index {index}",
                        extra={
                            "event": "feed.entry.invalid",
                            "index": index,
                            "error_count": e.error_count(),
                        },
                    )

            created = []
            seen = set()
            with get_session() as session:
                repo = JobRepository(session)
                for feed_job in jobs:
                    key = (feed_job.title.lower(), feed_job.company.lower())
                    if key in seen or repo.exists_with_title_and_company(feed_job.title, feed_job.company):
                        result.skipped_existing += 1
                        continue
                    seen.add(key)
                    created.append(
                        repo.create(
                            **feed_job.model_dump(),
                            posted_by=None,
                            status=JobStatus.OPEN,
                        )
                    )

            # Announce only after the jobs are committed
            for job in created:
                result.job_ids.append(job.id)
                if self.broadcaster is not None:
                    self.broadcaster.emit_from_thread(events.JOB_NEW, job.to_wire())

            result.created = len(created)
            logger.info(
                f"Feed import finished: {result.created} created, "
                f"{result.skipped_existing} already present, {result.invalid} invalid",
                extra={
                    "event": "feed.import.completed",
                    "fetched": result.fetched,
                    "created": result.created,
                    "skipped_existing": result.skipped_existing,
                    "invalid": result.invalid,
                },
            )
        return result

    def _read_file(self) -> Any:
        path = Path(self.source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(
                f"Cannot read feed file {path}: {e}",
                extra={"event": "feed.fetch.error", "error_type": type(e).__name__},
            )
            raise FeedFetchError(f"Cannot read feed file {path}: {e}", source=self.source) from e

        try:
            return json.loads(text)
        except ValueError as e:
            raise FeedFormatError(f"Feed file {path} is not valid JSON: {e}") from e

    def _fetch_url(self) -> Any:
        url = self.source
        logger.debug(
            f"HTTP GET {url}",
            extra={"event": "feed.fetch.request", "url": url, "timeout": self.timeout},
        )

        try:
            response = self._http.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Feed request timed out after {self.timeout} seconds",
                extra={"event": "feed.fetch.retryable_error", "error_type": "Timeout", "url": url},
            )
            raise FeedFetchError(
                f"Request to {url} timed out after {self.timeout} seconds", source=url, status_code=0
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Feed request failed: {e}",
                extra={"event": "feed.fetch.error", "error_type": type(e).__name__, "url": url},
            )
            raise FeedFetchError(f"Request to {url} failed: {e}", source=url, status_code=0) from e

        if response.status_code >= 400:
            is_retryable = response.status_code >= 500
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "feed.fetch.retryable_error" if is_retryable else "feed.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise FeedFetchError(
                f"HTTP {response.status_code}: {response.reason}",
                source=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise FeedFormatError(f"Failed to parse JSON response from {url}: {e}") from e
