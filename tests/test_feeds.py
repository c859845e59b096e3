"""Tests for the job feed importer."""

import asyncio
import json
from unittest.mock import Mock

import pytest
import requests

from jobboard.domain.models import JobStatus, JobType
from jobboard.feeds import FeedFetchError, FeedFormatError, FeedImporter, FeedJob
from jobboard.feeds.importer import USER_AGENT, is_url
from jobboard.persistence import close_database, init_database
from jobboard.realtime import Broadcaster, events
from tests.helpers import FakeConnection, get_job, make_job


@pytest.fixture
def database(tmp_path):
    init_database(f"sqlite:///{tmp_path / 'feed.db'}")
    yield
    close_database()


def write_feed(tmp_path, entries):
    path = tmp_path / "feed.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return str(path)


def http_session(payload=None, status_code=200, reason="OK", json_error=None):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    session = Mock()
    session.headers = {}
    session.get.return_value = response
    return session


class TestFeedJob:
    def test_camel_case_keys_and_skill_lists(self):
        job = FeedJob.model_validate(
            {"title": " SRE ", "company": "Acme", "skills": ["go", " k8s ", ""], "jobType": "remote", "salaryMin": 10}
        )

        assert job.title == "SRE"
        assert job.skills == "go, k8s"
        assert job.job_type == JobType.REMOTE
        assert job.salary_min == 10

    @pytest.mark.parametrize(
        "entry",
        [
            {"company": "Acme"},
            {"title": "   ", "company": "Acme"},
            {"title": "SRE", "company": "Acme", "salaryMin": -1},
            {"title": "SRE", "company": "Acme", "jobType": "gig"},
        ],
    )
    def test_invalid_entries(self, entry):
        with pytest.raises(ValueError):
            FeedJob.model_validate(entry)


class TestFeedImporterSources:
    def test_is_url(self):
        assert is_url("https://feed.example.com/jobs.json")
        assert is_url("HTTP://feed.example.com")
        assert not is_url("/var/feeds/jobs.json")

    def test_empty_source_is_refused(self):
        with pytest.raises(ValueError):
            FeedImporter("  ")

    def test_user_agent_is_set(self):
        session = http_session([])
        FeedImporter("https://feed.example.com", session=session)
        assert session.headers["User-Agent"] == USER_AGENT

    def test_fetch_from_url(self):
        session = http_session([{"title": "SRE", "company": "Acme"}, "junk"])
        importer = FeedImporter("https://feed.example.com/jobs.json", session=session, timeout=12)

        assert importer.fetch() == [{"title": "SRE", "company": "Acme"}]
        session.get.assert_called_once_with("https://feed.example.com/jobs.json", timeout=12)

    @pytest.mark.parametrize("status_code", [404, 503])
    def test_http_error_status(self, status_code):
        importer = FeedImporter(
            "https://feed.example.com", session=http_session(status_code=status_code, reason="Nope")
        )

        with pytest.raises(FeedFetchError) as exc_info:
            importer.fetch()
        assert exc_info.value.status_code == status_code

    def test_timeout(self):
        session = http_session()
        session.get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(FeedFetchError, match="timed out"):
            FeedImporter("https://feed.example.com", session=session).fetch()

    def test_connection_error(self):
        session = http_session()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FeedFetchError) as exc_info:
            FeedImporter("https://feed.example.com", session=session).fetch()
        assert exc_info.value.status_code == 0

    def test_bad_json_from_url(self):
        importer = FeedImporter("https://feed.example.com", session=http_session(json_error=ValueError("bad")))
        with pytest.raises(FeedFormatError):
            importer.fetch()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FeedFetchError):
            FeedImporter(str(tmp_path / "absent.json")).fetch()

    def test_file_must_hold_an_array(self, tmp_path):
        path = tmp_path / "feed.json"
        path.write_text('{"title": "SRE"}', encoding="utf-8")

        with pytest.raises(FeedFormatError, match="JSON array"):
            FeedImporter(str(path)).fetch()

    def test_file_with_invalid_json(self, tmp_path):
        path = tmp_path / "feed.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(FeedFormatError):
            FeedImporter(str(path)).fetch()


class TestFeedImport:
    def test_new_jobs_are_saved_open_and_ownerless(self, database, tmp_path):
        source = write_feed(
            tmp_path,
            [
                {"title": "SRE", "company": "Acme", "skills": ["go"]},
                {"title": "Analyst", "company": "Globex", "description": "Numbers"},
            ],
        )

        result = FeedImporter(source).run_once()

        assert (result.fetched, result.created, result.skipped_existing, result.invalid) == (2, 2, 0, 0)
        job = get_job(result.job_ids[0])
        assert job.posted_by is None
        assert job.status == JobStatus.OPEN
        assert job.skills == "go"

    def test_existing_and_repeated_entries_are_skipped(self, database, tmp_path):
        make_job(None, title="SRE", company="Acme")
        source = write_feed(
            tmp_path,
            [
                {"title": "sre", "company": "ACME"},
                {"title": "Analyst", "company": "Globex"},
                {"title": "Analyst", "company": "Globex"},
                {"title": "", "company": "Nobody"},
            ],
        )

        result = FeedImporter(source).run_once()

        assert result.created == 1
        assert result.skipped_existing == 2
        assert result.invalid == 1

    def test_second_run_creates_nothing(self, database, tmp_path):
        source = write_feed(tmp_path, [{"title": "SRE", "company": "Acme"}])
        FeedImporter(source).run_once()

        assert FeedImporter(source).run_once().created == 0

    def test_created_jobs_are_announced(self, database, tmp_path):
        source = write_feed(tmp_path, [{"title": "SRE", "company": "Acme"}])
        broadcaster = Broadcaster()
        conn = FakeConnection()
        broadcaster.registry.join("user_1", conn)

        async def scenario():
            broadcaster.bind_loop(asyncio.get_running_loop())
            result = await asyncio.to_thread(FeedImporter(source, broadcaster=broadcaster).run_once)
            for _ in range(100):
                if conn.sent:
                    break
                await asyncio.sleep(0.01)
            return result

        result = asyncio.run(scenario())

        [announced] = conn.events(events.JOB_NEW)
        assert announced["id"] == result.job_ids[0]
        assert announced["postedBy"] is None
