"""Unit tests for the matching engine."""

from datetime import datetime, timedelta, timezone

import pytest

from jobboard.domain.models import Job, JobType, Profile, User, UserRole
from jobboard.matching import SearchFilters
from jobboard.matching.engine import (
    KEYWORD_MAX,
    match_score,
    matched_candidates,
    max_possible_score,
    parse_skill_set,
    rank_search_results,
    recommend_for_candidate,
    round_half_up,
    search_relevance,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def build_job(job_id=1, skills="python, sql", created_at=NOW, **fields):
    defaults = {
        "title": "Backend Engineer",
        "company": "Acme",
        "description": "Build services",
        "location": "Berlin",
    }
    defaults.update(fields)
    return Job(id=job_id, skills=skills, created_at=created_at, **defaults)


def build_candidate(user_id, skills):
    user = User(id=user_id, name=f"User {user_id}", email=f"u{user_id}@example.com", created_at=NOW)
    profile = Profile(id=user_id + 100, user_id=user_id, skills=skills)
    return profile, user


class TestSkillParsing:
    """Tests for skill text normalization."""

    def test_trims_lowercases_and_drops_empty_tokens(self):
        assert parse_skill_set(" Python, GO ,, sql ,") == frozenset({"python", "go", "sql"})

    def test_none_and_blank_are_empty(self):
        assert parse_skill_set(None) == frozenset()
        assert parse_skill_set("   ") == frozenset()
        assert parse_skill_set(" , ,") == frozenset()

    def test_duplicates_collapse(self):
        assert parse_skill_set("go, Go, GO") == frozenset({"go"})


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(12.5, 13), (2.5, 3), (33.333, 33), (66.666, 67), (0.0, 0), (100.0, 100)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestMatchScore:
    """Tests for the job-side skill match percentage."""

    def test_partial_match_uses_job_skill_count_as_denominator(self):
        assert match_score("java,go,rust", "go") == 33

    def test_two_of_three(self):
        assert match_score("java,go,rust", "go,rust") == 67

    def test_extra_candidate_skills_do_not_dilute(self):
        assert match_score("java,go", "go,java,rust,python") == 100

    def test_half_rounds_up(self):
        assert match_score("a,b,c,d,e,f,g,h", "a") == 13

    def test_case_and_whitespace_insensitive(self):
        assert match_score(" Python , SQL", "python,sql ") == 100

    @pytest.mark.parametrize(
        "required,candidate",
        [(None, "python"), ("python", None), ("", "python"), ("python", ""), (" , ", "python")],
    )
    def test_empty_side_scores_zero(self, required, candidate):
        assert match_score(required, candidate) == 0

    def test_no_overlap_scores_zero(self):
        assert match_score("java", "python") == 0


class TestRecommendations:
    """Tests for ranking jobs for one candidate."""

    def test_keeps_positive_scores_sorted_descending(self):
        jobs = [
            build_job(1, skills="java, go, rust"),
            build_job(2, skills="python"),
            build_job(3, skills="cobol"),
            build_job(4, skills="python, go"),
        ]

        ranked = recommend_for_candidate(jobs, "python, go")

        assert [entry.job.id for entry in ranked] == [2, 4, 1]
        assert [entry.score for entry in ranked] == [100, 100, 33]

    def test_candidate_without_skills_gets_nothing(self):
        assert recommend_for_candidate([build_job(1)], None) == []

    def test_job_without_skills_is_never_recommended(self):
        assert recommend_for_candidate([build_job(1, skills=None)], "python") == []


class TestMatchedCandidates:
    """Tests for ranking candidates for one job."""

    def test_sorted_best_first_and_zero_scores_dropped(self):
        job = build_job(1, skills="python, sql, docker, aws")
        candidates = [
            build_candidate(1, "python"),
            build_candidate(2, "python, sql, docker"),
            build_candidate(3, "ruby"),
            build_candidate(4, None),
        ]

        ranked = matched_candidates(job, candidates)

        assert [entry.user.id for entry in ranked] == [2, 1]
        assert [entry.score for entry in ranked] == [75, 25]

    def test_jobseeker_role_is_not_checked_here(self):
        profile, user = build_candidate(1, "python")
        user = user.model_copy(update={"role": UserRole.RECRUITER})
        ranked = matched_candidates(build_job(1, skills="python"), [(profile, user)])
        assert len(ranked) == 1


class TestSearchRelevance:
    """Tests for weighted search scoring."""

    def test_no_filters_scores_zero_percent(self):
        assert max_possible_score(SearchFilters()) == 1
        assert search_relevance(build_job(), SearchFilters()) == (0, 0)

    def test_blank_text_filters_are_not_supplied(self):
        filters = SearchFilters(keyword="  ", location="", skills=" , ")
        assert max_possible_score(filters) == 1

    def test_keyword_weights(self):
        job = build_job(title="Python Developer", skills="python, django", description="Web work")

        score, percentage = search_relevance(job, SearchFilters(keyword="python"))

        # title 5 + skills 4 out of 16
        assert score == 9
        assert percentage == round_half_up(9 * 100 / KEYWORD_MAX)

    def test_keyword_is_case_insensitive_substring(self):
        job = build_job(company="PyCorp")
        score, _ = search_relevance(job, SearchFilters(keyword="PYC"))
        assert score == 2

    def test_each_skill_token_scores_separately(self):
        job = build_job(skills="python, sql")
        score, percentage = search_relevance(job, SearchFilters(skills="python, go"))
        assert score == 4
        assert percentage == 50

    def test_experience_range_defaults_open_ends(self):
        job = build_job(experience_required=5)
        assert search_relevance(job, SearchFilters(min_exp=3))[0] == 3
        assert search_relevance(job, SearchFilters(max_exp=4))[0] == 0
        assert search_relevance(job, SearchFilters(min_exp=5, max_exp=5))[0] == 3

    def test_missing_experience_counts_as_zero(self):
        job = build_job(experience_required=None)
        assert search_relevance(job, SearchFilters(max_exp=2))[0] == 3

    def test_salary_range_must_overlap(self):
        job = build_job(salary_min=50_000, salary_max=70_000)
        assert search_relevance(job, SearchFilters(min_salary=60_000))[0] == 3
        assert search_relevance(job, SearchFilters(min_salary=80_000))[0] == 0
        assert search_relevance(job, SearchFilters(max_salary=40_000))[0] == 0

    def test_salary_filter_needs_both_job_bounds(self):
        job = build_job(salary_min=50_000, salary_max=None)
        score, percentage = search_relevance(job, SearchFilters(min_salary=10_000))
        assert (score, percentage) == (0, 0)

    def test_job_type_exact_match(self):
        job = build_job(job_type=JobType.CONTRACT)
        assert search_relevance(job, SearchFilters(job_type=JobType.CONTRACT)) == (2, 100)
        assert search_relevance(job, SearchFilters(job_type=JobType.REMOTE)) == (0, 0)

    def test_all_filters_matching_is_one_hundred_percent(self):
        job = build_job(
            title="python",
            description="python",
            skills="python",
            company="python",
            location="python",
            experience_required=2,
            salary_min=10,
            salary_max=20,
            job_type=JobType.REMOTE,
        )
        filters = SearchFilters(
            keyword="python",
            location="python",
            skills="python",
            min_exp=1,
            min_salary=5,
            job_type=JobType.REMOTE,
        )

        score, percentage = search_relevance(job, filters)

        assert score == max_possible_score(filters)
        assert percentage == 100


class TestRankSearchResults:
    def test_orders_by_score_then_recency_and_keeps_zero_scores(self):
        older = build_job(1, title="Python Dev", created_at=NOW - timedelta(days=2))
        newer = build_job(2, title="Python Dev", created_at=NOW)
        unrelated = build_job(3, title="Chef", skills="cooking", description="Kitchen")

        hits = rank_search_results([older, unrelated, newer], SearchFilters(keyword="python dev"))

        assert [hit.job.id for hit in hits] == [2, 1, 3]
        assert hits[-1].score == 0
        assert hits[-1].match_percentage == 0
