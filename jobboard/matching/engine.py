"""Skill matching and search relevance scoring.

This module implements the scoring that decides who hears about a job:
1. match_score: share of a job's required skills found in a candidate's skills
2. recommend_for_candidate / matched_candidates: rank jobs or candidates by it
3. search_relevance / rank_search_results: weighted multi-filter search score

Nothing here raises on bad input. Missing or malformed skill text behaves as
an empty skill set and scores zero.
"""

import math
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from jobboard.domain.models import Job, Profile, User

from .models import ScoredCandidate, ScoredJob, SearchFilters, SearchHit

# Search weights
KEYWORD_TITLE_WEIGHT = 5
KEYWORD_DESCRIPTION_WEIGHT = 3
KEYWORD_SKILLS_WEIGHT = 4
KEYWORD_COMPANY_WEIGHT = 2
KEYWORD_LOCATION_WEIGHT = 2
LOCATION_WEIGHT = 3
SKILL_TOKEN_WEIGHT = 4
EXPERIENCE_WEIGHT = 3
SALARY_WEIGHT = 3
JOB_TYPE_WEIGHT = 2

KEYWORD_MAX = (
    KEYWORD_TITLE_WEIGHT
    + KEYWORD_DESCRIPTION_WEIGHT
    + KEYWORD_SKILLS_WEIGHT
    + KEYWORD_COMPANY_WEIGHT
    + KEYWORD_LOCATION_WEIGHT
)

# Open-ended range bounds when only one side is given
DEFAULT_MAX_EXPERIENCE = 999
DEFAULT_MAX_SALARY = 99_999_999

# Number of best matches pushed live from a recommendation query
LIVE_MATCH_LIMIT = 3


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def parse_skill_set(skills: Optional[str]) -> FrozenSet[str]:
    """
    Turn comma-separated skill text into a set of normalized tokens.

    Tokens are trimmed and lowercased; empty tokens are dropped.

    Example:
        >>> sorted(parse_skill_set(" Python, go ,,SQL"))
        ['go', 'python', 'sql']
    """
    if not skills or not isinstance(skills, str):
        return frozenset()
    return frozenset(token.strip().lower() for token in skills.split(",") if token.strip())


def match_score(required_skills: Optional[str], candidate_skills: Optional[str]) -> int:
    """
    Percentage (0-100) of the job's required skills present in the candidate's.

    The job's skill set is the denominator. Either side empty or absent scores 0.

    Example:
        >>> match_score("java,go,rust", "go")
        33
        >>> match_score("java,go", "go,java,rust")
        100
    """
    required = parse_skill_set(required_skills)
    candidate = parse_skill_set(candidate_skills)
    if not required or not candidate:
        return 0
    matches = len(required & candidate)
    return round_half_up(matches * 100 / len(required))


def recommend_for_candidate(jobs: Iterable[Job], candidate_skills: Optional[str]) -> List[ScoredJob]:
    """
    Score jobs against a candidate's skills.

    Returns:
        Jobs with a positive score, best first. Equal scores keep input order.
    """
    scored = [ScoredJob(job=job, score=match_score(job.skills, candidate_skills)) for job in jobs]
    scored = [entry for entry in scored if entry.score > 0]
    scored.sort(key=lambda entry: entry.score, reverse=True)
    return scored


def matched_candidates(
    job: Job, candidates: Iterable[Tuple[Profile, User]]
) -> List[ScoredCandidate]:
    """
    Score job seeker profiles against a job's required skills.

    The caller is responsible for checking that the requester owns the job.

    Returns:
        Candidates with a positive score, best first.
    """
    scored = [
        ScoredCandidate(profile=profile, user=user, score=match_score(job.skills, profile.skills))
        for profile, user in candidates
    ]
    scored = [entry for entry in scored if entry.score > 0]
    scored.sort(key=lambda entry: entry.score, reverse=True)
    return scored


def _filter_skill_tokens(filters: SearchFilters) -> List[str]:
    if not _supplied(filters.skills):
        return []
    return [token.strip().lower() for token in filters.skills.split(",") if token.strip()]


def _supplied(value: Optional[str]) -> bool:
    return value is not None and bool(str(value).strip())


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def max_possible_score(filters: SearchFilters) -> int:
    """
    Sum of the weights of the filters actually supplied.

    With no filters at all the maximum is 1, so every job reports 0%.
    """
    maximum = 0
    if _supplied(filters.keyword):
        maximum += KEYWORD_MAX
    if _supplied(filters.location):
        maximum += LOCATION_WEIGHT
    maximum += len(_filter_skill_tokens(filters)) * SKILL_TOKEN_WEIGHT
    if filters.has_experience_range:
        maximum += EXPERIENCE_WEIGHT
    if filters.has_salary_range:
        maximum += SALARY_WEIGHT
    if filters.job_type is not None:
        maximum += JOB_TYPE_WEIGHT
    return maximum or 1


def search_relevance(job: Job, filters: SearchFilters) -> Tuple[int, int]:
    """
    Weighted relevance of one job to the search filters.

    Returns:
        (absolute score, match percentage 0-100)
    """
    score = 0

    if _supplied(filters.keyword):
        keyword = filters.keyword.strip().lower()
        if _contains(job.title, keyword):
            score += KEYWORD_TITLE_WEIGHT
        if _contains(job.description, keyword):
            score += KEYWORD_DESCRIPTION_WEIGHT
        if _contains(job.skills, keyword):
            score += KEYWORD_SKILLS_WEIGHT
        if _contains(job.company, keyword):
            score += KEYWORD_COMPANY_WEIGHT
        if _contains(job.location, keyword):
            score += KEYWORD_LOCATION_WEIGHT

    if _supplied(filters.location) and _contains(job.location, filters.location.strip().lower()):
        score += LOCATION_WEIGHT

    job_skills = (job.skills or "").lower()
    for token in _filter_skill_tokens(filters):
        if token in job_skills:
            score += SKILL_TOKEN_WEIGHT

    if filters.has_experience_range:
        experience = job.experience_required or 0
        min_exp = filters.min_exp if filters.min_exp is not None else 0
        max_exp = filters.max_exp if filters.max_exp is not None else DEFAULT_MAX_EXPERIENCE
        if min_exp <= experience <= max_exp:
            score += EXPERIENCE_WEIGHT

    if filters.has_salary_range and job.salary_min is not None and job.salary_max is not None:
        min_salary = filters.min_salary if filters.min_salary is not None else 0
        max_salary = filters.max_salary if filters.max_salary is not None else DEFAULT_MAX_SALARY
        if job.salary_max >= min_salary and job.salary_min <= max_salary:
            score += SALARY_WEIGHT

    if filters.job_type is not None and job.job_type == filters.job_type:
        score += JOB_TYPE_WEIGHT

    percentage = round_half_up(score * 100 / max_possible_score(filters))
    return score, percentage


def rank_search_results(jobs: Sequence[Job], filters: SearchFilters) -> List[SearchHit]:
    """
    Score every job and order by score, then by recency.

    Every job is returned, including those scoring zero.
    """
    hits = []
    for job in jobs:
        score, percentage = search_relevance(job, filters)
        hits.append(SearchHit(job=job, score=score, match_percentage=percentage))
    hits.sort(key=lambda hit: (hit.score, hit.job.created_at), reverse=True)
    return hits
