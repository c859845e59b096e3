"""Matching engine for skill-based recommendations and job search."""

from .engine import (
    LIVE_MATCH_LIMIT,
    match_score,
    matched_candidates,
    max_possible_score,
    parse_skill_set,
    rank_search_results,
    recommend_for_candidate,
    search_relevance,
)
from .models import ScoredCandidate, ScoredJob, SearchFilters, SearchHit

__all__ = [
    "LIVE_MATCH_LIMIT",
    "match_score",
    "matched_candidates",
    "max_possible_score",
    "parse_skill_set",
    "rank_search_results",
    "recommend_for_candidate",
    "search_relevance",
    "ScoredCandidate",
    "ScoredJob",
    "SearchFilters",
    "SearchHit",
]
