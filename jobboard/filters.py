"""Downstream view filters: rescoring, search, location and sort."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from jobboard.config import DEFAULT_TEMPERATURE
from jobboard.location import LOCATION_FILTERS, matches_location_filter
from jobboard.log import get_logger
from jobboard.models import ParsedJob
from jobboard.scorer import ScoringEngine

log = get_logger(__name__)

SortBy = Literal["match", "recent"]
MatchScoreTier = Literal["low", "moderate", "good", "excellent"]


@dataclass(frozen=True)
class JobFilters:
    min_match_score: int = 0
    sort_by: SortBy = "match"
    search_query: str = ""
    location: str = "any-region"
    temperature: float = DEFAULT_TEMPERATURE
    region: str = "EU"

    def __post_init__(self) -> None:
        if self.location not in LOCATION_FILTERS:
            raise ValueError(f"Unknown location filter {self.location!r}; expected one of {LOCATION_FILTERS}")
        if self.sort_by not in ("match", "recent"):
            raise ValueError(f"Unknown sort {self.sort_by!r}")
        if not 0 <= self.temperature <= 1:
            raise ValueError(f"temperature must be within 0..1, got {self.temperature}")


def match_score_tier(score: int) -> MatchScoreTier:
    if score >= 76:
        return "excellent"
    if score >= 51:
        return "good"
    if score >= 21:
        return "moderate"
    return "low"


def _stored_temperature(job: ParsedJob) -> float:
    return job.match_details.temperature if job.match_details else DEFAULT_TEMPERATURE


def _matches_query(job: ParsedJob, query: str) -> bool:
    return (
        query in job.company.lower()
        or query in (job.title or "").lower()
        or query in job.raw_text.lower()
        or any(query in s.lower() for s in job.matched_skills)
    )


def apply_filters(jobs: list[ParsedJob], filters: JobFilters, scorer: ScoringEngine) -> list[ParsedJob]:
    """New list of (possibly rescored) copies; *jobs* is not modified."""
    result = [
        scorer.rescore(j, filters.temperature, filters.region)
        if abs(filters.temperature - _stored_temperature(j)) >= 0.01 else j
        for j in jobs
    ]

    if filters.location != "all":
        result = [j for j in result if matches_location_filter(j.location_data, filters.location, filters.region)]

    if filters.min_match_score > 0:
        result = [j for j in result if j.match_score >= filters.min_match_score]

    query = filters.search_query.strip().lower()
    if query:
        result = [j for j in result if _matches_query(j, query)]

    if filters.sort_by == "recent":
        result.sort(key=lambda j: j.posted_at, reverse=True)
    else:
        result.sort(key=lambda j: j.match_score, reverse=True)

    log.debug("Filters kept %d of %d jobs", len(result), len(jobs))
    return result
