"""Data models for postings, match results and location verdicts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Region = Literal["EU", "Americas", "APAC", "MENA", "Global"]
REGIONS: tuple[str, ...] = ("EU", "Americas", "APAC", "MENA", "Global")

LocationType = Literal[
    "REMOTE_GLOBAL",
    "REMOTE_REGIONAL",
    "HYBRID",
    "ON_SITE",
    "MIXED_ROLES",
    "UNKNOWN",
]
Confidence = Literal["high", "medium", "low"]

ProviderId = Literal["hn", "arbeitnow", "remoteok", "jobicy", "remotive"]


@dataclass(frozen=True)
class MatchedSkill:
    name: str
    weight: int
    points_earned: float


@dataclass(frozen=True)
class Bonuses:
    remote: bool = False
    region_friendly: bool = False
    seniority_match: bool = False
    domain_relevance: bool = False


@dataclass(frozen=True)
class WeightedMatchResult:
    score: int
    raw_points: float
    max_possible_points: float
    skill_points: float
    bonus_points: float
    matched_skills: tuple[MatchedSkill, ...]
    bonuses: Bonuses
    temperature: float

    @property
    def matched_skill_names(self) -> list[str]:
        return [s.name for s in self.matched_skills]


@dataclass(frozen=True)
class RoleBreakdown:
    remote_roles: int = 0
    on_site_roles: int = 0
    hybrid_roles: int = 0


@dataclass(frozen=True)
class ParsedLocationData:
    type: LocationType
    primary_regions: tuple[str, ...] = ()
    secondary_regions: tuple[str, ...] = ()
    on_site_locations: tuple[str, ...] = ()
    excluded_regions: tuple[str, ...] = ()
    confidence: Confidence = "low"
    role_breakdown: RoleBreakdown | None = None


@dataclass(frozen=True)
class HNThread:
    """Source-level metadata; HN thread info or a synthetic per-provider header."""

    id: str
    title: str
    posted_at: datetime
    comment_count: int


@dataclass(frozen=True)
class ParsedJob:
    id: str
    company: str
    raw_text: str
    posted_at: datetime
    author: str
    match_score: int
    matched_skills: tuple[str, ...]
    location_data: ParsedLocationData
    source: str
    source_url: str
    html_text: str = ""
    title: str | None = None
    match_details: WeightedMatchResult | None = None
    is_remote: bool = False
    location: str | None = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class JobFetchResult:
    jobs: list[ParsedJob]
    metadata: HNThread | None = None


@dataclass(frozen=True)
class ServiceConfig:
    provider_id: str
    api_url: str
    cache_duration: float  # seconds
    max_jobs: int = 200
    max_age_days: int = 30


@dataclass
class CacheEntry:
    jobs: list[ParsedJob]
    fetched_at: float  # epoch seconds
    metadata: HNThread | None = None


@dataclass(frozen=True)
class MatchResult:
    """Unweighted skill match, kept for simple skill-list comparisons."""

    score: int
    matched_skills: list[str] = field(default_factory=list)
    total_skills: int = 0
    matched_count: int = 0
