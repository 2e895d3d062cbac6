"""Provider registry: metadata per source and the service factory."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

import requests

from jobboard.cache import JOB_CACHE_KEYS
from jobboard.log import get_logger
from jobboard.models import ServiceConfig
from jobboard.scorer import ScoringEngine
from jobboard.sources.arbeitnow import ArbeitnowJobService
from jobboard.sources.base import JobService
from jobboard.sources.hn import HNJobService
from jobboard.sources.jobicy import JobicyJobService
from jobboard.sources.remoteok import RemoteOKJobService
from jobboard.sources.remotive import RemotiveJobService

log = get_logger(__name__)

__all__ = [
    "JobService", "HNJobService", "ArbeitnowJobService", "RemoteOKJobService",
    "JobicyJobService", "RemotiveJobService", "ProviderMeta", "PROVIDERS",
    "JOB_CACHE_KEYS", "get_provider", "get_provider_ids", "build_services",
]

HOUR = 60 * 60
DAY = 24 * HOUR


@dataclass(frozen=True)
class ProviderMeta:
    id: str
    name: str
    description: str
    api_url: str
    cache_duration: float  # seconds


PROVIDERS: dict[str, ProviderMeta] = {
    "hn": ProviderMeta(
        "hn", "Hacker News", "Who is Hiring threads from Hacker News",
        "https://hn.algolia.com/api/v1", DAY,
    ),
    "arbeitnow": ProviderMeta(
        "arbeitnow", "Arbeitnow", "European tech job board",
        "https://www.arbeitnow.com/api/job-board-api", 6 * HOUR,
    ),
    "remoteok": ProviderMeta(
        "remoteok", "RemoteOK", "Remote jobs worldwide",
        # feed is published with a 24h delay
        "https://remoteok.com/api", DAY,
    ),
    "jobicy": ProviderMeta(
        "jobicy", "Jobicy", "Remote jobs with geo filter",
        "https://jobicy.com/api/v2/remote-jobs", 6 * HOUR,
    ),
    "remotive": ProviderMeta(
        "remotive", "Remotive", "Remote jobs by category",
        "https://remotive.com/api/remote-jobs", DAY,
    ),
}

_SERVICE_CLASSES: dict[str, type[JobService]] = {
    "hn": HNJobService,
    "arbeitnow": ArbeitnowJobService,
    "remoteok": RemoteOKJobService,
    "jobicy": JobicyJobService,
    "remotive": RemotiveJobService,
}


def get_provider(provider_id: str) -> ProviderMeta:
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        raise ValueError(f"Unknown job provider: {provider_id!r}") from None


def get_provider_ids() -> list[str]:
    return list(PROVIDERS)


def build_services(
    scorer: ScoringEngine,
    region: str = "EU",
    session: requests.Session | None = None,
    clock: Callable[[], float] = time.time,
) -> dict[str, JobService]:
    """One service per provider, sharing a scorer and an HTTP session."""
    session = session or requests.Session()
    services: dict[str, JobService] = {}
    for pid, meta in PROVIDERS.items():
        config = ServiceConfig(provider_id=pid, api_url=meta.api_url, cache_duration=meta.cache_duration)
        services[pid] = _SERVICE_CLASSES[pid](config, scorer, region=region, session=session, clock=clock)
    log.debug("Registered %d job providers (region=%s)", len(services), region)
    return services
