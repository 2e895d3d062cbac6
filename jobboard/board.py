"""Provider selection with cache-first fetching.

JobBoard is the surface a UI or CLI talks to: pick a provider, get a JobFeed
back. Fetch failures are reported on the feed, never raised.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from jobboard.cache import JobsCache
from jobboard.errors import JobBoardError
from jobboard.log import get_logger
from jobboard.models import HNThread, ParsedJob
from jobboard.sources import PROVIDERS, JobService

log = get_logger(__name__)


@dataclass(frozen=True)
class JobFeed:
    provider_id: str
    jobs: list[ParsedJob] = field(default_factory=list)
    thread: HNThread | None = None
    loading: bool = False
    error: JobBoardError | None = None
    from_cache: bool = False


class JobBoard:
    """Cache-first access to every registered provider.

    Each fetch of a cache key takes a new generation number. When a slower,
    older fetch finishes after a newer one was started for the same key, its
    result still goes back to its caller but is not written to the cache.
    """

    def __init__(
        self,
        services: dict[str, JobService],
        cache: JobsCache,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.services = services
        self.cache = cache
        self.clock = clock
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._in_flight: dict[str, int] = {}

    def _service(self, provider_id: str) -> JobService:
        try:
            return self.services[provider_id]
        except KeyError:
            raise ValueError(f"Unknown job provider: {provider_id!r}") from None

    def _thread_for(self, provider_id: str, jobs: list[ParsedJob], metadata: HNThread | None) -> HNThread | None:
        if provider_id == "hn":
            return metadata
        return HNThread(
            id=provider_id,
            title=f"{PROVIDERS[provider_id].name} Jobs",
            posted_at=datetime.fromtimestamp(self.clock(), tz=timezone.utc),
            comment_count=len(jobs),
        )

    def is_loading(self, provider_id: str, options: dict | None = None) -> bool:
        key = self._service(provider_id).get_cache_key(options)
        with self._lock:
            return self._in_flight.get(key, 0) > 0

    def fetch(self, provider_id: str, options: dict | None = None, force_refresh: bool = False) -> JobFeed:
        service = self._service(provider_id)
        key = service.get_cache_key(options)

        if not force_refresh:
            cached = self.cache.read(key, service.cache_duration)
            if cached is not None:
                log.info("[%s] %d jobs from cache", provider_id, len(cached.jobs))
                return JobFeed(
                    provider_id=provider_id,
                    jobs=cached.jobs,
                    thread=self._thread_for(provider_id, cached.jobs, cached.metadata),
                    from_cache=True,
                )

        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            self._in_flight[key] = self._in_flight.get(key, 0) + 1

        try:
            result = service.fetch(options)
        except JobBoardError as exc:
            log.error("[%s] Failed to fetch jobs: %s", provider_id, exc)
            return JobFeed(provider_id=provider_id, error=exc)
        finally:
            with self._lock:
                self._in_flight[key] -= 1

        with self._lock:
            superseded = self._generations[key] != generation

        if superseded:
            log.warning("[%s] Result for %s superseded by a newer fetch; not caching", provider_id, key)
        elif not self.cache.write(key, self.cache.create_entry(result.jobs, result.metadata)):
            log.warning("Failed to cache %s - jobs will not persist", key)

        return JobFeed(
            provider_id=provider_id,
            jobs=result.jobs,
            thread=self._thread_for(provider_id, result.jobs, result.metadata),
        )

    def refresh(self, provider_id: str, options: dict | None = None) -> JobFeed:
        """Bypass the cache; the explicit retry path after an error."""
        return self.fetch(provider_id, options, force_refresh=True)
