"""Provider-agnostic job service pipeline."""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import requests

from jobboard.config import DEFAULT_TEMPERATURE
from jobboard.errors import JobFetchError
from jobboard.location import classify_job_location, is_remote_job
from jobboard.log import get_logger
from jobboard.models import HNThread, JobFetchResult, ParsedJob, ServiceConfig
from jobboard.parsing import strip_html
from jobboard.scorer import ScoringEngine

log = get_logger(__name__)

REQUEST_TIMEOUT = 15


def parse_timestamp(value: Any) -> datetime:
    """UTC datetime from epoch seconds or an ISO-8601 string."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Unparseable timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class JobService(ABC):
    """Drives one provider through fetch -> transform -> process_jobs.

    Subclasses implement ``fetch_from_api`` and ``transform_job``; providers
    with source-level metadata also override ``fetch_metadata``.
    """

    def __init__(
        self,
        config: ServiceConfig,
        scorer: ScoringEngine,
        region: str = "EU",
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self.config = config
        self.scorer = scorer
        self.region = region
        self.session = session or requests.Session()
        self.clock = clock
        self.temperature = temperature

    # -- provider hooks ---------------------------------------------------------

    @abstractmethod
    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        pass

    @abstractmethod
    def transform_job(self, item: dict) -> ParsedJob:
        pass

    def fetch_metadata(self, options: dict | None = None) -> HNThread | None:
        return None

    def get_cache_key(self, options: dict | None = None) -> str:
        return f"{self.config.provider_id}-jobs-cache"

    # -- shared helpers -------------------------------------------------------

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @property
    def cache_duration(self) -> float:
        return self.config.cache_duration

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def _get(self, url: str, params: dict | None = None, what: str = "jobs") -> Any:
        """GET *url* and decode JSON; any failure becomes a JobFetchError."""
        try:
            r = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
            r.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            raise JobFetchError(
                self.provider_id,
                f"Failed to fetch {what}: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            ) from exc
        except requests.RequestException as exc:
            raise JobFetchError(self.provider_id, f"Failed to fetch {what}: {exc}") from exc

        try:
            return r.json()
        except ValueError as exc:
            raise JobFetchError(self.provider_id, f"Invalid JSON in {what} response") from exc

    def build_job(
        self,
        *,
        id: str,
        company: str,
        html: str,
        posted_at: datetime,
        author: str,
        source_url: str,
        title: str | None = None,
        is_remote: bool | None = None,
        location: str | None = None,
        tags: tuple[str, ...] = (),
    ) -> ParsedJob:
        """Score and classify the plain text of *html*, assemble a ParsedJob."""
        raw_text = strip_html(html)
        match = self.scorer.score(raw_text, self.temperature, self.region)
        return ParsedJob(
            id=id,
            company=company,
            raw_text=raw_text,
            posted_at=posted_at,
            author=author,
            match_score=match.score,
            matched_skills=tuple(match.matched_skill_names),
            location_data=classify_job_location(raw_text),
            source=self.provider_id,
            source_url=source_url,
            html_text=html,
            title=title,
            match_details=match,
            is_remote=is_remote_job(raw_text) if is_remote is None else is_remote,
            location=location or None,
            tags=tuple(t for t in tags if t),
        )

    # -- orchestration --------------------------------------------------------

    def process_jobs(self, jobs: list[ParsedJob]) -> list[ParsedJob]:
        """Drop postings older than max_age_days, best score first, capped at max_jobs."""
        cutoff = self.now() - timedelta(days=self.config.max_age_days)
        recent = [j for j in jobs if j.posted_at >= cutoff]
        recent.sort(key=lambda j: j.match_score, reverse=True)
        return recent[: self.config.max_jobs]

    def _transform_all(self, items: list[dict]) -> list[ParsedJob]:
        jobs: list[ParsedJob] = []
        for item in items:
            try:
                jobs.append(self.transform_job(item))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                log.warning("[%s] Skipping malformed item: %s", self.provider_id, exc)
        return jobs

    def fetch(self, options: dict | None = None) -> JobFetchResult:
        with ThreadPoolExecutor(max_workers=2) as pool:
            items_future = pool.submit(self.fetch_from_api, options)
            metadata_future = pool.submit(self.fetch_metadata, options)
            items = items_future.result()
            metadata = metadata_future.result()

        jobs = self.process_jobs(self._transform_all(items))
        log.info(
            "[%s] %d items fetched, %d jobs after filtering", self.provider_id, len(items), len(jobs),
        )
        return JobFetchResult(jobs=jobs, metadata=metadata)
