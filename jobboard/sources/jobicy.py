"""Jobicy: remote jobs API, fetched per industry segment.

Docs: https://jobicy.com/jobs-rss-feed
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from jobboard.errors import JobFetchError
from jobboard.log import get_logger
from jobboard.models import ParsedJob
from jobboard.sources.base import JobService, parse_timestamp

log = get_logger(__name__)

INDUSTRIES: tuple[str, ...] = ("dev", "engineering")
COUNT = 100


class JobicyJobService(JobService):
    def _industry_jobs(self, industry: str) -> list[dict]:
        data = self._get(
            self.config.api_url,
            params={"count": COUNT, "industry": industry},
            what=f"Jobicy {industry} jobs",
        )
        jobs = data.get("jobs") if isinstance(data, dict) else None
        if not isinstance(jobs, list):
            raise JobFetchError(self.provider_id, "Unexpected Jobicy API response: missing jobs array")
        return jobs

    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        results: list[list[dict]] = []
        failures: list[JobFetchError] = []
        with ThreadPoolExecutor(max_workers=len(INDUSTRIES)) as pool:
            futures = {pool.submit(self._industry_jobs, ind): ind for ind in INDUSTRIES}
            for future, industry in futures.items():
                try:
                    results.append(future.result())
                except JobFetchError as exc:
                    failures.append(exc)

        if len(failures) == len(INDUSTRIES):
            raise JobFetchError(
                self.provider_id,
                "All Jobicy industry fetches failed: " + ", ".join(str(f) for f in failures),
            )
        if failures:
            log.warning(
                "%d/%d Jobicy fetches failed: %s",
                len(failures), len(INDUSTRIES), "; ".join(str(f) for f in failures),
            )

        unique: dict = {}
        for batch in results:
            for job in batch:
                unique[job.get("id")] = job
        return list(unique.values())

    def transform_job(self, item: dict) -> ParsedJob:
        return self.build_job(
            id=f"jobicy-{item['id']}",
            company=item["companyName"],
            title=item.get("jobTitle"),
            html=item.get("jobDescription") or "",
            posted_at=parse_timestamp(item["pubDate"]),
            author=item["companyName"],
            source_url=item.get("url", ""),
            is_remote=True,
            location=item.get("jobGeo"),
            tags=(_first(item.get("jobIndustry")), _first(item.get("jobLevel"))),
        )


def _first(value) -> str | None:
    # jobIndustry arrives as a list on v2 of the API, a string on v1
    if isinstance(value, list):
        return str(value[0]) if value else None
    return value
