"""Remotive: free API for remote tech jobs (no API key required).

Docs: https://remotive.com/api/remote-jobs
"""
from __future__ import annotations

from jobboard.errors import JobFetchError
from jobboard.models import ParsedJob
from jobboard.sources.base import JobService, parse_timestamp

LIMIT = 300


class RemotiveJobService(JobService):
    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        data = self._get(self.config.api_url, params={"limit": LIMIT}, what="Remotive jobs")
        jobs = data.get("jobs") if isinstance(data, dict) else None
        if not isinstance(jobs, list):
            raise JobFetchError(self.provider_id, "Unexpected Remotive API response: missing jobs array")
        return jobs

    def transform_job(self, item: dict) -> ParsedJob:
        return self.build_job(
            id=f"remotive-{item['id']}",
            company=item["company_name"],
            title=item.get("title"),
            html=item.get("description") or "",
            posted_at=parse_timestamp(item["publication_date"]),
            author=item["company_name"],
            source_url=item.get("url", ""),
            is_remote=True,
            location=item.get("candidate_required_location"),
            tags=(item.get("category"), item.get("job_type")),
        )
