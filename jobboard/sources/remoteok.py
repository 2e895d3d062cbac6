"""RemoteOK: public JSON feed of remote jobs (no API key required).

Docs: https://remoteok.com/api
"""
from __future__ import annotations

from jobboard.errors import JobFetchError
from jobboard.models import ParsedJob
from jobboard.sources.base import JobService, parse_timestamp


class RemoteOKJobService(JobService):
    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        data = self._get(self.config.api_url, what="RemoteOK jobs")
        if not isinstance(data, list):
            raise JobFetchError(self.provider_id, "Unexpected RemoteOK API response: expected a JSON array")
        # first element is the legal notice / metadata block
        return data[1:]

    def transform_job(self, item: dict) -> ParsedJob:
        source_url = item.get("apply_url") or f"https://remoteok.com/remote-jobs/{item['slug']}"
        return self.build_job(
            id=f"remoteok-{item['id']}",
            company=item["company"],
            title=item.get("position"),
            html=item.get("description") or "",
            posted_at=parse_timestamp(item["epoch"]),
            author=item["company"],
            source_url=source_url,
            is_remote=True,
            location=item.get("location"),
            tags=tuple(item.get("tags") or ()),
        )
