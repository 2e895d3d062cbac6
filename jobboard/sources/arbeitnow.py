"""Arbeitnow: European tech job board API, paginated.

Docs: https://www.arbeitnow.com/blog/job-board-api
"""
from __future__ import annotations

from jobboard.errors import JobFetchError
from jobboard.log import get_logger
from jobboard.models import ParsedJob
from jobboard.sources.base import JobService, parse_timestamp

log = get_logger(__name__)

CACHE_KEY_BASE = "arbeitnow-jobs-cache"
MAX_PAGES = 3


class ArbeitnowJobService(JobService):
    """Options: ``{"remote_only": bool}`` maps to ``remote=true`` and its own cache key."""

    def get_cache_key(self, options: dict | None = None) -> str:
        if options and options.get("remote_only"):
            return f"{CACHE_KEY_BASE}-remote"
        return CACHE_KEY_BASE

    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        items: list[dict] = []
        page = 1
        while page <= MAX_PAGES:
            params: dict = {"page": page}
            if options and options.get("remote_only"):
                params["remote"] = "true"

            data = self._get(self.config.api_url, params=params, what="Arbeitnow jobs")
            if not isinstance(data, dict) or not isinstance(data.get("data"), list):
                raise JobFetchError(self.provider_id, "Unexpected Arbeitnow API response: missing data array")
            batch = data["data"]
            # keep this page before deciding whether another one exists
            items.extend(batch)

            meta = data.get("meta") or {}
            last_page = meta.get("last_page", page) if isinstance(meta, dict) else None
            if not isinstance(last_page, int):
                raise JobFetchError(self.provider_id, "Unexpected Arbeitnow API response: malformed meta")
            if not batch or page >= last_page:
                break
            page += 1

        log.debug("Arbeitnow: %d jobs over %d page(s)", len(items), page)
        return items

    def transform_job(self, item: dict) -> ParsedJob:
        return self.build_job(
            id=f"arbeitnow-{item['slug']}",
            company=item["company_name"],
            title=item.get("title"),
            html=item.get("description") or "",
            posted_at=parse_timestamp(item["created_at"]),
            author=item["company_name"],
            source_url=item.get("url", ""),
            # API flag, else the text heuristic
            is_remote=True if item.get("remote") else None,
            location=item.get("location"),
            tags=tuple(item.get("tags") or ()),
        )
