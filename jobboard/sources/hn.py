"""Hacker News "Who is hiring?" threads via the Algolia search API.

Docs: https://hn.algolia.com/api
"""
from __future__ import annotations

from jobboard.errors import JobFetchError
from jobboard.log import get_logger
from jobboard.models import HNThread, ParsedJob
from jobboard.parsing import parse_company_name, parse_job_location
from jobboard.sources.base import JobService, parse_timestamp

log = get_logger(__name__)

ALGOLIA_BASE = "https://hn.algolia.com/api/v1"
HITS_PER_PAGE = 100
MAX_PAGES = 11
# Top-level comments this short are replies like "Is this still open?"
MIN_TEXT_LENGTH = 50


class HNJobService(JobService):
    def _hits(self, data, what: str) -> list[dict]:
        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise JobFetchError(self.provider_id, f"Unexpected {what} response: missing hits array")
        return [h for h in hits if isinstance(h, dict)]

    def _latest_story(self) -> dict:
        data = self._get(
            f"{ALGOLIA_BASE}/search_by_date",
            params={"query": "who is hiring", "tags": "story,author_whoishiring", "hitsPerPage": 10},
            what="HN threads",
        )
        for story in self._hits(data, "HN threads"):
            title = (story.get("title") or "").lower()
            if "who is hiring" in title and "who wants to be hired" not in title:
                if "objectID" not in story or "created_at" not in story:
                    raise JobFetchError(
                        self.provider_id, "Unexpected HN API response: story without objectID or created_at",
                    )
                return story
        raise JobFetchError(self.provider_id, 'No "Who is Hiring?" thread found')

    def _comments(self, story_id: str) -> list[dict]:
        comments: list[dict] = []
        page = 0
        while page < MAX_PAGES:
            data = self._get(
                f"{ALGOLIA_BASE}/search",
                params={"tags": f"comment,story_{story_id}", "hitsPerPage": HITS_PER_PAGE, "page": page},
                what="HN comments",
            )
            comments.extend(self._hits(data, "HN comments"))
            page += 1
            if data.get("page", page - 1) >= data.get("nbPages", 0) - 1:
                break

        # replies to other comments are not postings
        top_level = [c for c in comments if str(c.get("parent_id")) == str(story_id)]
        log.debug("HN story %s: %d comments, %d top-level", story_id, len(comments), len(top_level))
        return top_level

    def fetch_from_api(self, options: dict | None = None) -> list[dict]:
        story = self._latest_story()
        return self._comments(story["objectID"])

    def fetch_metadata(self, options: dict | None = None) -> HNThread | None:
        story = self._latest_story()
        try:
            return HNThread(
                id=str(story["objectID"]),
                title=story["title"],
                posted_at=parse_timestamp(story["created_at"]),
                comment_count=int(story.get("num_comments") or 0),
            )
        except (TypeError, ValueError) as exc:
            raise JobFetchError(self.provider_id, f"Unexpected HN API response: {exc}") from exc

    def transform_job(self, item: dict) -> ParsedJob:
        html = item["comment_text"]
        object_id = str(item["objectID"])
        return self.build_job(
            id=object_id,
            company=parse_company_name(html),
            html=html,
            posted_at=parse_timestamp(item["created_at"]),
            author=item.get("author", ""),
            source_url=f"https://news.ycombinator.com/item?id={object_id}",
            location=parse_job_location(html),
        )

    def process_jobs(self, jobs: list[ParsedJob]) -> list[ParsedJob]:
        return super().process_jobs([j for j in jobs if len(j.raw_text) > MIN_TEXT_LENGTH])
