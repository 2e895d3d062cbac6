"""Markdown summary of the best matches in a feed."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

from jobboard.board import JobFeed
from jobboard.config import REPORTS_DIR, UserLocation
from jobboard.filters import match_score_tier
from jobboard.log import get_logger
from jobboard.models import ParsedJob
from jobboard.parsing import matches_user_location

log = get_logger(__name__)

_LOCATION_LABELS: dict[str, str] = {
    "REMOTE_GLOBAL": "Remote (global)",
    "REMOTE_REGIONAL": "Remote (regional)",
    "HYBRID": "Hybrid",
    "ON_SITE": "On-site",
    "MIXED_ROLES": "Mixed roles",
    "UNKNOWN": "Unknown",
}


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _truncate(text: str, n: int) -> str:
    return text[:n] + ("…" if len(text) > n else "")


def describe_location(job: ParsedJob) -> str:
    data = job.location_data
    label = _LOCATION_LABELS.get(data.type, data.type)
    regions = list(data.primary_regions) + [f"{r}?" for r in data.secondary_regions]
    if regions:
        label += f" [{', '.join(regions)}]"
    if data.on_site_locations:
        label += f" {', '.join(data.on_site_locations[:3])}"
    return label


def build_report(
    feed: JobFeed,
    jobs: list[ParsedJob] | None = None,
    *,
    top: int = 15,
    user_location: UserLocation | None = None,
) -> str:
    """Report for *feed*; pass *jobs* to report a filtered view instead of the raw feed.

    With *user_location*, postings that name the user's city or country are flagged.
    """
    jobs = feed.jobs if jobs is None else jobs
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    title = feed.thread.title if feed.thread else feed.provider_id
    lines: list[str] = [f"# Job Board Report: {title} ({date})", ""]

    if feed.error is not None:
        lines += [f"**Fetch failed:** {feed.error}", ""]
        return "\n".join(lines)

    shown = jobs[:top]
    source = "cache" if feed.from_cache else "live fetch"
    lines.append(f"**{len(jobs)}** jobs from {source}, showing top **{len(shown)}**")
    lines.append("")

    if shown:
        lines.append("## Top Matches")
        lines.append("")
        for job in shown:
            heading = f"{job.title} @ {job.company}" if job.title else job.company
            lines.append(f"### {heading}")
            lines.append(f"- **Score:** {job.match_score}% ({match_score_tier(job.match_score)})")
            lines.append(f"- **Location:** {describe_location(job)}")
            if user_location and matches_user_location(job.raw_text, user_location.locality, user_location.country):
                lines.append("- **Mentions your location:** yes")
            if job.matched_skills:
                lines.append(f"- **Skills:** {', '.join(job.matched_skills)}")
            lines.append(f"- **Posted:** {job.posted_at.strftime('%Y-%m-%d')}")
            if job.source_url:
                lines.append(f"- **Link:** [{_short_url_label(job.source_url)}]({job.source_url})")
            lines.append("")

        lines.append("---")
        lines.append("")
        lines.append("## Quick Reference")
        lines.append("")
        lines.append("| # | Company | Role | Location | Score |")
        lines.append("|--:|---------|------|----------|------:|")
        for i, job in enumerate(shown, 1):
            role = _truncate(job.title or "", 40)
            lines.append(
                f"| {i} | {_truncate(job.company, 22)} | {role} "
                f"| {_LOCATION_LABELS.get(job.location_data.type)} | {job.match_score}% |"
            )
        lines.append("")

    log.info("Built report for %s: %d jobs", feed.provider_id, len(jobs))
    return "\n".join(lines)


def write_report(content: str, provider_id: str, directory: Path = REPORTS_DIR) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = directory / f"jobs_{provider_id}_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written to %s", path)
    return path
