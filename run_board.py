#!/usr/bin/env python3
"""Fetch one provider's jobs, filter them and optionally write a Markdown report.

Usage:
    python run_board.py --provider hn
    python run_board.py --provider arbeitnow --remote-only --location remote-region --report
"""
from __future__ import annotations

import sys
from pathlib import Path

import typer

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobboard.board import JobBoard
from jobboard.cache import FileStorage, JobsCache
from jobboard.config import DATA_DIR, DEFAULT_TEMPERATURE, ensure_dirs, is_job_board_enabled, load_settings
from jobboard.errors import ConfigError
from jobboard.filters import JobFilters, apply_filters, match_score_tier
from jobboard.location import get_region_from_country, get_region_label
from jobboard.log import get_logger, set_level
from jobboard.report import build_report, describe_location, write_report
from jobboard.scorer import ScoringEngine
from jobboard.skills import SkillRegistry
from jobboard.sources import build_services, get_provider_ids

log = get_logger(__name__)

app = typer.Typer(add_completion=False)


@app.command()
def main(
    provider: str = typer.Option("hn", "--provider", "-p", help=f"One of: {', '.join(get_provider_ids())}"),
    remote_only: bool = typer.Option(False, "--remote-only", help="Arbeitnow: remote postings only"),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and fetch again"),
    temperature: float = typer.Option(DEFAULT_TEMPERATURE, "--temperature", "-t", min=0.0, max=1.0),
    min_score: int = typer.Option(0, "--min-score", min=0, max=100),
    location: str = typer.Option("any-region", "--location", help="all, remote-global, remote-region, onsite-region, any-region"),
    search: str = typer.Option("", "--search", "-s", help="Match company, title, text or skills"),
    limit: int = typer.Option(15, "--limit", "-n", min=1),
    report: bool = typer.Option(False, "--report", help="Write a Markdown report to reports/"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Fetch, score and list jobs from a single provider."""
    if verbose:
        set_level("DEBUG")

    if not is_job_board_enabled():
        log.error("Job board is disabled (JOB_BOARD_ENABLED=false)")
        raise typer.Exit(code=1)
    if provider not in get_provider_ids():
        log.error("Unknown provider %r; choose from %s", provider, ", ".join(get_provider_ids()))
        raise typer.Exit(code=1)

    try:
        settings = load_settings()
        registry = SkillRegistry.from_categories(
            settings.skill_categories, settings.scoring.default_skill_weight,
        )
        filters = JobFilters(
            min_match_score=min_score,
            search_query=search,
            location=location,
            temperature=temperature,
            region=get_region_from_country(settings.location.country),
        )
    except (ConfigError, ValueError) as e:
        log.error("Configuration error: %s", e)
        raise typer.Exit(code=1)

    ensure_dirs()
    scorer = ScoringEngine(registry, settings.scoring)
    board = JobBoard(
        build_services(scorer, region=filters.region),
        JobsCache(FileStorage(DATA_DIR / "cache")),
    )

    log.info(
        "Fetching %s (region %s, temperature %.2f)",
        provider, get_region_label(filters.region), temperature,
    )
    options = {"remote_only": True} if remote_only else None
    feed = board.fetch(provider, options, force_refresh=refresh)
    if feed.error is not None:
        log.error("Fetch failed: %s", feed.error)
        raise typer.Exit(code=1)

    jobs = apply_filters(feed.jobs, filters, scorer)
    log.info("%d of %d jobs match the filters", len(jobs), len(feed.jobs))
    for job in jobs[:limit]:
        heading = f"{job.company} - {job.title}" if job.title else job.company
        typer.echo(f"{job.match_score:>3}% {match_score_tier(job.match_score):<9} {heading}")
        typer.echo(f"      {describe_location(job)}  {job.source_url}")

    if report:
        path = write_report(build_report(feed, jobs, top=limit, user_location=settings.location), provider)
        typer.echo(f"\nReport: {path}")


if __name__ == "__main__":
    app()
