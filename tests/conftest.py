"""Shared fixtures: a fixed skill profile, a fake HTTP session and a controllable clock."""

import json
import os
import threading
from datetime import datetime, timedelta, timezone

import pytest
import requests

os.environ.setdefault("JOBBOARD_LOG_FILE", "false")

from jobboard.config import resolve_scoring_config  # noqa: E402
from jobboard.models import ParsedJob, ParsedLocationData, ServiceConfig  # noqa: E402
from jobboard.scorer import ScoringEngine  # noqa: E402
from jobboard.skills import SkillRegistry  # noqa: E402
from jobboard.sources.base import JobService, parse_timestamp  # noqa: E402

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)

SKILL_CATEGORIES = [
    {
        "name": "Languages",
        "skills": [
            {"name": "Python", "aliases": ["python", "py", "python3"], "weight": 9},
            {"name": "Go", "aliases": ["go", "golang"], "weight": 8},
            {"name": "Hack/PHP", "aliases": ["hack", "php", "hhvm"], "weight": 7},
            {"name": "TypeScript", "aliases": ["ts", "typescript"], "weight": 6},
            {"name": "SQL", "aliases": ["sql", "presto", "mysql"], "weight": 7},
        ],
    },
    {
        "name": "Infrastructure & Tools",
        "skills": [
            {"name": "Kubernetes", "aliases": ["kubernetes", "k8s", "containers"], "weight": 8},
            {"name": "GraphQL", "aliases": ["graphql", "gql"], "weight": 8},
            {"name": "gRPC", "aliases": ["grpc", "protobuf"], "weight": 7},
            {"name": "Terraform", "aliases": ["terraform", "iac"], "weight": 6},
            {"name": "Docker", "aliases": ["docker", "containers"], "weight": 7},
        ],
    },
    {
        "name": "Leadership",
        "skills": [
            {"name": "System Design", "aliases": ["system design", "architecture"], "weight": 9},
            {"name": "Technical Mentorship", "aliases": ["mentorship", "coaching"], "weight": 8},
            {"name": "Incident Response", "aliases": ["incident", "oncall", "on-call"], "weight": 7},
            {"name": "Code Review", "aliases": ["code review", "pr review"], "weight": 6},
        ],
    },
]

SCORING = {
    "defaultSkillWeight": 5,
    "bonuses": {
        "remotePosition": 15,
        "regionFriendly": 10,
        "seniorityMatch": 20,
        "domainRelevance": 15,
    },
    "seniorityKeywords": ["senior", "staff", "principal", "lead", "architect"],
    "relevantDomains": ["saas", "b2b", "platform", "infrastructure", "developer tools"],
}


# --- HTTP ---

_REASONS = {200: "OK", 404: "Not Found", 429: "Too Many Requests", 500: "Internal Server Error"}


def make_response(payload=None, status=200, text=None, url="https://api.example.test"):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = _REASONS.get(status, "")
    resp.url = url
    resp.encoding = "utf-8"
    body = text if text is not None else json.dumps(payload)
    resp._content = body.encode("utf-8")
    return resp


class FakeSession:
    """Stands in for requests.Session; routes GETs by URL.

    A route is a JSON payload, a Response, an exception instance, or a
    callable taking the request params and returning one of those.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def route(self, url, handler):
        self.routes[url] = handler

    def get(self, url, params=None, timeout=None):
        params = dict(params or {})
        with self._lock:
            self.calls.append((url, params))
        handler = self.routes.get(url)
        if handler is None:
            return make_response({"error": "no route"}, status=404, url=url)
        if callable(handler):
            handler = handler(params)
        if isinstance(handler, Exception):
            raise handler
        if isinstance(handler, requests.Response):
            return handler
        return make_response(handler, url=url)

    def calls_to(self, url):
        return [params for u, params in self.calls if u == url]


# --- Clock ---

class FakeClock:
    def __init__(self, start=NOW):
        self.now = start.timestamp()

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


# --- Services ---

class StubService(JobService):
    """In-memory provider; items are ``{id, company, html, posted}`` dicts."""

    def __init__(self, config, scorer, items=(), metadata=None, error=None, **kwargs):
        super().__init__(config, scorer, **kwargs)
        self.items = list(items)
        self.metadata = metadata
        self.error = error
        self.calls = 0
        self.on_fetch = None

    def fetch_from_api(self, options=None):
        self.calls += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.error is not None:
            raise self.error
        return list(self.items)

    def fetch_metadata(self, options=None):
        return self.metadata

    def transform_job(self, item):
        return self.build_job(
            id=item["id"],
            company=item["company"],
            html=item["html"],
            posted_at=parse_timestamp(item["posted"]),
            author=item["company"],
            source_url=f"https://example.com/jobs/{item['id']}",
            title=item.get("title"),
        )


def posting(id, html, days_ago=1, company="Acme", title=None):
    return {
        "id": id,
        "company": company,
        "html": html,
        "posted": (NOW - timedelta(days=days_ago)).isoformat(),
        "title": title,
    }


# --- Fixtures ---

@pytest.fixture
def scoring_config():
    return resolve_scoring_config(SCORING)


@pytest.fixture
def registry():
    return SkillRegistry.from_categories(SKILL_CATEGORIES)


@pytest.fixture
def scorer(registry, scoring_config):
    return ScoringEngine(registry, scoring_config)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def stub_service(scorer, clock):
    def factory(items=(), provider_id="remoteok", **kwargs):
        config = ServiceConfig(
            provider_id=provider_id,
            api_url="https://api.example.test/jobs",
            cache_duration=kwargs.pop("cache_duration", 3600),
            max_jobs=kwargs.pop("max_jobs", 200),
        )
        return StubService(config, scorer, items=items, clock=clock, **kwargs)

    return factory


@pytest.fixture
def make_job():
    def factory(**overrides):
        fields = dict(
            id="job-1",
            company="Acme",
            raw_text="Senior Python engineer, remote (EU)",
            posted_at=NOW - timedelta(days=2),
            author="acme",
            match_score=50,
            matched_skills=("Python",),
            location_data=ParsedLocationData(type="REMOTE_GLOBAL", confidence="high"),
            source="remoteok",
            source_url="https://example.com/jobs/1",
            html_text="<p>Senior Python engineer, remote (EU)</p>",
        )
        fields.update(overrides)
        return ParsedJob(**fields)

    return factory
