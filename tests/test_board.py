import logging

import pytest

from conftest import posting
from jobboard.board import JobBoard
from jobboard.cache import JobsCache, MemoryStorage
from jobboard.errors import JobFetchError

KEY = "remoteok-jobs-cache"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def board_for(storage, clock):
    def factory(service):
        return JobBoard({service.provider_id: service}, JobsCache(storage, clock=clock), clock=clock)
    return factory


def test_fetch_then_cache_hit(stub_service, board_for, storage):
    service = stub_service([posting("a", "<p>Python</p>")])
    board = board_for(service)

    first = board.fetch("remoteok")
    assert first.from_cache is False
    assert [j.id for j in first.jobs] == ["a"]
    assert KEY in storage

    second = board.fetch("remoteok")
    assert second.from_cache is True
    assert [j.id for j in second.jobs] == ["a"]
    assert second.jobs[0].html_text == ""
    assert service.calls == 1


def test_synthetic_thread_for_non_hn(stub_service, board_for, clock):
    service = stub_service([posting("a", "Python"), posting("b", "Go")])
    feed = board_for(service).fetch("remoteok")

    assert feed.thread.id == "remoteok"
    assert feed.thread.title == "RemoteOK Jobs"
    assert feed.thread.comment_count == 2
    assert feed.thread.posted_at.timestamp() == clock()


def test_refresh_bypasses_cache(stub_service, board_for):
    service = stub_service([posting("a", "Python")])
    board = board_for(service)
    board.fetch("remoteok")

    service.items = [posting("b", "Python")]
    feed = board.refresh("remoteok")
    assert [j.id for j in feed.jobs] == ["b"]
    assert service.calls == 2
    assert [j.id for j in board.fetch("remoteok").jobs] == ["b"]


def test_expired_cache_refetches(stub_service, board_for, clock):
    service = stub_service([posting("a", "Python")], cache_duration=3600)
    board = board_for(service)
    board.fetch("remoteok")

    clock.advance(3601)
    assert board.fetch("remoteok").from_cache is False
    assert service.calls == 2


def test_error_reported_on_feed(stub_service, board_for, storage, caplog):
    service = stub_service(error=JobFetchError("remoteok", "Failed to fetch jobs: 503"))
    with caplog.at_level(logging.ERROR):
        feed = board_for(service).fetch("remoteok")

    assert isinstance(feed.error, JobFetchError)
    assert feed.jobs == []
    assert feed.loading is False
    assert KEY not in storage
    assert "Failed to fetch jobs" in caplog.text


def test_error_then_retry(stub_service, board_for):
    service = stub_service(error=JobFetchError("remoteok", "down"))
    board = board_for(service)
    assert board.fetch("remoteok").error is not None

    service.error = None
    service.items = [posting("a", "Python")]
    feed = board.refresh("remoteok")
    assert feed.error is None
    assert [j.id for j in feed.jobs] == ["a"]


def test_unknown_provider(stub_service, board_for):
    board = board_for(stub_service())
    with pytest.raises(ValueError, match="Unknown job provider"):
        board.fetch("monster")


def test_is_loading_during_fetch(stub_service, board_for):
    service = stub_service([posting("a", "Python")])
    board = board_for(service)
    seen = []
    service.on_fetch = lambda: seen.append(board.is_loading("remoteok"))

    assert board.is_loading("remoteok") is False
    board.fetch("remoteok")
    assert seen == [True]
    assert board.is_loading("remoteok") is False


def test_superseded_fetch_not_cached(stub_service, board_for, clock, caplog):
    service = stub_service([posting("old", "Python")])
    board = board_for(service)

    def start_newer_fetch():
        # a second request for the same key starts while the first is in flight
        service.on_fetch = None
        service.items = [posting("new", "Python")]
        newer = board.refresh("remoteok")
        assert [j.id for j in newer.jobs] == ["new"]
        service.items = [posting("old", "Python")]

    service.on_fetch = start_newer_fetch
    with caplog.at_level(logging.WARNING):
        older = board.fetch("remoteok", force_refresh=True)

    assert [j.id for j in older.jobs] == ["old"]
    assert "superseded" in caplog.text
    cached = board.cache.read(KEY, service.cache_duration)
    assert [j.id for j in cached.jobs] == ["new"]


def test_cache_failure_still_returns_jobs(stub_service, clock, caplog):
    service = stub_service([posting("a", "Python")])
    board = JobBoard({"remoteok": service}, JobsCache(MemoryStorage(quota_bytes=10), clock=clock), clock=clock)

    with caplog.at_level(logging.WARNING):
        feed = board.fetch("remoteok")
    assert [j.id for j in feed.jobs] == ["a"]
    assert "will not persist" in caplog.text


def test_arbeitnow_options_use_separate_cache(scorer, session, clock, storage):
    from jobboard.sources import PROVIDERS, build_services

    calls = []

    def handler(params):
        calls.append(params)
        return {"data": [], "meta": {"last_page": 1}}

    session.route(PROVIDERS["arbeitnow"].api_url, handler)
    board = JobBoard(build_services(scorer, session=session, clock=clock), JobsCache(storage, clock=clock), clock=clock)

    board.fetch("arbeitnow")
    board.fetch("arbeitnow", {"remote_only": True})
    board.fetch("arbeitnow", {"remote_only": True})

    assert "arbeitnow-jobs-cache" in storage
    assert "arbeitnow-jobs-cache-remote" in storage
    assert len(calls) == 2


def test_non_object_cache_entry_refetches(stub_service, board_for, storage):
    storage.set(KEY, "null")
    service = stub_service([posting("a", "Python")])

    feed = board_for(service).fetch("remoteok")
    assert feed.error is None
    assert feed.from_cache is False
    assert [j.id for j in feed.jobs] == ["a"]
    assert service.calls == 1


def test_unexpected_payload_reported_on_feed(scorer, session, clock, storage):
    from jobboard.sources import PROVIDERS, build_services

    session.route(PROVIDERS["arbeitnow"].api_url, ["unexpected"])
    board = JobBoard(build_services(scorer, session=session, clock=clock), JobsCache(storage, clock=clock), clock=clock)

    feed = board.fetch("arbeitnow")
    assert isinstance(feed.error, JobFetchError)
    assert feed.jobs == []
    assert "arbeitnow-jobs-cache" not in storage
