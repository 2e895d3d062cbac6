"""Per-provider job cache over a quota-limited key/value store.

Entries are JSON documents ``{jobs, metadata, fetched_at}``. Nothing here
raises to callers: expiry, corruption and quota exhaustion all degrade to a
cache miss or a skipped write.
"""
from __future__ import annotations

import dataclasses
import fcntl
import json
import os
import time
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable

from jobboard.errors import QuotaExceededError
from jobboard.log import get_logger
from jobboard.models import (
    Bonuses,
    CacheEntry,
    HNThread,
    MatchedSkill,
    ParsedJob,
    ParsedLocationData,
    RoleBreakdown,
    WeightedMatchResult,
)

log = get_logger(__name__)

JOB_CACHE_KEYS: tuple[str, ...] = (
    "hn-jobs-cache",
    "arbeitnow-jobs-cache",
    "arbeitnow-jobs-cache-remote",
    "remoteok-jobs-cache",
    "jobicy-jobs-cache",
    "remotive-jobs-cache",
)


# ---------------------------------------------------------------------------
# Storage backends
# ---------------------------------------------------------------------------

class Storage(ABC):
    """String key/value store with a finite quota."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value*; raises QuotaExceededError when it does not fit."""

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


def _size(value: str) -> int:
    return len(value.encode("utf-8"))


class MemoryStorage(Storage):
    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(_size(v) for k, v in self._data.items() if k != key)
            if used + _size(value) > self.quota_bytes:
                raise QuotaExceededError(
                    f"Storing {key!r} needs {_size(value)} bytes, "
                    f"{self.quota_bytes - used} of {self.quota_bytes} free"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)


def _unlock(f) -> None:
    fcntl.flock(f.fileno(), fcntl.LOCK_UN)


class FileStorage(Storage):
    """One ``<key>.json`` file per key under *directory*; quota spans all of them."""

    def __init__(self, directory: Path, quota_bytes: int | None = 5 * 1024 * 1024) -> None:
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _used_bytes(self, exclude: Path) -> int:
        return sum(p.stat().st_size for p in self.directory.glob("*.json") if p != exclude)

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                data = f.read()
                _unlock(f)
        except FileNotFoundError:
            return None
        return data

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        with open(self.directory / ".lock", "w") as lock_file:
            _lock(lock_file)
            try:
                if self.quota_bytes is not None:
                    used = self._used_bytes(exclude=path)
                    if used + _size(value) > self.quota_bytes:
                        raise QuotaExceededError(
                            f"Storing {key!r} needs {_size(value)} bytes, "
                            f"{self.quota_bytes - used} of {self.quota_bytes} free"
                        )
                tmp = path.with_suffix(".tmp")
                tmp.write_text(value, encoding="utf-8")
                os.replace(tmp, path)
            finally:
                _unlock(lock_file)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def prepare_jobs_for_cache(jobs: Iterable[ParsedJob]) -> list[ParsedJob]:
    """Drop html_text; raw_text stands in for display after a cache hit."""
    return [dataclasses.replace(j, html_text="") for j in jobs]


def job_to_dict(job: ParsedJob) -> dict[str, Any]:
    data = dataclasses.asdict(job)
    data.pop("html_text", None)
    data["posted_at"] = job.posted_at.isoformat()
    return data


def _location_from_dict(d: dict[str, Any]) -> ParsedLocationData:
    breakdown = d.get("role_breakdown")
    return ParsedLocationData(
        type=d["type"],
        primary_regions=tuple(d.get("primary_regions", ())),
        secondary_regions=tuple(d.get("secondary_regions", ())),
        on_site_locations=tuple(d.get("on_site_locations", ())),
        excluded_regions=tuple(d.get("excluded_regions", ())),
        confidence=d.get("confidence", "low"),
        role_breakdown=RoleBreakdown(**breakdown) if breakdown else None,
    )


def _match_from_dict(d: dict[str, Any]) -> WeightedMatchResult:
    return WeightedMatchResult(
        score=d["score"],
        raw_points=d["raw_points"],
        max_possible_points=d["max_possible_points"],
        skill_points=d["skill_points"],
        bonus_points=d["bonus_points"],
        matched_skills=tuple(MatchedSkill(**s) for s in d.get("matched_skills", ())),
        bonuses=Bonuses(**d.get("bonuses", {})),
        temperature=d["temperature"],
    )


def job_from_dict(d: dict[str, Any]) -> ParsedJob:
    details = d.get("match_details")
    return ParsedJob(
        id=d["id"],
        company=d["company"],
        raw_text=d["raw_text"],
        posted_at=datetime.fromisoformat(d["posted_at"]),
        author=d.get("author", ""),
        match_score=d["match_score"],
        matched_skills=tuple(d.get("matched_skills", ())),
        location_data=_location_from_dict(d["location_data"]),
        source=d["source"],
        source_url=d.get("source_url", ""),
        title=d.get("title"),
        match_details=_match_from_dict(details) if details else None,
        is_remote=d.get("is_remote", False),
        location=d.get("location"),
        tags=tuple(d.get("tags", ())),
    )


def _thread_to_dict(thread: HNThread) -> dict[str, Any]:
    return {
        "id": thread.id,
        "title": thread.title,
        "posted_at": thread.posted_at.isoformat(),
        "comment_count": thread.comment_count,
    }


def _thread_from_dict(d: dict[str, Any]) -> HNThread:
    return HNThread(
        id=d["id"],
        title=d["title"],
        posted_at=datetime.fromisoformat(d["posted_at"]),
        comment_count=d["comment_count"],
    )


def entry_to_json(entry: CacheEntry) -> str:
    return json.dumps({
        "jobs": [job_to_dict(j) for j in prepare_jobs_for_cache(entry.jobs)],
        "metadata": _thread_to_dict(entry.metadata) if entry.metadata else None,
        "fetched_at": entry.fetched_at,
    })


def entry_from_json(raw: str) -> CacheEntry:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    metadata = data.get("metadata")
    return CacheEntry(
        jobs=[job_from_dict(j) for j in data["jobs"]],
        fetched_at=float(data["fetched_at"]),
        metadata=_thread_from_dict(metadata) if metadata else None,
    )


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class JobsCache:
    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], float] = time.time,
        keys: Iterable[str] = JOB_CACHE_KEYS,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.keys = tuple(keys)

    def create_entry(self, jobs: list[ParsedJob], metadata: HNThread | None = None) -> CacheEntry:
        return CacheEntry(jobs=jobs, fetched_at=self.clock(), metadata=metadata)

    def read(self, key: str, ttl: float) -> CacheEntry | None:
        """Entry for *key* if younger than *ttl* seconds; expired or corrupt entries are removed."""
        try:
            raw = self.storage.get(key)
        except OSError as exc:
            log.warning("Failed to read cache %s: %s", key, exc)
            return None
        if not raw:
            return None

        try:
            entry = entry_from_json(raw)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            log.warning("Corrupted cache entry %s, discarding: %s", key, exc)
            self._remove(key)
            return None

        age = self.clock() - entry.fetched_at
        if age > ttl:
            log.debug("Cache %s expired (%.0fs old, ttl %.0fs)", key, age, ttl)
            self._remove(key)
            return None

        log.debug("Cache hit %s: %d jobs", key, len(entry.jobs))
        return entry

    def write(self, key: str, entry: CacheEntry) -> bool:
        """Persist *entry*; on quota exhaustion evict other providers and retry once."""
        try:
            data = entry_to_json(entry)
        except (TypeError, ValueError) as exc:
            log.warning("Failed to serialize cache %s: %s", key, exc)
            return False

        try:
            self.storage.set(key, data)
            return True
        except QuotaExceededError:
            log.warning("Storage quota exceeded for %s, clearing other caches and retrying", key)
        except OSError as exc:
            log.warning("Failed to cache %s: %s", key, exc)
            return False

        self.clear_others(key)
        try:
            self.storage.set(key, data)
            return True
        except (QuotaExceededError, OSError) as exc:
            log.warning("Failed to cache %s even after clearing: %s", key, exc)
            return False

    def _remove(self, key: str) -> None:
        try:
            self.storage.remove(key)
        except OSError as exc:
            log.warning("Failed to clear job cache %r: %s", key, exc)

    def clear_all(self) -> None:
        for key in self.keys:
            self._remove(key)

    def clear_others(self, keep_key: str) -> None:
        for key in self.keys:
            if key != keep_key:
                self._remove(key)
