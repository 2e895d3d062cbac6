"""Exception types raised by the job board."""
from __future__ import annotations


class JobBoardError(Exception):
    """Base class for job board errors."""


class ConfigError(JobBoardError):
    """Raised when the skill/scoring configuration is invalid."""


class JobFetchError(JobBoardError):
    """
    Raised when an upstream job API cannot be fetched.

    Attributes:
        provider_id: Provider whose fetch failed (e.g. 'remoteok')
        status_code: HTTP status for non-2xx responses, None for transport errors
    """

    def __init__(self, provider_id: str, message: str, status_code: int | None = None):
        self.provider_id = provider_id
        self.status_code = status_code
        super().__init__(f"[{provider_id}] {message}")


class QuotaExceededError(JobBoardError):
    """Raised by a cache storage backend when a write would exceed its quota."""
