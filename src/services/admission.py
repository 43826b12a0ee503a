import secrets
from typing import Protocol

import structlog
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from src.config import DEFAULT_API_KEY
from src.core.exceptions import AuthError

logger = structlog.get_logger()


class AdmissionTracker(Protocol):
    def admit(self, identity: str) -> bool: ...

    def reset(self) -> None: ...


class SlidingWindowLimiter:
    def __init__(self, max_requests: int = 100, window_seconds: int = 60) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)

    def admit(self, identity: str) -> bool:
        return self._strategy.hit(self._item, identity)

    def count(self, identity: str) -> int:
        stats = self._strategy.get_window_stats(self._item, identity)
        return self.max_requests - stats.remaining

    def reset(self) -> None:
        self._storage.reset()


class ApiKeyAuthenticator:
    def __init__(self, expected_key: str) -> None:
        self._expected = expected_key

    @property
    def uses_default_key(self) -> bool:
        return self._expected == DEFAULT_API_KEY

    def verify(self, provided: str | None) -> None:
        if not provided:
            raise AuthError("API key required")
        if not secrets.compare_digest(provided.encode(), self._expected.encode()):
            logger.warning("api_key_rejected")
            raise AuthError("Invalid API key")
