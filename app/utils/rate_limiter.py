"""
Per-client request rate limiting for the API
"""
import threading
import time
from collections import defaultdict, deque
from typing import Deque, Dict
from fastapi import Request
import logging

from app.config import settings
from app.exceptions import QuizMakerError

logger = logging.getLogger(__name__)


class RateLimitExceeded(QuizMakerError):
    """Client sent too many requests"""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class RateLimiter:
    """
    In-memory sliding-window rate limiter (per minute and per hour)

    Clients are identified by IP address. Counters live in this process only,
    which is enough for a single-instance administrative tool.
    """

    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000, enabled: bool = True):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.enabled = enabled

        # {client_id: timestamps of accepted requests within the last hour}
        self._history: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def _get_client_id(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def check(self, request: Request) -> None:
        """
        Record a request or refuse it

        Raises:
            RateLimitExceeded: minute or hour budget used up
        """
        if not self.enabled:
            return

        client_id = self._get_client_id(request)
        now = time.time()

        with self._lock:
            history = self._history[client_id]
            while history and history[0] <= now - 3600:
                history.popleft()

            last_minute = sum(1 for ts in history if ts > now - 60)
            if last_minute >= self.requests_per_minute:
                logger.warning(f"Rate limit exceeded (minute): {client_id}")
                raise RateLimitExceeded(
                    f"Too many requests. Limit: {self.requests_per_minute} requests per minute",
                    retry_after=60,
                )

            if len(history) >= self.requests_per_hour:
                logger.warning(f"Rate limit exceeded (hour): {client_id}")
                raise RateLimitExceeded(
                    f"Too many requests. Limit: {self.requests_per_hour} requests per hour",
                    retry_after=3600,
                )

            history.append(now)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    enabled=settings.RATE_LIMIT_ENABLED,
)
