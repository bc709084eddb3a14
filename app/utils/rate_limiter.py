"""
Per-client request throttling for the API
"""
import time
from collections import deque
from fastapi import Request
from typing import Deque, Dict
import logging

from app.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window limiter kept in process memory
    
    Each client keeps one deque of request timestamps; the minute and hour
    windows are both counted from it. Clients with nothing inside the hour
    window are dropped.
    """
    
    WINDOWS = (("minute", 60), ("hour", 3600))
    
    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        trust_forwarded: bool = False
    ):
        self.limits = {"minute": requests_per_minute, "hour": requests_per_hour}
        self.trust_forwarded = trust_forwarded
        self.requests: Dict[str, Deque[float]] = {}
    
    def _get_client_id(self, request: Request) -> str:
        """Socket peer, or the first forwarded address when behind a trusted proxy"""
        if self.trust_forwarded:
            forwarded = request.headers.get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"
    
    def _evict_stale(self, now: float) -> None:
        cutoff = now - 3600
        for client_id in list(self.requests):
            history = self.requests[client_id]
            while history and history[0] <= cutoff:
                history.popleft()
            if not history:
                del self.requests[client_id]
    
    def check_rate_limit(self, request: Request) -> None:
        """
        Record the request or reject it
        
        Raises:
            RateLimitExceeded: 429 when either window is full
        """
        client_id = self._get_client_id(request)
        now = time.time()
        
        self._evict_stale(now)
        history = self.requests.get(client_id, ())
        
        for window, seconds in self.WINDOWS:
            count = sum(1 for ts in history if ts > now - seconds)
            if count >= self.limits[window]:
                logger.warning(f"Rate limit exceeded ({window}): {client_id}")
                raise RateLimitExceeded(self.limits[window], window, seconds)
        
        self.requests.setdefault(client_id, deque()).append(now)
    

# Global instance
from app.config import settings
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    trust_forwarded=settings.TRUST_FORWARDED_HEADERS
)
