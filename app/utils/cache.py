"""
Redis cache for course structure lookups

The structure of a subject (every active content block under it) changes
only when content is re-authored, so it is cached per subject and read on
every progress update.
"""
import redis
import json
import logging
from typing import Any, Callable, Optional
from app.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    JSON values in Redis under "course_structure:<subject_id>"
    
    Every operation degrades to a no-op when Redis is disabled or down;
    callers then read straight from the database.
    """
    
    KEY_PREFIX = "course_structure"
    
    def __init__(self):
        self.redis_client = None
        
        if not settings.CACHE_ENABLED:
            logger.info("Course structure cache disabled by configuration")
            return
        
        try:
            client = redis.from_url(settings.REDIS_URL, decode_responses=True, socket_connect_timeout=5)
            client.ping()
            self.redis_client = client
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis unavailable ({str(e)}), course structure cache disabled")
    
    @property
    def enabled(self) -> bool:
        return self.redis_client is not None
    
    def course_structure_key(self, subject_id: str) -> str:
        return f"{self.KEY_PREFIX}:{subject_id}"
    
    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache read failed for {key}: {str(e)}")
            return None
        if raw is None:
            logger.debug(f"Cache miss: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return json.loads(raw)
    
    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """Store a JSON-serializable value; ttl defaults to COURSE_STRUCTURE_CACHE_TTL"""
        if not self.enabled:
            return False
        ttl = ttl or settings.COURSE_STRUCTURE_CACHE_TTL
        try:
            self.redis_client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Cache write failed for {key}: {str(e)}")
            return False
        return True
    
    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        """
        Cached value for key, else loader() which is cached when non-empty
        
        Empty results are not cached so a subject whose content is still
        being authored shows up as soon as it has blocks.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        if value:
            self.set(key, value)
        return value
    
    def delete(self, key: str) -> bool:
        if not self.enabled:
            return False
        try:
            self.redis_client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Cache delete failed for {key}: {str(e)}")
            return False
        logger.info(f"Cache invalidated: {key}")
        return True
    
    def clear_subject_cache(self, subject_id: str) -> bool:
        """Drop the cached structure of one subject after its content changes"""
        return self.delete(self.course_structure_key(subject_id))


# Global instance
cache_service = CacheService()
