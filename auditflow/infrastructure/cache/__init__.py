"""Cache infrastructure: Redis-backed CacheService."""

from auditflow.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
