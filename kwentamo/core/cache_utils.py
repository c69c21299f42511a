"""
Caching helpers for expensive aggregate queries.
Backed by Redis when REDIS_URL is configured, local memory otherwise.
"""
import hashlib
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_CACHE_TTL = 300  # 5 minutes


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def dashboard_cache_key(user_id):
    return make_cache_key("dashboard_summary", user_id)


def get_cached_dashboard(user_id):
    """Returns tuple: (cached_data, cache_key)"""
    cache_key = dashboard_cache_key(user_id)
    return cache.get(cache_key), cache_key


def cache_dashboard(cache_key, data, ttl=DASHBOARD_CACHE_TTL):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached dashboard summary: {cache_key}")


def invalidate_dashboard_cache(user_id):
    """Drop one user's cached dashboard summary"""
    if user_id is None:
        return
    cache.delete(dashboard_cache_key(user_id))
    logger.debug(f"Invalidated dashboard cache for user {user_id}")
