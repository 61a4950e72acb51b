# core/cache_manager.py

import asyncio
import hashlib
import json
import logging
from diskcache import Cache
from typing import Optional, Dict, Any
from collections import defaultdict

logger = logging.getLogger(__name__)

# default expiry: 7 days (604800 seconds)
CACHE_EXPIRATION = 604800

_cache: Optional[Cache] = None
_cache_lock = asyncio.Lock()  # guards _cache_stats
_cache_stats = defaultdict(int)

def init_cache(data_dir: str):
    """
    Initialise the cache manager.
    Call once at service startup.
    """
    global _cache
    if _cache is None:
        cache_path = f"{data_dir}/cache"
        _cache = Cache(cache_path, size_limit=256 * 1024 * 1024, tag_index=True)
        logger.info(f"LegislatorLens[CacheManager]: cache initialised at '{cache_path}'")

def close_cache():
    """Close and forget the cache so init_cache can be called again."""
    global _cache
    if _cache is not None:
        _cache.close()
        _cache = None

def _ensure_cache_initialized():
    """Raise unless the cache has been initialised"""
    if _cache is None:
        raise RuntimeError(
            "Cache has not been initialized. "
            "Please call init_cache() at service startup."
        )

async def get(key: str) -> Optional[Any]:
    """
    Look up any value by key.
    """
    _ensure_cache_initialized()
    value = await asyncio.to_thread(_cache.get, key)

    async with _cache_lock:
        if value is not None:
            _cache_stats["hits"] += 1
            logger.debug(f"LegislatorLens[CacheManager]: cache hit (Key: {key})")
        else:
            _cache_stats["misses"] += 1
            logger.debug(f"LegislatorLens[CacheManager]: cache miss (Key: {key})")
    return value

async def set(key: str, value: Any, expire: int = CACHE_EXPIRATION, tag: Optional[str] = None):
    """
    Store any value under key.
    `tag` groups entries so they can be evicted together, e.g. every entry of one bill.
    """
    _ensure_cache_initialized()
    try:
        await asyncio.to_thread(_cache.set, key, value, expire=expire, tag=tag)
        logger.debug(f"LegislatorLens[CacheManager]: stored (Key: {key}, Expire: {expire}s)")
    except Exception as e:
        logger.error(f"LegislatorLens[CacheManager]: failed to store (key: {key})", exc_info=e)

async def evict(tag: str) -> int:
    """Drop every entry stored with `tag`; returns how many were removed."""
    _ensure_cache_initialized()
    removed = await asyncio.to_thread(_cache.evict, tag)
    logger.info(f"LegislatorLens[CacheManager]: evicted {removed} entries (Tag: {tag})")
    return removed

def build_analysis_key(bill_id: str, analysis_level: str, options: Optional[Dict[str, Any]] = None) -> str:
    """
    Key for a composite analysis (bill_id, analysis_level, options).
    The resolved option flags are folded in as a short digest, so the same
    level run with different overrides is cached separately.
    """
    key = f"analysis:{bill_id}:{analysis_level}"
    if options:
        digest = hashlib.sha1(json.dumps(options, sort_keys=True).encode("utf-8")).hexdigest()[:12]
        key = f"{key}:{digest}"
    return key

def build_news_key(bill_id: str) -> str:
    """Key for a bill's news correlation"""
    return f"news:{bill_id}"

def build_historical_key(bill_id: str) -> str:
    """Key for a bill's historical analysis"""
    return f"historical:{bill_id}"

async def get_cache_stats() -> Dict[str, int]:
    """
    Cache hit/miss statistics
    """
    async with _cache_lock:
        stats = dict(_cache_stats)
    stats.setdefault("hits", 0)
    stats.setdefault("misses", 0)
    total = stats["hits"] + stats["misses"]
    if total > 0:
        stats["hit_rate"] = round(stats["hits"] / total, 4)
    else:
        stats["hit_rate"] = 0.0
    return stats

async def reset_cache_stats():
    """
    Reset the statistics
    """
    async with _cache_lock:
        global _cache_stats
        _cache_stats = defaultdict(int)
