"""Result caching for incremental builds."""

from gitbuildnumber.incremental.cache import CachedResult, CacheState, ResultCache

__all__ = ["CachedResult", "CacheState", "ResultCache"]
