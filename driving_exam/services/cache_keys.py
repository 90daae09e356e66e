"""
Cache key conventions.

Keys follow ``{category}:{param1}:{param2}...`` and each category has its own
time-to-live in seconds.
"""

import enum


class CacheKey(enum.Enum):
    QUESTIONS = ("questions", 3600)
    PACKAGES = ("packages", 1800)
    USER_STATS = ("user_stats", 600)
    LEADERBOARD = ("leaderboard", 300)
    TRANSLATIONS = ("translations", 86400)

    def __init__(self, prefix: str, ttl_seconds: int):
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds

    def key(self, *params) -> str:
        """``CacheKey.USER_STATS.key(3, "package", 12)`` -> ``"user_stats:3:package:12"``"""
        return ":".join([self.prefix, *(str(param) for param in params)])
