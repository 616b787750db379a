from __future__ import annotations

import os
from functools import lru_cache

import redis


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


@lru_cache(maxsize=1)
def get_shared_redis() -> redis.Redis:
    # One pooled client per process; see stackdrop.api.deps.get_redis.
    return create_redis()
