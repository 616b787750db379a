from __future__ import annotations

import redis

from stackdrop.infra.redis_client import get_shared_redis
from stackdrop.session_store import SessionRegistry, registry


def get_redis() -> redis.Redis:
    # Live sessions keep their high-score store bound to this client, so every
    # request gets the same process-wide instance.
    return get_shared_redis()


def get_registry() -> SessionRegistry:
    return registry
