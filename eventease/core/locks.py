from contextlib import contextmanager

import redis

from eventease.core.config import get_redis_url
from eventease.core.errors import ResourceBusy

LOCK_TIMEOUT = 10
BLOCKING_TIMEOUT = 5


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def resource_lock(key: str):
    """
    Hold a Redis lock on `key` for the duration of the block.
    Only one request can run a read-check-write on the same resource at a time.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(key, timeout=LOCK_TIMEOUT, blocking_timeout=BLOCKING_TIMEOUT)

    try:
        if not lock.acquire(blocking=True, blocking_timeout=BLOCKING_TIMEOUT):
            raise ResourceBusy()
    except redis.exceptions.LockError:  # type: ignore
        raise ResourceBusy()
    except redis.exceptions.ConnectionError:  # type: ignore
        raise ResourceBusy()

    try:
        yield lock
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:  # type: ignore
            # lock expired while we held it; nothing left to release
            pass


def event_lock_key(event_id: str) -> str:
    return f"event_lock:{event_id}"


def like_lock_key(event_id: str, user_id: str) -> str:
    return f"like_lock:{event_id}:{user_id}"


def review_lock_key(event_id: str, user_id: str) -> str:
    return f"review_lock:{event_id}:{user_id}"
