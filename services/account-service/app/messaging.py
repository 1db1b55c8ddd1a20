"""Redis pub/sub notifier used for outbound account events."""

from __future__ import annotations

import logging

import redis
from redis import Redis

logger = logging.getLogger(__name__)


def connect_redis(url: str, timeout_seconds: float) -> Redis:
    """Create a Redis client whose connect and socket operations are time-bounded."""
    return redis.from_url(
        url,
        socket_timeout=timeout_seconds,
        socket_connect_timeout=timeout_seconds,
    )


class RedisNotifier:
    """Publish-only channel backed by Redis ``PUBLISH``."""

    def __init__(self, client: Redis, *, channel_prefix: str = "") -> None:
        self._client = client
        self._channel_prefix = channel_prefix

    def publish(self, topic: str, payload: bytes) -> None:
        """Publish ``payload`` on ``topic``; connection errors and timeouts propagate."""
        channel = f"{self._channel_prefix}{topic}"
        receivers = self._client.publish(channel, payload)
        logger.debug("published %d bytes to %s (%s receivers)", len(payload), channel, receivers)
