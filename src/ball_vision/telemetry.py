"""
Telemetry publishing to a shared Redis key/value store.
"""

import logging
import redis
from typing import Optional
from .config import TelemetryConfig
from .geometry import BoundingBox


logger = logging.getLogger(__name__)


class RedisTelemetryStore:
    """String key/value store backed by Redis."""

    def __init__(self, config: TelemetryConfig, client: Optional[redis.Redis] = None):
        """
        Initialize the store.

        Args:
            config: Telemetry configuration
            client: Existing Redis client, created from config if None
        """
        self.config = config
        self.client = client or redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            socket_timeout=config.socket_timeout,
            decode_responses=True,
        )

    def set_string(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under key.

        Write failures are logged and not raised.
        """
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            logger.warning(f"Failed to write telemetry key '{key}': {e}")

    def get_string(self, key: str) -> Optional[str]:
        """Read the value stored under key, None if absent."""
        value = self.client.get(key)
        if isinstance(value, bytes):
            return value.decode()
        return value

    def close(self):
        """Close the Redis connection pool."""
        self.client.close()


class TelemetryPublisher:
    """Writes the latest bounding box under a fixed key."""

    def __init__(self, store, key: str = "BallPosition"):
        self.store = store
        self.key = key

    def publish(self, box: BoundingBox) -> None:
        self.store.set_string(self.key, str(box))
