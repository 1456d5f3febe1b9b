# 📄 File: plantscan/shared/config/storage.py
#
# 🧭 Purpose (Layman Explanation):
# Reads the settings and builds the right storage for this device: in memory,
# JSON files in a folder, or a Redis server.
#
# 🧪 Purpose (Technical Summary):
# Storage backend factory with Redis connection pooling. Produces an explicitly
# constructed KeyValueStore that callers pass into caches and repositories.
#
# 🔗 Dependencies:
# - redis Python package (asyncio connection pool)
# - plantscan.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - plantscan.main (application container)

from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import ConnectionPool, Redis

from plantscan.shared.infrastructure.storage import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
)

from .settings import Settings, get_settings


class StorageConfig:
    """Storage configuration with backend selection and Redis connection management."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._connection_pool: ConnectionPool | None = None

    @property
    def backend(self) -> str:
        return self.settings.STORAGE_BACKEND

    @property
    def redis_connection_kwargs(self) -> Dict[str, Any]:
        """Get Redis connection configuration."""
        base_config = {
            "encoding": "utf-8",
            "decode_responses": True,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }

        if self.settings.is_production:
            base_config.update({
                "socket_timeout": 5.0,
                "socket_connect_timeout": 5.0,
                "socket_keepalive": True,
            })
        elif self.settings.is_development:
            base_config.update({
                "socket_timeout": 10.0,
                "socket_connect_timeout": 10.0,
            })

        return base_config

    def create_connection_pool(self) -> ConnectionPool:
        """Create Redis connection pool."""
        if self._connection_pool is None:
            self._connection_pool = ConnectionPool.from_url(
                self.settings.redis_url,
                max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                **self.redis_connection_kwargs
            )
        return self._connection_pool

    def create_redis_client(self) -> Redis:
        """Create Redis client with connection pool."""
        return redis.Redis(connection_pool=self.create_connection_pool())

    def create_store(self) -> KeyValueStore:
        """
        Build the configured key-value store.

        Returns:
            KeyValueStore for the configured backend
        """
        if self.backend == "memory":
            return MemoryKeyValueStore()

        if self.backend == "redis":
            return RedisKeyValueStore(
                self.create_redis_client(),
                namespace=self.settings.STORAGE_NAMESPACE
            )

        return FileKeyValueStore(self.settings.STORAGE_PATH)

    async def close_connections(self):
        """Close the Redis connection pool if one was opened."""
        if self._connection_pool:
            await self._connection_pool.disconnect()
            self._connection_pool = None
