"""
ChoirStats - Redis Document Store

Persists monthly statistics documents keyed by YYYY-MM.

Each month is one Redis hash. Every top-level document field is stored as
a JSON-encoded hash field, so HSET merges fields into an existing record
without touching fields that are not part of the write.

Unlike a read-through cache, this store does not hide failures: any Redis
error is logged and raised as StatisticsStoreError so callers can tell a
failed read from a missing record.
"""

import copy
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from choirstats.exceptions import StatisticsStoreError


logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Key to document async store used by the rollup composer."""

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    async def upsert(
        self,
        key: str,
        partial_doc: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None
    ) -> None:
        ...

    async def list_keys(self, prefix: str = "") -> List[str]:
        ...

    async def delete(self, key: str) -> bool:
        ...


class RedisDocumentStore:
    """
    Redis-backed document store for monthly statistics.

    PERSISTENCE NOTE:
    -----------------
    Monthly statistics are the only copy of historical rollups, so Redis
    must run with persistence enabled (AOF recommended):

       docker run -d --name redis -p 6379:6379 \\
           -v redis-data:/data \\
           redis:alpine redis-server --appendonly yes
    """

    # Cache key prefix
    PREFIX_MONTHLY = "choirstats:monthly_statistics"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: Optional[str] = None,
        client: Optional[Any] = None
    ):
        """
        Initialize the store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace for month keys (default: PREFIX_MONTHLY)
            client: Pre-built redis.asyncio client (tests inject a mock)
        """
        self.redis_url = redis_url
        self.key_prefix = key_prefix or self.PREFIX_MONTHLY
        self.client: Any = client or redis.from_url(redis_url, decode_responses=True)

    def _safe_url(self) -> str:
        """Return URL with password masked for logging."""
        if "@" in self.redis_url:
            parts = self.redis_url.split("@")
            return f"***@{parts[-1]}"
        return self.redis_url

    def _redis_key(self, key: str) -> str:
        """Full Redis key for a month key."""
        return f"{self.key_prefix}:{key}"

    def _serialize(self, data: Any) -> str:
        """Serialize a field value to JSON string."""
        return json.dumps(data, default=str, ensure_ascii=False)

    def _deserialize(self, data: Optional[str]) -> Any:
        """Deserialize a JSON field value, keeping undecodable values as text."""
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"[WARN] Undecodable field value in {self.key_prefix}: {data[:40]!r}")
            return data

    async def ping(self) -> bool:
        """
        Check the connection.

        Raises:
            StatisticsStoreError: If Redis cannot be reached
        """
        try:
            await self.client.ping()
        except RedisError as error:
            logger.error(f"[ERROR] Failed to connect to Redis at {self._safe_url()}: {error}")
            raise StatisticsStoreError("ping", self._safe_url(), str(error)) from error
        logger.info(f"[OK] Connected to Redis at {self._safe_url()}")
        return True

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a document.

        Args:
            key: Month key (YYYY-MM)

        Returns:
            Document dictionary, or None if no record exists
        """
        try:
            raw = await self.client.hgetall(self._redis_key(key))
        except RedisError as error:
            logger.error(f"[ERROR] Error reading statistics for {key}: {error}")
            raise StatisticsStoreError("get", key, str(error)) from error

        if not raw:
            return None
        return {field: self._deserialize(value) for field, value in raw.items()}

    async def upsert(
        self,
        key: str,
        partial_doc: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None
    ) -> None:
        """
        Merge fields into a document, creating it if needed.

        Args:
            key: Month key (YYYY-MM)
            partial_doc: Fields to set (other stored fields are kept)
            defaults: Fields written only if not already present
        """
        redis_key = self._redis_key(key)
        try:
            pipe = self.client.pipeline(transaction=True)
            if partial_doc:
                pipe.hset(
                    redis_key,
                    mapping={field: self._serialize(value) for field, value in partial_doc.items()}
                )
            for field, value in (defaults or {}).items():
                pipe.hsetnx(redis_key, field, self._serialize(value))
            await pipe.execute()
        except RedisError as error:
            logger.error(f"[ERROR] Error storing statistics for {key}: {error}")
            raise StatisticsStoreError("upsert", key, str(error)) from error

        logger.debug(f"Stored {len(partial_doc)} fields for {key}")

    async def list_keys(self, prefix: str = "") -> List[str]:
        """
        List stored month keys starting with a prefix.

        Args:
            prefix: Month key prefix, e.g. "2025" or "2025-0"

        Returns:
            Matching month keys (unordered)
        """
        pattern = f"{self.key_prefix}:{_escape_glob(prefix)}*"
        namespace = f"{self.key_prefix}:"
        keys: List[str] = []
        try:
            async for redis_key in self.client.scan_iter(match=pattern, count=500):
                keys.append(redis_key[len(namespace):])
        except RedisError as error:
            logger.error(f"[ERROR] Error listing statistics keys: {error}")
            raise StatisticsStoreError("list_keys", prefix or "*", str(error)) from error
        return keys

    async def delete(self, key: str) -> bool:
        """
        Delete a document.

        Returns:
            True if a record was removed
        """
        try:
            removed = await self.client.delete(self._redis_key(key))
        except RedisError as error:
            logger.error(f"[ERROR] Error deleting statistics for {key}: {error}")
            raise StatisticsStoreError("delete", key, str(error)) from error
        if removed:
            logger.info(f"[OK] Deleted statistics for {key}")
        return bool(removed)

    async def close(self) -> None:
        """Close the Redis connection."""
        await self.client.aclose()
        logger.debug("Redis connection closed")


class InMemoryDocumentStore:
    """
    Dictionary-backed store with the same contract as RedisDocumentStore.

    Used for tests and for running the CLI without a Redis server.
    Documents are deep-copied in and out so callers cannot mutate stored state.
    """

    def __init__(self, documents: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._documents: Dict[str, Dict[str, Any]] = {
            key: copy.deepcopy(dict(document)) for key, document in (documents or {}).items()
        }

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    async def upsert(
        self,
        key: str,
        partial_doc: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None
    ) -> None:
        document = self._documents.setdefault(key, {})
        document.update(copy.deepcopy(dict(partial_doc)))
        for field, value in (defaults or {}).items():
            document.setdefault(field, copy.deepcopy(value))

    async def list_keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._documents if key.startswith(prefix)]

    async def delete(self, key: str) -> bool:
        return self._documents.pop(key, None) is not None

    async def close(self) -> None:
        pass


def _escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters in a literal prefix."""
    return "".join(f"\\{char}" if char in "*?[]\\" else char for char in value)
