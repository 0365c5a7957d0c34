"""Durable key/blob storage backing the preference store.

Each store persists exactly one JSON blob under a namespaced key. Namespaces
keep unrelated blobs (the auth session and the preference state) apart, so
deleting one never touches the other.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

if TYPE_CHECKING:
    from marketplace.settings import AppSettings

logger = logging.getLogger(__name__)

PREFERENCES_NAMESPACE = "preferences"
AUTH_NAMESPACE = "auth"
_PREFERENCES_BLOB_NAME = "user-preferences"
_AUTH_BLOB_NAME = "auth-storage"


def namespaced_key(namespace: str, name: str) -> str:
    namespace = namespace.strip()
    name = name.strip()
    if not namespace or not name:
        raise ValueError("Durable keys need both a namespace and a name")
    return f"{namespace}:{name}"


def preferences_key() -> str:
    return namespaced_key(PREFERENCES_NAMESPACE, _PREFERENCES_BLOB_NAME)


def auth_session_key() -> str:
    return namespaced_key(AUTH_NAMESPACE, _AUTH_BLOB_NAME)


@runtime_checkable
class DurableStore(Protocol):
    """Minimal persistent key/blob surface required by the preference store."""

    def read(self, key: str) -> str | None:
        """Return the blob stored under ``key`` or ``None`` when absent."""

    def write(self, key: str, blob: str) -> None:
        """Replace the blob stored under ``key``."""

    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""


class InMemoryDurableStore:
    """Process-local store, handy for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._blobs)


def _sanitize(key: str) -> str:
    """Map an arbitrary key onto a filesystem-safe file name."""

    return "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in key)


class FileDurableStore:
    """Store each key as ``<directory>/<sanitized key>.json``.

    Writes go to a temporary file in the same directory followed by
    :func:`os.replace`, so readers observe either the previous blob or the
    new one.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{_sanitize(key)}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            logger.warning("Durable blob at %s is not valid UTF-8", path)
            return ""

    def write(self, key: str, blob: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._directory, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(blob)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote durable blob %s (%d bytes)", path, len(blob))

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


def _is_redis_connection_error(exc: BaseException) -> bool:
    """Return ``True`` when ``exc`` represents a Redis connection failure."""

    if isinstance(exc, RedisConnectionError):
        return True

    error_type = type(exc)
    return error_type.__name__ == "ConnectionError" and error_type.__module__.startswith("redis")


class RedisDurableStore:
    """Keep blobs in Redis without expiry.

    Reads degrade to "no blob" when Redis is unreachable so hydration falls
    back to defaults. Writes propagate connection errors: silently dropping a
    mutation would break the persist-before-return contract.
    """

    def __init__(self, client: Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisDurableStore:
        client = Redis.from_url(url, decode_responses=True, encoding="utf-8")
        return cls(client)

    def read(self, key: str) -> str | None:
        try:
            payload = self._redis.get(key)
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_connection_error(exc):
                logger.warning("Redis read failed for key %s: %s", key, exc)
                return None
            raise
        if isinstance(payload, bytes):
            return payload.decode("utf-8", errors="replace")
        return payload

    def write(self, key: str, blob: str) -> None:
        self._redis.set(key, blob)

    def delete(self, key: str) -> None:
        try:
            self._redis.delete(key)
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_connection_error(exc):
                logger.warning("Redis delete failed for key %s: %s", key, exc)
                return
            raise


def build_durable_store(active_settings: AppSettings) -> DurableStore:
    """Instantiate the backend selected by ``PREFERENCES_BACKEND``."""

    backend = active_settings.preferences_backend
    if backend == "memory":
        return InMemoryDurableStore()
    if backend == "file":
        return FileDurableStore(active_settings.preferences_storage_dir)
    if backend == "redis":
        return RedisDurableStore.from_url(active_settings.redis_url)
    raise ValueError(f"Unsupported preferences backend: {backend}")


__all__ = [
    "AUTH_NAMESPACE",
    "DurableStore",
    "FileDurableStore",
    "InMemoryDurableStore",
    "PREFERENCES_NAMESPACE",
    "RedisDurableStore",
    "auth_session_key",
    "build_durable_store",
    "namespaced_key",
    "preferences_key",
]
