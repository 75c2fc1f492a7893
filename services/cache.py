"""Persisted cache: namespaced key-value store on a Django cache alias.

Best effort: a failing cache backend is logged and reads as "no cached
value". Values are opaque; callers serialize and deserialize.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any

from django.core.cache import caches

from pointsman.conf import pointsman_settings

logger = logging.getLogger(__name__)

# Shared by every PersistedCache in the process: clear_all() on one instance
# must not interleave with a critical section held through another.
_LOCK = threading.RLock()


class PersistedCache:
    """
    Device-local cache.

    Usage:
        cache = PersistedCache()
        cache.set("settings", json.dumps(settings))
        raw = cache.get("settings")

        with cache.critical_section():
            cache.set("rewards", rewards_json)
            cache.set("last_sync", now_iso)
    """

    def __init__(self, alias: str | None = None, namespace: str | None = None):
        self.alias = alias or pointsman_settings.CACHE_ALIAS
        self.namespace = namespace or pointsman_settings.CACHE_NAMESPACE

    @property
    def backend(self):
        return caches[self.alias]

    def make_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self.backend.get(self.make_key(key), default)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return default

    def set(self, key: str, value: Any) -> bool:
        """Store `value` with no expiry. Returns False if the write failed."""
        try:
            self.backend.set(self.make_key(key), value, timeout=None)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.backend.delete(self.make_key(key))
        except Exception:
            logger.warning("Cache delete failed for %s", key, exc_info=True)
            return False
        return True

    def clear_all(self) -> bool:
        """
        Wipe the whole cache alias, last-sync marker included.

        Waits for any critical section in progress.
        """
        with self.critical_section():
            try:
                self.backend.clear()
            except Exception:
                logger.warning("Cache clear failed for alias %s", self.alias, exc_info=True)
                return False
        logger.info("Cache alias %s cleared", self.alias)
        return True

    @contextmanager
    def critical_section(self):
        with _LOCK:
            yield self
