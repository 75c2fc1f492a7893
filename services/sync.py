"""Sync coordinator: keeps the device cache fresh from the database.

Sync is caller-triggered: a manual refresh, or a reconnect event from the
network monitor via attach(). Each call is a single attempt. Everything is
fetched first; cache entries and the last-sync marker are written only once
every fetch has succeeded.

Staleness is exclusive at the boundary: a cache exactly `threshold` old is
still fresh.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from asgiref.sync import sync_to_async
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from pointsman.conf import pointsman_settings
from pointsman.exceptions import Offline, PointsmanError
from pointsman.protocols import ConversionInfo, MemberInfo
from pointsman.services.catalog import RewardCatalog
from pointsman.services.ledger import PointsLedger
from pointsman.services.preferences import SETTINGS_KEY, SettingsService
from pointsman.services.redemption import RedemptionService
from pointsman.signals import cache_synced

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    synced_at: datetime
    member_code: str | None = None
    keys: list[str] = field(default_factory=list)
    # False when a cache write failed; the last-sync marker was not advanced
    complete: bool = True


class SyncCoordinator:
    """
    Decides when the persisted cache is stale and refreshes it.

    Args:
        cache: PersistedCache
        connectivity: ConnectivitySignal (e.g. ConnectivityContext)
        session: SessionProvider for the signed-in member
    """

    LAST_SYNC_KEY = "last_sync"
    REWARDS_KEY = "rewards"
    PROFILE_KEY = "profile"
    CONVERSIONS_KEY = "conversions"
    SETTINGS_KEY = SETTINGS_KEY

    # Entries that belong to the signed-in member
    MEMBER_KEYS = (PROFILE_KEY, CONVERSIONS_KEY, SETTINGS_KEY)

    def __init__(self, cache, connectivity, session):
        self.cache = cache
        self.connectivity = connectivity
        self.session = session

    def last_sync_time(self) -> datetime | None:
        raw = self.cache.get(self.LAST_SYNC_KEY)
        if not raw:
            return None
        try:
            return parse_datetime(raw)
        except (TypeError, ValueError):
            return None

    def is_stale(self, threshold: timedelta | None = None) -> bool:
        if threshold is None:
            threshold = timedelta(seconds=pointsman_settings.STALE_AFTER_SECONDS)
        last_sync = self.last_sync_time()
        if last_sync is None:
            return True
        return timezone.now() - last_sync > threshold

    def sync_now(self) -> SyncResult:
        """
        Refresh the cache from the database.

        With nobody signed in only the catalog is refreshed and the previous
        member's entries are removed. If any cache write fails the result has
        complete=False, the marker is not advanced and cache_synced is not sent.

        Raises:
            Offline: not connected (nothing written)
            BackendUnavailable: database failure (nothing written)
            MemberNotFound: the session's member no longer exists
        """
        if not self.connectivity.is_connected:
            raise Offline()

        member_code = self.session.current_member_code()
        payload = self._fetch(member_code)

        with self.cache.critical_section():
            stored = [
                key
                for key, value in payload.items()
                if self.cache.set(key, json.dumps(value, cls=DjangoJSONEncoder))
            ]
            complete = len(stored) == len(payload)
            if member_code is None:
                # Signed out: drop the previous member's entries
                removed = [self.cache.remove(key) for key in self.MEMBER_KEYS]
                complete = complete and all(removed)
            synced_at = timezone.now()
            if complete:
                complete = self.cache.set(self.LAST_SYNC_KEY, synced_at.isoformat())

        result = SyncResult(
            synced_at=synced_at,
            member_code=member_code,
            keys=stored,
            complete=complete,
        )
        if not complete:
            logger.warning("Partial cache write for %s, cache left stale", member_code or "anonymous")
            return result

        logger.info("Cache synced for %s (%s)", member_code or "anonymous", ", ".join(stored))
        cache_synced.send(sender=SyncCoordinator, member_code=member_code, synced_at=synced_at)
        return result

    async def async_now(self) -> SyncResult:
        return await sync_to_async(self.sync_now)()

    def attach(self):
        """
        Sync on reconnect when the cache is stale.

        Returns:
            Callable that detaches from the connectivity signal
        """
        return self.connectivity.subscribe(self._on_connectivity_change)

    # ======================================================================
    # Cached reads
    # ======================================================================

    @classmethod
    def read_snapshot(cls, cache, key: str):
        raw = cache.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    def cached_rewards(self) -> list[dict] | None:
        return self.read_snapshot(self.cache, self.REWARDS_KEY)

    def cached_profile(self) -> dict | None:
        return self.read_snapshot(self.cache, self.PROFILE_KEY)

    def cached_conversions(self) -> list[dict] | None:
        return self.read_snapshot(self.cache, self.CONVERSIONS_KEY)

    # ======================================================================
    # Internals
    # ======================================================================

    def _fetch(self, member_code: str | None) -> dict:
        payload = {self.REWARDS_KEY: RewardCatalog.snapshot()}
        if member_code:
            member = PointsLedger.get_member(member_code)
            payload[self.PROFILE_KEY] = MemberInfo.from_member(member).as_dict()
            payload[self.SETTINGS_KEY] = SettingsService.fetch(member_code)
            payload[self.CONVERSIONS_KEY] = [
                ConversionInfo.from_conversion(c).as_dict()
                for c in RedemptionService.get_history(member_code)
            ]
        return payload

    def _on_connectivity_change(self, is_connected: bool) -> None:
        if not is_connected or not self.is_stale():
            return
        try:
            self.sync_now()
        except PointsmanError as e:
            logger.warning("Reconnect sync failed: %s", e.code)
