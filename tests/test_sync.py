"""Tests for the sync coordinator and catalog fallback."""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from pointsman.adapters.session import DjangoSessionProvider
from pointsman.exceptions import BackendUnavailable, MemberNotFound, Offline
from pointsman.protocols import SessionProvider
from pointsman.services.catalog import RewardCatalog
from pointsman.services.preferences import SettingsService
from pointsman.services.redemption import RedemptionService
from pointsman.services.sync import SyncCoordinator
from pointsman.signals import cache_synced


pytestmark = pytest.mark.django_db


@pytest.fixture
def coordinator(cache, connectivity, session):
    return SyncCoordinator(cache, connectivity, session)


def _now_at(moment):
    return patch("pointsman.services.sync.timezone.now", return_value=moment)


class TestStaleness:
    def test_stale_without_marker(self, coordinator):
        assert coordinator.last_sync_time() is None
        assert coordinator.is_stale() is True

    def test_fresh_after_sync(self, coordinator, reward):
        result = coordinator.sync_now()

        assert coordinator.is_stale() is False
        assert coordinator.last_sync_time() == result.synced_at

    def test_boundary_is_fresh(self, coordinator, reward):
        """Exactly at the threshold the cache is still fresh."""
        synced_at = timezone.now()
        with _now_at(synced_at):
            coordinator.sync_now()

        with _now_at(synced_at + timedelta(minutes=5)):
            assert coordinator.is_stale() is False

        with _now_at(synced_at + timedelta(minutes=5, microseconds=1)):
            assert coordinator.is_stale() is True

    def test_custom_threshold(self, coordinator, reward):
        synced_at = timezone.now()
        with _now_at(synced_at):
            coordinator.sync_now()

        with _now_at(synced_at + timedelta(seconds=31)):
            assert coordinator.is_stale(threshold=timedelta(seconds=30)) is True
            assert coordinator.is_stale() is False

    def test_threshold_from_settings(self, coordinator, reward, settings):
        settings.POINTSMAN = {"CACHE_ALIAS": "device", "STALE_AFTER_SECONDS": 10}
        synced_at = timezone.now()
        with _now_at(synced_at):
            coordinator.sync_now()

        with _now_at(synced_at + timedelta(seconds=11)):
            assert coordinator.is_stale() is True

    def test_clear_all_discards_marker(self, coordinator, cache, reward):
        coordinator.sync_now()
        cache.clear_all()
        assert coordinator.is_stale() is True

    def test_unreadable_marker_is_stale(self, coordinator, cache):
        cache.set(SyncCoordinator.LAST_SYNC_KEY, "not-a-date")
        assert coordinator.is_stale() is True


class TestSyncNow:
    def test_writes_snapshots(self, coordinator, member, reward, sticker):
        RedemptionService.redeem("MEM-001", "STICKER")
        SettingsService.save("MEM-001", {"theme": "dark"})

        result = coordinator.sync_now()

        assert result.member_code == "MEM-001"
        assert set(result.keys) == {"rewards", "profile", "settings", "conversions"}

        assert [r["code"] for r in coordinator.cached_rewards()] == ["STICKER", "TSHIRT"]
        assert coordinator.cached_profile()["points"] == 90
        assert coordinator.cached_conversions()[0]["reward_code"] == "STICKER"
        assert coordinator.cached_conversions()[0]["status"] == "pending"
        assert SettingsService.get(coordinator.cache)["theme"] == "dark"

    def test_offline_writes_nothing(self, coordinator, connectivity, cache, reward):
        connectivity.update(False)

        with pytest.raises(Offline):
            coordinator.sync_now()

        assert cache.get(SyncCoordinator.REWARDS_KEY) is None
        assert coordinator.last_sync_time() is None

    def test_backend_failure_writes_nothing(self, coordinator, cache, reward):
        cache.set(SyncCoordinator.REWARDS_KEY, '[{"code": "OLD"}]')

        with patch.object(RewardCatalog, "snapshot", side_effect=BackendUnavailable()):
            with pytest.raises(BackendUnavailable):
                coordinator.sync_now()

        assert coordinator.cached_rewards() == [{"code": "OLD"}]
        assert coordinator.last_sync_time() is None

    def test_failure_keeps_previous_marker(self, coordinator, reward):
        first = coordinator.sync_now()

        with patch.object(RewardCatalog, "snapshot", side_effect=BackendUnavailable()):
            with pytest.raises(BackendUnavailable):
                coordinator.sync_now()

        assert coordinator.last_sync_time() == first.synced_at

    def test_partial_write_keeps_marker_unset(self, coordinator, cache, reward):
        real_set = cache.set

        def flaky_set(key, value):
            if key == SyncCoordinator.PROFILE_KEY:
                return False
            return real_set(key, value)

        received = []

        def handler(sender, **kwargs):
            received.append(kwargs["member_code"])

        cache_synced.connect(handler)
        try:
            with patch.object(cache, "set", side_effect=flaky_set):
                result = coordinator.sync_now()
        finally:
            cache_synced.disconnect(handler)

        assert "profile" not in result.keys
        assert result.complete is False
        assert received == []
        assert coordinator.last_sync_time() is None
        assert coordinator.is_stale() is True

    def test_marker_write_failure_is_incomplete(self, coordinator, cache, reward):
        real_set = cache.set

        def flaky_set(key, value):
            if key == SyncCoordinator.LAST_SYNC_KEY:
                return False
            return real_set(key, value)

        with patch.object(cache, "set", side_effect=flaky_set):
            result = coordinator.sync_now()

        assert result.complete is False
        assert coordinator.is_stale() is True

    def test_complete_sync(self, coordinator, reward):
        assert coordinator.sync_now().complete is True

    def test_signed_out_syncs_catalog_only(self, cache, connectivity, reward):
        coordinator = SyncCoordinator(cache, connectivity, DjangoSessionProvider({}))

        result = coordinator.sync_now()

        assert result.member_code is None
        assert result.keys == ["rewards"]
        assert result.complete is True
        assert coordinator.cached_profile() is None

    def test_sign_out_drops_previous_member_entries(self, coordinator, session, cache, reward):
        SettingsService.save("MEM-001", {"theme": "dark"})
        coordinator.sync_now()
        assert coordinator.cached_profile()["code"] == "MEM-001"

        session.sign_out()
        coordinator.sync_now()

        assert coordinator.cached_profile() is None
        assert coordinator.cached_conversions() is None
        assert cache.get(SyncCoordinator.SETTINGS_KEY) is None
        assert SettingsService.get(cache)["theme"] != "dark"
        assert coordinator.cached_rewards()[0]["code"] == "TSHIRT"
        assert coordinator.is_stale() is False

    def test_sign_out_removal_failure_is_incomplete(self, coordinator, session, cache, reward):
        coordinator.sync_now()
        session.sign_out()

        with patch.object(cache, "remove", return_value=False):
            result = coordinator.sync_now()

        assert result.complete is False

    def test_deleted_member(self, cache, connectivity, reward):
        coordinator = SyncCoordinator(cache, connectivity, DjangoSessionProvider({"pointsman_member_code": "GONE"}))
        with pytest.raises(MemberNotFound):
            coordinator.sync_now()
        assert coordinator.last_sync_time() is None

    def test_values_are_json(self, coordinator, cache, reward):
        coordinator.sync_now()
        raw = cache.get(SyncCoordinator.PROFILE_KEY)
        assert json.loads(raw)["code"] == "MEM-001"

    def test_emits_cache_synced(self, coordinator, reward):
        received = []

        def handler(sender, member_code, synced_at, **kwargs):
            received.append(member_code)

        cache_synced.connect(handler)
        try:
            coordinator.sync_now()
        finally:
            cache_synced.disconnect(handler)

        assert received == ["MEM-001"]

    def test_async(self, coordinator, reward):
        result = async_to_sync(coordinator.async_now)()
        assert "rewards" in result.keys
        assert coordinator.is_stale() is False


class TestReconnect:
    def test_reconnect_syncs_when_stale(self, coordinator, connectivity, reward):
        coordinator.attach()
        connectivity.update(False)
        assert coordinator.last_sync_time() is None

        connectivity.update(True)

        assert coordinator.is_stale() is False

    def test_reconnect_skips_fresh_cache(self, coordinator, connectivity, reward):
        first = coordinator.sync_now()
        coordinator.attach()

        connectivity.update(False)
        connectivity.update(True)

        assert coordinator.last_sync_time() == first.synced_at

    def test_reconnect_failure_is_logged(self, coordinator, connectivity, reward, caplog):
        coordinator.attach()
        connectivity.update(False)

        with patch.object(RewardCatalog, "snapshot", side_effect=BackendUnavailable()):
            connectivity.update(True)

        assert "Reconnect sync failed: BACKEND_UNAVAILABLE" in caplog.text
        assert coordinator.is_stale() is True

    def test_detach(self, coordinator, connectivity, reward):
        detach = coordinator.attach()
        detach()

        connectivity.update(False)
        connectivity.update(True)

        assert coordinator.last_sync_time() is None


class TestCatalog:
    def test_list_active_sorted_by_cost(self, expensive_reward, reward, sticker):
        sticker_2 = type(sticker).objects.create(code="BADGE", title="Badge", points_cost=10)
        type(sticker).objects.create(code="OLD", title="Old", points_cost=1, is_active=False)

        assert [r.code for r in RewardCatalog.list_active()] == [sticker_2.code, "STICKER", "TSHIRT", "HOODIE"]

    def test_get(self, reward):
        assert RewardCatalog.get("TSHIRT") == reward

    def test_falls_back_to_cached_snapshot(self, coordinator, cache, reward):
        coordinator.sync_now()

        with patch.object(RewardCatalog, "list_active", side_effect=BackendUnavailable()):
            rewards = RewardCatalog.list_active_or_cached(cache)

        assert [r["code"] for r in rewards] == ["TSHIRT"]

    def test_no_snapshot_reraises(self, cache, reward):
        with patch.object(RewardCatalog, "list_active", side_effect=BackendUnavailable()):
            with pytest.raises(BackendUnavailable):
                RewardCatalog.list_active_or_cached(cache)

    def test_fresh_when_backend_up(self, cache, reward):
        rewards = RewardCatalog.list_active_or_cached(cache)
        assert rewards[0]["max_redemptions"] == 1
        assert rewards[0]["total_redeemed"] == 0


class TestSessionAdapter:
    def test_satisfies_protocol(self):
        assert isinstance(DjangoSessionProvider({}), SessionProvider)

    def test_sign_in_out(self):
        provider = DjangoSessionProvider({})
        assert provider.current_member_code() is None

        provider.sign_in("MEM-001")
        assert provider.current_member_code() == "MEM-001"

        provider.sign_out()
        assert provider.current_member_code() is None
