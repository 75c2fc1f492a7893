"""Reward catalog: read-only view over active rewards."""

import logging

from pointsman.exceptions import BackendUnavailable, RewardNotFound, backend_guard
from pointsman.models import Reward
from pointsman.protocols import RewardInfo

logger = logging.getLogger(__name__)


class RewardCatalog:
    """Service for reward catalog reads. No side effects."""

    @classmethod
    def list_active(cls) -> list[Reward]:
        """Active rewards, cheapest first."""
        with backend_guard():
            return list(Reward.objects.filter(is_active=True).order_by("points_cost", "code"))

    @classmethod
    def get(cls, reward_code: str) -> Reward:
        with backend_guard():
            try:
                return Reward.objects.get(code=reward_code, is_active=True)
            except Reward.DoesNotExist:
                raise RewardNotFound(reward_code=reward_code)

    @classmethod
    def snapshot(cls) -> list[dict]:
        """Active rewards as plain dicts, the shape kept in the cache."""
        return [RewardInfo.from_reward(r).as_dict() for r in cls.list_active()]

    @classmethod
    def list_active_or_cached(cls, cache) -> list[dict]:
        """
        Fresh catalog, or the last cached snapshot when the backend is down.

        Raises:
            BackendUnavailable: backend down and nothing cached
        """
        from pointsman.services.sync import SyncCoordinator

        try:
            return cls.snapshot()
        except BackendUnavailable:
            cached = SyncCoordinator.read_snapshot(cache, SyncCoordinator.REWARDS_KEY)
            if cached is None:
                raise
            logger.warning("Backend unavailable, serving cached reward catalog")
            return cached
