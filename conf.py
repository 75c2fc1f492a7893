"""
Pointsman configuration.

Usage in settings.py:
    POINTSMAN = {
        "CACHE_ALIAS": "device",
        "STALE_AFTER_SECONDS": 300,
        "POINT_VALUES": {"petition_created": 10},
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


def _default_point_values() -> dict[str, int]:
    return {
        # Petitions
        "petition_created": 10,
        "petition_signed": 2,
        "petition_shared": 3,
        "petition_goal_reached": 50,
        # Engagement
        "comment_posted": 3,
        "comment_liked": 1,
        "post_created": 5,
        "vote_cast": 1,
        # Social
        "profile_completed": 20,
        "profile_verified": 50,
        "user_followed": 2,
        # Special
        "badge_earned": 15,
        "whistleblow_submitted": 25,
        "case_created": 20,
        "consultation_booked": 10,
        # Streaks
        "daily_login": 5,
        "weekly_streak": 25,
        "monthly_streak": 100,
    }


@dataclass
class PointsmanSettings:
    """Pointsman configuration settings."""

    # Django cache alias used as the device-local persisted cache
    CACHE_ALIAS: str = "default"
    CACHE_NAMESPACE: str = "pointsman"

    # Cache freshness window
    STALE_AFTER_SECONDS: int = 300

    # Earning table: action -> points
    POINT_VALUES: dict[str, int] = field(default_factory=_default_point_values)

    # Levels: level = floor(sqrt(lifetime / BASE)) + 1
    LEVEL_BASE_MULTIPLIER: int = 10
    MAX_LEVEL: int = 100

    # Every Nth level pays a bonus of level * LEVEL_MILESTONE_BONUS points
    LEVEL_MILESTONE_EVERY: int = 5
    LEVEL_MILESTONE_BONUS: int = 10

    # History listings
    HISTORY_LIMIT: int = 50


def get_pointsman_settings() -> PointsmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "POINTSMAN", {})
    return PointsmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_pointsman_settings(), name)


pointsman_settings = _LazySettings()
