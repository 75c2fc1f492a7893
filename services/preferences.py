"""App settings: cache as the fast path, MemberSettings as the durable copy."""

import copy
import json
from typing import Any

from django.db import transaction

from pointsman.exceptions import backend_guard
from pointsman.models import MemberSettings
from pointsman.services.ledger import PointsLedger

SETTINGS_KEY = "settings"

DEFAULT_SETTINGS: dict[str, Any] = {
    "theme": "system",
    "language": "en",
    "notifications": {
        "enabled": True,
        "petition_updates": True,
        "comments": True,
        "votes": True,
        "messages": True,
        "system": True,
    },
    "privacy": {
        "show_email": False,
        "show_phone": False,
        "show_activity": True,
    },
}


def merge_settings(stored: dict | None) -> dict:
    """Overlay stored values on the defaults, one level of nesting deep."""
    merged = copy.deepcopy(DEFAULT_SETTINGS)
    for key, value in (stored or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


class SettingsService:
    """
    Service for app settings.

    Uses @classmethod for extensibility (consistent with the other services).
    """

    @classmethod
    def get(cls, cache) -> dict:
        """Cached settings over defaults. Never touches the database."""
        raw = cache.get(SETTINGS_KEY)
        if raw is None:
            return merge_settings(None)
        try:
            return merge_settings(json.loads(raw))
        except (TypeError, ValueError):
            return merge_settings(None)

    @classmethod
    def fetch(cls, member_code: str) -> dict:
        """Durable settings over defaults."""
        member = PointsLedger.get_member(member_code)
        with backend_guard():
            stored = MemberSettings.objects.filter(member=member).values_list("data", flat=True).first()
        return merge_settings(stored)

    @classmethod
    def save(cls, member_code: str, settings: dict, cache=None) -> dict:
        """
        Persist settings, then refresh the cache copy.

        Returns:
            The merged settings
        """
        merged = merge_settings(settings)
        member = PointsLedger.get_member(member_code)
        with backend_guard(), transaction.atomic():
            MemberSettings.objects.update_or_create(member=member, defaults={"data": merged})
        if cache is not None:
            cache.set(SETTINGS_KEY, json.dumps(merged))
        return merged

    @classmethod
    def reset(cls, member_code: str, cache=None) -> dict:
        """Back to defaults, both copies."""
        return cls.save(member_code, {}, cache=cache)
