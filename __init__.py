"""
Django Pointsman - Points economy and offline cache.

Usage:
    from pointsman import PointsLedger, RedemptionService, RewardCatalog

    PointsLedger.award("MEM-001", "petition_created")
    conversion = RedemptionService.redeem("MEM-001", "TSHIRT")
    RedemptionService.reject(conversion.pk, "admin-1", notes="out of stock")

    # Device side
    from pointsman import PersistedCache, SyncCoordinator, ConnectivityContext

    coordinator = SyncCoordinator(PersistedCache(), ConnectivityContext(), session)
    if coordinator.is_stale():
        coordinator.sync_now()
"""

_LAZY = {
    "PointsLedger": "pointsman.services.ledger",
    "RewardCatalog": "pointsman.services.catalog",
    "RedemptionService": "pointsman.services.redemption",
    "RedemptionResult": "pointsman.services.redemption",
    "PersistedCache": "pointsman.services.cache",
    "SyncCoordinator": "pointsman.services.sync",
    "ConnectivityContext": "pointsman.services.connectivity",
    "SettingsService": "pointsman.services.preferences",
}


def __getattr__(name):
    if name in _LAZY:
        from importlib import import_module

        return getattr(import_module(_LAZY[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_LAZY)
__version__ = "0.1.0"
