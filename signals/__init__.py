"""
Pointsman signals: public event API.

Emitted signals (after the database transaction commits):
- conversion_created: Emitted by RedemptionService.redeem()
- conversion_approved: Emitted by RedemptionService.approve()
- conversion_rejected: Emitted by RedemptionService.reject()
- cache_synced: Emitted by SyncCoordinator.sync_now() after a complete write
- member_leveled_up: Emitted by PointsLedger.award()
"""

from django.dispatch import Signal

# Redemption signals (sender=Conversion, conversion=instance)
conversion_created = Signal()
conversion_approved = Signal()
conversion_rejected = Signal()

# Device cache (sender=SyncCoordinator, member_code=str, synced_at=datetime)
cache_synced = Signal()

# Levels (sender=Member, member_code=str, old_level=int, new_level=int)
member_leveled_up = Signal()
