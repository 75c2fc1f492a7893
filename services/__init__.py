"""Pointsman services.

Ledger side (database is authoritative):
- ledger: PointsLedger
- catalog: RewardCatalog
- redemption: RedemptionService

Device side (best-effort cache):
- cache: PersistedCache
- connectivity: ConnectivityContext
- preferences: SettingsService
- sync: SyncCoordinator
"""
