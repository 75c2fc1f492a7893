"""Pointsman protocols and snapshot types."""

from pointsman.protocols.device import (
    ConnectivitySignal,
    SessionProvider,
)
from pointsman.protocols.snapshots import (
    ConversionInfo,
    MemberInfo,
    MemberStats,
    RewardInfo,
)

__all__ = [
    # Collaborators
    "ConnectivitySignal",
    "SessionProvider",
    # Cached shapes
    "RewardInfo",
    "MemberInfo",
    "MemberStats",
    "ConversionInfo",
]
