"""Pointsman models."""

from pointsman.models.member import Member
from pointsman.models.reward import Reward
from pointsman.models.conversion import Conversion, ConversionStatus
from pointsman.models.transaction import PointsTransaction, TransactionType
from pointsman.models.member_settings import MemberSettings

__all__ = [
    # Ledger
    "Member",
    "PointsTransaction",
    "TransactionType",
    # Catalog and redemptions
    "Reward",
    "Conversion",
    "ConversionStatus",
    # Settings mirror
    "MemberSettings",
]
