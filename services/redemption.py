"""Redemption workflow: pending to approved or rejected.

redeem(), approve() and reject() each run in a single transaction.atomic().
State transitions are conditional UPDATEs guarded by status='pending', so a
conversion leaves pending exactly once and is refunded at most once.

Rejection does NOT give the inventory slot back to the reward.
"""

import logging
from dataclasses import dataclass

from asgiref.sync import sync_to_async
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from pointsman.conf import pointsman_settings
from pointsman.exceptions import (
    ConversionNotFound,
    InvalidTransition,
    PointsmanError,
    RewardNotFound,
    SoldOut,
    backend_guard,
)
from pointsman.models import Conversion, ConversionStatus, Reward
from pointsman.services.ledger import PointsLedger
from pointsman.signals import conversion_approved, conversion_created, conversion_rejected

logger = logging.getLogger(__name__)


@dataclass
class RedemptionResult:
    """Redemption outcome as a plain value for UI screens."""

    success: bool
    conversion: Conversion | None = None
    error_code: str | None = None
    message: str | None = None
    data: dict | None = None


class RedemptionService:
    """
    Service for the redemption workflow.

    Uses @classmethod for extensibility (consistent with the other services).
    """

    @classmethod
    def redeem(
        cls,
        member_code: str,
        reward_code: str,
        created_by: str = "",
    ) -> Conversion:
        """
        Exchange points for a reward.

        Claims an inventory slot, records a pending Conversion and debits the
        reward's current cost. All three happen or none does.

        Returns:
            The pending Conversion

        Raises:
            MemberNotFound, RewardNotFound, SoldOut, InsufficientFunds,
            BackendUnavailable
        """
        with backend_guard(), transaction.atomic():
            member = PointsLedger.get_member(member_code)
            try:
                reward = Reward.objects.select_for_update().get(code=reward_code, is_active=True)
            except Reward.DoesNotExist:
                raise RewardNotFound(reward_code=reward_code)

            claimed = (
                Reward.objects.filter(pk=reward.pk)
                .filter(
                    Q(max_redemptions__isnull=True)
                    | Q(total_redeemed__lt=F("max_redemptions"))
                )
                .update(total_redeemed=F("total_redeemed") + 1)
            )
            if not claimed:
                raise SoldOut(
                    reward_code=reward_code,
                    max_redemptions=reward.max_redemptions,
                )

            conversion = Conversion.objects.create(
                member=member,
                reward=reward,
                points_spent=reward.points_cost,
                status=ConversionStatus.PENDING,
            )
            PointsLedger.debit(
                member_code,
                reward.points_cost,
                description=f"Redeemed: {reward.title}",
                reference=f"conversion:{conversion.pk}",
                created_by=created_by,
            )
            reward.refresh_from_db(fields=["total_redeemed"])

            transaction.on_commit(
                lambda: conversion_created.send(sender=Conversion, conversion=conversion)
            )

        logger.info(
            "Conversion %s created: %s redeemed %s for %s pts",
            conversion.pk,
            member_code,
            reward_code,
            conversion.points_spent,
        )
        return conversion

    @classmethod
    def try_redeem(
        cls,
        member_code: str,
        reward_code: str,
        created_by: str = "",
    ) -> RedemptionResult:
        """Like redeem(), but expected failures come back as a result."""
        try:
            conversion = cls.redeem(member_code, reward_code, created_by=created_by)
        except PointsmanError as e:
            return RedemptionResult(
                success=False,
                error_code=e.code,
                message=e.message,
                data=e.data,
            )
        return RedemptionResult(
            success=True,
            conversion=conversion,
            message=f"Successfully redeemed: {conversion.reward.title}",
        )

    @classmethod
    def approve(cls, conversion_id: int, admin_id: str) -> Conversion:
        """
        Approve a pending conversion. Points were already debited.

        Raises:
            ConversionNotFound, InvalidTransition
        """
        with backend_guard(), transaction.atomic():
            updated = Conversion.objects.filter(
                pk=conversion_id,
                status=ConversionStatus.PENDING,
            ).update(
                status=ConversionStatus.APPROVED,
                processed_at=timezone.now(),
                processed_by=str(admin_id),
            )
            if not updated:
                cls._refuse_transition(conversion_id, ConversionStatus.APPROVED)

            conversion = cls._load(conversion_id)
            transaction.on_commit(
                lambda: conversion_approved.send(sender=Conversion, conversion=conversion)
            )

        logger.info("Conversion %s approved by %s", conversion_id, admin_id)
        return conversion

    @classmethod
    def reject(cls, conversion_id: int, admin_id: str, notes: str = "") -> Conversion:
        """
        Reject a pending conversion and refund points_spent.

        Status change and refund commit together; a second reject fails with
        InvalidTransition before any refund.

        Raises:
            ConversionNotFound, InvalidTransition
        """
        with backend_guard(), transaction.atomic():
            updated = Conversion.objects.filter(
                pk=conversion_id,
                status=ConversionStatus.PENDING,
            ).update(
                status=ConversionStatus.REJECTED,
                processed_at=timezone.now(),
                processed_by=str(admin_id),
                notes=notes,
            )
            if not updated:
                cls._refuse_transition(conversion_id, ConversionStatus.REJECTED)

            conversion = cls._load(conversion_id)
            PointsLedger.credit(
                conversion.member.code,
                conversion.points_spent,
                description=f"Refund: {conversion.reward.title}",
                reference=f"conversion:{conversion.pk}",
                created_by=str(admin_id),
            )
            transaction.on_commit(
                lambda: conversion_rejected.send(sender=Conversion, conversion=conversion)
            )

        logger.info(
            "Conversion %s rejected by %s, refunded %s pts",
            conversion_id,
            admin_id,
            conversion.points_spent,
        )
        return conversion

    # ======================================================================
    # Queries
    # ======================================================================

    @classmethod
    def get(cls, conversion_id: int) -> Conversion:
        with backend_guard():
            return cls._load(conversion_id)

    @classmethod
    def get_history(cls, member_code: str, limit: int | None = None) -> list[Conversion]:
        """Member's conversions, newest first."""
        limit = limit or pointsman_settings.HISTORY_LIMIT
        with backend_guard():
            return list(
                Conversion.objects.select_related("reward")
                .filter(member__code=member_code, member__is_active=True)[:limit]
            )

    @classmethod
    def get_pending(cls) -> list[Conversion]:
        """Conversions waiting for an administrator, newest first."""
        with backend_guard():
            return list(
                Conversion.objects.select_related("member", "reward").filter(
                    status=ConversionStatus.PENDING
                )
            )

    # ======================================================================
    # Async entry points
    # ======================================================================

    @classmethod
    async def aredeem(cls, member_code: str, reward_code: str, created_by: str = "") -> Conversion:
        return await sync_to_async(cls.redeem)(member_code, reward_code, created_by=created_by)

    @classmethod
    async def aapprove(cls, conversion_id: int, admin_id: str) -> Conversion:
        return await sync_to_async(cls.approve)(conversion_id, admin_id)

    @classmethod
    async def areject(cls, conversion_id: int, admin_id: str, notes: str = "") -> Conversion:
        return await sync_to_async(cls.reject)(conversion_id, admin_id, notes=notes)

    # ======================================================================
    # Internals
    # ======================================================================

    @classmethod
    def _load(cls, conversion_id: int) -> Conversion:
        try:
            return Conversion.objects.select_related("member", "reward").get(pk=conversion_id)
        except Conversion.DoesNotExist:
            raise ConversionNotFound(conversion_id=conversion_id)

    @classmethod
    def _refuse_transition(cls, conversion_id: int, target: str) -> None:
        """Raise for a conversion that is missing or no longer pending."""
        current = cls._load(conversion_id)
        logger.warning(
            "Refused %s -> %s for conversion %s (processed by %s at %s)",
            current.status,
            target,
            conversion_id,
            current.processed_by or "-",
            current.processed_at,
        )
        raise InvalidTransition(
            conversion_id=conversion_id,
            status=current.status,
            target=str(target),
        )
