"""Points ledger: balances and every mutation of Member.points.

All balance changes are single conditional UPDATE statements (F expressions)
inside transaction.atomic(), so concurrent debits against the same member
are linearized by the database and can never overdraw the balance.
"""

import logging
import math

from django.db import transaction
from django.db.models import F

from pointsman.conf import pointsman_settings
from pointsman.exceptions import (
    InsufficientFunds,
    InvalidAction,
    InvalidAmount,
    MemberNotFound,
    backend_guard,
)
from pointsman.models import Member, PointsTransaction, Reward, TransactionType
from pointsman.protocols import MemberStats
from pointsman.signals import member_leveled_up

logger = logging.getLogger(__name__)


def calculate_level(points: int) -> int:
    """Level for a lifetime points total, capped at MAX_LEVEL."""
    base = pointsman_settings.LEVEL_BASE_MULTIPLIER
    level = math.isqrt(max(0, points) // base) + 1
    return min(level, pointsman_settings.MAX_LEVEL)


def points_for_level(level: int) -> int:
    """Lifetime points needed to reach `level`."""
    return (level - 1) ** 2 * pointsman_settings.LEVEL_BASE_MULTIPLIER


def points_for_next_level(level: int) -> int:
    return points_for_level(level + 1)


class PointsLedger:
    """
    Authoritative balance operations.

    Uses @classmethod for extensibility (consistent with the other services).
    Member.points is never written anywhere else.
    """

    @classmethod
    def get_member(cls, member_code: str) -> Member:
        """Get active member or raise MemberNotFound."""
        with backend_guard():
            try:
                return Member.objects.get(code=member_code, is_active=True)
            except Member.DoesNotExist:
                raise MemberNotFound(member_code=member_code)

    @classmethod
    def get_balance(cls, member_code: str) -> int:
        return cls.get_member(member_code).points

    @classmethod
    def can_afford(cls, member_code: str, reward_code: str) -> bool:
        """
        True iff the member has enough points and the reward has a free slot.

        Advisory only: redeem() re-checks both atomically.
        """
        member = cls.get_member(member_code)
        with backend_guard():
            reward = Reward.objects.filter(code=reward_code, is_active=True).first()
        if reward is None:
            return False
        return member.points >= reward.points_cost and not reward.is_sold_out

    @classmethod
    def debit(
        cls,
        member_code: str,
        amount: int,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """
        Atomically subtract `amount` from the member's balance.

        The balance check and the decrement are one statement:
        UPDATE ... SET points = points - amount WHERE points >= amount.

        Raises:
            InvalidAmount: amount <= 0
            InsufficientFunds: balance < amount (nothing changed)
            MemberNotFound: unknown or inactive member
        """
        if amount <= 0:
            raise InvalidAmount(amount=amount)

        with backend_guard(), transaction.atomic():
            updated = Member.objects.filter(
                code=member_code,
                is_active=True,
                points__gte=amount,
            ).update(points=F("points") - amount)

            if not updated:
                member = cls.get_member(member_code)
                raise InsufficientFunds(
                    member_code=member_code,
                    available=member.points,
                    requested=amount,
                )

            tx = cls._record(
                member_code,
                TransactionType.REDEEM,
                -amount,
                description,
                reference,
                created_by,
            )

        logger.info("Debited %s pts from %s (%s)", amount, member_code, reference or "-")
        return tx

    @classmethod
    def credit(
        cls,
        member_code: str,
        amount: int,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """
        Atomically add `amount` back to the member's balance.

        Refund path only; earning goes through award().
        """
        if amount <= 0:
            raise InvalidAmount(amount=amount)

        with backend_guard(), transaction.atomic():
            updated = Member.objects.filter(code=member_code, is_active=True).update(
                points=F("points") + amount
            )
            if not updated:
                raise MemberNotFound(member_code=member_code)

            tx = cls._record(
                member_code,
                TransactionType.REFUND,
                amount,
                description,
                reference,
                created_by,
            )

        logger.info("Refunded %s pts to %s (%s)", amount, member_code, reference or "-")
        return tx

    @classmethod
    def award(
        cls,
        member_code: str,
        action: str,
        description: str = "",
        reference: str = "",
        created_by: str = "",
    ) -> PointsTransaction:
        """
        Award the points configured for `action` (see POINT_VALUES).

        When the award raises the member's level, every milestone level
        crossed (each LEVEL_MILESTONE_EVERY-th) pays a bonus of
        level * LEVEL_MILESTONE_BONUS in the same transaction, and
        member_leveled_up fires on commit. Bonuses never trigger further
        milestones.

        Raises:
            InvalidAction: no points defined for the action
            MemberNotFound: unknown or inactive member
        """
        points = pointsman_settings.POINT_VALUES.get(action, 0)
        if points <= 0:
            raise InvalidAction(action=action)

        with backend_guard(), transaction.atomic():
            tx = cls._earn(member_code, points, description or action, reference, created_by)

            lifetime = tx.member.lifetime_points
            old_level = calculate_level(lifetime - points)
            if calculate_level(lifetime) > old_level:
                cls._level_up(member_code, old_level, lifetime, created_by)

        logger.info("Awarded %s pts to %s (%s)", points, member_code, action)
        return tx

    # ======================================================================
    # Level progress
    # ======================================================================

    @classmethod
    def get_rank(cls, member_code: str) -> int:
        """1 + the number of active members with more lifetime points."""
        member = cls.get_member(member_code)
        with backend_guard():
            ahead = Member.objects.filter(
                is_active=True,
                lifetime_points__gt=member.lifetime_points,
            ).count()
        return ahead + 1

    @classmethod
    def get_stats(cls, member_code: str) -> MemberStats:
        """Level, progress towards the next level, and rank."""
        member = cls.get_member(member_code)
        level = calculate_level(member.lifetime_points)
        current = points_for_level(level)
        following = points_for_next_level(level)
        progress = member.lifetime_points - current
        needed = following - current

        return MemberStats(
            code=member.code,
            points=member.points,
            lifetime_points=member.lifetime_points,
            level=level,
            points_for_current_level=current,
            points_for_next_level=following,
            progress_points=progress,
            points_needed=needed,
            progress_percentage=min(progress / needed * 100, 100.0),
            rank=cls.get_rank(member_code),
        )

    @classmethod
    def get_transactions(
        cls,
        member_code: str,
        limit: int | None = None,
    ) -> list[PointsTransaction]:
        """Get journal entries for a member, newest first."""
        limit = limit or pointsman_settings.HISTORY_LIMIT
        with backend_guard():
            return list(
                PointsTransaction.objects.filter(
                    member__code=member_code,
                    member__is_active=True,
                )[:limit]
            )

    @classmethod
    def _earn(
        cls,
        member_code: str,
        points: int,
        description: str,
        reference: str,
        created_by: str,
    ) -> PointsTransaction:
        updated = Member.objects.filter(code=member_code, is_active=True).update(
            points=F("points") + points,
            lifetime_points=F("lifetime_points") + points,
        )
        if not updated:
            raise MemberNotFound(member_code=member_code)

        return cls._record(
            member_code,
            TransactionType.EARN,
            points,
            description,
            reference,
            created_by,
        )

    @classmethod
    def _level_up(
        cls,
        member_code: str,
        old_level: int,
        lifetime: int,
        created_by: str,
    ) -> None:
        """Pay milestone bonuses for a level-up. Runs inside award()'s transaction."""
        every = pointsman_settings.LEVEL_MILESTONE_EVERY
        new_level = calculate_level(lifetime)

        for level in range(old_level + 1, new_level + 1):
            bonus = level * pointsman_settings.LEVEL_MILESTONE_BONUS
            if not every or level % every or bonus <= 0:
                continue
            tx = cls._earn(
                member_code,
                bonus,
                f"Milestone bonus for reaching Level {level}",
                f"level_{level}",
                created_by,
            )
            lifetime = tx.member.lifetime_points
            logger.info("Milestone bonus %s pts to %s (level %s)", bonus, member_code, level)

        reached = calculate_level(lifetime)
        logger.info("Member %s leveled up %s -> %s", member_code, old_level, reached)
        transaction.on_commit(
            lambda: member_leveled_up.send(
                sender=Member,
                member_code=member_code,
                old_level=old_level,
                new_level=reached,
            )
        )

    @classmethod
    def _record(
        cls,
        member_code: str,
        transaction_type: str,
        points: int,
        description: str,
        reference: str,
        created_by: str,
    ) -> PointsTransaction:
        """
        Write the journal row for a mutation that just happened.

        MUST be called inside the same transaction.atomic() as the UPDATE.
        """
        member = Member.objects.get(code=member_code)
        return PointsTransaction.objects.create(
            member=member,
            transaction_type=transaction_type,
            points=points,
            balance_after=member.points,
            description=description[:200],
            reference=reference,
            created_by=created_by,
        )
