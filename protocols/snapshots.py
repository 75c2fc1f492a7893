"""Snapshot dataclasses: the plain shapes written to the persisted cache."""

from dataclasses import asdict, dataclass
from datetime import datetime


@dataclass(frozen=True)
class RewardInfo:
    code: str
    title: str
    description: str
    icon: str
    reward_type: str
    points_cost: int
    max_redemptions: int | None
    total_redeemed: int

    @classmethod
    def from_reward(cls, reward) -> "RewardInfo":
        return cls(
            code=reward.code,
            title=reward.title,
            description=reward.description,
            icon=reward.icon,
            reward_type=reward.reward_type,
            points_cost=reward.points_cost,
            max_redemptions=reward.max_redemptions,
            total_redeemed=reward.total_redeemed,
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MemberInfo:
    """Profile summary shown while offline."""

    code: str
    full_name: str
    points: int
    lifetime_points: int
    level: int

    @classmethod
    def from_member(cls, member) -> "MemberInfo":
        return cls(
            code=member.code,
            full_name=member.full_name,
            points=member.points,
            lifetime_points=member.lifetime_points,
            level=member.level,
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ConversionInfo:
    id: int
    reward_code: str
    reward_title: str
    points_spent: int
    status: str
    created_at: datetime
    processed_at: datetime | None
    notes: str

    @classmethod
    def from_conversion(cls, conversion) -> "ConversionInfo":
        return cls(
            id=conversion.pk,
            reward_code=conversion.reward.code,
            reward_title=conversion.reward.title,
            points_spent=conversion.points_spent,
            status=conversion.status,
            created_at=conversion.created_at,
            processed_at=conversion.processed_at,
            notes=conversion.notes,
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MemberStats:
    """Level progress for the member home screen."""

    code: str
    points: int
    lifetime_points: int
    level: int
    points_for_current_level: int
    points_for_next_level: int
    progress_points: int
    points_needed: int
    progress_percentage: float
    rank: int

    def as_dict(self) -> dict:
        return asdict(self)
