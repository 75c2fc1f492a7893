"""Pointsman exceptions."""

from contextlib import contextmanager

from django.db import InterfaceError, OperationalError


class BaseError(Exception):
    """
    Structured exception: machine-readable code, human message, extra data.

    Subclasses declare `_default_messages` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class PointsmanError(BaseError):
    """
    Structured exception for points operations.

    Usage:
        try:
            RedemptionService.redeem("MEM-001", "TSHIRT")
        except PointsmanError as e:
            if e.code == "INSUFFICIENT_FUNDS":
                show_balance_hint(e.data["available"])
    """

    _default_messages = {
        "INSUFFICIENT_FUNDS": "Insufficient points for this operation",
        "SOLD_OUT": "Reward is sold out",
        "INVALID_TRANSITION": "Conversion was already processed",
        "MEMBER_NOT_FOUND": "Member not found",
        "REWARD_NOT_FOUND": "Reward not found",
        "CONVERSION_NOT_FOUND": "Conversion not found",
        "BACKEND_UNAVAILABLE": "Backend unavailable, try again",
        "OFFLINE": "No internet connection",
        "INVALID_AMOUNT": "Points must be positive",
        "INVALID_ACTION": "No points defined for action",
    }

    # Overridden by the typed subclasses below
    default_code = ""

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        super().__init__(code or self.default_code, message=message, **data)


class InsufficientFunds(PointsmanError):
    default_code = "INSUFFICIENT_FUNDS"


class SoldOut(PointsmanError):
    default_code = "SOLD_OUT"


class InvalidTransition(PointsmanError):
    default_code = "INVALID_TRANSITION"


class MemberNotFound(PointsmanError):
    default_code = "MEMBER_NOT_FOUND"


class RewardNotFound(PointsmanError):
    default_code = "REWARD_NOT_FOUND"


class ConversionNotFound(PointsmanError):
    default_code = "CONVERSION_NOT_FOUND"


class BackendUnavailable(PointsmanError):
    """Retryable: the database could not be reached or timed out."""

    default_code = "BACKEND_UNAVAILABLE"


class Offline(PointsmanError):
    default_code = "OFFLINE"


class InvalidAmount(PointsmanError):
    default_code = "INVALID_AMOUNT"


class InvalidAction(PointsmanError):
    default_code = "INVALID_ACTION"


@contextmanager
def backend_guard():
    """Translate database connectivity failures into BackendUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise BackendUnavailable(detail=str(exc)) from exc
