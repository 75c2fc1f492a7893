"""PointsTransaction - append-only journal of balance mutations."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransactionType(models.TextChoices):
    EARN = "earn", _("Earn")
    REDEEM = "redeem", _("Redeem")
    REFUND = "refund", _("Refund")


class PointsTransaction(models.Model):
    """
    Immutable record of a points mutation.

    Transactions are append-only, never modified or deleted.
    """

    member = models.ForeignKey(
        "pointsman.Member",
        on_delete=models.CASCADE,
        related_name="transactions",
        verbose_name=_("member"),
    )

    transaction_type = models.CharField(
        _("type"),
        max_length=20,
        choices=TransactionType.choices,
    )
    points = models.IntegerField(
        _("points"),
        help_text=_("Positive for earn/refund, negative for redeem"),
    )
    balance_after = models.IntegerField(_("balance after"))

    description = models.CharField(_("description"), max_length=200, blank=True)
    reference = models.CharField(
        _("reference"),
        max_length=100,
        blank=True,
        help_text=_("External reference (e.g. conversion:42)"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    class Meta:
        db_table = "member_points"
        verbose_name = _("points transaction")
        verbose_name_plural = _("points transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["member", "-created_at"], name="pointsman_tx_member_idx"),
        ]

    def __str__(self):
        sign = "+" if self.points > 0 else ""
        return f"{sign}{self.points}pts — {self.description}"
