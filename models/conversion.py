"""Conversion model - a member's request to exchange points for a reward."""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


class ConversionStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


class Conversion(models.Model):
    """
    Redemption record.

    Created pending together with the member's debit. Moves once to
    approved or rejected; both are terminal. Never deleted.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    member = models.ForeignKey(
        "pointsman.Member",
        on_delete=models.PROTECT,
        related_name="conversions",
        verbose_name=_("member"),
    )
    reward = models.ForeignKey(
        "pointsman.Reward",
        on_delete=models.PROTECT,
        related_name="conversions",
        verbose_name=_("reward"),
    )

    points_spent = models.PositiveIntegerField(
        _("points spent"),
        help_text=_("Reward cost at redemption time"),
    )
    status = models.CharField(
        _("status"),
        max_length=20,
        choices=ConversionStatus.choices,
        default=ConversionStatus.PENDING,
        db_index=True,
    )

    processed_at = models.DateTimeField(_("processed at"), null=True, blank=True)
    processed_by = models.CharField(_("processed by"), max_length=100, blank=True)
    notes = models.TextField(_("notes"), blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        db_table = "points_conversions"
        verbose_name = _("conversion")
        verbose_name_plural = _("conversions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["member", "-created_at"], name="pointsman_conv_member_idx"),
        ]

    def __str__(self):
        return f"{self.member_id}->{self.reward_id} [{self.status}]"

    @property
    def is_terminal(self) -> bool:
        return self.status != ConversionStatus.PENDING
