"""Member model.

Data architecture:
    Member.points
        Spendable balance. Mutated only by PointsLedger (conditional UPDATE
        statements), never by direct writes from views or forms.

    Member.lifetime_points
        Total ever earned. Never decreases; drives the member level.

    PointsTransaction
        Append-only journal. One row per balance mutation, written in the
        same database transaction as the mutation itself.
"""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


class Member(models.Model):
    """Platform member holding a points balance."""

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique member code (e.g. MEM-001)"),
    )
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    full_name = models.CharField(_("full name"), max_length=200, blank=True)
    email = models.EmailField(_("email"), blank=True, db_index=True)

    points = models.PositiveIntegerField(
        _("points"),
        default=0,
        help_text=_("Points available for redemption"),
    )
    lifetime_points = models.PositiveIntegerField(
        _("lifetime points"),
        default=0,
        help_text=_("Total points ever earned (never decreases)"),
    )

    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "members"
        verbose_name = _("member")
        verbose_name_plural = _("members")
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points__gte=0),
                name="pointsman_member_points_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code}: {self.points}pts"

    @property
    def level(self) -> int:
        from pointsman.services.ledger import calculate_level

        return calculate_level(self.lifetime_points)
