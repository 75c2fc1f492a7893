"""Reward model - redeemable catalog item with optional finite inventory."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Reward(models.Model):
    """
    Catalog reward.

    max_redemptions empty means unlimited. Otherwise total_redeemed can
    never exceed it (enforced by a check constraint and by the conditional
    increment in RedemptionService.redeem).
    """

    code = models.CharField(_("code"), max_length=50, unique=True)
    title = models.CharField(_("title"), max_length=200)
    description = models.TextField(_("description"), blank=True)
    icon = models.CharField(_("icon"), max_length=20, blank=True)
    reward_type = models.CharField(
        _("type"),
        max_length=30,
        blank=True,
        help_text=_("Free-form category (e.g. 'discount', 'merchandise')"),
    )

    points_cost = models.PositiveIntegerField(_("points cost"))
    max_redemptions = models.PositiveIntegerField(
        _("max redemptions"),
        null=True,
        blank=True,
        help_text=_("Leave empty for unlimited"),
    )
    total_redeemed = models.PositiveIntegerField(_("total redeemed"), default=0)

    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "points_rewards"
        verbose_name = _("reward")
        verbose_name_plural = _("rewards")
        ordering = ["points_cost", "code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_cost__gt=0),
                name="pointsman_reward_cost_positive",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(max_redemptions__isnull=True)
                    | models.Q(total_redeemed__lte=models.F("max_redemptions"))
                ),
                name="pointsman_reward_inventory_bound",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.points_cost}pts)"

    @property
    def is_unlimited(self) -> bool:
        return self.max_redemptions is None

    @property
    def remaining(self) -> int | None:
        """Slots left, or None when unlimited."""
        if self.is_unlimited:
            return None
        return max(0, self.max_redemptions - self.total_redeemed)

    @property
    def is_sold_out(self) -> bool:
        return not self.is_unlimited and self.total_redeemed >= self.max_redemptions
