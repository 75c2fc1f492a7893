"""MemberSettings - durable copy of the app settings mirrored in the cache."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MemberSettings(models.Model):
    member = models.OneToOneField(
        "pointsman.Member",
        on_delete=models.CASCADE,
        related_name="settings",
        verbose_name=_("member"),
    )
    data = models.JSONField(_("settings"), default=dict)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "member_settings"
        verbose_name = _("member settings")
        verbose_name_plural = _("member settings")

    def __str__(self):
        return f"settings:{self.member_id}"
