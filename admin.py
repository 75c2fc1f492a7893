"""Pointsman admin.

Balances and conversion states are read-only here: every change goes through
PointsLedger / RedemptionService via the admin actions.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from pointsman.exceptions import PointsmanError
from pointsman.models import (
    Conversion,
    ConversionStatus,
    Member,
    MemberSettings,
    PointsTransaction,
    Reward,
)
from pointsman.services.redemption import RedemptionService


# ===========================================
# Member Admin
# ===========================================


class PointsTransactionInline(admin.TabularInline):
    model = PointsTransaction
    extra = 0
    readonly_fields = ["transaction_type", "points", "balance_after", "description", "reference", "created_at"]
    ordering = ["-created_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ["code", "full_name", "email", "points", "lifetime_points", "level", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["code", "full_name", "email"]
    readonly_fields = ["uuid", "points", "lifetime_points", "created_at", "updated_at"]
    inlines = [PointsTransactionInline]

    def level(self, obj):
        return obj.level

    level.short_description = "Level"


# ===========================================
# Reward Admin
# ===========================================


@admin.register(Reward)
class RewardAdmin(admin.ModelAdmin):
    list_display = ["code", "title", "points_cost", "inventory", "is_active"]
    list_filter = ["is_active", "reward_type"]
    search_fields = ["code", "title"]
    readonly_fields = ["total_redeemed", "created_at", "updated_at"]

    def inventory(self, obj):
        if obj.is_unlimited:
            return f"{obj.total_redeemed} / ∞"
        return f"{obj.total_redeemed} / {obj.max_redemptions}"

    inventory.short_description = "Redeemed"


# ===========================================
# Conversion Admin
# ===========================================


@admin.register(Conversion)
class ConversionAdmin(admin.ModelAdmin):
    list_display = [
        "created_at",
        "member",
        "reward",
        "points_spent",
        "status_badge",
        "processed_by",
        "processed_at",
    ]
    list_filter = ["status"]
    search_fields = ["member__code", "reward__code", "notes"]
    date_hierarchy = "created_at"
    readonly_fields = [
        "uuid",
        "member",
        "reward",
        "points_spent",
        "status",
        "processed_at",
        "processed_by",
        "notes",
        "created_at",
    ]
    actions = ["approve_selected", "reject_selected"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        colors = {
            ConversionStatus.PENDING: "#f0ad4e",
            ConversionStatus.APPROVED: "#28a745",
            ConversionStatus.REJECTED: "#dc3545",
        }
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            colors.get(obj.status, "#6c757d"),
            obj.get_status_display(),
        )

    status_badge.short_description = "Status"

    @admin.action(description="Approve selected conversions")
    def approve_selected(self, request, queryset):
        self._process(request, queryset, lambda c: RedemptionService.approve(c.pk, request.user.get_username()))

    @admin.action(description="Reject selected conversions (refund points)")
    def reject_selected(self, request, queryset):
        self._process(
            request,
            queryset,
            lambda c: RedemptionService.reject(c.pk, request.user.get_username(), notes="Rejected via admin"),
        )

    def _process(self, request, queryset, operation):
        done = 0
        for conversion in queryset:
            try:
                operation(conversion)
                done += 1
            except PointsmanError as e:
                self.message_user(request, f"Conversion {conversion.pk}: {e.message}", messages.WARNING)
        if done:
            self.message_user(request, f"{done} conversion(s) processed.", messages.SUCCESS)


@admin.register(MemberSettings)
class MemberSettingsAdmin(admin.ModelAdmin):
    list_display = ["member", "updated_at"]
    search_fields = ["member__code"]
    raw_id_fields = ["member"]
