# Initial migration for the points economy

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Member",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        help_text="Unique member code (e.g. MEM-001)",
                        max_length=50,
                        unique=True,
                        verbose_name="code",
                    ),
                ),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("full_name", models.CharField(blank=True, max_length=200, verbose_name="full name")),
                ("email", models.EmailField(blank=True, db_index=True, max_length=254, verbose_name="email")),
                (
                    "points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Points available for redemption",
                        verbose_name="points",
                    ),
                ),
                (
                    "lifetime_points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Total points ever earned (never decreases)",
                        verbose_name="lifetime points",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "member",
                "verbose_name_plural": "members",
                "db_table": "members",
                "ordering": ["code"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points__gte", 0)),
                        name="pointsman_member_points_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reward",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="code")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                ("icon", models.CharField(blank=True, max_length=20, verbose_name="icon")),
                (
                    "reward_type",
                    models.CharField(
                        blank=True,
                        help_text="Free-form category (e.g. 'discount', 'merchandise')",
                        max_length=30,
                        verbose_name="type",
                    ),
                ),
                ("points_cost", models.PositiveIntegerField(verbose_name="points cost")),
                (
                    "max_redemptions",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Leave empty for unlimited",
                        null=True,
                        verbose_name="max redemptions",
                    ),
                ),
                ("total_redeemed", models.PositiveIntegerField(default=0, verbose_name="total redeemed")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "reward",
                "verbose_name_plural": "rewards",
                "db_table": "points_rewards",
                "ordering": ["points_cost", "code"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("points_cost__gt", 0)),
                        name="pointsman_reward_cost_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("max_redemptions__isnull", True),
                            ("total_redeemed__lte", models.F("max_redemptions")),
                            _connector="OR",
                        ),
                        name="pointsman_reward_inventory_bound",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Conversion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                (
                    "points_spent",
                    models.PositiveIntegerField(
                        help_text="Reward cost at redemption time",
                        verbose_name="points spent",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                ("processed_at", models.DateTimeField(blank=True, null=True, verbose_name="processed at")),
                ("processed_by", models.CharField(blank=True, max_length=100, verbose_name="processed by")),
                ("notes", models.TextField(blank=True, verbose_name="notes")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="conversions",
                        to="pointsman.member",
                        verbose_name="member",
                    ),
                ),
                (
                    "reward",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="conversions",
                        to="pointsman.reward",
                        verbose_name="reward",
                    ),
                ),
            ],
            options={
                "verbose_name": "conversion",
                "verbose_name_plural": "conversions",
                "db_table": "points_conversions",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["member", "-created_at"], name="pointsman_conv_member_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PointsTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[("earn", "Earn"), ("redeem", "Redeem"), ("refund", "Refund")],
                        max_length=20,
                        verbose_name="type",
                    ),
                ),
                (
                    "points",
                    models.IntegerField(
                        help_text="Positive for earn/refund, negative for redeem",
                        verbose_name="points",
                    ),
                ),
                ("balance_after", models.IntegerField(verbose_name="balance after")),
                ("description", models.CharField(blank=True, max_length=200, verbose_name="description")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="External reference (e.g. conversion:42)",
                        max_length=100,
                        verbose_name="reference",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="created by")),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="pointsman.member",
                        verbose_name="member",
                    ),
                ),
            ],
            options={
                "verbose_name": "points transaction",
                "verbose_name_plural": "points transactions",
                "db_table": "member_points",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["member", "-created_at"], name="pointsman_tx_member_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MemberSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(default=dict, verbose_name="settings")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "member",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="settings",
                        to="pointsman.member",
                        verbose_name="member",
                    ),
                ),
            ],
            options={
                "verbose_name": "member settings",
                "verbose_name_plural": "member settings",
                "db_table": "member_settings",
            },
        ),
    ]
