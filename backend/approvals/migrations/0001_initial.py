# Generated manually

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Approval",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action_type",
                    models.CharField(
                        choices=[
                            ("PROGRAM_PUBLISH", "Publish program"),
                            ("ARTICLE_PUBLISH", "Publish article"),
                            ("ROLE_UPGRADE", "Upgrade to pengusul"),
                        ],
                        max_length=32,
                    ),
                ),
                ("entity_id", models.PositiveBigIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")],
                        db_index=True,
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("required_approver_count", models.PositiveSmallIntegerField(default=1)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approval_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["action_type", "entity_id"], name="approval_entity_idx"),
                    models.Index(fields=["status", "created_at"], name="approval_status_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "PENDING")),
                        fields=("action_type", "entity_id"),
                        name="uniq_pending_approval_per_entity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApprovalAction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("approver_role", models.CharField(max_length=16)),
                ("action", models.CharField(choices=[("APPROVE", "Approve"), ("REJECT", "Reject")], max_length=8)),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "approval",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="actions",
                        to="approvals.approval",
                    ),
                ),
                (
                    "approver",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="approval_actions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["approval", "action"], name="approval_action_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("approval", "approver"), name="uniq_vote_per_approver"),
                ],
            },
        ),
    ]
