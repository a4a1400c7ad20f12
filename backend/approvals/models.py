from django.db import models
from django.db.models import Q
from django.utils import timezone
from accounts.models import User


class ActionType(models.TextChoices):
    PROGRAM_PUBLISH = "PROGRAM_PUBLISH", "Publish program"
    ARTICLE_PUBLISH = "ARTICLE_PUBLISH", "Publish article"
    ROLE_UPGRADE = "ROLE_UPGRADE", "Upgrade to pengusul"


class Approval(models.Model):
    """
    One submission of an entity for review. The (action_type, entity_id) pair
    points at a Program, Article or RoleUpgradeRequest depending on the tag.
    Only status/resolved_at change after insert.
    """
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    action_type = models.CharField(max_length=32, choices=ActionType.choices)
    entity_id = models.PositiveBigIntegerField()
    requester = models.ForeignKey(User, on_delete=models.PROTECT, related_name="approval_requests")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    required_approver_count = models.PositiveSmallIntegerField(default=1)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["action_type", "entity_id"],
                condition=Q(status="PENDING"),
                name="uniq_pending_approval_per_entity",
            ),
        ]
        indexes = [
            models.Index(fields=["action_type", "entity_id"], name="approval_entity_idx"),
            models.Index(fields=["status", "created_at"], name="approval_status_created_idx"),
        ]

    def __str__(self):
        return f"{self.action_type} #{self.entity_id} – {self.status}"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING


class ApprovalAction(models.Model):
    """A single vote on an Approval. Append-only."""
    class Action(models.TextChoices):
        APPROVE = "APPROVE", "Approve"
        REJECT = "REJECT", "Reject"

    approval = models.ForeignKey(Approval, on_delete=models.PROTECT, related_name="actions")
    approver = models.ForeignKey(User, on_delete=models.PROTECT, related_name="approval_actions")
    approver_role = models.CharField(max_length=16)  # role at the time of the vote
    action = models.CharField(max_length=8, choices=Action.choices)
    comment = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["approval", "approver"], name="uniq_vote_per_approver"),
        ]
        indexes = [models.Index(fields=["approval", "action"], name="approval_action_idx")]

    def __str__(self):
        return f"{self.approval_id} {self.action} by {self.approver_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("ApprovalAction rows are append-only.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("ApprovalAction rows are append-only.")
