from decimal import Decimal

from django.db import models
from django.utils import timezone

from accounts.models import User


class Program(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
        ACTIVE = "ACTIVE", "Active"
        REJECTED = "REJECTED", "Rejected"
        CLOSED = "CLOSED", "Closed"

    # editable by the owner only in these states
    EDITABLE_STATUSES = (Status.DRAFT, Status.REJECTED)

    creator = models.ForeignKey(User, on_delete=models.PROTECT, related_name="programs")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    target_amount = models.DecimalField(max_digits=15, decimal_places=2)
    # cache of SUM(successful donations); see donations.ledger.recompute_program_fund
    collected_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0"))

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["status", "created_at"], name="program_status_created_idx")]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_editable(self) -> bool:
        return self.status in self.EDITABLE_STATUSES
