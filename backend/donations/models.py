from django.db import models
from django.utils import timezone

from accounts.models import User
from programs.models import Program


class Donation(models.Model):
    """
    One donation attempt, written and finalized by the payment gateway
    integration. Only SUCCESS rows count toward any aggregate.
    """
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        SUCCESS = "SUCCESS", "Success"
        FAILED = "FAILED", "Failed"

    program = models.ForeignKey(Program, on_delete=models.PROTECT, related_name="donations")
    # guest donations have no account
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="donations")
    donor_name = models.CharField(max_length=255, blank=True)
    donor_email = models.EmailField(blank=True)

    amount = models.DecimalField(max_digits=15, decimal_places=2)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    is_anonymous = models.BooleanField(default=False)

    # idempotency key from the payment gateway
    external_order_id = models.CharField(max_length=100, unique=True)
    paid_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=["program", "status"], name="donation_program_status_idx"),
            models.Index(fields=["status", "paid_at"], name="donation_status_paid_idx"),
        ]

    def __str__(self):
        return f"{self.external_order_id} – {self.amount} ({self.status})"
