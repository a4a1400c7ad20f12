from django.db import models
from django.utils import timezone

from accounts.models import User


class RoleUpgradeRequest(models.Model):
    """
    A donor's request to become a pengusul (program proposer). Created
    PENDING; creating it is the same event as submitting it for approval.
    """
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="upgrade_requests")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)

    # Identity documents (files live in external storage; we keep references)
    ktp_number = models.CharField(max_length=32)
    ktp_image_url = models.URLField(max_length=500, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    institution_name = models.CharField(max_length=255, blank=True)
    institution_profile = models.TextField(blank=True)
    supporting_documents = models.JSONField(default=list, blank=True)

    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    reviewed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["user", "status"], name="upgrade_user_status_idx")]

    def __str__(self):
        return f"{self.user} – {self.status}"
