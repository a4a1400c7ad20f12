from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone
from accounts.models import User


class AuditLog(models.Model):
    """Append-only trail of state changes made through the core services."""
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    actor = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="audit_logs")
    actor_role = models.CharField(max_length=16, blank=True)
    action = models.CharField(max_length=64)  # e.g., APPROVAL_SUBMITTED, PROGRAM_CLOSED
    target_app = models.CharField(max_length=64, blank=True)
    target_model = models.CharField(max_length=64, blank=True)
    target_id = models.CharField(max_length=64, blank=True)
    payload = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    ip = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
            models.Index(fields=["target_model", "target_id"], name="audit_target_idx"),
        ]

    def __str__(self):
        return f"{self.created_at:%Y-%m-%d %H:%M} {self.action}"
