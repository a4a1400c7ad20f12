from django.db import models
from django.utils import timezone

from accounts.models import User


class Article(models.Model):
    """Progress report ("pelaporan") for a program, or a standalone article."""
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
        PUBLISHED = "PUBLISHED", "Published"
        REJECTED = "REJECTED", "Rejected"

    EDITABLE_STATUSES = (Status.DRAFT, Status.REJECTED)

    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name="articles")
    program = models.ForeignKey("programs.Program", on_delete=models.SET_NULL, null=True, blank=True,
                                related_name="articles")
    title = models.CharField(max_length=255)
    content = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True)
    published_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="article_status_created_idx"),
            models.Index(fields=["program", "status"], name="article_program_status_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_editable(self) -> bool:
        return self.status in self.EDITABLE_STATUSES
