from django.db import models
from django.contrib.auth.models import AbstractUser
from .managers import UserManager


class Role(models.TextChoices):
    USER = "USER", "Donatur"
    PENGUSUL = "PENGUSUL", "Pengusul"
    CONTENT_MANAGER = "CONTENT_MANAGER", "Content Manager"
    MANAGER = "MANAGER", "Manager"
    SUPERVISOR = "SUPERVISOR", "Supervisor"
    FINANCE = "FINANCE", "Finance"
    SUPER_ADMIN = "SUPER_ADMIN", "Super Admin"


class User(AbstractUser):
    """
    Email-first auth; username removed. `role` is the only attribute the
    approval gate looks at.
    """
    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.USER, db_index=True)

    # Identity data copied from an approved pengusul request
    phone = models.CharField(max_length=32, blank=True)
    ktp_number = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    institution_name = models.CharField(max_length=255, blank=True)
    institution_profile = models.TextField(blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey("self", on_delete=models.SET_NULL, null=True, blank=True, related_name="+")

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def display_name(self) -> str:
        return self.name or self.email
