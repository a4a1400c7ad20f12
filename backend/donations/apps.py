from django.apps import AppConfig


class DonationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "donations"

    def ready(self):
        # Register signal handlers that keep Program.collected_amount up-to-date.
        from . import signals  # noqa: F401
