from celery import shared_task
from django.utils import timezone
from .models import Heartbeat


@shared_task
def beat_heartbeat():
    Heartbeat.objects.update_or_create(key="beat", defaults={"seen_at": timezone.now()})
    return "ok"
