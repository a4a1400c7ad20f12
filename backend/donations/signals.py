"""Keep Program.collected_amount current as the gateway finalizes donations."""

from __future__ import annotations

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .ledger import recompute_program_fund
from .models import Donation


@receiver(post_save, sender=Donation)
def _donation_refresh_program_fund(sender, instance: Donation, **kwargs):
    if instance.status != Donation.Status.SUCCESS:
        return
    program_id = instance.program_id
    # read the ledger only after the donation row is visible to other sessions
    transaction.on_commit(lambda: recompute_program_fund(program_id))
