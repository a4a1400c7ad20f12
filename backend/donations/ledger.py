"""
Program fund cache maintenance.

``Program.collected_amount`` is a cache of the sum of the program's SUCCESS
donations. It is always rebuilt from a full SUM query and written with a
queryset ``update()``, so replays and concurrent recomputes converge on the
same value.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db.models import Sum

from programs.models import Program

from .models import Donation

logger = logging.getLogger(__name__)


def program_fund_total(program_id) -> Decimal:
    total = (Donation.objects
             .filter(program_id=program_id, status=Donation.Status.SUCCESS)
             .aggregate(total=Sum("amount"))["total"])
    return total or Decimal("0")


def recompute_program_fund(program_id) -> Decimal:
    """Re-derive and persist ``collected_amount`` for one program. Idempotent."""
    total = program_fund_total(program_id)
    updated = Program.objects.filter(pk=program_id).update(collected_amount=total)
    if not updated:
        logger.warning("recompute skipped: program %s does not exist", program_id)
        return Decimal("0")
    logger.debug("program %s collected_amount=%s", program_id, total)
    return total


def recompute_all_program_funds() -> int:
    n = 0
    for pk in Program.objects.order_by("pk").values_list("pk", flat=True).iterator():
        recompute_program_fund(pk)
        n += 1
    return n
