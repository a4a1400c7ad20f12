from __future__ import annotations

import logging

from celery import shared_task

from .ledger import recompute_all_program_funds

logger = logging.getLogger(__name__)


@shared_task
def reconcile_program_funds():
    # nightly safety net for missed signals (e.g. rows written outside the ORM)
    n = recompute_all_program_funds()
    logger.info("reconciled collected_amount for %s programs", n)
    return n
