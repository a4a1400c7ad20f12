"""PROGRAM_PUBLISH transition callbacks."""
from django.utils import timezone

from approvals.exceptions import InvalidEntityState

from .models import Program
from .services import ensure_owner


def on_submit(program: Program, requester) -> None:
    ensure_owner(program, requester)
    if not program.is_editable:
        raise InvalidEntityState(f"Program is {program.status}; submit a DRAFT or REJECTED program.")
    program.status = Program.Status.PENDING_APPROVAL
    program.save(update_fields=["status", "updated_at"])


def on_approve(program: Program, approver) -> None:
    program.status = Program.Status.ACTIVE
    program.published_at = timezone.now()
    program.save(update_fields=["status", "published_at", "updated_at"])


def on_reject(program: Program, approver) -> None:
    program.status = Program.Status.REJECTED
    program.save(update_fields=["status", "updated_at"])


def summarize(program: Program) -> dict:
    return {"id": program.pk, "title": program.title}
