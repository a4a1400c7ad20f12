from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounts.models import Role
from approvals import gate
from approvals.exceptions import AuthorizationError, InvalidEntityState
from approvals.models import ActionType
from audit.utils import audit_log

from .models import Program

EDITABLE_FIELDS = ("title", "description", "target_amount")


def _clean_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidEntityState("Target amount must be a number.") from None
    if amount <= 0:
        raise InvalidEntityState("Target amount must be positive.")
    return amount


def ensure_owner(program: Program, user) -> None:
    if program.creator_id != user.pk and user.role != Role.SUPER_ADMIN:
        raise AuthorizationError("You can only change your own programs.")


@transaction.atomic
def create_program(creator, title: str, target_amount, description: str = "") -> Program:
    """New programs always start as DRAFT; publishing goes through an approval."""
    if not gate.can_submit(ActionType.PROGRAM_PUBLISH, creator.role) or not creator.is_active:
        raise AuthorizationError("Your role cannot create programs.")
    program = Program.objects.create(
        creator=creator,
        title=title,
        description=description,
        target_amount=_clean_amount(target_amount),
    )
    audit_log(creator, "PROGRAM_CREATED", target=program, payload={"title": title})
    return program


@transaction.atomic
def update_program(program: Program, actor, **changes) -> Program:
    ensure_owner(program, actor)
    program = Program.objects.select_for_update().get(pk=program.pk)
    if not program.is_editable:
        raise InvalidEntityState(f"Program is {program.status}; only DRAFT or REJECTED programs can be edited.")
    fields = []
    for name, value in changes.items():
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"{name} is not editable")
        if name == "target_amount":
            value = _clean_amount(value)
        setattr(program, name, value)
        fields.append(name)
    if fields:
        program.save(update_fields=fields + ["updated_at"])
        audit_log(actor, "PROGRAM_UPDATED", target=program, payload={"fields": fields})
    return program


@transaction.atomic
def close_program(program: Program, actor) -> Program:
    if actor.role not in (Role.MANAGER, Role.SUPER_ADMIN):
        ensure_owner(program, actor)
    program = Program.objects.select_for_update().get(pk=program.pk)
    if program.status != Program.Status.ACTIVE:
        raise InvalidEntityState("Only ACTIVE programs can be closed.")
    program.status = Program.Status.CLOSED
    program.closed_at = timezone.now()
    program.save(update_fields=["status", "closed_at", "updated_at"])
    audit_log(actor, "PROGRAM_CLOSED", target=program, payload={"collected_amount": program.collected_amount})
    return program
