"""
Approval registry: opens approvals for submitted entities, records votes and
drives the entity to its final status.

Submissions and decisions run inside ``transaction.atomic()``. A decision
locks the Approval row (``select_for_update``) so that the vote count and the
PENDING -> terminal transition are one read-modify-write; the entity
callback runs exactly once, from the decision that crossed the threshold.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from audit.utils import audit_log

from . import gate
from .exceptions import (
    ApprovalNotPending,
    DuplicatePendingApproval,
    DuplicateVote,
    EntityNotFound,
    ReauthenticationRequired,
    SelfApprovalForbidden,
)
from .handlers import get_handler
from .models import Approval, ApprovalAction

logger = logging.getLogger(__name__)


def required_approvers_for(action_type: str) -> int:
    table = getattr(settings, "APPROVAL_REQUIRED_APPROVERS", {}) or {}
    return max(1, int(table.get(str(action_type), 1)))


def is_sensitive(action_type: str) -> bool:
    return str(action_type) in (getattr(settings, "APPROVAL_SENSITIVE_ACTIONS", ()) or ())


def pending_approval_for(action_type: str, entity_id) -> Approval | None:
    return (Approval.objects
            .filter(action_type=action_type, entity_id=entity_id, status=Approval.Status.PENDING)
            .first())


def submit(action_type: str, entity_id, requester, required_approver_count: int | None = None) -> Approval:
    """
    Open a PENDING approval for the entity and move the entity into review.

    Raises DuplicatePendingApproval (with ``.approval`` set to the existing
    record) when one is already open for the same (action_type, entity_id).
    """
    handler = get_handler(action_type)
    gate.ensure_can_submit(handler.action_type, requester)
    needed = required_approver_count or required_approvers_for(handler.action_type)
    if needed < 1:
        raise ValueError("required_approver_count must be at least 1")

    try:
        with transaction.atomic():
            # entity row lock serializes concurrent submissions of the same item
            entity = handler.load(entity_id, for_update=True)
            existing = pending_approval_for(handler.action_type, entity.pk)
            if existing:
                raise DuplicatePendingApproval(existing)

            handler.on_submit(entity, requester)
            approval = Approval.objects.create(
                action_type=handler.action_type,
                entity_id=entity.pk,
                requester=requester,
                required_approver_count=needed,
            )
            audit_log(requester, "APPROVAL_SUBMITTED", target=approval, payload={
                "action_type": handler.action_type,
                "entity_id": entity.pk,
                "required_approver_count": needed,
            })
    except IntegrityError:
        existing = pending_approval_for(handler.action_type, entity_id)
        if existing is None:
            raise
        raise DuplicatePendingApproval(existing) from None

    logger.info("approval %s opened: %s #%s by user %s", approval.pk, approval.action_type,
                approval.entity_id, requester.pk)
    return approval


def decide(approval_id, approver, action: str, comment: str | None = None,
           reauthenticated: bool = False) -> Approval:
    """
    Record one vote. A REJECT finalizes immediately; APPROVE votes finalize
    once ``required_approver_count`` distinct approvers have approved.

    ``reauthenticated`` is supplied by the caller after re-checking the
    approver's credentials; it is required for sensitive action types.
    """
    if action not in ApprovalAction.Action.values:
        raise ValueError(f"Unknown decision {action!r}")

    with transaction.atomic():
        try:
            approval = Approval.objects.select_for_update().get(pk=approval_id)
        except (Approval.DoesNotExist, ValueError, TypeError):
            raise EntityNotFound(f"Approval {approval_id} not found.") from None

        gate.ensure_can_decide(approval.action_type, approver)
        if is_sensitive(approval.action_type) and not reauthenticated:
            raise ReauthenticationRequired()
        if approval.status != Approval.Status.PENDING:
            raise ApprovalNotPending(f"Approval {approval.pk} is already {approval.status}.")
        if approval.requester_id == approver.pk:
            raise SelfApprovalForbidden()
        if approval.actions.filter(approver=approver).exists():
            raise DuplicateVote()

        ApprovalAction.objects.create(
            approval=approval,
            approver=approver,
            approver_role=approver.role,
            action=action,
            comment=comment or "",
        )

        handler = get_handler(approval.action_type)
        if action == ApprovalAction.Action.REJECT:
            _finalize(approval, Approval.Status.REJECTED, handler, approver)
        else:
            approve_votes = approval.actions.filter(action=ApprovalAction.Action.APPROVE).count()
            if approve_votes >= approval.required_approver_count:
                _finalize(approval, Approval.Status.APPROVED, handler, approver)

        audit_log(approver, f"APPROVAL_{action}", target=approval, payload={
            "action_type": approval.action_type,
            "entity_id": approval.entity_id,
            "status": approval.status,
            "comment": comment or "",
        })

    logger.info("approval %s: %s by user %s -> %s", approval.pk, action, approver.pk, approval.status)
    return approval


def _finalize(approval: Approval, status: str, handler, approver) -> None:
    entity = handler.load(approval.entity_id, for_update=True)
    if status == Approval.Status.APPROVED:
        handler.on_approve(entity, approver)
    else:
        handler.on_reject(entity, approver)
    approval.status = status
    approval.resolved_at = timezone.now()
    approval.save(update_fields=["status", "resolved_at", "updated_at"])


def approve(approval_id, approver, comment=None, reauthenticated=False) -> Approval:
    return decide(approval_id, approver, ApprovalAction.Action.APPROVE, comment, reauthenticated)


def reject(approval_id, approver, comment=None, reauthenticated=False) -> Approval:
    return decide(approval_id, approver, ApprovalAction.Action.REJECT, comment, reauthenticated)


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

def serialize_approval(approval: Approval) -> dict:
    requester = approval.requester
    data = {
        "id": approval.pk,
        "action_type": approval.action_type,
        "entity_id": approval.entity_id,
        "status": approval.status,
        "required_approver_count": approval.required_approver_count,
        "requester": {"id": requester.pk, "name": requester.display_name, "role": requester.role},
        "actions": [
            {
                "approver": {"id": a.approver_id, "name": a.approver.display_name},
                "approver_role": a.approver_role,
                "action": a.action,
                "comment": a.comment or None,
                "created_at": a.created_at.isoformat(),
            }
            for a in sorted(approval.actions.all(), key=lambda a: (a.created_at, a.pk))
        ],
        "created_at": approval.created_at.isoformat(),
        "resolved_at": approval.resolved_at.isoformat() if approval.resolved_at else None,
    }
    handler = get_handler(approval.action_type)
    if handler.summarize:
        entity = handler.model.objects.filter(pk=approval.entity_id).first()
        data[handler.key] = handler.summarize(entity) if entity else None
    return data


def list_approvals(action_type: str | None = None, status: str | None = None,
                   limit: int | None = None, offset: int = 0) -> dict:
    qs = (Approval.objects
          .select_related("requester")
          .prefetch_related("actions__approver")
          .order_by("-created_at", "-id"))
    if action_type:
        qs = qs.filter(action_type=action_type)
    if status:
        qs = qs.filter(status=status)
    total = qs.count()
    offset = max(0, offset or 0)
    page = qs[offset:offset + limit] if limit else qs[offset:]
    return {
        "data": [serialize_approval(a) for a in page],
        "total": total,
        "limit": limit or total,
        "offset": offset,
    }


def approval_history(action_type: str, entity_id) -> list[dict]:
    """Every submission of one entity, oldest first."""
    qs = (Approval.objects
          .filter(action_type=action_type, entity_id=entity_id)
          .select_related("requester")
          .prefetch_related("actions__approver")
          .order_by("created_at", "id"))
    return [serialize_approval(a) for a in qs]
