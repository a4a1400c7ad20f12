"""ROLE_UPGRADE transition callbacks."""
from django.utils import timezone

from accounts.models import Role, User
from approvals.exceptions import AuthorizationError, InvalidEntityState

from .models import RoleUpgradeRequest


def on_submit(req: RoleUpgradeRequest, requester) -> None:
    if req.user_id != requester.pk:
        raise AuthorizationError("You can only submit your own upgrade request.")
    if req.status != RoleUpgradeRequest.Status.PENDING:
        raise InvalidEntityState("Upgrade request has already been processed.")


def on_approve(req: RoleUpgradeRequest, approver) -> None:
    user = User.objects.select_for_update().get(pk=req.user_id)
    if user.role != Role.USER:
        raise InvalidEntityState(f"User is now {user.role}; only USER accounts can be upgraded.")
    now = timezone.now()

    req.status = RoleUpgradeRequest.Status.APPROVED
    req.reviewed_by = approver
    req.reviewed_at = now
    req.save(update_fields=["status", "reviewed_by", "reviewed_at", "updated_at"])

    user.role = Role.PENGUSUL
    user.ktp_number = req.ktp_number
    user.phone = req.phone or user.phone
    user.address = req.address
    user.institution_name = req.institution_name
    user.institution_profile = req.institution_profile
    user.verified_at = now
    user.verified_by = approver
    user.save(update_fields=[
        "role", "ktp_number", "phone", "address", "institution_name",
        "institution_profile", "verified_at", "verified_by",
    ])


def on_reject(req: RoleUpgradeRequest, approver) -> None:
    req.status = RoleUpgradeRequest.Status.REJECTED
    req.reviewed_by = approver
    req.reviewed_at = timezone.now()
    req.save(update_fields=["status", "reviewed_by", "reviewed_at", "updated_at"])


def summarize(req: RoleUpgradeRequest) -> dict:
    return {"id": req.pk, "user_id": req.user_id, "institution_name": req.institution_name}
