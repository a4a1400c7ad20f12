from django.db import transaction

from accounts.models import Role, User
from approvals import services as approvals
from approvals.exceptions import DuplicatePendingApproval, InvalidEntityState
from approvals.models import ActionType, Approval

from .models import RoleUpgradeRequest

DOCUMENT_FIELDS = (
    "ktp_number", "ktp_image_url", "phone", "address",
    "institution_name", "institution_profile", "supporting_documents",
)


def request_role_upgrade(user, **documents) -> Approval:
    """
    File a USER -> PENGUSUL request and open its approval in one transaction.

    A user may have only one pending request; a second attempt raises
    DuplicatePendingApproval pointing at the approval already open.
    """
    unknown = set(documents) - set(DOCUMENT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown document fields: {sorted(unknown)}")
    if not (documents.get("ktp_number") or "").strip():
        raise InvalidEntityState("KTP number is required.")

    with transaction.atomic():
        # lock the user row so two requests from the same user serialize
        user = User.objects.select_for_update().get(pk=user.pk)
        if user.role != Role.USER:
            raise InvalidEntityState("Only donors with the USER role can apply to become pengusul.")
        existing = RoleUpgradeRequest.objects.filter(user=user, status=RoleUpgradeRequest.Status.PENDING).first()
        if existing:
            approval = approvals.pending_approval_for(ActionType.ROLE_UPGRADE, existing.pk)
            if approval:
                raise DuplicatePendingApproval(approval, "You already have a pending upgrade request.")
        req = RoleUpgradeRequest.objects.create(user=user, **documents)
        return approvals.submit(ActionType.ROLE_UPGRADE, req.pk, user)


def latest_request_for(user) -> RoleUpgradeRequest | None:
    return RoleUpgradeRequest.objects.filter(user=user).order_by("-created_at", "-id").first()
