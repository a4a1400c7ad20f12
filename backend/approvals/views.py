from django.contrib.auth.decorators import login_required
from django.http import HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404

from accounts.decorators import require_roles
from accounts.models import Role

from . import services
from .exceptions import ApprovalError, DuplicatePendingApproval
from .models import Approval, ApprovalAction


def error_response(exc: ApprovalError) -> JsonResponse:
    return JsonResponse({"error": exc.code, "detail": exc.message}, status=exc.http_status)


def _int_param(request, name):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return None
    try:
        return max(0, int(raw))
    except ValueError:
        return None


@require_roles(Role.MANAGER, Role.SUPERVISOR, allow_superuser=True)
def approval_list(request):
    result = services.list_approvals(
        action_type=request.GET.get("action_type") or None,
        status=request.GET.get("status") or None,
        limit=_int_param(request, "limit"),
        offset=_int_param(request, "offset") or 0,
    )
    return JsonResponse(result)


@require_roles(Role.MANAGER, Role.SUPERVISOR, allow_superuser=True)
def approval_detail(request, approval_id: int):
    approval = get_object_or_404(Approval.objects.select_related("requester"), pk=approval_id)
    return JsonResponse(services.serialize_approval(approval))


@login_required
def approval_submit(request):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    action_type = request.POST.get("action_type", "")
    entity_id = request.POST.get("entity_id", "")
    if not action_type or not entity_id.isdigit():
        return HttpResponseBadRequest("action_type and entity_id are required.")
    try:
        approval = services.submit(action_type, int(entity_id), request.user)
    except DuplicatePendingApproval as exc:
        # idempotent: hand back the approval that is already open
        return JsonResponse({"approval": services.serialize_approval(exc.approval), "created": False})
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse({"approval": services.serialize_approval(approval), "created": True}, status=201)


def _decide(request, approval_id: int, action: str):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    password = request.POST.get("password") or ""
    # the password re-entry is checked here; the registry only trusts the flag
    reauthenticated = bool(password) and request.user.check_password(password)
    try:
        approval = services.decide(
            approval_id, request.user, action,
            comment=(request.POST.get("comment") or "").strip() or None,
            reauthenticated=reauthenticated,
        )
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(services.serialize_approval(approval))


@require_roles(Role.MANAGER, allow_superuser=True)
def approval_approve(request, approval_id: int):
    return _decide(request, approval_id, ApprovalAction.Action.APPROVE)


@require_roles(Role.MANAGER, allow_superuser=True)
def approval_reject(request, approval_id: int):
    return _decide(request, approval_id, ApprovalAction.Action.REJECT)
