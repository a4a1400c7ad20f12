from django.contrib.auth.decorators import login_required
from django.http import HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404

from approvals.exceptions import ApprovalError
from approvals.models import ActionType
from approvals.services import approval_history
from approvals.views import error_response

from . import services
from .models import Program


def _program_json(p: Program) -> dict:
    return {
        "id": p.pk,
        "title": p.title,
        "description": p.description,
        "status": p.status,
        "target_amount": p.target_amount,
        "collected_amount": p.collected_amount,
        "creator_id": p.creator_id,
        "published_at": p.published_at.isoformat() if p.published_at else None,
    }


@login_required
def program_create(request):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    title = (request.POST.get("title") or "").strip()
    if not title:
        return HttpResponseBadRequest("title is required.")
    try:
        program = services.create_program(
            request.user, title, request.POST.get("target_amount"),
            description=request.POST.get("description", ""),
        )
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(_program_json(program), status=201)


@login_required
def program_update(request, program_id: int):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    program = get_object_or_404(Program, pk=program_id)
    changes = {k: request.POST[k] for k in services.EDITABLE_FIELDS if k in request.POST}
    try:
        program = services.update_program(program, request.user, **changes)
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(_program_json(program))


@login_required
def program_close(request, program_id: int):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    program = get_object_or_404(Program, pk=program_id)
    try:
        program = services.close_program(program, request.user)
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(_program_json(program))


@login_required
def program_history(request, program_id: int):
    program = get_object_or_404(Program, pk=program_id)
    if program.creator_id != request.user.pk and request.user.role not in ("MANAGER", "SUPERVISOR", "SUPER_ADMIN"):
        return JsonResponse({"error": "FORBIDDEN"}, status=403)
    return JsonResponse({"program": _program_json(program),
                         "approvals": approval_history(ActionType.PROGRAM_PUBLISH, program.pk)})
