from django.contrib.auth.decorators import login_required
from django.http import HttpResponseBadRequest, JsonResponse

from approvals.exceptions import ApprovalError, DuplicatePendingApproval
from approvals.services import serialize_approval
from approvals.views import error_response

from . import services


@login_required
def upgrade_request_create(request):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    documents = {k: request.POST[k] for k in services.DOCUMENT_FIELDS
                 if k in request.POST and k != "supporting_documents"}
    docs = request.POST.getlist("supporting_documents")
    if docs:
        documents["supporting_documents"] = docs
    try:
        approval = services.request_role_upgrade(request.user, **documents)
    except DuplicatePendingApproval as exc:
        return JsonResponse({"approval": serialize_approval(exc.approval), "created": False})
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse({"approval": serialize_approval(approval), "created": True}, status=201)


@login_required
def my_upgrade_request(request):
    req = services.latest_request_for(request.user)
    if not req:
        return JsonResponse({"request": None})
    return JsonResponse({"request": {
        "id": req.pk,
        "status": req.status,
        "created_at": req.created_at.isoformat(),
        "reviewed_at": req.reviewed_at.isoformat() if req.reviewed_at else None,
    }})
