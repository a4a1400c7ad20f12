from django.contrib.auth.decorators import login_required
from django.http import HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404

from approvals.exceptions import ApprovalError
from approvals.models import ActionType
from approvals.services import approval_history
from approvals.views import error_response
from programs.models import Program

from . import services
from .models import Article


def _article_json(a: Article) -> dict:
    return {
        "id": a.pk,
        "title": a.title,
        "status": a.status,
        "author_id": a.author_id,
        "program_id": a.program_id,
        "published_at": a.published_at.isoformat() if a.published_at else None,
    }


@login_required
def article_create(request):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    title = (request.POST.get("title") or "").strip()
    if not title:
        return HttpResponseBadRequest("title is required.")
    program = None
    if request.POST.get("program_id"):
        program = get_object_or_404(Program, pk=request.POST["program_id"])
    try:
        article = services.create_article(request.user, title, request.POST.get("content", ""), program=program)
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(_article_json(article), status=201)


@login_required
def article_history(request, article_id: int):
    article = get_object_or_404(Article, pk=article_id)
    if article.author_id != request.user.pk and request.user.role not in ("MANAGER", "SUPERVISOR", "SUPER_ADMIN"):
        return JsonResponse({"error": "FORBIDDEN"}, status=403)
    return JsonResponse({"article": _article_json(article),
                         "approvals": approval_history(ActionType.ARTICLE_PUBLISH, article.pk)})


@login_required
def article_update(request, article_id: int):
    if request.method != "POST":
        return HttpResponseBadRequest("POST required")
    article = get_object_or_404(Article, pk=article_id)
    changes = {k: request.POST[k] for k in ("title", "content") if k in request.POST}
    if "program_id" in request.POST:
        pid = request.POST["program_id"]
        changes["program"] = get_object_or_404(Program, pk=pid) if pid else None
    try:
        article = services.update_article(article, request.user, **changes)
    except ApprovalError as exc:
        return error_response(exc)
    return JsonResponse(_article_json(article))
