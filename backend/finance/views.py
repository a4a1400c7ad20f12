from __future__ import annotations

import csv
import io
from datetime import date, datetime, time, timedelta

from django.http import HttpResponse, HttpResponseBadRequest, JsonResponse
from django.utils import timezone

from accounts.decorators import require_roles
from accounts.models import Role

from . import services

FINANCE_ROLES = (Role.FINANCE, Role.MANAGER, Role.SUPERVISOR)


def _int_param(request, name, default=None):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    value = int(raw)
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def statistics(request):
    return JsonResponse(services.overall_statistics())


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def program_summary(request, program_id: int):
    return JsonResponse(services.program_summary(program_id))


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def program_donors(request, program_id: int):
    try:
        limit = _int_param(request, "limit")
        offset = _int_param(request, "offset", 0)
    except ValueError:
        return HttpResponseBadRequest("limit and offset must be non-negative integers.")
    return JsonResponse(services.program_donors(program_id, limit=limit, offset=offset))


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def export_program_donors_csv(request, program_id: int):
    result = services.program_donors(program_id)
    buff = io.StringIO()
    w = csv.writer(buff)
    w.writerow(["Donor", "Email", "Anonymous", "Total", "Donations"])
    for row in result["data"]:
        w.writerow([row["donor_name"], row["donor_email"] or "", "yes" if row["is_anonymous"] else "no",
                    row["total_amount"], row["donation_count"]])
    resp = HttpResponse(buff.getvalue(), content_type="text/csv")
    resp["Content-Disposition"] = f'attachment; filename="program_{program_id}_donors.csv"'
    return resp


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def top_donors(request):
    try:
        limit = _int_param(request, "limit", 10)
    except ValueError:
        return HttpResponseBadRequest("limit must be a non-negative integer.")
    return JsonResponse({"data": services.top_donors(limit)})


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def trends(request):
    try:
        days = _int_param(request, "days", 30)
        data = services.trends(request.GET.get("period") or "daily", days)
    except ValueError as exc:
        return HttpResponseBadRequest(str(exc))
    return JsonResponse({"data": data})


# Public leaderboard (names only, anonymous gifts never listed)

def leaderboard(request):
    try:
        limit = _int_param(request, "limit", 10)
        offset = _int_param(request, "offset", 0)
    except ValueError:
        return HttpResponseBadRequest("limit and offset must be non-negative integers.")
    page = services.leaderboard(limit, offset)
    return JsonResponse(page)


def leaderboard_statistics(request):
    return JsonResponse(services.leaderboard_statistics())


def donor_rank(request, identifier: str):
    entry = services.donor_rank(identifier)
    if entry is None:
        return JsonResponse({"error": "not_found", "detail": "Donor not on the leaderboard."}, status=404)
    return JsonResponse(entry)


def _day_bound(request, name, end_of_day=False):
    raw = request.GET.get(name)
    if not raw:
        return None
    day = date.fromisoformat(raw)
    if end_of_day:
        # inclusive: everything before the next midnight
        return timezone.make_aware(datetime.combine(day + timedelta(days=1), time.min)) - timedelta(microseconds=1)
    return timezone.make_aware(datetime.combine(day, time.min))


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def transactions(request):
    try:
        result = services.transactions(
            status=request.GET.get("status") or None,
            start=_day_bound(request, "start"),
            end=_day_bound(request, "end", end_of_day=True),
            limit=_int_param(request, "limit"),
            offset=_int_param(request, "offset", 0),
        )
    except ValueError:
        return HttpResponseBadRequest("start/end must be YYYY-MM-DD; limit and offset non-negative integers.")
    return JsonResponse(result)


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def program_transactions(request, program_id: int):
    try:
        limit = _int_param(request, "limit")
        offset = _int_param(request, "offset", 0)
    except ValueError:
        return HttpResponseBadRequest("limit and offset must be non-negative integers.")
    return JsonResponse(services.program_transactions(program_id, limit=limit, offset=offset))


@require_roles(*FINANCE_ROLES, allow_superuser=True)
def programs_funds(request):
    return JsonResponse({"data": services.programs_funds()})
