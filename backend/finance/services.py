"""
Read-side aggregation over the donation ledger.

Every figure here is folded from SUCCESS donations on read; nothing raises for
missing data. Grouping goes through ``finance.identity`` so each view applies
its own donor-key policy. Rankings sort by total with Python's stable sort:
donors with equal totals keep the order in which the query returned their
first donation, and no further tie-break is applied.
"""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, F, Prefetch, Sum
from django.utils import timezone

from donations.models import Donation
from programs.models import Program

from .identity import DonorKey, View, display_email, display_name, resolve
from .tiers import active_table, leaderboard_tier

ZERO = Decimal("0")
RECENT_PREVIEW = 5
PERIODS = ("daily", "weekly", "monthly")


def _successful():
    return Donation.objects.filter(status=Donation.Status.SUCCESS).select_related("user")


def _avg(amount: Decimal, count: int) -> Decimal:
    return amount / count if count else ZERO


def _percentage(collected: Decimal, target: Decimal) -> Decimal:
    # not clamped: over-funded programs report more than 100
    if not target:
        return ZERO
    return collected / target * 100


def _paginate(rows: list, limit: int | None, offset: int) -> dict:
    offset = max(0, offset or 0)
    total = len(rows)
    end = total if limit is None else offset + limit
    return {"data": rows[offset:end], "total": total, "limit": total if limit is None else limit, "offset": offset}


def _donation_row(d: Donation) -> dict:
    return {
        "id": d.pk,
        "amount": d.amount,
        "donor_name": display_name(d),
        "is_anonymous": d.is_anonymous,
        "paid_at": d.paid_at,
        "order_id": d.external_order_id,
    }


# ---------------------------------------------------------------------------
# Platform-wide
# ---------------------------------------------------------------------------

def overall_statistics() -> dict:
    success = (Donation.objects.filter(status=Donation.Status.SUCCESS)
               .aggregate(amount=Sum("amount"), n=Count("id")))
    pending = (Donation.objects.filter(status=Donation.Status.PENDING)
               .aggregate(amount=Sum("amount"), n=Count("id")))
    total = success["amount"] or ZERO
    return {
        "total_amount": total,
        "total_donations": success["n"],
        "pending_amount": pending["amount"] or ZERO,
        "pending_donations": pending["n"],
        "active_programs": Program.objects.filter(status=Program.Status.ACTIVE).count(),
        "average_donation": _avg(total, success["n"]),
    }


def _transaction_row(d: Donation) -> dict:
    user = d.user if d.user_id else None
    return {
        "id": d.pk,
        "program": {"id": d.program_id, "title": d.program.title},
        "user": {"id": user.pk, "name": user.display_name, "email": user.email} if user else None,
        "donor_name": d.donor_name,
        "donor_email": d.donor_email,
        "amount": d.amount,
        "status": d.status,
        "is_anonymous": d.is_anonymous,
        "order_id": d.external_order_id,
        "paid_at": d.paid_at,
        "created_at": d.created_at,
    }


def _page_queryset(qs, limit: int | None, offset: int) -> dict:
    offset = max(0, offset or 0)
    total = qs.count()
    page = qs[offset:] if limit is None else qs[offset:offset + limit]
    return {
        "data": [_transaction_row(d) for d in page],
        "total": total,
        "limit": total if limit is None else limit,
        "offset": offset,
    }


def transactions(status: str | None = None, start=None, end=None,
                 limit: int | None = None, offset: int = 0) -> dict:
    """
    Raw ledger rows of every status, newest first, for reconciliation.
    ``start``/``end`` bound ``created_at`` inclusively.
    """
    qs = Donation.objects.select_related("program", "user").order_by("-created_at", "-id")
    if status:
        qs = qs.filter(status=status)
    if start:
        qs = qs.filter(created_at__gte=start)
    if end:
        qs = qs.filter(created_at__lte=end)
    return _page_queryset(qs, limit, offset)


def program_transactions(program_id, limit: int | None = None, offset: int = 0) -> dict:
    qs = (Donation.objects
          .filter(program_id=program_id)
          .select_related("program", "user")
          .order_by("-created_at", "-id"))
    return _page_queryset(qs, limit, offset)


def programs_funds() -> list[dict]:
    """Fund position of every published program, largest collected amount first."""
    recent = Prefetch(
        "donations",
        queryset=_successful().order_by("-created_at", "-id"),
        to_attr="successful_donations",
    )
    programs = (Program.objects
                .filter(status__in=[Program.Status.ACTIVE, Program.Status.CLOSED])
                .select_related("creator")
                .prefetch_related(recent)
                .order_by("-collected_amount", "id"))
    rows = []
    for p in programs:
        donations = p.successful_donations
        named = {k for k in (resolve(d, View.FUND_SUMMARY) for d in donations) if not k.anonymous}
        rows.append({
            "id": p.pk,
            "title": p.title,
            "status": p.status,
            "target_amount": p.target_amount,
            "collected_amount": p.collected_amount,
            "creator": {"id": p.creator_id, "name": p.creator.display_name, "email": p.creator.email},
            "total_donations": len(donations),
            "donor_count": len(named),
            "recent_donations": [_donation_row(d) for d in donations[:RECENT_PREVIEW]],
            "percentage_reached": _percentage(p.collected_amount, p.target_amount),
        })
    return rows


# ---------------------------------------------------------------------------
# Per program
# ---------------------------------------------------------------------------

def _empty_summary() -> dict:
    return {
        "program": None,
        "statistics": {
            "total_donations": 0,
            "total_amount": ZERO,
            "unique_donors": 0,
            "average_donation": ZERO,
            "percentage_reached": ZERO,
        },
        "donors": [],
        "recent_donations": [],
    }


def program_summary(program_id) -> dict:
    """
    Fund summary for one program. All anonymous gifts share one bucket; the
    unique donor count covers named buckets only.
    """
    program = Program.objects.select_related("creator").filter(pk=program_id).first()
    if program is None:
        return _empty_summary()

    donations = list(_successful()
                     .filter(program=program)
                     .order_by(F("paid_at").desc(nulls_last=True), "-id"))

    # keyed by DonorKey so a donor literally named "anonymous" stays separate
    buckets: dict[DonorKey, dict] = {}
    total = ZERO
    for d in donations:
        key = resolve(d, View.FUND_SUMMARY)
        bucket = buckets.setdefault(key, {
            "name": key.identifier,
            "total_amount": ZERO,
            "donation_count": 0,
            "is_anonymous": key.anonymous,
        })
        bucket["total_amount"] += d.amount
        bucket["donation_count"] += 1
        total += d.amount

    donors = sorted(buckets.values(), key=lambda b: b["total_amount"], reverse=True)
    creator = program.creator
    return {
        "program": {
            "id": program.pk,
            "title": program.title,
            "status": program.status,
            "target_amount": program.target_amount,
            "collected_amount": program.collected_amount,
            "creator": {"id": creator.pk, "name": creator.display_name, "email": creator.email},
        },
        "statistics": {
            "total_donations": len(donations),
            "total_amount": total,
            "unique_donors": sum(1 for b in donors if not b["is_anonymous"]),
            "average_donation": _avg(total, len(donations)),
            "percentage_reached": _percentage(total, program.target_amount),
        },
        "donors": donors,
        "recent_donations": [_donation_row(d) for d in donations[:RECENT_PREVIEW]],
    }


def program_donors(program_id, limit: int | None = None, offset: int = 0) -> dict:
    """
    One row per distinct donor of a program, largest total first. Each
    anonymous donation is its own row. ``limit=None`` returns every row.
    """
    rows: dict[DonorKey, dict] = {}
    qs = _successful().filter(program_id=program_id).order_by("-created_at", "-id")
    for d in qs:
        key = resolve(d, View.PROGRAM_DONORS)
        row = rows.get(key)
        if row is None:
            row = rows[key] = {
                "identifier": key.identifier,
                "donor_id": d.user_id,
                "donor_name": display_name(d),
                "donor_email": display_email(d),
                "total_amount": ZERO,
                "donation_count": 0,
                "is_anonymous": key.anonymous,
                "donations": [],
            }
        row["total_amount"] += d.amount
        row["donation_count"] += 1
        row["donations"].append({
            "id": d.pk,
            "amount": d.amount,
            "created_at": d.created_at,
            "order_id": d.external_order_id,
        })

    ranked = sorted(rows.values(), key=lambda r: r["total_amount"], reverse=True)
    return _paginate(ranked, limit, offset)


# ---------------------------------------------------------------------------
# Cross-program donors and leaderboard
# ---------------------------------------------------------------------------

def _donor_rollup() -> list[dict]:
    rows: dict[str, dict] = {}
    for d in _successful().filter(is_anonymous=False).order_by("created_at", "id"):
        key = resolve(d, View.TOP_DONORS)
        if key is None:
            continue
        row = rows.get(key.identifier)
        if row is None:
            row = rows[key.identifier] = {
                "identifier": key.identifier,
                "donor_id": d.user_id,
                "donor_name": display_name(d),
                "donor_email": display_email(d),
                "total_amount": ZERO,
                "donation_count": 0,
                "programs": set(),
                "last_donation_at": None,
            }
        row["total_amount"] += d.amount
        row["donation_count"] += 1
        row["programs"].add(d.program_id)
        when = d.paid_at or d.created_at
        if row["last_donation_at"] is None or when > row["last_donation_at"]:
            row["last_donation_at"] = when

    ranked = sorted(rows.values(), key=lambda r: r["total_amount"], reverse=True)
    for row in ranked:
        row["programs_supported"] = len(row.pop("programs"))
    return ranked


def top_donors(limit: int = 10) -> list[dict]:
    """Named donors across all programs; anonymous gifts never count."""
    rows = _donor_rollup()
    return rows if limit is None else rows[:limit]


def _leaderboard_entry(row: dict, rank: int, tiers) -> dict:
    return {
        "rank": rank,
        "identifier": row["identifier"],
        "donor_name": row["donor_name"],
        "total_donations": row["total_amount"],
        "donation_count": row["donation_count"],
        "title": leaderboard_tier(row["total_amount"], tiers),
        "last_donation_at": row["last_donation_at"],
    }


def leaderboard(limit: int = 10, offset: int = 0) -> dict:
    tiers = active_table()
    rows = _donor_rollup()
    page = _paginate(rows, limit, offset)
    page["data"] = [
        _leaderboard_entry(row, page["offset"] + i + 1, tiers)
        for i, row in enumerate(page["data"])
    ]
    return page


def donor_rank(identifier: str) -> dict | None:
    rows = _donor_rollup()
    me = next((r for r in rows if r["identifier"] == str(identifier)), None)
    if me is None:
        return None
    # ties share a rank
    rank = 1 + sum(1 for r in rows if r["total_amount"] > me["total_amount"])
    return _leaderboard_entry(me, rank, active_table())


def leaderboard_statistics() -> dict:
    rows = _donor_rollup()
    top = rows[0] if rows else None
    tiers = active_table()
    return {
        "total_donors": len(rows),
        "total_donations": sum((r["total_amount"] for r in rows), ZERO),
        "total_transactions": sum(r["donation_count"] for r in rows),
        "top_donor": {
            "name": top["donor_name"],
            "total_donations": top["total_amount"],
            "title": leaderboard_tier(top["total_amount"], tiers),
        } if top else None,
        "tiers": [t.as_dict() for t in tiers],
    }


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------

def _bucket(day, period: str) -> str:
    if period == "daily":
        return day.isoformat()
    if period == "weekly":
        # weeks start on Sunday
        return (day - timedelta(days=(day.weekday() + 1) % 7)).isoformat()
    return f"{day.year:04d}-{day.month:02d}"


def trends(period: str = "daily", days: int = 30, now=None) -> list[dict]:
    """
    SUCCESS donations paid in the trailing ``days`` days, bucketed by day,
    week or month and sorted by bucket key ascending.
    """
    if period not in PERIODS:
        raise ValueError(f"period must be one of {', '.join(PERIODS)}")
    now = now or timezone.now()
    since = now - timedelta(days=days)

    buckets: dict[str, dict] = {}
    qs = (Donation.objects
          .filter(status=Donation.Status.SUCCESS, paid_at__gte=since, paid_at__lte=now)
          .order_by("paid_at", "id")
          .only("amount", "paid_at"))
    for d in qs:
        key = _bucket(timezone.localtime(d.paid_at).date(), period)
        b = buckets.setdefault(key, {"count": 0, "amount": ZERO})
        b["count"] += 1
        b["amount"] += d.amount

    return [
        {"date": key, "count": b["count"], "amount": b["amount"], "average": _avg(b["amount"], b["count"])}
        for key, b in sorted(buckets.items())
    ]
