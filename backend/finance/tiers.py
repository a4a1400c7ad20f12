from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings


@dataclass(frozen=True)
class Tier:
    min_amount: Decimal
    max_amount: Decimal | None
    title: str

    def as_dict(self) -> dict:
        return {"title": self.title, "min_amount": self.min_amount, "max_amount": self.max_amount}


# IDR brackets; [min, max), the last one unbounded
TIER_TABLE = (
    Tier(Decimal("0"), Decimal("1000000"), "PEMULA"),
    Tier(Decimal("1000000"), Decimal("10000000"), "DERMAWAN"),
    Tier(Decimal("10000000"), Decimal("50000000"), "JURAGAN"),
    Tier(Decimal("50000000"), Decimal("100000000"), "SULTAN"),
    Tier(Decimal("100000000"), None, "LEGEND"),
)


def _dec(v) -> Decimal | None:
    if v is None:
        return None
    return v if isinstance(v, Decimal) else Decimal(str(v))


def _coerce(entry) -> Tier:
    if isinstance(entry, Tier):
        return entry
    if isinstance(entry, dict):
        lo = entry.get("min", entry.get("min_amount", entry.get("minAmount")))
        hi = entry.get("max", entry.get("max_amount", entry.get("maxAmount")))
        return Tier(_dec(lo) or Decimal("0"), _dec(hi), entry["title"])
    lo, hi, title = entry
    return Tier(_dec(lo) or Decimal("0"), _dec(hi), title)


def normalize(table) -> list[Tier]:
    tiers = sorted((_coerce(e) for e in table), key=lambda t: t.min_amount)
    if not tiers:
        raise ValueError("tier table is empty")
    # [min, max) intervals must tile the line: each max is the next min
    for lower, upper in zip(tiers, tiers[1:]):
        if lower.max_amount != upper.min_amount:
            raise ValueError(f"tier {lower.title} must end where {upper.title} begins")
    if tiers[-1].max_amount is not None:
        raise ValueError(f"last tier {tiers[-1].title} must be unbounded")
    return tiers


def active_table() -> list[Tier]:
    return normalize(getattr(settings, "LEADERBOARD_TIERS", None) or TIER_TABLE)


def tier_for(total, tier_table=None) -> Tier:
    """
    The tier whose [min, max) interval contains ``total``; an amount exactly
    on a boundary belongs to the upper tier. Amounts below the first tier's
    minimum fall into the first tier.
    """
    tiers = normalize(tier_table) if tier_table is not None else active_table()
    total = _dec(total) or Decimal("0")
    if total < tiers[0].min_amount:
        return tiers[0]
    for tier in tiers:
        if total >= tier.min_amount and (tier.max_amount is None or total < tier.max_amount):
            return tier
    return tiers[-1]


def leaderboard_tier(total, tier_table=None) -> str:
    return tier_for(total, tier_table).title
