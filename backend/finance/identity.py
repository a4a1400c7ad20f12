"""
Donor identity per reporting view.

A donation carries up to three optional ways of naming its donor (account,
email, free-text name) plus an anonymity flag. Which of them groups donations
together depends on the view:

* FUND_SUMMARY: every anonymous donation shares the key ``"anonymous"``;
  others key on the display name.
* PROGRAM_DONORS: each anonymous donation keys on its own id
  (``"anonymous-<id>"``) so anonymous gifts are never merged; others key on
  user id, else email, else name.
* TOP_DONORS: anonymous donations are excluded (no key); others key on user
  id, else email, else name.

Keys are computed on read and never stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ANONYMOUS = "anonymous"
UNKNOWN = "unknown"


class View(str, Enum):
    FUND_SUMMARY = "fund_summary"
    PROGRAM_DONORS = "program_donors"
    TOP_DONORS = "top_donors"


@dataclass(frozen=True)
class DonorKey:
    identifier: str
    anonymous: bool = False


def _first(*values) -> str | None:
    for v in values:
        if v not in (None, ""):
            return str(v)
    return None


def resolve_identifier(is_anonymous: bool, user_id, donor_email, donor_name, view: View,
                       donation_id=None, user_name=None) -> DonorKey | None:
    view = View(view)
    if view is View.FUND_SUMMARY:
        if is_anonymous:
            return DonorKey(ANONYMOUS, anonymous=True)
        return DonorKey(_first(donor_name, user_name) or UNKNOWN)

    if is_anonymous:
        if view is View.TOP_DONORS:
            return None
        if donation_id is None:
            raise ValueError("donation_id is required to key an anonymous donation per program")
        return DonorKey(f"{ANONYMOUS}-{donation_id}", anonymous=True)

    return DonorKey(_first(user_id, donor_email, donor_name) or UNKNOWN)


def resolve(donation, view: View) -> DonorKey | None:
    user = donation.user if donation.user_id else None
    return resolve_identifier(
        donation.is_anonymous,
        donation.user_id,
        donation.donor_email,
        donation.donor_name,
        view,
        donation_id=donation.pk,
        user_name=user.name if user else None,
    )


def display_name(donation) -> str:
    if donation.is_anonymous:
        return "Anonymous"
    user = donation.user if donation.user_id else None
    return _first(donation.donor_name, user.name if user else None) or "Unknown"


def display_email(donation) -> str | None:
    user = donation.user if donation.user_id else None
    return _first(donation.donor_email, user.email if user else None)
