import itertools
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from accounts.models import Role

User = get_user_model()

PASSWORD = "s3cret-pass"

_order_ids = itertools.count(1)


def _user(email, role, **extra):
    return User.objects.create_user(email=email, password=PASSWORD, role=role, name=email.split("@")[0], **extra)


@pytest.fixture
def donor(db):
    return _user("donor@test", Role.USER)


@pytest.fixture
def pengusul(db):
    return _user("pengusul@test", Role.PENGUSUL)


@pytest.fixture
def author(db):
    return _user("author@test", Role.CONTENT_MANAGER)


@pytest.fixture
def manager(db):
    return _user("manager@test", Role.MANAGER)


@pytest.fixture
def manager2(db):
    return _user("manager2@test", Role.MANAGER)


@pytest.fixture
def supervisor(db):
    return _user("supervisor@test", Role.SUPERVISOR)


@pytest.fixture
def finance_user(db):
    return _user("finance@test", Role.FINANCE)


@pytest.fixture
def super_admin(db):
    return _user("root@test", Role.SUPER_ADMIN)


@pytest.fixture
def program(author):
    from programs.services import create_program
    return create_program(author, "Sumur untuk Desa", Decimal("1000000"), description="Clean water")


@pytest.fixture
def make_donation(db):
    """Write a ledger row the way the payment integration would."""
    from donations.models import Donation

    def _make(program, amount, status="SUCCESS", user=None, donor_name="", donor_email="",
              is_anonymous=False, paid_at=None, **extra):
        if paid_at is None and status == "SUCCESS":
            paid_at = datetime(2025, 1, 15, 12, 0, tzinfo=dt_timezone.utc)
        return Donation.objects.create(
            program=program,
            user=user,
            donor_name=donor_name,
            donor_email=donor_email,
            amount=Decimal(str(amount)),
            status=status,
            is_anonymous=is_anonymous,
            external_order_id=f"ORDER-{next(_order_ids)}",
            paid_at=paid_at,
            **extra,
        )
    return _make
