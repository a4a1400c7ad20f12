from decimal import Decimal

import pytest
from django.urls import reverse

from approvals.models import ActionType, Approval
from approvals import services as approvals
from programs.models import Program

PASSWORD = "s3cret-pass"


def _login(client, user):
    assert client.login(email=user.email, password=PASSWORD)


@pytest.mark.django_db
def test_health(client):
    assert client.get("/health/").json() == {"ok": True}


@pytest.mark.django_db
def test_create_and_submit_program_over_http(client, author):
    _login(client, author)
    resp = client.post(reverse("programs:create"), {"title": "Masjid", "target_amount": "2500000"})
    assert resp.status_code == 201
    program_id = resp.json()["id"]
    assert resp.json()["status"] == "DRAFT"

    payload = {"action_type": "PROGRAM_PUBLISH", "entity_id": program_id}
    resp = client.post(reverse("approvals:submit"), payload)
    assert resp.status_code == 201
    assert resp.json()["created"] is True

    again = client.post(reverse("approvals:submit"), payload)
    assert again.status_code == 200
    assert again.json()["created"] is False
    assert again.json()["approval"]["id"] == resp.json()["approval"]["id"]


@pytest.mark.django_db
def test_donor_gets_403_on_program_create(client, donor):
    _login(client, donor)
    resp = client.post(reverse("programs:create"), {"title": "X", "target_amount": "1"})
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN"


@pytest.mark.django_db
def test_approve_requires_password(client, program, author, manager):
    approval = approvals.submit(ActionType.PROGRAM_PUBLISH, program.pk, author)
    _login(client, manager)
    url = reverse("approvals:approve", args=[approval.pk])

    resp = client.post(url, {"comment": "ok"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "REAUTHENTICATION_REQUIRED"

    resp = client.post(url, {"comment": "ok", "password": "wrong"})
    assert resp.status_code == 401

    resp = client.post(url, {"comment": "ok", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["status"] == "APPROVED"
    program.refresh_from_db()
    assert program.status == Program.Status.ACTIVE

    resp = client.post(url, {"password": PASSWORD})
    assert resp.status_code == 409


@pytest.mark.django_db
def test_author_cannot_reach_decision_endpoint(client, program, author):
    approval = approvals.submit(ActionType.PROGRAM_PUBLISH, program.pk, author)
    _login(client, author)
    resp = client.post(reverse("approvals:reject", args=[approval.pk]), {"password": PASSWORD})
    assert resp.status_code == 403
    assert Approval.objects.get(pk=approval.pk).status == Approval.Status.PENDING


@pytest.mark.django_db
def test_supervisor_reads_approvals(client, program, author, supervisor):
    approvals.submit(ActionType.PROGRAM_PUBLISH, program.pk, author)
    _login(client, supervisor)
    resp = client.get(reverse("approvals:list"), {"status": "PENDING"})
    assert resp.status_code == 200
    assert resp.json()["total"] == 1


@pytest.mark.django_db
def test_role_upgrade_over_http(client, donor):
    _login(client, donor)
    resp = client.post(reverse("pengusul:request"), {"ktp_number": "3201", "institution_name": "Yayasan"})
    assert resp.status_code == 201
    assert resp.json()["approval"]["action_type"] == "ROLE_UPGRADE"
    again = client.post(reverse("pengusul:request"), {"ktp_number": "3201"})
    assert again.status_code == 200
    assert again.json()["created"] is False
    assert client.get(reverse("pengusul:me")).json()["request"]["status"] == "PENDING"


@pytest.mark.django_db
def test_finance_endpoints_by_role(client, program, finance_user, donor, make_donation):
    make_donation(program, 10000, donor_name="Ani")

    _login(client, donor)
    assert client.get(reverse("finance:statistics")).status_code == 403

    client.logout()
    _login(client, finance_user)
    summary = client.get(reverse("finance:program_summary", args=[program.pk]))
    assert summary.status_code == 200
    assert summary.json()["statistics"]["total_donations"] == 1

    donors = client.get(reverse("finance:program_donors", args=[program.pk]), {"limit": "1"})
    assert donors.json()["limit"] == 1
    assert client.get(reverse("finance:program_donors", args=[program.pk]), {"limit": "x"}).status_code == 400

    assert client.get(reverse("finance:trends"), {"period": "yearly"}).status_code == 400
    assert client.get(reverse("finance:top_donors")).json()["data"][0]["donor_name"] == "Ani"

    csv_resp = client.get(reverse("finance:program_donors_csv", args=[program.pk]))
    assert csv_resp["Content-Type"] == "text/csv"
    assert b"Ani" in csv_resp.content


@pytest.mark.django_db
def test_public_leaderboard(client, program, make_donation):
    make_donation(program, 2000000, donor_email="dermawan@x", donor_name="Dermawan")
    resp = client.get(reverse("finance:leaderboard"))
    assert resp.status_code == 200
    assert resp.json()["data"][0]["title"] == "DERMAWAN"
    assert client.get(reverse("finance:donor_rank", args=["dermawan@x"])).json()["rank"] == 1
    assert client.get(reverse("finance:donor_rank", args=["ghost@x"])).status_code == 404


@pytest.mark.django_db
def test_finance_transaction_endpoints(client, program, finance_user, donor, make_donation):
    from datetime import datetime, timezone as dt_timezone

    make_donation(program, 10000, donor_name="Ani", created_at=datetime(2025, 3, 1, 23, 30, tzinfo=dt_timezone.utc))
    make_donation(program, 5000, status="PENDING", created_at=datetime(2025, 3, 2, 8, 0, tzinfo=dt_timezone.utc))
    Program.objects.filter(pk=program.pk).update(status=Program.Status.ACTIVE)

    _login(client, donor)
    assert client.get(reverse("finance:transactions")).status_code == 403
    assert client.get(reverse("finance:programs_funds")).status_code == 403

    client.logout()
    _login(client, finance_user)
    everything = client.get(reverse("finance:transactions")).json()
    assert everything["total"] == 2

    pending = client.get(reverse("finance:transactions"), {"status": "PENDING"}).json()
    assert [Decimal(r["amount"]) for r in pending["data"]] == [Decimal("5000")]

    # end day is inclusive up to midnight
    first_day = client.get(reverse("finance:transactions"), {"start": "2025-03-01", "end": "2025-03-01"}).json()
    assert first_day["total"] == 1
    assert client.get(reverse("finance:transactions"), {"start": "01/03/2025"}).status_code == 400

    per_program = client.get(reverse("finance:program_transactions", args=[program.pk]), {"limit": "1"}).json()
    assert per_program["total"] == 2 and len(per_program["data"]) == 1

    funds = client.get(reverse("finance:programs_funds")).json()["data"]
    assert funds[0]["id"] == program.pk
    assert funds[0]["total_donations"] == 1
