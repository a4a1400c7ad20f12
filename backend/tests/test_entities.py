from decimal import Decimal

import pytest

from accounts.models import Role
from approvals import services as approvals
from approvals.exceptions import AuthorizationError, DuplicatePendingApproval, InvalidEntityState
from approvals.models import ActionType, Approval
from articles.models import Article
from articles.services import create_article, update_article
from pengusul.models import RoleUpgradeRequest
from pengusul.services import request_role_upgrade
from programs.models import Program
from programs.services import close_program, create_program, update_program


@pytest.mark.django_db
def test_programs_start_as_draft(pengusul):
    program = create_program(pengusul, "Beasiswa", "5000000")
    assert program.status == Program.Status.DRAFT
    assert program.collected_amount == Decimal("0")


@pytest.mark.django_db
def test_donor_cannot_create_program(donor):
    with pytest.raises(AuthorizationError):
        create_program(donor, "Beasiswa", "5000000")


@pytest.mark.django_db
def test_bad_target_amount(author):
    with pytest.raises(InvalidEntityState):
        create_program(author, "Beasiswa", "-1")


@pytest.mark.django_db
def test_program_frozen_while_pending(program, author):
    approvals.submit(ActionType.PROGRAM_PUBLISH, program.pk, author)
    with pytest.raises(InvalidEntityState):
        update_program(program, author, title="changed")


@pytest.mark.django_db
def test_only_owner_edits(program, pengusul):
    with pytest.raises(AuthorizationError):
        update_program(program, pengusul, title="mine now")


@pytest.mark.django_db
def test_close_program(program, author, manager):
    approval = approvals.submit(ActionType.PROGRAM_PUBLISH, program.pk, author)
    approvals.approve(approval.pk, manager, reauthenticated=True)
    program = close_program(program, manager)
    assert program.status == Program.Status.CLOSED
    assert program.closed_at is not None


@pytest.mark.django_db
def test_draft_program_cannot_close(program, author):
    with pytest.raises(InvalidEntityState):
        close_program(program, author)


@pytest.mark.django_db
def test_article_publish_flow(program, author, manager):
    article = create_article(author, "Kabar sumur", "Sudah digali", program=program)
    assert article.status == Article.Status.DRAFT

    approval = approvals.submit(ActionType.ARTICLE_PUBLISH, article.pk, author)
    article.refresh_from_db()
    assert article.status == Article.Status.PENDING_APPROVAL

    approvals.approve(approval.pk, manager, reauthenticated=True)
    article.refresh_from_db()
    assert article.status == Article.Status.PUBLISHED
    assert article.published_at is not None

    data = approvals.serialize_approval(Approval.objects.get(pk=approval.pk))
    assert data["article"]["title"] == "Kabar sumur"


@pytest.mark.django_db
def test_rejected_article_is_editable(author, manager):
    article = create_article(author, "Draft")
    approval = approvals.submit(ActionType.ARTICLE_PUBLISH, article.pk, author)
    approvals.reject(approval.pk, manager, reauthenticated=True)
    article.refresh_from_db()
    assert article.status == Article.Status.REJECTED
    article = update_article(article, author, content="Revised")
    assert article.content == "Revised"


@pytest.mark.django_db
def test_role_upgrade_promotes_user(donor, manager):
    approval = request_role_upgrade(donor, ktp_number="3201000000000001", phone="0812",
                                    institution_name="Yayasan Air")
    req = RoleUpgradeRequest.objects.get(pk=approval.entity_id)
    assert req.status == RoleUpgradeRequest.Status.PENDING
    assert approval.action_type == ActionType.ROLE_UPGRADE

    approvals.approve(approval.pk, manager, reauthenticated=True)
    donor.refresh_from_db()
    req.refresh_from_db()
    assert req.status == RoleUpgradeRequest.Status.APPROVED
    assert req.reviewed_by == manager
    assert donor.role == Role.PENGUSUL
    assert donor.ktp_number == "3201000000000001"
    assert donor.institution_name == "Yayasan Air"
    assert donor.verified_by == manager


@pytest.mark.django_db
def test_role_upgrade_one_pending_per_user(donor):
    first = request_role_upgrade(donor, ktp_number="1")
    with pytest.raises(DuplicatePendingApproval) as exc:
        request_role_upgrade(donor, ktp_number="2")
    assert exc.value.approval.pk == first.pk
    assert RoleUpgradeRequest.objects.filter(user=donor).count() == 1


@pytest.mark.django_db
def test_rejected_upgrade_leaves_role_and_allows_new_request(donor, manager):
    approval = request_role_upgrade(donor, ktp_number="1")
    approvals.reject(approval.pk, manager, reauthenticated=True)
    donor.refresh_from_db()
    assert donor.role == Role.USER
    assert RoleUpgradeRequest.objects.get(pk=approval.entity_id).status == RoleUpgradeRequest.Status.REJECTED

    again = request_role_upgrade(donor, ktp_number="1")
    assert again.status == Approval.Status.PENDING


@pytest.mark.django_db
def test_only_ordinary_donors_request_upgrade(pengusul):
    with pytest.raises(InvalidEntityState):
        request_role_upgrade(pengusul, ktp_number="1")


@pytest.mark.django_db
def test_upgrade_requires_ktp(donor):
    with pytest.raises(InvalidEntityState):
        request_role_upgrade(donor, ktp_number="  ")
