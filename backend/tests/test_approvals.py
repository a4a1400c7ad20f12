import pytest

from approvals import services
from approvals.exceptions import (
    ApprovalNotPending,
    AuthorizationError,
    DuplicatePendingApproval,
    DuplicateVote,
    EntityNotFound,
    InvalidEntityState,
    ReauthenticationRequired,
    SelfApprovalForbidden,
    UnknownActionType,
)
from approvals.models import ActionType, Approval, ApprovalAction
from audit.models import AuditLog
from programs.models import Program


def _submit(program, user, **kw):
    return services.submit(ActionType.PROGRAM_PUBLISH, program.pk, user, **kw)


@pytest.mark.django_db
def test_submit_moves_program_into_review(program, author):
    approval = _submit(program, author)
    program.refresh_from_db()
    assert approval.status == Approval.Status.PENDING
    assert approval.required_approver_count == 1
    assert program.status == Program.Status.PENDING_APPROVAL
    assert AuditLog.objects.filter(action="APPROVAL_SUBMITTED").count() == 1


@pytest.mark.django_db
def test_second_submit_returns_existing_pending(program, author):
    first = _submit(program, author)
    with pytest.raises(DuplicatePendingApproval) as exc:
        _submit(program, author)
    assert exc.value.approval.pk == first.pk
    assert Approval.objects.filter(entity_id=program.pk, status=Approval.Status.PENDING).count() == 1


@pytest.mark.django_db
def test_donor_cannot_submit_program(program, donor):
    with pytest.raises(AuthorizationError):
        _submit(program, donor)


@pytest.mark.django_db
def test_only_owner_submits_program(program, pengusul):
    with pytest.raises(AuthorizationError):
        _submit(program, pengusul)


@pytest.mark.django_db
def test_submit_unknown_entity(author):
    with pytest.raises(EntityNotFound):
        services.submit(ActionType.PROGRAM_PUBLISH, 999999, author)


@pytest.mark.django_db
def test_submit_unknown_action_type(program, author):
    with pytest.raises(UnknownActionType):
        services.submit("PROGRAM_DELETE", program.pk, author)


@pytest.mark.django_db
def test_active_program_cannot_be_resubmitted(program, author, manager):
    approval = _submit(program, author)
    services.approve(approval.pk, manager, reauthenticated=True)
    with pytest.raises(InvalidEntityState):
        _submit(program, author)


@pytest.mark.django_db
def test_single_approve_publishes(program, author, manager):
    approval = _submit(program, author)
    approval = services.approve(approval.pk, manager, comment="ok", reauthenticated=True)
    program.refresh_from_db()
    assert approval.status == Approval.Status.APPROVED
    assert approval.resolved_at is not None
    assert program.status == Program.Status.ACTIVE
    assert program.published_at is not None
    action = approval.actions.get()
    assert action.approver_role == "MANAGER"
    assert action.comment == "ok"


@pytest.mark.django_db
def test_two_approvers_required(program, author, manager, manager2):
    approval = _submit(program, author, required_approver_count=2)

    approval = services.approve(approval.pk, manager, reauthenticated=True)
    program.refresh_from_db()
    assert approval.status == Approval.Status.PENDING
    assert program.status == Program.Status.PENDING_APPROVAL

    approval = services.approve(approval.pk, manager2, reauthenticated=True)
    program.refresh_from_db()
    assert approval.status == Approval.Status.APPROVED
    assert program.status == Program.Status.ACTIVE


@pytest.mark.django_db
def test_reject_after_approve_finalizes_rejected(program, author, manager, manager2):
    approval = _submit(program, author, required_approver_count=2)
    services.approve(approval.pk, manager, reauthenticated=True)
    approval = services.reject(approval.pk, manager2, comment="needs photos", reauthenticated=True)
    program.refresh_from_db()
    assert approval.status == Approval.Status.REJECTED
    assert program.status == Program.Status.REJECTED
    assert approval.actions.count() == 2


@pytest.mark.django_db
def test_rejected_program_can_be_edited_and_resubmitted(program, author, manager):
    from programs.services import update_program

    first = _submit(program, author)
    services.reject(first.pk, manager, reauthenticated=True)
    program.refresh_from_db()
    update_program(program, author, title="Sumur untuk Desa (revisi)")
    second = _submit(program, author)
    assert second.pk != first.pk
    assert Approval.objects.filter(entity_id=program.pk).count() == 2


@pytest.mark.django_db
def test_decided_approval_is_closed(program, author, manager, manager2):
    approval = _submit(program, author)
    services.approve(approval.pk, manager, reauthenticated=True)
    with pytest.raises(ApprovalNotPending):
        services.reject(approval.pk, manager2, reauthenticated=True)


@pytest.mark.django_db
def test_self_approval_forbidden(program, super_admin, author):
    program.creator = super_admin
    program.save()
    approval = _submit(program, super_admin)
    with pytest.raises(SelfApprovalForbidden):
        services.approve(approval.pk, super_admin, reauthenticated=True)


@pytest.mark.django_db
def test_same_approver_cannot_vote_twice(program, author, manager):
    approval = _submit(program, author, required_approver_count=2)
    services.approve(approval.pk, manager, reauthenticated=True)
    with pytest.raises(DuplicateVote):
        services.approve(approval.pk, manager, reauthenticated=True)
    assert ApprovalAction.objects.filter(approval=approval).count() == 1


@pytest.mark.django_db
def test_sensitive_decision_needs_reauthentication(program, author, manager):
    approval = _submit(program, author)
    with pytest.raises(ReauthenticationRequired):
        services.approve(approval.pk, manager)
    program.refresh_from_db()
    assert program.status == Program.Status.PENDING_APPROVAL


@pytest.mark.django_db
def test_non_sensitive_types_skip_reauthentication(program, author, manager, settings):
    settings.APPROVAL_SENSITIVE_ACTIONS = []
    approval = _submit(program, author)
    assert services.approve(approval.pk, manager).status == Approval.Status.APPROVED


@pytest.mark.django_db
def test_supervisor_cannot_decide(program, author, supervisor):
    approval = _submit(program, author)
    with pytest.raises(AuthorizationError):
        services.approve(approval.pk, supervisor, reauthenticated=True)


@pytest.mark.django_db
def test_unknown_approval(manager):
    with pytest.raises(EntityNotFound):
        services.approve(424242, manager, reauthenticated=True)


@pytest.mark.django_db
def test_required_approvers_from_settings(program, author, settings):
    settings.APPROVAL_REQUIRED_APPROVERS = {"PROGRAM_PUBLISH": 3}
    assert _submit(program, author).required_approver_count == 3


@pytest.mark.django_db
def test_actions_are_append_only(program, author, manager):
    approval = _submit(program, author)
    services.approve(approval.pk, manager, reauthenticated=True)
    action = ApprovalAction.objects.get(approval=approval)
    action.comment = "edited"
    with pytest.raises(ValueError):
        action.save()
    with pytest.raises(ValueError):
        action.delete()


@pytest.mark.django_db
def test_serialized_shape(program, author, manager):
    approval = _submit(program, author)
    services.approve(approval.pk, manager, comment="looks good", reauthenticated=True)
    data = services.serialize_approval(Approval.objects.get(pk=approval.pk))
    assert data["action_type"] == "PROGRAM_PUBLISH"
    assert data["status"] == "APPROVED"
    assert data["requester"] == {"id": author.pk, "name": author.display_name, "role": "CONTENT_MANAGER"}
    assert data["program"] == {"id": program.pk, "title": program.title}
    assert data["actions"][0]["approver"]["name"] == manager.display_name
    assert data["actions"][0]["approver_role"] == "MANAGER"
    assert data["actions"][0]["comment"] == "looks good"


@pytest.mark.django_db
def test_list_and_history(program, author, manager):
    first = _submit(program, author)
    services.reject(first.pk, manager, reauthenticated=True)
    _submit(program, author)

    pending = services.list_approvals(status="PENDING")
    assert pending["total"] == 1
    assert pending["offset"] == 0

    history = services.approval_history(ActionType.PROGRAM_PUBLISH, program.pk)
    assert [h["status"] for h in history] == ["REJECTED", "PENDING"]


@pytest.mark.django_db
def test_database_allows_one_pending_approval_per_entity(program, author):
    from django.db import IntegrityError, transaction

    Approval.objects.create(action_type=ActionType.PROGRAM_PUBLISH, entity_id=program.pk, requester=author)
    with pytest.raises(IntegrityError), transaction.atomic():
        Approval.objects.create(action_type=ActionType.PROGRAM_PUBLISH, entity_id=program.pk, requester=author)
    # resolved rows do not count against the constraint
    Approval.objects.create(action_type=ActionType.PROGRAM_PUBLISH, entity_id=program.pk, requester=author,
                            status=Approval.Status.REJECTED)


@pytest.mark.django_db
def test_racing_submit_returns_winner(program, author, monkeypatch):
    winner = Approval.objects.create(action_type=ActionType.PROGRAM_PUBLISH, entity_id=program.pk, requester=author)
    real_lookup = services.pending_approval_for
    calls = []

    def lookup_misses_first_time(action_type, entity_id):
        calls.append(entity_id)
        # first lookup runs before the winner is visible
        return None if len(calls) == 1 else real_lookup(action_type, entity_id)

    monkeypatch.setattr(services, "pending_approval_for", lookup_misses_first_time)
    with pytest.raises(DuplicatePendingApproval) as exc:
        _submit(program, author)

    assert exc.value.approval.pk == winner.pk
    assert len(calls) == 2
    assert Approval.objects.filter(entity_id=program.pk).count() == 1
    program.refresh_from_db()
    assert program.status == Program.Status.DRAFT


@pytest.mark.django_db
def test_late_decision_does_not_rerun_entity_transition(program, author, manager, manager2, monkeypatch):
    import dataclasses

    from approvals import handlers

    handler = handlers.get_handler(ActionType.PROGRAM_PUBLISH)
    approved = []

    def counting_on_approve(entity, approver):
        approved.append(approver.pk)
        handler.on_approve(entity, approver)

    monkeypatch.setitem(handlers._registry, handler.action_type,
                        dataclasses.replace(handler, on_approve=counting_on_approve))

    approval = _submit(program, author)
    services.approve(approval.pk, manager, reauthenticated=True)
    program.refresh_from_db()
    published_at = program.published_at

    with pytest.raises(ApprovalNotPending):
        services.approve(approval.pk, manager2, reauthenticated=True)

    program.refresh_from_db()
    assert approved == [manager.pk]
    assert program.published_at == published_at
    assert ApprovalAction.objects.filter(approval=approval).count() == 1
