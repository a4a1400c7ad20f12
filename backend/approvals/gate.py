"""
Role gate: which roles may submit or decide each approval action type.

This table is the single place role checks for the approval workflow live.
SUPER_ADMIN is allowed everything; SUPERVISOR and FINANCE only observe.
"""
from accounts.models import Role

from .exceptions import AuthorizationError
from .models import ActionType

SUBMIT = "submit"
DECIDE = "decide"

POLICY = {
    ActionType.PROGRAM_PUBLISH: {
        SUBMIT: frozenset({Role.CONTENT_MANAGER, Role.PENGUSUL}),
        DECIDE: frozenset({Role.MANAGER}),
    },
    ActionType.ARTICLE_PUBLISH: {
        SUBMIT: frozenset({Role.CONTENT_MANAGER, Role.PENGUSUL}),
        DECIDE: frozenset({Role.MANAGER}),
    },
    ActionType.ROLE_UPGRADE: {
        SUBMIT: frozenset({Role.USER}),
        DECIDE: frozenset({Role.MANAGER}),
    },
}

OVERRIDE_ROLES = frozenset({Role.SUPER_ADMIN})


def is_allowed(action_type: str, role: str, capability: str) -> bool:
    if role in OVERRIDE_ROLES:
        return True
    rules = POLICY.get(action_type)
    if not rules:
        return False
    return role in rules.get(capability, ())


def can_submit(action_type: str, role: str) -> bool:
    return is_allowed(action_type, role, SUBMIT)


def can_decide(action_type: str, role: str) -> bool:
    return is_allowed(action_type, role, DECIDE)


def _ensure(action_type: str, user, capability: str) -> None:
    if not getattr(user, "is_active", False):
        raise AuthorizationError("Account is inactive.")
    if not is_allowed(action_type, user.role, capability):
        raise AuthorizationError(f"Role {user.role} may not {capability} {action_type}.")


def ensure_can_submit(action_type: str, user) -> None:
    _ensure(action_type, user, SUBMIT)


def ensure_can_decide(action_type: str, user) -> None:
    _ensure(action_type, user, DECIDE)
