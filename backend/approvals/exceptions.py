"""
Errors raised by the approval workflow.

Every error carries an ``http_status`` and a stable ``code`` so views can
surface it verbatim. Nothing here is retried internally.
"""


class ApprovalError(Exception):
    code = "APPROVAL_ERROR"
    http_status = 400
    default_message = "Approval request failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AuthorizationError(ApprovalError):
    code = "FORBIDDEN"
    http_status = 403
    default_message = "Your role is not allowed to perform this action."


class DuplicatePendingApproval(ApprovalError):
    """A PENDING approval already exists; callers should use ``.approval``."""
    code = "DUPLICATE_PENDING_APPROVAL"
    http_status = 409
    default_message = "A pending approval already exists for this item."

    def __init__(self, approval, message: str | None = None):
        super().__init__(message)
        self.approval = approval


class ApprovalNotPending(ApprovalError):
    code = "APPROVAL_NOT_PENDING"
    http_status = 409
    default_message = "This approval has already been decided."


class SelfApprovalForbidden(ApprovalError):
    code = "SELF_APPROVAL_FORBIDDEN"
    http_status = 403
    default_message = "You cannot decide on your own submission."


class DuplicateVote(ApprovalError):
    code = "DUPLICATE_VOTE"
    http_status = 409
    default_message = "You have already voted on this approval."


class ReauthenticationRequired(ApprovalError):
    code = "REAUTHENTICATION_REQUIRED"
    http_status = 401
    default_message = "Please confirm your password to continue."


class EntityNotFound(ApprovalError):
    code = "NOT_FOUND"
    http_status = 404
    default_message = "Item not found."


class InvalidEntityState(ApprovalError):
    code = "INVALID_STATE"
    http_status = 409
    default_message = "The item is not in a state that allows this action."


class UnknownActionType(ApprovalError):
    code = "UNKNOWN_ACTION_TYPE"
    http_status = 400
    default_message = "Unknown approval action type."
