"""Domain exceptions."""


class QuillGateError(Exception):
    """Base exception for QuillGate."""

    pass


class PermissionDenied(QuillGateError):
    """Actor is not allowed to perform the requested governance change."""

    pass


class NotFound(QuillGateError):
    """Requested entity was not found."""

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class ValidationError(QuillGateError):
    """Validation failed for input data."""

    pass


class InvalidWindow(ValidationError):
    """Validity window starts after it ends."""

    pass


class InsufficientGrantorScope(QuillGateError):
    """Grantor does not hold the permission it tries to grant."""

    pass


class DelegationNotPermitted(QuillGateError):
    """Temporary permission cannot be delegated as requested."""

    pass


class ConcurrentModification(QuillGateError):
    """Entity was changed by another writer; caller should retry."""

    pass


class RuleEvaluationError(QuillGateError):
    """Data permission rule could not be evaluated."""

    pass


class GovernanceError(QuillGateError):
    """Configuration workflow transition is not allowed."""

    pass
