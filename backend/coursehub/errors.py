"""Domain error taxonomy.

Services raise these internally; ``service_operation`` converts them into failed
``OperationResult`` records so callers branch on ``result.error`` instead of
catching exceptions.
"""

from enum import Enum


class ErrorKind(str, Enum):
    validation = "validation"
    precondition = "precondition"
    invalid_state = "invalid_state"
    conflict = "conflict"
    authorization = "authorization"
    not_found = "not_found"
    rate_limit = "rate_limit"


class DomainError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed input: bad email, short password, invalid enum, out-of-range rating."""

    kind = ErrorKind.validation


class PreconditionError(DomainError):
    """Valid input, but the domain state is not ready for the operation."""

    kind = ErrorKind.precondition


class InvalidStateError(PreconditionError):
    """The entity is in a lifecycle state that does not allow the transition."""

    kind = ErrorKind.invalid_state


class ConflictError(DomainError):
    kind = ErrorKind.conflict


class AuthorizationError(DomainError):
    kind = ErrorKind.authorization


class NotFoundError(DomainError):
    kind = ErrorKind.not_found


class RateLimitError(DomainError):
    kind = ErrorKind.rate_limit
