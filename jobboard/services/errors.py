"""Business-rule errors raised by the orchestration services.

A DomainError aborts the whole operation before any notification is written.
The API maps each kind to an HTTP status with a single descriptive message.
"""


class DomainError(Exception):
    """Base class for business-rule failures."""

    kind = "domain_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Bad input such as an unknown status value, or a failed precondition."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(DomainError):
    """A referenced user, job, application or notification does not exist."""

    kind = "not_found"
    status_code = 404


class AuthorizationError(DomainError):
    """The actor may not perform this operation."""

    kind = "forbidden"
    status_code = 403


class ConflictError(DomainError):
    """The operation would duplicate an existing record."""

    kind = "conflict"
    status_code = 409
