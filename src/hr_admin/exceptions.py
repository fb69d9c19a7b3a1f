"""Typed errors raised by the HR admin engine.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with:

    HRAdminError
    +-- NotFoundError          404  NOT_FOUND
    +-- ValidationFailedError  400  VALIDATION_FAILED
    +-- ForbiddenError         403  FORBIDDEN
    +-- ConflictError          409  CONFLICT
    +-- NotAuthenticatedError  401  NOT_AUTHENTICATED
"""

from __future__ import annotations

from typing import Any


class HRAdminError(Exception):
    """Base class for all engine errors."""

    code: str = "HR_ADMIN_ERROR"
    status_code: int = 500

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(HRAdminError):
    """Raised when the addressed entity does not exist (under the read scope)."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity_kind: str, entity_id: Any = None, message: str | None = None):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        if message is None:
            message = f"No {entity_kind} found with that ID"
        super().__init__(message, entity_kind=entity_kind, entity_id=entity_id)


class ValidationFailedError(HRAdminError):
    """Raised when an entity-level constraint or reference is violated."""

    code = "VALIDATION_FAILED"
    status_code = 400


class ForbiddenError(HRAdminError):
    """Raised when a guard rule or role restriction rejects the actor."""

    code = "FORBIDDEN"
    status_code = 403


class ConflictError(HRAdminError):
    """Raised on uniqueness violations (duplicate payroll period, email, name)."""

    code = "CONFLICT"
    status_code = 409


class NotAuthenticatedError(HRAdminError):
    """Raised when no acting principal can be resolved for a request."""

    code = "NOT_AUTHENTICATED"
    status_code = 401
