"""Error taxonomy for corrective action operations.

Every error carries a stable ``code`` and an optional ``context`` dict so the
caller receives the kind and a human-readable detail verbatim. None of these
are retried or swallowed inside the engine.
"""

from __future__ import annotations

from typing import Any


class DisciplineError(Exception):
    """Base class for all corrective action errors."""

    code = "DISCIPLINE_ERROR"

    def __init__(self, detail: str, context: dict[str, Any] | None = None):
        self.detail = detail
        self.context = context or {}
        super().__init__(detail)


class ValidationError(DisciplineError):
    """Malformed or missing required input."""

    code = "VALIDATION_ERROR"


class AuthorizationError(DisciplineError):
    """Caller's role is not permitted for the requested operation."""

    code = "AUTHORIZATION_ERROR"


class ConflictError(DisciplineError):
    """Operation conflicts with the current state of the record."""

    code = "CONFLICT"


class NotFoundError(DisciplineError):
    """A referenced employee, category, user or action does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} {entity_id} not found",
            {"entity": entity, "id": str(entity_id)},
        )
