"""Exceptions raised by the data-access layer and the HTTP API.

Repository errors are plain exceptions that propagate to the caller.
The HTTP exceptions at the bottom are only raised from API endpoints.
"""

from typing import Any

from fastapi import HTTPException, status


class RepositoryError(Exception):
    """Base exception for data-access errors."""


class StoreUnavailableError(RepositoryError):
    """Raised when the backing store cannot be reached or times out."""

    def __init__(self, detail: str = "Backing store is unavailable") -> None:
        super().__init__(detail)
        self.detail = detail


class PredicateEvaluationError(RepositoryError):
    """Raised when a specification's criteria cannot be evaluated.

    Attributes:
        entity_id: Identity of the entity being evaluated, or None when
            the failure happened while translating the criteria to SQL
        field: The attribute path the criteria referenced, if known
    """

    def __init__(
        self,
        reason: str,
        *,
        entity_id: int | None = None,
        field: str | None = None,
    ) -> None:
        self.reason = reason
        self.entity_id = entity_id
        self.field = field
        if entity_id is not None:
            message = f"Criteria evaluation failed for entity {entity_id}: {reason}"
        else:
            message = f"Criteria evaluation failed: {reason}"
        super().__init__(message)


class CriterionNotTranslatableError(RepositoryError):
    """Raised when a criterion has no SQL form (e.g. an opaque predicate)."""


class InvalidIncludeError(RepositoryError):
    """Raised when an include selector does not resolve on the entity."""

    def __init__(self, selector: Any, reason: str) -> None:
        self.selector = selector
        super().__init__(f"Invalid include {selector!r}: {reason}")


class NotFoundError(HTTPException):
    """Raised when a resource is not found."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class BadRequestError(HTTPException):
    """Raised for general bad request errors."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )
