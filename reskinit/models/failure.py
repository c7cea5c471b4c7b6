"""
Failure envelope and domain errors.

Every non-success outcome leaves the API as an ApiResponse carrying a
classified FailureDetail. Domain code raises KnownError subclasses; the
application's exception handlers turn them into responses.

INVARIANT: No raw 500 errors may reach the client. Unexpected exceptions
are rendered with a fixed message and no internal detail.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Access failures
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"

    # Resource failures
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"

    # Data integrity failures
    UNSUPPORTED_TABLE = "unsupported_table"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope for failures and, where useful, successes."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


# Fixed, boring, predictable
UNKNOWN_FAILURE_MESSAGE = "Something went wrong on our side. Please retry the request."
UNKNOWN_FAILURE_SUGGESTION = "If this persists, please report the issue."


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    Only the exception type name is exposed; messages and tracebacks may
    carry internal detail and stay in the logs.
    """
    return ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=type(exception).__name__,
            suggestion=UNKNOWN_FAILURE_SUGGESTION,
        ),
    )


# =============================================================================
# DOMAIN ERRORS
# =============================================================================


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ValidationError(KnownError):
    """Malformed or missing input, or an unresolvable reference in it."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        invalid_ids: Iterable[int] | None = None,
    ):
        self.invalid_ids = sorted(set(invalid_ids)) if invalid_ids is not None else []
        if self.invalid_ids and detail is None:
            detail = "Invalid ids: " + ", ".join(str(i) for i in self.invalid_ids)
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            suggestion="Correct the request and try again.",
            status_code=400,
        )


class UnauthenticatedError(KnownError):
    """No usable credential was presented."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.UNAUTHENTICATED,
            message="Authentication required.",
            detail=detail,
            suggestion="Sign in and retry with a valid access token.",
            status_code=401,
        )


class ForbiddenError(KnownError):
    """Authenticated, but not allowed to touch this resource."""

    def __init__(self, message: str = "You do not have permission to modify this resource."):
        super().__init__(
            kind=FailureKind.FORBIDDEN,
            message=message,
            status_code=403,
        )


class NotFoundError(KnownError):
    """
    Referenced entity does not exist.

    The message names only the entity type and id, so an absent resource
    and one owned by somebody else look the same.
    """

    def __init__(self, entity: str, entity_id: int | str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{entity} not found",
            detail=f"{entity} {entity_id}",
            status_code=404,
        )


class ConflictError(KnownError):
    """A uniqueness constraint was violated."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=message,
            detail=detail,
            suggestion="Pick a different name.",
            status_code=409,
        )


class UnsupportedTableError(KnownError):
    """A card-definition table name the store does not implement."""

    def __init__(self, table_name: str | None):
        self.table_name = table_name
        if table_name is None:
            detail = "Card definition table is no longer registered for this game"
        else:
            detail = f"Unsupported card definition table: {table_name}"
        super().__init__(
            kind=FailureKind.UNSUPPORTED_TABLE,
            message="Unsupported card type.",
            detail=detail,
            status_code=422,
        )
