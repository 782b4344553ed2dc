"""
Error taxonomy of the assessment engine.

Every error carries a developer message, structured ``details`` for the logs
and a ``user_message`` that is safe to show the participant. The web layer
picks HTTP status codes by class: validation, session and storage errors.
"""

from __future__ import annotations

from typing import Any


class AssessmentEngineError(Exception):
    """Root of every error the engine raises on purpose."""

    default_user_message = "An unexpected error occurred. Please try again."

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self.default_user_message

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(AssessmentEngineError):
    """Raised when input validation fails."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )


class SectionValidationError(ValidationError):
    """
    Raised when a section submission violates one or more rules.

    Carries every violated rule, not only the first, so callers can present
    the complete list. The session is never modified when this is raised.
    """

    def __init__(self, section: str, errors: list[Any]):
        self.section = section
        self.validation_errors = list(errors)
        self.field = "responses"
        self.value = None
        messages = [f"{e.field}: {e.message}" for e in self.validation_errors]
        AssessmentEngineError.__init__(
            self,
            message=f"Invalid {section} submission: {'; '.join(messages)}",
            details={
                "section": section,
                "errors": [
                    {"field": e.field, "message": e.message, "value": e.value}
                    for e in self.validation_errors
                ],
            },
            user_message="Please correct the following errors and try again.",
        )

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.validation_errors]


class DatabaseError(AssessmentEngineError):
    """
    Raised when the session store fails.

    ``retryable`` marks failures that say nothing about the submission
    itself (lost connection, lock timeout); the same request may succeed later.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        self.operation = operation
        self.retryable = retryable
        super().__init__(
            message=f"Database error during {operation}: {message}",
            details=details or {"operation": operation, "retryable": retryable},
            user_message="Your answers could not be saved right now. Please try again in a moment.",
        )


class ConnectionError(DatabaseError):
    """Raised when the database cannot be reached or stays locked past the timeout."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, operation="connection", details=details, retryable=True)


# Named constraints of the assessment schema and what they protect
CONSTRAINT_MESSAGES: dict[str, str] = {
    "uq_session_section": "This section was already recorded. Please refresh and try again.",
    "ck_section_time_spent": "Time spent on a section cannot be negative.",
    "ck_section_name": "Unknown assessment section.",
    "ck_session_status": "Invalid assessment status.",
    "foreign_key": "The assessment no longer exists. Please start a new one.",
}


class IntegrityError(DatabaseError):
    """Raised when a write violates one of the schema's constraints."""

    def __init__(
        self,
        message: str,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.constraint = constraint
        super().__init__(
            message=message,
            operation="integrity_check",
            details=details or {"constraint": constraint},
        )
        self.user_message = CONSTRAINT_MESSAGES.get(
            constraint or "", "These answers conflict with what is already stored."
        )


class SessionError(AssessmentEngineError):
    """Raised when assessment session operations fail."""

    def __init__(
        self,
        message: str,
        session_id: int | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        self.session_id = session_id
        super().__init__(
            message=message,
            details=details or {"session_id": session_id},
            user_message=user_message
            or "Assessment error occurred. Please reload your assessment and try again.",
        )


class SessionNotFoundError(SessionError):
    """Raised when an assessment session is not found."""

    def __init__(self, session_id: int | None, owner_id: str | None = None):
        self.owner_id = owner_id
        target = f"Assessment {session_id}" if session_id is not None else "Assessment"
        suffix = f" for owner {owner_id}" if owner_id is not None else ""
        super().__init__(
            message=f"{target} not found{suffix}",
            session_id=session_id,
            user_message="The assessment could not be found. Please start a new one.",
        )


class StateError(SessionError):
    """Raised when an operation is not allowed in the session's current state."""

    def __init__(
        self,
        message: str,
        session_id: int | None = None,
        status: str | None = None,
        operation: str | None = None,
    ):
        self.status = status
        self.operation = operation
        super().__init__(
            message=message,
            session_id=session_id,
            details={"session_id": session_id, "status": status, "operation": operation},
            user_message=self._state_user_message(status),
        )

    @staticmethod
    def _state_user_message(status: str | None) -> str:
        if status == "completed":
            return "This assessment is already complete. Start a new assessment to retake it."
        if status == "abandoned":
            return "This assessment was closed. Start a new assessment to continue."
        return "This action is not available for the current assessment."


class ConsistencyError(SessionError):
    """Raised when the completion guard was already taken by another submission."""

    def __init__(self, session_id: int):
        super().__init__(
            message=f"Assessment {session_id} was completed by a concurrent submission",
            session_id=session_id,
        )


class ConfigurationError(AssessmentEngineError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


def _constraint_in(error_msg: str) -> str | None:
    for name in CONSTRAINT_MESSAGES:
        if name in error_msg:
            return name
    if "unique constraint" in error_msg or "duplicate" in error_msg:
        # SQLite names the columns rather than the constraint
        if "section_results" in error_msg or "session_section" in error_msg:
            return "uq_session_section"
        return "unique"
    if "foreign key" in error_msg:
        return "foreign_key"
    if "check constraint" in error_msg:
        return "check"
    return None


def handle_database_error(e: Exception, operation: str = "database operation") -> DatabaseError:
    """
    Convert a SQLAlchemy/DBAPI failure into the engine's error taxonomy.

    Lock and connection failures become retryable ``ConnectionError``;
    constraint violations become ``IntegrityError`` naming the constraint.

    Example:
        >>> try:
        ...     session.commit()
        >>> except SQLAlchemyError as e:
        ...     raise handle_database_error(e, "save_section") from e
    """
    error_msg = str(e).lower()

    if any(marker in error_msg for marker in ("database is locked", "connection", "timeout")):
        return ConnectionError(str(e), details={"operation": operation})
    constraint = _constraint_in(error_msg)
    if constraint is not None:
        return IntegrityError(str(e), constraint=constraint)
    return DatabaseError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Example:
        >>> error = ValidationError("time_spent_minutes", "must not be negative")
        >>> create_user_friendly_error_message(error)
        'Invalid time spent minutes: must not be negative'
    """
    if isinstance(error, AssessmentEngineError):
        return error.user_message

    error_type = type(error).__name__
    messages = {
        "ValueError": "Invalid input provided. Please check your answers and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        error_type, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Args:
        error: The exception to log
        context: Additional context information

    Returns:
        Dictionary with structured error details
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, AssessmentEngineError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
