"""
Typed errors raised by the review workflow engine.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer answers with, so callers catch by type and never parse messages:

    WorkflowError (base)
    +-- InvalidTransitionError   INVALID_TRANSITION   409
    +-- ForbiddenError           FORBIDDEN            403
    +-- NotFoundError            NOT_FOUND            404
    +-- InvalidRequestError      INVALID_REQUEST      422
    +-- WorkflowSystemError      SYSTEM_ERROR         500

The engine itself never raises ``WorkflowSystemError``; it is reserved for the
store and transport layers around it.
"""

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """Base class for all review workflow errors."""

    code: str = "WORKFLOW_ERROR"
    http_status: int = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["context"] = {k: _plain(v) for k, v in self.details.items()}
        return body


class InvalidTransitionError(WorkflowError):
    """State change not in the transition graph, or attempted on a terminal state."""

    code = "INVALID_TRANSITION"
    http_status = 409

    def __init__(self, current: Any, target: Any, message: Optional[str] = None):
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot transition application from {_plain(current)} to {_plain(target)}",
            current=current,
            target=target,
        )


class ForbiddenError(WorkflowError):
    """The actor may not perform this action in the current state."""

    code = "FORBIDDEN"
    http_status = 403


class NotFoundError(WorkflowError):
    """A referenced entity (application, revision request) does not exist or is stale."""

    code = "NOT_FOUND"
    http_status = 404


class InvalidRequestError(WorkflowError):
    """Malformed input that reached the engine without passing API validation."""

    code = "INVALID_REQUEST"
    http_status = 422


class WorkflowSystemError(WorkflowError):
    """Failure outside the engine (store, transport)."""

    code = "SYSTEM_ERROR"
    http_status = 500


def _plain(value: Any) -> Any:
    """Enum members render as their value; everything else as str unless JSON-native."""
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    return str(value)
