"""
Exception types for TubeFlow.

Backend failures are normalized at the client boundary into a closed set of
tagged errors (see ErrorKind) so that the retrier and router can switch on
the tag instead of inspecting free-text error messages.
"""
import enum
from typing import Optional


class TubeflowError(Exception):
    """Base exception for all TubeFlow errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(TubeflowError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration value is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value cannot be parsed."""
    pass


# =============================================================================
# BACKEND ERRORS
# =============================================================================

class ErrorKind(enum.Enum):
    """Failure category reported by the generation backend."""
    TRANSIENT = "transient"          # overload, rate limit, 5xx, transport
    UNAUTHORIZED = "unauthorized"    # 401/403, PERMISSION_DENIED
    NOT_FOUND = "not_found"          # unknown model / endpoint
    INVALID = "invalid"              # malformed request
    UNKNOWN = "unknown"
    BAD_RESPONSE = "bad_response"    # success envelope, unusable payload


class BackendError(TubeflowError):
    """Raised when a call to the generation backend fails."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        model: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        if model:
            details["model"] = model
        super().__init__(message, details)
        self.status_code = status_code
        self.model = model


class TransientBackendError(BackendError):
    """Overloaded, rate limited or unreachable backend."""
    kind = ErrorKind.TRANSIENT


class PermissionDeniedError(BackendError):
    """Credential lacks access to the requested model."""
    kind = ErrorKind.UNAUTHORIZED


class ModelNotFoundError(BackendError):
    kind = ErrorKind.NOT_FOUND


class InvalidRequestError(BackendError):
    kind = ErrorKind.INVALID


class UnknownBackendError(BackendError):
    kind = ErrorKind.UNKNOWN


class EmptyResponseError(BackendError):
    """Backend answered successfully but returned no usable payload."""
    kind = ErrorKind.BAD_RESPONSE


class MalformedResponseError(BackendError):
    """Payload did not match the requested structured-output shape."""
    kind = ErrorKind.BAD_RESPONSE


# =============================================================================
# WORKFLOW ERRORS
# =============================================================================

class WorkflowError(TubeflowError):
    """Base exception for workflow state machine errors."""
    pass


class StageNotApprovableError(WorkflowError):
    """Raised when approving a stage that has no output yet."""

    def __init__(self, stage_name: str, reason: str):
        message = f"Stage '{stage_name}' cannot be approved: {reason}"
        super().__init__(message, {"stage": stage_name, "reason": reason})


class StageNavigationError(WorkflowError):
    """Raised on a transition the linear workflow does not allow."""
    pass


class MissingPrerequisiteError(WorkflowError):
    """Raised when an earlier stage has not produced output yet."""

    def __init__(self, stage_name: str, missing: list):
        message = f"Stage '{stage_name}' requires output from: {', '.join(missing)}"
        super().__init__(message, {"stage": stage_name, "missing": missing})


class InvalidInputError(WorkflowError):
    """Raised when an operation is invoked with unusable inputs."""
    pass
