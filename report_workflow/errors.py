"""
Exception taxonomy for the report workflow.

Messages are plain text meant for a human; callers display ``str(error)``.
"""

from typing import Optional

from .config import ROUTING_STATUSES


class ReportWorkflowError(Exception):
    """Base class for every error raised by this package."""


class ApiError(ReportWorkflowError):
    """Non-2xx response from the backend."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    @property
    def is_routing_error(self) -> bool:
        """404/405 mean "wrong endpoint", not "wrong request"."""
        return self.status in ROUTING_STATUSES

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


class NotAuthenticatedError(ReportWorkflowError):
    """No bearer token available, so no call is attempted."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Not logged in. Sign in to use report downloads.")


class ReportNotApprovedError(ApiError):
    """Download attempted while the request is not APPROVED."""

    def __init__(self, status_value: str):
        super().__init__(403, f"Report is {status_value}. Approval is required before download.")
        self.request_status = status_value


class MissingReportFileError(ReportWorkflowError):
    """A successful response carried neither a file nor a download URL."""

    def __init__(self, message: str = "Report download did not return a PDF file."):
        super().__init__(message)


class ResponseShapeError(ReportWorkflowError):
    """The backend answered but the body could not be read as a report request."""


class InvalidTransitionError(ReportWorkflowError):
    """Lifecycle move that the state machine does not allow."""


class ActionInProgressError(ReportWorkflowError):
    """The same action id is already in flight."""

    def __init__(self, action_id: str):
        super().__init__(f"Action already in progress for {action_id}.")
        self.action_id = action_id
