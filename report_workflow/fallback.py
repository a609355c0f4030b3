"""
Candidate probing for endpoints whose exact route is not known in advance.

Each logical operation lists guessed calls in priority order. A call that
fails with a *soft* error (the route does not exist here) moves on to the
next candidate; anything else stops the probe and propagates unchanged.
"""

from typing import Callable, Iterable, Optional, TypeVar

from .config import logger
from .errors import ApiError, MissingReportFileError, ReportWorkflowError

T = TypeVar('T')


def is_routing_error(error: BaseException) -> bool:
    """404 / 405: wrong endpoint, try the next one."""
    return isinstance(error, ApiError) and error.is_routing_error


def is_download_soft_failure(error: BaseException) -> bool:
    """Routing errors, plus successful responses that carried no report file."""
    return is_routing_error(error) or isinstance(error, MissingReportFileError)


def try_candidates(
    calls: Iterable[Callable[[], T]],
    is_soft_failure: Callable[[BaseException], bool] = is_routing_error,
    operation: str = "report workflow",
) -> T:
    """Return the first candidate result; re-raise the last soft failure if all fail."""
    last_error: Optional[ReportWorkflowError] = None
    for index, call in enumerate(calls):
        try:
            return call()
        except ReportWorkflowError as error:
            if not is_soft_failure(error):
                raise
            logger.debug(f"{operation}: candidate {index + 1} skipped ({error})")
            last_error = error
    if last_error is not None:
        raise last_error
    raise ApiError(404, f"No matching endpoint for {operation}.")
