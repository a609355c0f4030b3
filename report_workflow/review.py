"""
Approver review queue: the admin / instructor view of report requests.
"""

from datetime import datetime
from typing import List, Optional

import httpx

from .client import ReportClient
from .config import POLL_INTERVAL, logger
from .errors import ReportWorkflowError
from .models import ReportRequest, StatusSummary
from .polling import Poller
from .workflow import (
    ActionGuard,
    can_decide,
    merge_decision,
    sort_by_date,
    status_summary,
    validate_status_filter,
)


class ReviewQueue:
    """Request rows kept in sync with the backend, plus decide actions."""

    def __init__(
        self,
        client: ReportClient,
        status_filter: str = "ALL",
        admin: bool = False,
        course_id: Optional[str] = None,
    ):
        self.client = client
        self.status_filter = validate_status_filter(status_filter)
        self.admin = admin
        self.course_id = course_id
        self.rows: List[ReportRequest] = []
        self.error = ""
        self.last_synced: Optional[datetime] = None
        self.guard = ActionGuard()

    def fetch(self) -> List[ReportRequest]:
        if self.admin:
            return self.client.list_admin_requests(status=self.status_filter, course_id=self.course_id)
        return self.client.list_requests(status=self.status_filter, course_id=self.course_id)

    def apply(self, rows: List[ReportRequest]) -> None:
        self.rows = sort_by_date(rows)
        self.error = ""
        self.last_synced = datetime.now()

    def fail(self, error: Exception) -> None:
        self.error = str(error) or "Failed to load report requests."
        logger.error(f"Report request sync failed: {self.error}")

    def refresh(self) -> bool:
        """Reload rows; on failure keep the previous rows and record the message."""
        try:
            self.apply(self.fetch())
        except (ReportWorkflowError, httpx.HTTPError) as error:
            self.fail(error)
            return False
        return True

    def set_filter(self, status_filter: str) -> bool:
        self.status_filter = validate_status_filter(status_filter)
        return self.refresh()

    def find(self, request_id: str) -> Optional[ReportRequest]:
        return next((row for row in self.rows if row.id == request_id), None)

    def can_decide(self, request_id: str) -> bool:
        row = self.find(request_id)
        return row is not None and can_decide(row, self.guard.in_flight)

    def decide(self, request_id: str, decision: str) -> Optional[ReportRequest]:
        """Record a decision; the guard rejects a second click on the same row.

        Returns the request as the server left it, which is not the decision
        asked for when another approver got there first. None on failure.
        """
        self.error = ""
        with self.guard.track(request_id):
            try:
                updated = self.client.decide_request(request_id, decision)
            except (ReportWorkflowError, httpx.HTTPError) as error:
                self.error = str(error) or "Failed to update request status."
                logger.error(f"Decision on {request_id} failed: {self.error}")
                return None
        self.rows = merge_decision(self.rows, request_id, decision, updated)
        self.last_synced = datetime.now()
        row = self.find(request_id)
        if row is None:
            row = merge_decision([updated], request_id, decision, updated)[0]
        return row

    def summary(self) -> StatusSummary:
        return status_summary(self.rows)

    def watch(self, interval: float = POLL_INTERVAL) -> Poller:
        """Poller bound to this queue; call ``stop()`` when the view goes away."""
        return Poller(self.fetch, self.apply, interval=interval, on_error=self.fail)
