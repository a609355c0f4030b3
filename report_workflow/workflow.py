"""
Report request lifecycle.

    PENDING --approve--> APPROVED   (terminal)
    PENDING --reject---> REJECTED   (terminal)

Only a PENDING request can be decided; deciding a final request returns it
unchanged, so the first decision wins. A rejected learner starts over with
a brand-new PENDING request rather than reviving the rejected one.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Union

from .config import (
    DECISIONS,
    FILTER_ALL,
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    STATUS_VALUES,
)
from .errors import ActionInProgressError, InvalidTransitionError
from .models import Actor, ReportRequest, StatusSummary
from .normalizer import normalize_approver_role


def now_iso() -> str:
    """Current UTC time as ``2026-02-12T00:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def validate_decision(decision: str) -> str:
    normalized = str(decision or '').strip().upper()
    if normalized not in DECISIONS:
        raise ValueError(f"Decision must be APPROVED or REJECTED, got {decision!r}.")
    return normalized


def validate_status_filter(status: Optional[str]) -> str:
    normalized = str(status or FILTER_ALL).strip().upper()
    if normalized != FILTER_ALL and normalized not in STATUS_VALUES:
        raise ValueError(f"Unknown status filter {status!r}.")
    return normalized


def filter_requests(
    items: Iterable[ReportRequest],
    status: Optional[str] = None,
    course_id: Optional[str] = None,
) -> List[ReportRequest]:
    """Authoritative client-side filter, whatever the server claims to have done."""
    status_filter = validate_status_filter(status)
    return [
        item for item in items
        if (status_filter == FILTER_ALL or item.status == status_filter)
        and (not course_id or item.course_id == course_id)
    ]


# ============================================
# Gates
# ============================================

def can_download(subject: Union[ReportRequest, str, None]) -> bool:
    """Learners may download only an APPROVED report."""
    if isinstance(subject, ReportRequest):
        return subject.is_identifiable and subject.status == STATUS_APPROVED
    return subject == STATUS_APPROVED


def can_request(request: Optional[ReportRequest]) -> bool:
    """A new request is allowed when none exists or the last one was rejected."""
    if request is None or not request.is_identifiable:
        return True
    return request.status == STATUS_REJECTED


def can_decide(request: ReportRequest, in_flight_id: Optional[str] = None) -> bool:
    return (
        request.status == STATUS_PENDING
        and bool(request.id)
        and request.id != in_flight_id
    )


def request_button_label(request: Optional[ReportRequest], requesting: bool = False) -> str:
    if requesting:
        return 'Submitting...'
    if request is not None and request.status == STATUS_REJECTED:
        return 'Request Download Again'
    if request is not None and request.is_identifiable:
        return 'Request Submitted'
    return 'Request Download'


# ============================================
# Transitions
# ============================================

def apply_decision(
    request: ReportRequest,
    actor: Actor,
    decision: str,
    timestamp: Optional[str] = None,
) -> ReportRequest:
    """Move a PENDING request to APPROVED/REJECTED; final requests come back unchanged.

    Only an ADMIN or INSTRUCTOR may decide, so a decided request always
    names its approver.
    """
    decision = validate_decision(decision)
    role = normalize_approver_role(actor.role)
    if role is None:
        raise InvalidTransitionError(
            f"Only an admin or instructor can mark a request {decision} (role is {actor.role or 'unknown'})."
        )
    if request.status != STATUS_PENDING:
        return request
    return replace(
        request,
        status=decision,
        approved_by=actor.id,
        approved_by_name=actor.name,
        approved_by_role=role,
        updated_at=timestamp or now_iso(),
    )


def fresh_request(previous: ReportRequest, timestamp: Optional[str] = None) -> ReportRequest:
    """New PENDING request for the same learner and course after a rejection."""
    if previous.status != STATUS_REJECTED:
        raise InvalidTransitionError(
            f"Only a rejected request can be requested again (status is {previous.status})."
        )
    stamp = timestamp or now_iso()
    return ReportRequest(
        student_id=previous.student_id,
        student_name=previous.student_name,
        course_id=previous.course_id,
        course_name=previous.course_name,
        created_at=stamp,
        updated_at=stamp,
    )


def sort_by_date(rows: Iterable[ReportRequest]) -> List[ReportRequest]:
    """Most recently touched first."""
    return sorted(rows, key=lambda row: row.sort_key, reverse=True)


def merge_decision(
    rows: Iterable[ReportRequest],
    request_id: str,
    decision: str,
    updated: ReportRequest,
    now: Optional[str] = None,
) -> List[ReportRequest]:
    """Fold a decide response into locally held rows."""
    decision = validate_decision(decision)
    stamp = now or now_iso()
    merged = []
    for row in rows:
        if row.id != request_id or row.is_final:
            merged.append(row)
            continue
        merged.append(replace(
            row,
            status=decision if updated.status == STATUS_PENDING else updated.status,
            approved_by=updated.approved_by or row.approved_by,
            approved_by_name=updated.approved_by_name or row.approved_by_name,
            approved_by_role=updated.approved_by_role or row.approved_by_role,
            updated_at=updated.updated_at or stamp,
            created_at=updated.created_at or row.created_at,
        ))
    return sort_by_date(merged)


def status_summary(rows: Iterable[ReportRequest]) -> StatusSummary:
    summary = StatusSummary()
    for row in rows:
        if row.status == STATUS_PENDING:
            summary.pending += 1
        elif row.status == STATUS_APPROVED:
            summary.approved += 1
        elif row.status == STATUS_REJECTED:
            summary.rejected += 1
    return summary


class ActionGuard:
    """Single in-flight action marker, so one control cannot be submitted twice."""

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Optional[str] = None

    @property
    def in_flight(self) -> Optional[str]:
        return self._in_flight

    def is_busy(self, action_id: str) -> bool:
        return self._in_flight == action_id

    @contextmanager
    def track(self, action_id: str) -> Iterator[None]:
        with self._lock:
            if self._in_flight == action_id:
                raise ActionInProgressError(action_id)
            self._in_flight = action_id
        try:
            yield
        finally:
            with self._lock:
                if self._in_flight == action_id:
                    self._in_flight = None
