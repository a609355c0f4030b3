"""
Data models for the report workflow.
Pure dataclasses - no workflow logic.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import (
    APPROVER_ROLES,
    GENERAL_COURSE,
    STATUS_PENDING,
    TERMINAL_STATUSES,
    UNKNOWN_LEARNER,
)


def parse_timestamp(value: Optional[str]) -> float:
    """ISO-8601 text to epoch seconds; missing or unreadable values sort as 0."""
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


@dataclass
class ReportRequest:
    """A learner's ask to download a formatted academic report."""
    id: str = ""
    student_id: str = ""
    student_name: str = UNKNOWN_LEARNER
    course_id: str = ""
    course_name: str = GENERAL_COURSE
    status: str = STATUS_PENDING  # PENDING, APPROVED, REJECTED
    approved_by: Optional[str] = None
    approved_by_name: Optional[str] = None
    approved_by_role: Optional[str] = None  # ADMIN, INSTRUCTOR or None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_identifiable(self) -> bool:
        return bool(self.id or self.student_id)

    @property
    def is_final(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def sort_key(self) -> float:
        return parse_timestamp(self.updated_at or self.created_at)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape (camelCase keys)."""
        return {
            'id': self.id,
            'studentId': self.student_id,
            'studentName': self.student_name,
            'courseId': self.course_id,
            'courseName': self.course_name,
            'status': self.status,
            'approvedBy': self.approved_by,
            'approvedByName': self.approved_by_name,
            'approvedByRole': self.approved_by_role,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }


@dataclass
class ReportSubjectRow:
    """One derived line of a report card."""
    subject: str
    first_term: int
    second_term: int
    third_term: int
    total: int
    grade: str


@dataclass
class Actor:
    """Whoever is performing an action (approver or learner)."""
    id: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_user(cls, user: Optional[Dict[str, Any]]) -> "Actor":
        """Build from a stored user record ({_id|id, name, email, role})."""
        if not user:
            return cls()
        role = str(user.get('role') or '').strip().upper()
        user_id = user.get('_id') or user.get('id')
        return cls(
            id=str(user_id) if user_id else None,
            name=user.get('name') or user.get('email'),
            role=role if role in APPROVER_ROLES else None,
        )


@dataclass
class DownloadResult:
    """Rendered report: either file bytes or a URL to fetch it from."""
    type: str  # blob, url
    file_name: str
    blob: Optional[bytes] = None
    url: Optional[str] = None

    def save(self, directory: Path) -> Path:
        """Write a blob result under ``directory`` and return the file path."""
        if self.type != 'blob' or self.blob is None:
            raise ValueError("Only blob results can be saved; open the URL instead.")
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / Path(self.file_name).name
        target.write_bytes(self.blob)
        return target


@dataclass
class StatusSummary:
    """Request counts per lifecycle state."""
    pending: int = 0
    approved: int = 0
    rejected: int = 0


@dataclass
class LearnerReportSummary:
    """Everything a learner sees on the report card page."""
    report_id: str
    student_name: str
    course_name: str
    class_level: str
    school_year: str
    generated_at: str
    overall_average: int
    performance_level: str
    feedback: str
    subjects: List[ReportSubjectRow] = field(default_factory=list)
    request: Optional[ReportRequest] = None
