"""
EduLearn report workflow - learner report-card requests and approvals.

Covers:
- Schema-tolerant normalization of report-request payloads
- REST client with candidate-endpoint probing
- PENDING -> APPROVED / REJECTED lifecycle and the download gate
- Academic summary (subject rows, grades, feedback)
- Polling review queue for admins and instructors

Usage:
    python -m report_workflow [status|request|list|approve|reject|download|watch|card]
"""

from .client import ReportClient
from .errors import (
    ActionInProgressError,
    ApiError,
    InvalidTransitionError,
    MissingReportFileError,
    NotAuthenticatedError,
    ReportNotApprovedError,
    ReportWorkflowError,
    ResponseShapeError,
)
from .learner import LearnerReport
from .models import Actor, DownloadResult, LearnerReportSummary, ReportRequest, ReportSubjectRow
from .normalizer import normalize_report_request, normalize_request_collection
from .review import ReviewQueue
from .summary import (
    build_feedback_comment,
    build_subject_rows,
    calculate_overall_average,
    get_grade_from_score,
    get_performance_level,
)
from .workflow import apply_decision, can_download, can_request

__all__ = [
    'ActionInProgressError',
    'Actor',
    'ApiError',
    'DownloadResult',
    'InvalidTransitionError',
    'LearnerReport',
    'LearnerReportSummary',
    'MissingReportFileError',
    'NotAuthenticatedError',
    'ReportClient',
    'ReportNotApprovedError',
    'ReportRequest',
    'ReportSubjectRow',
    'ReportWorkflowError',
    'ResponseShapeError',
    'ReviewQueue',
    'apply_decision',
    'build_feedback_comment',
    'build_subject_rows',
    'calculate_overall_average',
    'can_download',
    'can_request',
    'get_grade_from_score',
    'get_performance_level',
    'normalize_report_request',
    'normalize_request_collection',
]
