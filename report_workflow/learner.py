"""
Learner report page: preview, request approval, download once approved.
"""

from typing import Any, Dict, List, Optional, Tuple

from .client import ReportClient
from .config import DEFAULT_CLASS_LEVEL, GENERAL_COURSE, GENERAL_COURSE_ID, logger
from .errors import ReportNotApprovedError
from .models import DownloadResult, LearnerReportSummary, ReportRequest
from .normalizer import get_string, to_record
from .polling import fetch_independently
from .summary import (
    build_feedback_comment,
    build_subject_rows,
    calculate_overall_average,
    get_performance_level,
    get_school_year_label,
)
from .workflow import can_download, can_request, now_iso


def derive_course_from_quizzes(quizzes: List[Dict[str, Any]]) -> Tuple[str, str, List[str]]:
    """(course_id, course_name, subjects) taken from the learner's quiz list."""
    subjects: List[str] = []
    for quiz in quizzes:
        lesson = to_record(quiz.get('lesson'))
        title = get_string(lesson.get('title')) or get_string(lesson.get('name')) or get_string(quiz.get('title'))
        if title and title not in subjects:
            subjects.append(title)

    lesson = to_record(quizzes[0].get('lesson')) if quizzes else {}
    course_id = get_string(lesson.get('_id')) or get_string(lesson.get('id')) or GENERAL_COURSE_ID
    course_name = get_string(lesson.get('title')) or get_string(lesson.get('name')) or GENERAL_COURSE
    return course_id, course_name, subjects


def get_class_level(user: Optional[Dict[str, Any]]) -> str:
    user = user or {}
    return get_string(user.get('classLevel')) or get_string(user.get('level')) or DEFAULT_CLASS_LEVEL


class LearnerReport:
    """State behind the learner's report card."""

    def __init__(self, client: ReportClient):
        self.client = client
        self.analytics: List[Any] = []
        self.quizzes: List[Dict[str, Any]] = []
        self.request: Optional[ReportRequest] = None
        self.user: Optional[Dict[str, Any]] = client.user

    def load(self) -> "LearnerReport":
        """Fetch everything at once; each failure only blanks its own section."""
        results = fetch_independently(
            {
                'analytics': self.client.quiz_analytics,
                'quizzes': self.client.list_quizzes,
                'request': self.client.get_learner_request,
                'profile': self.client.get_profile,
            },
            fallbacks={'analytics': [], 'quizzes': []},
        )
        self.analytics = results['analytics'] or []
        self.quizzes = results['quizzes'] or []
        self.request = results['request']
        self.user = results['profile'] or self.client.user
        return self

    @property
    def course(self) -> Tuple[str, str, List[str]]:
        return derive_course_from_quizzes(self.quizzes)

    @property
    def can_download(self) -> bool:
        return self.request is not None and can_download(self.request)

    @property
    def can_request(self) -> bool:
        return can_request(self.request)

    def report_id(self) -> str:
        if self.request is not None and self.request.id:
            return self.request.id
        user = self.user or {}
        user_id = get_string(user.get('_id')) or get_string(user.get('id')) or 'LEARNER'
        return f"TEMP-{user_id[-6:].upper()}"

    def summary(self, manual_comment: str = "") -> LearnerReportSummary:
        _, course_name, fallback_subjects = self.course
        subjects = build_subject_rows(self.analytics, fallback_subjects)
        overall = calculate_overall_average(subjects)
        level = get_performance_level(overall)
        request = self.request
        user = self.user or {}
        generated_at = None
        if request is not None:
            generated_at = request.updated_at or request.created_at

        return LearnerReportSummary(
            report_id=self.report_id(),
            student_name=get_string(user.get('name')) or (request.student_name if request else 'Learner'),
            course_name=course_name,
            class_level=get_class_level(self.user),
            school_year=get_school_year_label(),
            generated_at=generated_at or now_iso(),
            overall_average=overall,
            performance_level=level,
            feedback=manual_comment.strip() or build_feedback_comment(subjects, level),
            subjects=subjects,
            request=request,
        )

    def submit_request(self) -> ReportRequest:
        course_id, course_name, _ = self.course
        self.request = self.client.request_download(
            course_id=course_id,
            course_name=course_name,
            class_level=get_class_level(self.user),
        )
        logger.info(f"Download request submitted for {course_name}; awaiting approval")
        return self.request

    def download(self) -> DownloadResult:
        if not self.can_download:
            raise ReportNotApprovedError(self.request.status if self.request else 'not requested')
        course_id, _, _ = self.course
        return self.client.download_approved_report(request_id=self.request.id, course_id=course_id)
