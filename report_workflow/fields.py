"""
Field resolution rules for report-request payloads.

Backends in the wild name the same thing in many ways (``studentId``,
``student.id``, ``learner_id``...). Each canonical field gets an ordered
tuple of rules; the first rule that yields a value wins.

A rule's ``path`` walks nested objects: steps are separated by ``.`` and a
step may list alternates with ``|`` (the first non-null alternate is used).
An empty path means the payload root.
"""

from typing import NamedTuple, Tuple


class FieldRule(NamedTuple):
    path: str
    keys: Tuple[str, ...] = ()
    compose_name: bool = False


# Key groups
ID_KEYS = ('id', '_id')
STUDENT_ID_KEYS = ('id', '_id', 'studentId', 'student_id')
LEARNER_ID_KEYS = ('id', '_id', 'learnerId', 'learner_id')
COURSE_ID_KEYS = ('id', '_id', 'courseId', 'course_id')
LESSON_ID_KEYS = ('id', '_id', 'lessonId', 'lesson_id')
COURSE_NAME_KEYS = ('name', 'title', 'courseName', 'course_name')
LESSON_NAME_KEYS = ('name', 'title', 'lessonTitle', 'lesson_title')
QUIZ_TITLE_KEYS = ('title', 'quizTitle', 'quiz_title')

PERSON_NAME_KEYS = ('name', 'fullName', 'full_name', 'displayName', 'display_name')
FIRST_NAME_KEYS = ('firstName', 'first_name')
LAST_NAME_KEYS = ('lastName', 'last_name')

# Nested person objects probed for the owner, in order
PERSON_PATHS = (
    'student',
    'learner',
    'studentId|student_id',
    'learnerId|learner_id',
    'user',
    'requestedBy|requested_by',
    'createdBy|created_by',
)


REQUEST_ID = (
    FieldRule('', ('id', '_id', 'requestId', 'request_id')),
)

STUDENT_ID = (
    FieldRule('', ('studentId', 'student_id', 'learnerId', 'learner_id')),
    FieldRule('student', STUDENT_ID_KEYS),
    FieldRule('learner', LEARNER_ID_KEYS),
    FieldRule('studentId|student_id', STUDENT_ID_KEYS),
    FieldRule('learnerId|learner_id', LEARNER_ID_KEYS),
    FieldRule('user', ID_KEYS),
    FieldRule('requestedBy|requested_by', ID_KEYS),
    FieldRule('createdBy|created_by', ID_KEYS),
)

STUDENT_NAME = (
    FieldRule('', ('studentName', 'student_name', 'learnerName', 'learner_name')),
) + tuple(FieldRule(path, compose_name=True) for path in PERSON_PATHS)

COURSE_ID = (
    FieldRule('', ('courseId', 'course_id')),
    FieldRule('course', COURSE_ID_KEYS),
    FieldRule('courseId|course_id', COURSE_ID_KEYS),
    FieldRule('', ('lessonId', 'lesson_id')),
    FieldRule('lesson', LESSON_ID_KEYS),
    FieldRule('lessonId|lesson_id', LESSON_ID_KEYS),
    FieldRule('quiz.lesson', LESSON_ID_KEYS),
    FieldRule('quiz.course', COURSE_ID_KEYS),
)

COURSE_NAME = (
    FieldRule('', ('courseName', 'course_name')),
    FieldRule('course', COURSE_NAME_KEYS),
    FieldRule('courseId|course_id', COURSE_NAME_KEYS),
    FieldRule('', ('lessonTitle', 'lesson_title')),
    FieldRule('lesson', LESSON_NAME_KEYS),
    FieldRule('lessonId|lesson_id', LESSON_NAME_KEYS),
    FieldRule('quiz.lesson', LESSON_NAME_KEYS),
    FieldRule('quiz.course', COURSE_NAME_KEYS),
    FieldRule('quiz', QUIZ_TITLE_KEYS),
)

APPROVED_BY = (
    FieldRule('', ('approvedBy', 'approved_by', 'actionBy', 'action_by')),
    FieldRule('approver', ID_KEYS),
)

APPROVED_BY_NAME = (
    FieldRule('', (
        'approvedByName', 'approved_by_name',
        'actionByName', 'action_by_name',
        'reviewedByName', 'reviewed_by_name',
    )),
    FieldRule('approver', ('name', 'fullName', 'full_name')),
)

# Raw values; the first non-null one is normalized (no fall-through on junk)
APPROVED_BY_ROLE = (
    FieldRule('', (
        'approvedByRole', 'approved_by_role',
        'actionByRole', 'action_by_role',
        'reviewedByRole', 'reviewed_by_role',
    )),
    FieldRule('approver', ('role',)),
)

CREATED_AT = (
    FieldRule('', ('createdAt', 'created_at', 'requestedAt', 'requested_at')),
)

UPDATED_AT = (
    FieldRule('', ('updatedAt', 'updated_at', 'reviewedAt', 'reviewed_at')),
)

STATUS = (
    FieldRule('', ('status',)),
)


# Response envelopes
REQUEST_ENVELOPE_PATHS = (
    'data.request',
    'data.reportRequest',
    'data.report',
    'request',
    'reportRequest',
    'report',
)

LIST_ENVELOPE_PATHS = (
    'data.reports',
    'data.requests',
    'data.reportRequests',
    'data.items',
    'reports',
    'requests',
    'reportRequests',
    'items',
)

DOWNLOAD_URL_PATHS = (
    'data.url',
    'data.downloadUrl',
    'data.reportUrl',
    'data.fileUrl',
    'url',
)
