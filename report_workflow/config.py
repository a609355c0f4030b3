"""
Configuration constants for the report workflow.
EduLearn - statuses, sentinels, grade thresholds, endpoints and env names.
"""

import logging

# Request lifecycle
STATUS_PENDING = 'PENDING'
STATUS_APPROVED = 'APPROVED'
STATUS_REJECTED = 'REJECTED'
STATUS_VALUES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
TERMINAL_STATUSES = {STATUS_APPROVED, STATUS_REJECTED}
DECISIONS = (STATUS_APPROVED, STATUS_REJECTED)
FILTER_ALL = 'ALL'

# Roles allowed to move a request out of PENDING
APPROVER_ROLES = ('ADMIN', 'INSTRUCTOR')

# Sentinels used when a payload does not carry the field
UNKNOWN_LEARNER = 'Unknown Learner'
GENERAL_COURSE = 'General Course'
GENERAL_COURSE_ID = 'general-course'
DEFAULT_CLASS_LEVEL = 'Digital Learning Level 1'

# Grade thresholds (score >= threshold), highest first
GRADE_THRESHOLDS = (
    (85, 'A', 'Excellent'),
    (70, 'B', 'Very Good'),
    (55, 'C', 'Good'),
)
LOWEST_GRADE = 'D'
LOWEST_LEVEL = 'Needs Improvement'

# Drift applied around the base score when terms must be synthesized
TERM_SPREAD = 4

# Review screens re-poll the list endpoint on this interval (seconds)
POLL_INTERVAL = 12.0

# HTTP
DEFAULT_API_BASE_URL = 'https://backend-for-edulearn.onrender.com/api/v1'
TIMEOUT = 10
ROUTING_STATUSES = {404, 405}
JSON_CONTENT_TYPE = 'application/json'
DOWNLOAD_FILE_PREFIX = 'edulearn-report'

# Environment variables (preferred name first, legacy browser-build name second)
ENV_BASE_URL = ('EDULEARN_API_BASE_URL', 'VITE_API_BASE_URL')
ENV_TOKEN = 'EDULEARN_TOKEN'
ENV_SESSION_FILE = 'EDULEARN_SESSION_FILE'

# Session storage keys, in lookup order
TOKEN_KEYS = ('edulearn_token', 'token', 'accessToken')
USER_KEY = 'edulearn_user'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger('edulearn')


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT
    )
