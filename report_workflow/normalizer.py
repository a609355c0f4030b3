"""
Schema-tolerant normalization of report-request payloads.

Whatever the backend returns, callers get a fully populated ReportRequest:
unresolved strings fall back to sentinels, unknown statuses to PENDING and
unknown approver roles to None. Nothing here does I/O, mutates its input
or raises on bad data.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from . import fields
from .config import (
    APPROVER_ROLES,
    GENERAL_COURSE,
    STATUS_PENDING,
    STATUS_VALUES,
    UNKNOWN_LEARNER,
)
from .models import ReportRequest


def to_record(value: Any) -> Dict[str, Any]:
    """Treat anything that is not a mapping as an empty one."""
    return value if isinstance(value, dict) else {}


def get_string(value: Any) -> Optional[str]:
    """Trimmed non-empty text, or the decimal text of a finite number."""
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return None


def get_number(value: Any) -> Optional[float]:
    """Finite number from a number or numeric text."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def value_at(payload: Any, path: str) -> Any:
    """Raw value at a dotted path; ``a|b`` steps take the first non-null alternate."""
    current = payload
    if not path:
        return current
    for step in path.split('.'):
        record = to_record(current)
        current = None
        for key in step.split('|'):
            if record.get(key) is not None:
                current = record[key]
                break
    return current


def pick_string(record: Dict[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = get_string(record.get(key))
        if value:
            return value
    return None


def build_name(record: Dict[str, Any]) -> Optional[str]:
    """Display name of a nested person object."""
    direct = pick_string(record, fields.PERSON_NAME_KEYS)
    if direct:
        return direct
    first = pick_string(record, fields.FIRST_NAME_KEYS) or ''
    last = pick_string(record, fields.LAST_NAME_KEYS) or ''
    return f"{first} {last}".strip() or None


def resolve_field(record: Dict[str, Any], rules: Iterable[fields.FieldRule]) -> Optional[str]:
    """Walk a rule table; the first rule producing text wins."""
    for rule in rules:
        source = to_record(value_at(record, rule.path))
        if rule.compose_name:
            value = build_name(source)
        else:
            value = pick_string(source, rule.keys)
        if value:
            return value
    return None


def first_raw(record: Dict[str, Any], rules: Iterable[fields.FieldRule]) -> Any:
    """First non-null raw value across a rule table."""
    for rule in rules:
        source = to_record(value_at(record, rule.path))
        for key in rule.keys:
            if source.get(key) is not None:
                return source[key]
    return None


def normalize_request_status(value: Any) -> str:
    normalized = (get_string(value) or '').upper()
    return normalized if normalized in STATUS_VALUES else STATUS_PENDING


def normalize_approver_role(value: Any) -> Optional[str]:
    normalized = (get_string(value) or '').upper()
    return normalized if normalized in APPROVER_ROLES else None


def normalize_report_request(value: Any) -> ReportRequest:
    """Coerce any payload shape into a canonical ReportRequest."""
    if isinstance(value, ReportRequest):
        value = value.to_dict()
    record = to_record(value)

    student_id = resolve_field(record, fields.STUDENT_ID) or ''
    course_id = resolve_field(record, fields.COURSE_ID) or ''

    return ReportRequest(
        id=resolve_field(record, fields.REQUEST_ID) or '',
        student_id=student_id,
        student_name=resolve_field(record, fields.STUDENT_NAME) or student_id or UNKNOWN_LEARNER,
        course_id=course_id,
        course_name=resolve_field(record, fields.COURSE_NAME) or course_id or GENERAL_COURSE,
        status=normalize_request_status(first_raw(record, fields.STATUS)),
        approved_by=resolve_field(record, fields.APPROVED_BY),
        approved_by_name=resolve_field(record, fields.APPROVED_BY_NAME),
        approved_by_role=normalize_approver_role(first_raw(record, fields.APPROVED_BY_ROLE)),
        created_at=resolve_field(record, fields.CREATED_AT),
        updated_at=resolve_field(record, fields.UPDATED_AT),
    )


def has_identity(item: ReportRequest) -> bool:
    return bool(item.id or item.student_id or item.student_name != UNKNOWN_LEARNER)


def normalize_request_collection(raw: Any) -> List[ReportRequest]:
    """Normalize a list payload, dropping placeholder rows with no identity."""
    if not isinstance(raw, (list, tuple)):
        return []
    normalized = (normalize_report_request(item) for item in raw)
    return [item for item in normalized if has_identity(item)]


# ============================================
# Response envelopes
# ============================================

def pick_request_like(payload: Any) -> Any:
    """The object inside a ``{data: {request: ...}}``-style envelope, else the payload."""
    for path in fields.REQUEST_ENVELOPE_PATHS:
        candidate = value_at(payload, path)
        if isinstance(candidate, (dict, list)) or candidate:
            return candidate
    return payload


def extract_request_list(payload: Any) -> List[ReportRequest]:
    candidates = [value_at(payload, path) for path in fields.LIST_ENVELOPE_PATHS]
    candidates.append(payload)
    for candidate in candidates:
        normalized = normalize_request_collection(candidate)
        if normalized:
            return normalized
    return []


def most_recent(items: List[ReportRequest]) -> Optional[ReportRequest]:
    """Latest by updated/created timestamp; earlier entries win ties."""
    if not items:
        return None
    return max(items, key=lambda item: item.sort_key)


def extract_single_request(payload: Any) -> Optional[ReportRequest]:
    from_list = most_recent(extract_request_list(payload))
    if from_list:
        return from_list
    request_like = normalize_report_request(pick_request_like(payload))
    return request_like if request_like.is_identifiable else None


def extract_download_url(payload: Any) -> Optional[str]:
    for path in fields.DOWNLOAD_URL_PATHS:
        candidate = value_at(payload, path)
        if isinstance(candidate, str) and candidate:
            return candidate
    return None
