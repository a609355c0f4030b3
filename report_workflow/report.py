"""
Report rendering for the report workflow.
Console and markdown output.
"""

from typing import List

from .models import LearnerReportSummary, ReportRequest
from .summary import format_report_date
from .workflow import status_summary

STATUS_ICONS = {
    'PENDING': '🟡',
    'APPROVED': '🟢',
    'REJECTED': '🔴',
}


def generate_requests_table(rows: List[ReportRequest]) -> str:
    """Markdown table of report requests."""
    summary = status_summary(rows)
    lines = [
        "# Report Download Requests",
        "",
        f"**Pending:** {summary.pending} · **Approved:** {summary.approved} · **Rejected:** {summary.rejected}",
        "",
    ]

    if not rows:
        lines.append("_No report requests yet._")
        return '\n'.join(lines)

    lines.append("| Id | Learner | Course | Status | Decided By | Updated |")
    lines.append("|----|---------|--------|--------|------------|---------|")
    for row in rows:
        decided_by = row.approved_by_name or '-'
        if row.approved_by_role:
            decided_by = f"{decided_by} ({row.approved_by_role})"
        lines.append(
            f"| `{row.id or '-'}` | {row.student_name} | {row.course_name} | {row.status} "
            f"| {decided_by} | {format_report_date(row.updated_at or row.created_at)} |"
        )
    lines.append("")
    return '\n'.join(lines)


def generate_report_card(summary: LearnerReportSummary) -> str:
    """Markdown report card, identical for learner and approver."""
    request = summary.request
    lines = [
        "# Student Academic Report",
        "",
        f"- **Report ID:** {summary.report_id}",
        f"- **Learner:** {summary.student_name}",
        f"- **Course:** {summary.course_name}",
        f"- **Class Level:** {summary.class_level}",
        f"- **School Year:** {summary.school_year}",
        f"- **Generated:** {format_report_date(summary.generated_at)}",
        f"- **Status:** {request.status if request else 'NOT REQUESTED'}",
        "",
        "| Subject | 1st Term | 2nd Term | 3rd Term | Total | Grade |",
        "|---------|----------|----------|----------|-------|-------|",
    ]
    for row in summary.subjects:
        lines.append(
            f"| {row.subject} | {row.first_term} | {row.second_term} | {row.third_term} "
            f"| {row.total} | {row.grade} |"
        )
    lines.extend([
        "",
        f"**Overall Average:** {summary.overall_average}% ({summary.performance_level})",
        "",
        f"> {summary.feedback}",
        "",
        f"- **Approved By:** {(request.approved_by_name if request else None) or 'Pending approval'}",
        f"- **Role:** {(request.approved_by_role if request else None) or 'N/A'}",
        f"- **Approval Date:** {format_report_date(request.updated_at if request else None)}",
        "",
    ])
    return '\n'.join(lines)


def print_summary(rows: List[ReportRequest]) -> None:
    """Print requests to console."""
    if not rows:
        print("\n📭 No report requests.")
        return

    print(f"\n📋 {len(rows)} report requests:\n")
    for row in rows:
        icon = STATUS_ICONS.get(row.status, '🔵')
        print(f"  {icon} [{row.status}] {row.id or '(unsaved)'} - {row.student_name} / {row.course_name}")
        if row.approved_by_name:
            print(f"     decided by {row.approved_by_name} ({row.approved_by_role or 'N/A'})")

    summary = status_summary(rows)
    print(f"\n📊 Summary: {summary.pending} pending, {summary.approved} approved, {summary.rejected} rejected")
