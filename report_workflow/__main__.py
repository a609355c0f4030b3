#!/usr/bin/env python3
"""
Entry point for the report_workflow module.

Usage:
    python -m report_workflow login --token TOKEN --user-json '{"id": "u-1", "role": "learner"}'
    python -m report_workflow status
    python -m report_workflow request --course-id c1 --course-name Algebra
    python -m report_workflow list --status PENDING [--admin]
    python -m report_workflow approve REQUEST_ID
    python -m report_workflow reject REQUEST_ID
    python -m report_workflow download --output ./reports
    python -m report_workflow watch --interval 12
    python -m report_workflow card [--analytics analytics.yaml] [--comment "..."]
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import List, Optional

import httpx
import yaml

from .client import ReportClient
from .config import DECISIONS, POLL_INTERVAL, STATUS_VALUES, configure_logging
from .errors import ReportWorkflowError
from .learner import LearnerReport
from .normalizer import to_record
from .report import generate_report_card, generate_requests_table, print_summary
from .review import ReviewQueue
from .session import SessionStore
from .workflow import request_button_label


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    END = '\033[0m'


def log_pass(message):
    print(f"{Colors.GREEN}✅ {message}{Colors.END}")


def log_fail(message):
    print(f"{Colors.RED}❌ {message}{Colors.END}")


def log_info(message):
    print(f"{Colors.CYAN}ℹ️  {message}{Colors.END}")


def load_analytics(path: str):
    """Analytics file (YAML or JSON): a list, or a mapping with analytics/quizzes."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if isinstance(data, list):
        return data, []
    data = to_record(data)
    return data.get('analytics') or [], data.get('quizzes') or []


def cmd_login(args, session: SessionStore) -> int:
    session.set_token(args.token)
    if args.user_json:
        session.set_user(json.loads(args.user_json))
    log_pass(f"Session saved to {session.path}")
    return 0


def cmd_logout(args, session: SessionStore) -> int:
    session.clear()
    log_pass("Signed out")
    return 0


def cmd_status(args, client: ReportClient) -> int:
    report = LearnerReport(client)
    report.request = client.get_learner_request()
    if report.request is None:
        log_info("No report request yet")
    else:
        print_summary([report.request])
    print(f"\n   Request button: {request_button_label(report.request)}")
    print(f"   Download: {'available' if report.can_download else 'locked'}")
    return 0


def cmd_request(args, client: ReportClient) -> int:
    request = client.request_download(
        course_id=args.course_id,
        course_name=args.course_name,
        class_level=args.class_level,
        quiz_id=args.quiz_id,
        quiz_title=args.quiz_title,
    )
    log_pass(f"Download request {request.id or '(unsaved)'} is {request.status}. Awaiting approval.")
    return 0


def cmd_list(args, client: ReportClient) -> int:
    queue = ReviewQueue(client, status_filter=args.status, admin=args.admin, course_id=args.course_id)
    if not queue.refresh():
        log_fail(queue.error)
        return 1
    if args.markdown:
        print(generate_requests_table(queue.rows))
    else:
        print_summary(queue.rows)
    return 0


def cmd_decide(args, client: ReportClient) -> int:
    queue = ReviewQueue(client, admin=args.admin)
    updated = queue.decide(args.request_id, args.decision)
    if updated is None:
        log_fail(queue.error)
        return 1
    decided_by = updated.approved_by_name or updated.approved_by or "unknown approver"
    if updated.status != args.decision:
        log_fail(f"Request {args.request_id} was already {updated.status} by {decided_by}")
        return 1
    log_pass(f"Request {args.request_id} marked {updated.status} by {decided_by}")
    return 0


def cmd_download(args, client: ReportClient) -> int:
    result = client.download_approved_report(
        request_id=args.request_id,
        course_id=args.course_id,
        quiz_id=args.quiz_id,
    )
    if result.type == 'url':
        log_pass(f"Report available at {result.url}")
        return 0
    target = result.save(Path(args.output))
    log_pass(f"Report downloaded to {target}")
    return 0


def cmd_watch(args, client: ReportClient) -> int:
    queue = ReviewQueue(client, status_filter=args.status, admin=args.admin)

    def show(rows):
        queue.apply(rows)
        print(f"\n{Colors.BLUE}▶ Synced at {queue.last_synced:%H:%M:%S}{Colors.END}")
        print_summary(queue.rows)

    poller = queue.watch(interval=args.interval)
    poller.apply = show
    log_info(f"Auto sync every {args.interval:g}s (Ctrl+C to stop)")
    try:
        with poller:
            while poller.running:
                time.sleep(0.5)
    except KeyboardInterrupt:
        poller.stop()
    return 0


def cmd_card(args, client: ReportClient) -> int:
    report = LearnerReport(client)
    if args.analytics:
        report.analytics, report.quizzes = load_analytics(args.analytics)
    else:
        report.load()
    print(generate_report_card(report.summary(manual_comment=args.comment or "")))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='EduLearn report requests')
    parser.add_argument('--env-file', type=str, help='Path to a .env file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    sub = parser.add_subparsers(dest='command', required=True)

    login = sub.add_parser('login', help='Store a bearer token')
    login.add_argument('--token', required=True)
    login.add_argument('--user-json', help='Signed-in user as JSON')

    sub.add_parser('logout', help='Forget the stored session')
    sub.add_parser('status', help="Show the learner's own request")

    request = sub.add_parser('request', help='Ask for report download approval')
    request.add_argument('--course-id')
    request.add_argument('--course-name')
    request.add_argument('--class-level')
    request.add_argument('--quiz-id')
    request.add_argument('--quiz-title')

    status_choices = ['ALL', *STATUS_VALUES]
    listing = sub.add_parser('list', help='List report requests')
    listing.add_argument('--status', default='ALL', type=str.upper, choices=status_choices)
    listing.add_argument('--course-id')
    listing.add_argument('--admin', action='store_true', help='Use admin-scoped routes first')
    listing.add_argument('--markdown', action='store_true', help='Print a markdown table')

    for name, decision in zip(('approve', 'reject'), DECISIONS):
        decide = sub.add_parser(name, help=f'Mark a request {decision}')
        decide.add_argument('request_id')
        decide.add_argument('--admin', action='store_true')
        decide.set_defaults(decision=decision)

    download = sub.add_parser('download', help='Download an approved report')
    download.add_argument('--request-id')
    download.add_argument('--course-id')
    download.add_argument('--quiz-id')
    download.add_argument('--output', default='.', help='Directory for the PDF')

    watch = sub.add_parser('watch', help='Poll the request list')
    watch.add_argument('--interval', type=float, default=POLL_INTERVAL)
    watch.add_argument('--status', default='ALL', type=str.upper, choices=status_choices)
    watch.add_argument('--admin', action='store_true')

    card = sub.add_parser('card', help='Print the report card')
    card.add_argument('--analytics', help='YAML/JSON analytics file (skips the API)')
    card.add_argument('--comment', help='Instructor comment replacing the generated feedback')

    return parser


COMMANDS = {
    'status': cmd_status,
    'request': cmd_request,
    'list': cmd_list,
    'approve': cmd_decide,
    'reject': cmd_decide,
    'download': cmd_download,
    'watch': cmd_watch,
    'card': cmd_card,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    session = SessionStore()

    if args.command == 'login':
        return cmd_login(args, session)
    if args.command == 'logout':
        return cmd_logout(args, session)

    try:
        with ReportClient.from_env(env_path=args.env_file, session=session) as client:
            return COMMANDS[args.command](args, client)
    except ReportWorkflowError as error:
        log_fail(str(error))
        return 1
    except httpx.HTTPError as error:
        log_fail(f"Network error: {error}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
