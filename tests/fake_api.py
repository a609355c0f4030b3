"""
In-memory EduLearn backend served through httpx.MockTransport.

Behaves like a deployment of the report API:
- Bearer tokens map to users; unknown tokens get 401
- Routes can be disabled to force candidate probing (disabled -> 404)
- Routes can be forced to fail with a given status
- Decisions only move PENDING requests; final requests come back unchanged

Every handled call is recorded in ``calls`` as (method, path).
"""

import json
import re
from datetime import datetime, timedelta, timezone

import httpx

API_PREFIX = "/api/v1"
BASE_URL = f"http://testserver{API_PREFIX}"

PDF_BYTES = b"%PDF-1.4\n% fake report card\n"
DOWNLOAD_URL = "https://files.example.test/reports/report-card.pdf"

# (route key, method, pattern, handler name)
ROUTES = (
    ('PATCH /reports', 'PATCH', r'/reports', 'create'),
    ('POST /reports/request-download', 'POST', r'/reports/request-download', 'create'),
    ('GET /reports/request-download', 'GET', r'/reports/request-download', 'own'),
    ('GET /reports', 'GET', r'/reports', 'list'),
    ('GET /admin/reports', 'GET', r'/admin/reports', 'list'),
    ('PATCH /admin/reports/{id}/{action}', 'PATCH',
     r'/admin/reports/(?P<id>[^/]+)/(?P<action>approve|reject)', 'decide'),
    ('PATCH /reports/{id}/decision', 'PATCH', r'/reports/(?P<id>[^/]+)/decision', 'decide'),
    ('GET /reports/download', 'GET', r'/reports/download', 'download'),
    ('GET /auth/me', 'GET', r'/auth/me', 'me'),
    ('GET /quizzes', 'GET', r'/quizzes', 'quizzes'),
    ('GET /quizzes/analytics', 'GET', r'/quizzes/analytics', 'analytics'),
)

START = datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)


def json_response(status, body):
    return httpx.Response(status, json=body)


class FakeBackend:
    """Report API state plus the MockTransport handler."""

    def __init__(self, disabled=(), download_mode='blob', decide_shape='request', ignore_filters=False):
        self.users = {}
        self.records = []
        self.calls = []
        self.disabled = set(disabled)
        self.fail = {}
        self.download_mode = download_mode  # blob, url, json
        self.decide_shape = decide_shape  # request, empty
        self.ignore_filters = ignore_filters
        self.quizzes = []
        self.analytics = []
        self._tick = 0
        self._next_id = 1

    # ============================================
    # Setup helpers
    # ============================================

    def add_user(self, token, user):
        self.users[token] = user

    def stamp(self):
        self._tick += 1
        moment = START + timedelta(minutes=self._tick)
        return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    def add_request(self, student, course_id='course-1', course_name='Algebra', status='PENDING'):
        stamp = self.stamp()
        record = {
            '_id': f"req-{self._next_id:03d}",
            'student': {'_id': student['_id'], 'name': student['name']},
            'course': {'_id': course_id, 'title': course_name},
            'status': status,
            'approvedBy': None,
            'approvedByName': None,
            'approvedByRole': None,
            'createdAt': stamp,
            'updatedAt': stamp,
        }
        self._next_id += 1
        self.records.append(record)
        return record

    def find(self, request_id):
        return next((record for record in self.records if record['_id'] == request_id), None)

    def latest_for(self, student_id):
        owned = [record for record in self.records if record['student']['_id'] == student_id]
        return owned[-1] if owned else None

    def transport(self):
        return httpx.MockTransport(self.handle)

    # ============================================
    # Dispatch
    # ============================================

    def handle(self, request):
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        self.calls.append((request.method, path))

        auth = request.headers.get('authorization', '')
        user = self.users.get(auth.replace('Bearer ', '', 1))
        if user is None:
            return json_response(401, {'message': 'Unauthorized'})

        for key, method, pattern, handler in ROUTES:
            match = re.fullmatch(pattern, path)
            if method != request.method or match is None or key in self.disabled:
                continue
            if key in self.fail:
                return json_response(self.fail[key], {'message': f"{key} is unavailable"})
            return getattr(self, f"on_{handler}")(request, user, **match.groupdict())

        return json_response(404, {'message': 'Route not found'})

    # ============================================
    # Handlers
    # ============================================

    def on_create(self, request, user):
        body = json.loads(request.content or b'{}')
        existing = self.latest_for(user['_id'])
        if existing is not None and existing['status'] != 'REJECTED':
            return json_response(200, {'success': True, 'data': {'request': existing}})
        record = self.add_request(
            user,
            course_id=body.get('courseId', 'general-course'),
            course_name=body.get('courseName', 'General Course'),
        )
        return json_response(201, {'success': True, 'data': {'request': record}})

    def on_own(self, request, user):
        record = self.latest_for(user['_id'])
        if record is None:
            return json_response(404, {'message': 'No report request found'})
        return json_response(200, {'data': {'request': record}})

    def on_list(self, request, user):
        status = request.url.params.get('status')
        records = self.records
        if status and not self.ignore_filters:
            records = [record for record in records if record['status'] == status]
        return json_response(200, {'data': {'reports': records}})

    def on_decide(self, request, user, id, action=None):
        if str(user.get('role', '')).upper() not in ('ADMIN', 'INSTRUCTOR'):
            return json_response(403, {'message': 'Forbidden'})
        record = self.find(id)
        if record is None:
            return json_response(404, {'message': 'Report request not found'})

        if action:
            decision = 'APPROVED' if action == 'approve' else 'REJECTED'
        else:
            decision = json.loads(request.content or b'{}').get('status')

        if record['status'] == 'PENDING':
            record.update({
                'status': decision,
                'approvedBy': user['_id'],
                'approvedByName': user['name'],
                'approvedByRole': user['role'].upper(),
                'updatedAt': self.stamp(),
            })

        if self.decide_shape == 'empty':
            return json_response(200, {'success': True})
        return json_response(200, {'success': True, 'data': {'request': record}})

    def on_download(self, request, user):
        record = self.latest_for(user['_id'])
        if record is None:
            return json_response(404, {'message': 'No report request found'})

        if self.download_mode == 'json':
            return json_response(200, {'data': {'request': record}})

        if record['status'] != 'APPROVED':
            return json_response(403, {
                'message': f"Report is {record['status']}. Approval is required before download."
            })

        if self.download_mode == 'url':
            return json_response(200, {'data': {'downloadUrl': DOWNLOAD_URL}})

        return httpx.Response(
            200,
            content=PDF_BYTES,
            headers={
                'content-type': 'application/pdf',
                'content-disposition': "attachment; filename*=UTF-8''report%20card.pdf",
            },
        )

    def on_me(self, request, user):
        return json_response(200, {'success': True, 'data': {'user': user}})

    def on_quizzes(self, request, user):
        return json_response(200, {'data': {'quizzes': self.quizzes}})

    def on_analytics(self, request, user):
        return json_response(200, {'data': {'analytics': self.analytics}})
