"""
Tests for the shared core plumbing.
Tests: batch row passes, breakdown aggregation, campus scoping, role permissions.
"""
from types import SimpleNamespace

from django.test import TestCase
from rest_framework.exceptions import ValidationError

from core.batch import apply_row_changes, rows_to_create, rows_to_delete, rows_to_update, strip_flags
from core.breakdown import aggregate
from core.campus import scope_to_campus
from core.exceptions import DomainError, NotFound
from core.permissions import IsAdminOrReadOnly, IsAdminRole
from core.views import handle_exception_response
from students.models import Student
from test_helpers import MongoTestCase


ROWS = [
    {'id': 'a', 'title': 'kept'},
    {'id': 'b', 'title': 'edited', '_dirty': True},
    {'id': 'tmp-1', 'title': 'added', '_isNew': True},
    {'id': 'tmp-2', 'title': 'added then removed', '_isNew': True, '_deleted': True},
    {'id': 'c', 'title': 'removed', '_deleted': True, '_dirty': True},
]


class BatchPassesTest(TestCase):

    def test_row_selection(self):
        self.assertEqual([r['id'] for r in rows_to_delete(ROWS)], ['c'])
        self.assertEqual([r['id'] for r in rows_to_create(ROWS)], ['tmp-1'])
        self.assertEqual([r['id'] for r in rows_to_update(ROWS)], ['b'])

    def test_strip_flags_drops_placeholder_id(self):
        self.assertEqual(strip_flags(ROWS[2]), {'title': 'added'})
        self.assertEqual(strip_flags(ROWS[1]), {'id': 'b', 'title': 'edited'})

    def test_passes_run_deletes_then_creates_then_updates(self):
        calls = []
        result = apply_row_changes(
            ROWS,
            create=lambda data: calls.append(('create', data['title'])) or 'new-id',
            update=lambda pk, data: calls.append(('update', pk)) or pk,
            delete=lambda pk: calls.append(('delete', pk)),
        )
        self.assertEqual(calls, [('delete', 'c'), ('create', 'added'), ('update', 'b')])
        self.assertEqual(result.to_dict()['message'], 'Saved')
        self.assertEqual(result.created, ['new-id'])

    def test_failed_row_does_not_stop_others(self):
        def create(data):
            raise ValidationError({'title': ['This field is required.']})

        result = apply_row_changes(ROWS, create, lambda pk, data: pk, lambda pk: None)
        summary = result.to_dict()
        self.assertEqual(summary['failed'], 1)
        self.assertEqual(summary['updated'], 1)
        self.assertEqual(summary['deleted'], 1)
        self.assertEqual(summary['message'], '1 operation(s) failed')
        self.assertEqual(summary['errors'][0]['action'], 'create')

    def test_empty_rows(self):
        self.assertEqual(apply_row_changes([], None, None, None).to_dict()['message'], 'Saved')


class AggregateTest(TestCase):

    def test_most_frequent_first_then_by_name(self):
        rows = aggregate(['b', 'a', 'c', 'c', 'a', 'c', 'd'])
        self.assertEqual([r['name'] for r in rows], ['c', 'a', 'b', 'd'])
        self.assertEqual(rows[0], {'name': 'c', 'value': 3, 'percentage': '42.9'})

    def test_percentages_use_one_decimal(self):
        rows = aggregate(['x', 'y', 'y'])
        self.assertEqual([r['percentage'] for r in rows], ['66.7', '33.3'])

    def test_empty(self):
        self.assertEqual(aggregate([]), [])


class CampusScopeTest(MongoTestCase):

    def setUp(self):
        super().setUp()
        Student(student_number='1', first_name='A', last_name='A', campus_id='north').save()
        Student(student_number='2', first_name='B', last_name='B', campus_id='south').save()
        Student(student_number='3', first_name='C', last_name='C').save()

    def test_scoping(self):
        self.assertEqual(scope_to_campus(Student.objects, None).count(), 3)
        self.assertEqual(scope_to_campus(Student.objects, 'north').count(), 1)
        self.assertEqual(scope_to_campus(Student.objects, 'north', include_shared=True).count(), 2)


class ErrorResponseTest(TestCase):

    def test_domain_errors_keep_their_status(self):
        self.assertEqual(handle_exception_response(DomainError('Room is at full capacity'), 'Room').status_code, 400)
        response = handle_exception_response(NotFound('Room not found'), 'Room')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'error': 'Room not found'})


class PermissionsTest(TestCase):

    def check(self, permission, role, method, **flags):
        user = SimpleNamespace(
            is_authenticated=True, is_superuser=False, is_staff=False, role=role, **flags
        )
        return permission().has_permission(SimpleNamespace(user=user, method=method), None)

    def test_admin_or_read_only(self):
        self.assertTrue(self.check(IsAdminOrReadOnly, 'admin', 'POST'))
        self.assertTrue(self.check(IsAdminOrReadOnly, 'teacher', 'GET'))
        self.assertFalse(self.check(IsAdminOrReadOnly, 'teacher', 'POST'))
        self.assertFalse(self.check(IsAdminOrReadOnly, 'parent', 'GET'))

    def test_admin_role(self):
        self.assertTrue(self.check(IsAdminRole, 'admin', 'POST'))
        self.assertFalse(self.check(IsAdminRole, 'teacher', 'GET'))
        anonymous = SimpleNamespace(is_authenticated=False)
        self.assertFalse(IsAdminRole().has_permission(SimpleNamespace(user=anonymous, method='GET'), None))
