"""
Tests for the portal app.
Tests: visibility summary, candidate filters, toggle all, visibility rules, API.
"""
from datetime import datetime, timedelta

from django.test import TestCase
from django.urls import reverse

from accounts.models import StaffProfile
from students.models import Student
from test_helpers import MongoTestCase, make_user, api_client_for
from portal.models import PortalItem
from portal.visibility import (
    visibility_summary, filter_student_candidates, filter_staff_candidates, toggle_all, is_visible_to,
)


class MockStudent:
    def __init__(self, pk, first_name, last_name, grade_level='', section='', admission_number=''):
        self.id = pk
        self.first_name = first_name
        self.last_name = last_name
        self.grade_level = grade_level
        self.section = section
        self.admission_number = admission_number

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class MockStaff:
    def __init__(self, first_name, last_name, role):
        self.first_name = first_name
        self.last_name = last_name
        self.role = role

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def tag(self):
        return self.role.capitalize()


class MockUser:
    def __init__(self, pk, role):
        self.pk = pk
        self.role = role


class VisibilitySummaryTest(TestCase):

    def test_roles(self):
        self.assertEqual(visibility_summary('roles', []), 'All Roles')
        self.assertEqual(visibility_summary('roles', ['admin', 'teacher', 'student', 'parent']), 'All Roles')
        self.assertEqual(visibility_summary('roles', ['teacher', 'parent']), 'Teacher, Parent')

    def test_students(self):
        self.assertEqual(visibility_summary('students', user_ids=[]), 'No students selected')
        self.assertEqual(visibility_summary('students', user_ids=['a']), '1 student')
        self.assertEqual(visibility_summary('students', user_ids=['a', 'b']), '2 students')

    def test_staff(self):
        self.assertEqual(visibility_summary('staff', user_ids=[]), 'No staff selected')
        self.assertEqual(visibility_summary('staff', user_ids=['a']), '1 staff member')
        self.assertEqual(visibility_summary('staff', user_ids=['a', 'b', 'c']), '3 staff members')


class CandidateFilterTest(TestCase):

    def setUp(self):
        self.students = [
            MockStudent('1', 'Asha', 'Rao', '5', 'A', 'ADM-100'),
            MockStudent('2', 'Ben', 'Okafor', '5', 'B', 'ADM-101'),
            MockStudent('3', 'Chen', 'Li', '6', 'A', 'ADM-200'),
        ]

    def test_grade_filter(self):
        result = filter_student_candidates(self.students, grade_level='5')
        self.assertEqual([s.id for s in result], ['1', '2'])

    def test_all_means_no_filter(self):
        result = filter_student_candidates(self.students, grade_level='all', section='all')
        self.assertEqual(len(result), 3)

    def test_grade_and_section(self):
        result = filter_student_candidates(self.students, grade_level='5', section='B')
        self.assertEqual([s.id for s in result], ['2'])

    def test_search_name_or_admission_number(self):
        self.assertEqual([s.id for s in filter_student_candidates(self.students, search='chen')], ['3'])
        self.assertEqual([s.id for s in filter_student_candidates(self.students, search='adm-10')], ['1', '2'])

    def test_staff_search_by_tag(self):
        staff = [MockStaff('Dina', 'Park', 'teacher'), MockStaff('Eli', 'Stone', 'librarian')]
        self.assertEqual([s.first_name for s in filter_staff_candidates(staff, 'librar')], ['Eli'])
        self.assertEqual([s.first_name for s in filter_staff_candidates(staff, 'PARK')], ['Dina'])


class ToggleAllTest(TestCase):

    def test_adds_missing_in_order(self):
        self.assertEqual(toggle_all(['x', 'b'], ['a', 'b', 'c']), ['x', 'b', 'a', 'c'])

    def test_removes_when_all_selected(self):
        self.assertEqual(toggle_all(['x', 'a', 'b'], ['a', 'b']), ['x'])

    def test_no_candidates(self):
        self.assertEqual(toggle_all(['x'], []), ['x'])


class IsVisibleToTest(TestCase):

    def setUp(self):
        self.now = datetime(2026, 5, 1, 12, 0)
        self.teacher = MockUser(7, 'teacher')
        self.parent = MockUser(8, 'parent')

    def item(self, **kwargs):
        defaults = {'title': 'Note', 'visibility_mode': 'roles', 'is_active': True}
        defaults.update(kwargs)
        return PortalItem(**defaults)

    def test_no_roles_means_everybody(self):
        self.assertTrue(is_visible_to(self.item(), self.parent, now=self.now))

    def test_role_list(self):
        item = self.item(visible_to_roles=['teacher'])
        self.assertTrue(is_visible_to(item, self.teacher, now=self.now))
        self.assertFalse(is_visible_to(item, self.parent, now=self.now))

    def test_time_window(self):
        item = self.item(visible_from=self.now + timedelta(days=1))
        self.assertFalse(is_visible_to(item, self.parent, now=self.now))
        item = self.item(visible_until=self.now - timedelta(days=1))
        self.assertFalse(is_visible_to(item, self.parent, now=self.now))
        item = self.item(visible_from=self.now - timedelta(days=1), visible_until=self.now + timedelta(days=1))
        self.assertTrue(is_visible_to(item, self.parent, now=self.now))

    def test_students_mode(self):
        item = self.item(visibility_mode='students', user_ids=['s1'])
        self.assertTrue(is_visible_to(item, MockUser(9, 'student'), MockStudent('s1', 'A', 'B'), now=self.now))
        self.assertFalse(is_visible_to(item, MockUser(10, 'student'), MockStudent('s2', 'C', 'D'), now=self.now))
        self.assertFalse(is_visible_to(item, self.teacher, now=self.now))

    def test_staff_mode(self):
        item = self.item(visibility_mode='staff', user_ids=['7'])
        self.assertTrue(is_visible_to(item, self.teacher, now=self.now))
        self.assertFalse(is_visible_to(item, self.parent, now=self.now))

    def test_inactive_hidden(self):
        self.assertFalse(is_visible_to(self.item(is_active=False), self.parent, now=self.now))


class PortalAPITest(MongoTestCase):

    def test_create_with_summary(self):
        response = self.client.post(reverse('portal:item-list'), {
            'title': 'Sports day',
            'visibility_mode': 'roles',
            'visible_to_roles': ['student', 'parent'],
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['visibility_label'], 'Student, Parent')
        self.assertEqual(response.data['created_by'], str(self.admin.pk))

    def test_unknown_role_rejected(self):
        response = self.client.post(reverse('portal:item-list'), {
            'title': 'Bad', 'visible_to_roles': ['janitor'],
        })
        self.assertEqual(response.status_code, 400)

    def test_window_must_end_after_start(self):
        response = self.client.post(reverse('portal:item-list'), {
            'title': 'Bad window',
            'visible_from': '2026-05-02T00:00:00Z',
            'visible_until': '2026-05-01T00:00:00Z',
        })
        self.assertEqual(response.status_code, 400)

    def test_visible_items_for_parent(self):
        PortalItem(title='Everyone').save()
        PortalItem(title='Teachers only', visible_to_roles=['teacher']).save()
        PortalItem(title='Expired', visible_until=datetime(2000, 1, 1)).save()
        client = api_client_for(make_user('parent'))
        response = client.get(reverse('portal:item-visible'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['title'] for i in response.data], ['Everyone'])

    def test_visible_items_for_selected_student(self):
        user = make_user('student')
        student = Student(student_number='S1', first_name='Ana', last_name='Ruiz', user_id=str(user.pk))
        student.save()
        PortalItem(title='Picked', visibility_mode='students', user_ids=[str(student.id)]).save()
        PortalItem(title='Not picked', visibility_mode='students', user_ids=['someone-else']).save()
        response = api_client_for(user).get(reverse('portal:item-visible'))
        self.assertEqual([i['title'] for i in response.data], ['Picked'])

    def test_student_candidates(self):
        Student(student_number='S1', first_name='Ana', last_name='Ruiz', grade_level='5', section='A').save()
        Student(student_number='S2', first_name='Bo', last_name='Kim', grade_level='5', section='B').save()
        Student(student_number='S3', first_name='Cy', last_name='Ng', grade_level='6', section='A').save()
        response = self.client.get(reverse('portal:audience-students'), {'grade_level': '5', 'section': 'all'})
        self.assertEqual([s['name'] for s in response.data], ['Bo Kim', 'Ana Ruiz'])
        self.assertEqual(response.data[0]['tag'], '5 - B')

    def test_staff_candidates(self):
        StaffProfile(user_id='11', email='t@test.com', first_name='Tess', last_name='Hale', role='teacher').save()
        StaffProfile(user_id='12', email='l@test.com', first_name='Lou', last_name='Bell', role='librarian').save()
        response = self.client.get(reverse('portal:audience-staff'), {'search': 'teach'})
        self.assertEqual(response.data, [{'id': '11', 'name': 'Tess Hale', 'tag': 'Teacher'}])

    def test_toggle_all(self):
        response = self.client.post(reverse('portal:audience-toggle-all'), {
            'selected_ids': ['a'], 'candidate_ids': ['a', 'b'],
        })
        self.assertEqual(response.data['selected_ids'], ['a', 'b'])
