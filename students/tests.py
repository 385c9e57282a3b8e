"""
Tests for the students app.
Tests: sort/search helpers, breakdown chart data, student API.
"""
import datetime

from django.test import TestCase
from django.urls import reverse

from students.models import Student
from students.utils import sort_students_by_name, sort_students_by_number, search_students
from students.breakdown import student_breakdown
from test_helpers import MongoTestCase, make_user, api_client_for


# ============================================================================
# Mock student objects for testing sort/search without MongoDB
# ============================================================================

class MockStudent:
    """Lightweight stand-in for helpers that only read attributes"""
    def __init__(self, first_name, last_name, student_number='', admission_number='', email='',
                 grade_level=None, section=None, gender=None, blood_group=None, allergies=None,
                 is_active=True):
        self.first_name = first_name
        self.last_name = last_name
        self.student_number = student_number
        self.admission_number = admission_number
        self.email = email
        self.grade_level = grade_level
        self.section = section
        self.gender = gender
        self.blood_group = blood_group
        self.allergies = allergies or []
        self.is_active = is_active

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class SortStudentsTest(TestCase):

    def test_sort_by_last_then_first_name(self):
        students = [
            MockStudent('Zoe', 'Adams'),
            MockStudent('amy', 'Brown'),
            MockStudent('Al', 'Adams'),
        ]
        names = [s.full_name for s in sort_students_by_name(students)]
        self.assertEqual(names, ['Al Adams', 'Zoe Adams', 'amy Brown'])

    def test_sort_empty_list(self):
        self.assertEqual(sort_students_by_name([]), [])

    def test_sort_by_number_numeric_then_text_then_missing(self):
        students = [
            MockStudent('A', 'A', student_number=''),
            MockStudent('B', 'B', student_number='10'),
            MockStudent('C', 'C', student_number='STU-1'),
            MockStudent('D', 'D', student_number='2'),
        ]
        numbers = [s.student_number for s in sort_students_by_number(students)]
        self.assertEqual(numbers, ['2', '10', 'STU-1', ''])


class SearchStudentsTest(TestCase):

    def setUp(self):
        self.students = [
            MockStudent('Alice', 'Smith', student_number='S001', admission_number='ADM-9', email='alice@test.com'),
            MockStudent('Bob', 'Jones', student_number='S002', email='bob@test.com'),
        ]

    def test_search_by_name_case_insensitive(self):
        self.assertEqual([s.first_name for s in search_students(self.students, 'SMITH')], ['Alice'])

    def test_search_by_admission_number(self):
        self.assertEqual([s.first_name for s in search_students(self.students, 'adm-9')], ['Alice'])

    def test_empty_query_returns_everyone(self):
        self.assertEqual(len(search_students(self.students, '  ')), 2)

    def test_no_results(self):
        self.assertEqual(search_students(self.students, 'zzz'), [])


class StudentBreakdownTest(TestCase):

    def setUp(self):
        self.students = [
            MockStudent('A', 'A', grade_level='5', gender='Female', allergies=['Peanuts']),
            MockStudent('B', 'B', grade_level='5', gender='Male'),
            MockStudent('C', 'C', grade_level='6', is_active=False),
            MockStudent('D', 'D'),
        ]

    def test_grade_level(self):
        rows = student_breakdown(self.students, 'grade_level')
        self.assertEqual(rows[0], {'name': '5', 'value': 2, 'percentage': '50.0'})
        self.assertEqual([r['name'] for r in rows[1:]], ['6', 'Not Assigned'])

    def test_gender_defaults_to_not_specified(self):
        rows = student_breakdown(self.students, 'gender')
        self.assertEqual(rows[0], {'name': 'Not Specified', 'value': 2, 'percentage': '50.0'})

    def test_allergies_and_status(self):
        allergies = {r['name']: r['value'] for r in student_breakdown(self.students, 'allergies')}
        self.assertEqual(allergies, {'No Allergies': 3, 'Has Allergies': 1})
        status = {r['name']: r['value'] for r in student_breakdown(self.students, 'status')}
        self.assertEqual(status, {'Active': 3, 'Inactive': 1})

    def test_unknown_field(self):
        with self.assertRaises(ValueError):
            student_breakdown(self.students, 'shoe_size')

    def test_no_students(self):
        self.assertEqual(student_breakdown([], 'grade_level'), [])


# ============================================================================
# API tests (MongoEngine on mongomock)
# ============================================================================

class StudentAPITest(MongoTestCase):

    def setUp(self):
        super().setUp()
        Student(student_number='S1', first_name='Maya', last_name='Young', grade_level='5', section='A').save()
        Student(student_number='S2', first_name='Ravi', last_name='Adams', grade_level='5', section='B',
                campus_id='north').save()
        Student(student_number='S3', first_name='Lia', last_name='Ortiz', grade_level='6', is_active=False).save()

    def test_list_sorted_by_name(self):
        response = self.client.get(reverse('students:student-list'))
        self.assertEqual([s['last_name'] for s in response.data], ['Adams', 'Ortiz', 'Young'])

    def test_filters_and_search(self):
        url = reverse('students:student-list')
        self.assertEqual(len(self.client.get(url, {'grade_level': '5'}).data), 2)
        self.assertEqual(len(self.client.get(url, {'status': 'inactive'}).data), 1)
        self.assertEqual([s['first_name'] for s in self.client.get(url, {'search': 'ravi'}).data], ['Ravi'])
        self.assertEqual([s['first_name'] for s in self.client.get(url, {'campus_id': 'north'}).data], ['Ravi'])

    def test_create_validates(self):
        url = reverse('students:student-list')
        duplicate = self.client.post(url, {'student_number': 'S1', 'first_name': 'X', 'last_name': 'Y'})
        self.assertEqual(duplicate.status_code, 400)
        future = (datetime.date.today() + datetime.timedelta(days=3)).isoformat()
        response = self.client.post(url, {
            'student_number': 'S9', 'first_name': 'X', 'last_name': 'Y', 'date_of_birth': future,
        })
        self.assertEqual(response.status_code, 400)
        response = self.client.post(url, {
            'student_number': 'S9', 'first_name': 'New', 'last_name': 'Kid', 'gender': '', 'allergies': ['Dust'],
        })
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(Student.objects.get(student_number='S9').gender)

    def test_breakdown_endpoint(self):
        response = self.client.get(reverse('students:student-breakdown'), {'field': 'section'})
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(
            {r['name'] for r in response.data['rows']}, {'A', 'B', 'Not Assigned'}
        )

    def test_breakdown_unknown_field(self):
        response = self.client.get(reverse('students:student-breakdown'), {'field': 'nope'})
        self.assertEqual(response.status_code, 400)

    def test_breakdown_fields(self):
        response = self.client.get(reverse('students:student-breakdown-fields'))
        self.assertIn('grade_level', [f['id'] for f in response.data])

    def test_stats(self):
        response = self.client.get(reverse('students:student-stats'))
        self.assertEqual(response.data, {'total_students': 3, 'active_students': 2, 'inactive_students': 1})

    def test_student_role_cannot_read_records(self):
        client = api_client_for(make_user('student'))
        self.assertEqual(client.get(reverse('students:student-list')).status_code, 403)

    def test_list_sorted_by_number(self):
        Student(student_number='10', first_name='Zed', last_name='Abbot').save()
        Student(student_number='9', first_name='Amy', last_name='Zane').save()
        response = self.client.get(reverse('students:student-list'), {'sort': 'number'})
        self.assertEqual(
            [s['student_number'] for s in response.data], ['9', '10', 'S1', 'S2', 'S3']
        )

    def test_unknown_grade_level_rejected(self):
        url = reverse('students:student-list')
        response = self.client.post(url, {'student_number': 'S7', 'first_name': 'A', 'last_name': 'B',
                                          'grade_level': '13'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('grade_level', response.data)
        response = self.client.post(url, {'student_number': 'S7', 'first_name': 'A', 'last_name': 'B',
                                          'grade_level': 'KG'})
        self.assertEqual(response.status_code, 201)
