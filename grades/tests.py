"""
Tests for the grades app.
Tests: comment code tables, batch saves, gradebook settings, honor roll, certificates.
"""
from datetime import date
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from students.models import Student
from test_helpers import MongoTestCase, make_user, api_client_for
from grades.models import CommentCodeScale, CommentCode, GradingScale, GradingScaleGrade, FinalGrade
from grades.config import get_config, parse_value, DEFAULT_CONFIG
from grades.honor_roll import classify, build_honor_roll, HIGH_HONOR, HONOR
from grades.certificates import (
    substitute_tokens, render_certificates, DEFAULT_CERTIFICATE_HTML, SUBSTITUTION_TOKENS, TOKEN_CATEGORIES,
)


# ============================================================================
# Mock objects for testing honor roll rules without MongoDB
# ============================================================================

class MockScale:
    def __init__(self, hr=None, hhr=None):
        self.hr_gpa_value = hr
        self.hhr_gpa_value = hhr


class MockStudent:
    def __init__(self, pk, first_name, last_name):
        self.id = pk
        self.student_number = f'S{pk}'
        self.first_name = first_name
        self.last_name = last_name
        self.grade_level = '5'
        self.section = 'A'
        self.admission_number = ''
        self.email = ''
        self.phone_number = ''
        self.gender = ''
        self.date_of_birth = None
        self.blood_group = ''
        self.address = ''
        self.admission_date = None
        self.allergies = []


class MockGrade:
    def __init__(self, student, gpa, scale, does_honor_roll=True):
        self.student = student
        self.gpa_value = gpa
        self.grading_scale = scale
        self.does_honor_roll = does_honor_roll
        self.teacher_name = 'Ms. Grey'


class HonorRollRulesTest(TestCase):
    """Per-grade threshold rules"""

    def test_all_grades_above_high_honor(self):
        self.assertEqual(classify([(4.0, 3.0, 3.7), (3.7, 3.0, 3.7)]), HIGH_HONOR)

    def test_one_grade_below_high_honor(self):
        self.assertEqual(classify([(4.0, 3.0, 3.7), (3.3, 3.0, 3.7)]), HONOR)

    def test_one_grade_below_honor_excludes(self):
        self.assertIsNone(classify([(4.0, 3.0, 3.7), (2.3, 3.0, 3.7)]))

    def test_no_grades(self):
        self.assertIsNone(classify([]))

    def test_high_honor_threshold_defaults_to_honor(self):
        scale = MockScale(hr=3.0)
        student = MockStudent(1, 'Ann', 'Lee')
        rows = build_honor_roll([MockGrade(student, 3.0, scale)])
        self.assertEqual(rows[0]['honor_level'], HIGH_HONOR)

    def test_scale_without_honor_threshold_is_ignored(self):
        counted = MockScale(hr=3.0, hhr=3.7)
        ignored = MockScale()
        student = MockStudent(1, 'Ann', 'Lee')
        rows = build_honor_roll([
            MockGrade(student, 3.3, counted),
            MockGrade(student, 1.0, ignored),
        ])
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['honor_level'], HONOR)

    def test_courses_outside_honor_roll_are_ignored(self):
        scale = MockScale(hr=3.0, hhr=3.7)
        student = MockStudent(1, 'Ann', 'Lee')
        rows = build_honor_roll([
            MockGrade(student, 4.0, scale),
            MockGrade(student, 0.0, scale, does_honor_roll=False),
        ])
        self.assertEqual(rows[0]['honor_level'], HIGH_HONOR)

    def test_sorted_high_honor_first_then_last_name(self):
        scale = MockScale(hr=3.0, hhr=3.7)
        zed = MockStudent(1, 'Amy', 'Zed')
        brown = MockStudent(2, 'Bo', 'Brown')
        adams = MockStudent(3, 'Cy', 'Adams')
        rows = build_honor_roll([
            MockGrade(brown, 3.3, scale),
            MockGrade(zed, 4.0, scale),
            MockGrade(adams, 3.3, scale),
        ])
        self.assertEqual([r['last_name'] for r in rows], ['Zed', 'Adams', 'Brown'])


class CertificateTokenTest(TestCase):
    """Certificate template substitution"""

    def setUp(self):
        self.row = {
            'student_id': 'abc',
            'student_number': 'S001',
            'first_name': 'Maya',
            'last_name': 'Khan',
            'grade_level': '7',
            'section': 'B',
            'honor_level': HIGH_HONOR,
        }

    def test_known_tokens_replaced(self):
        html = substitute_tokens(
            '<p>__FULL_NAME__ / __GRADE_LEVEL__-__SECTION_NAME__ / __HONOR_LEVEL__</p>',
            self.row,
        )
        self.assertEqual(html, '<p>Maya Khan / 7-B / High Honor Roll</p>')

    def test_unknown_and_empty_tokens_become_na(self):
        html = substitute_tokens('__MOTHER_NAME__ __ACADEMIC_YEAR__', self.row)
        self.assertEqual(html, 'N/A N/A')

    def test_context_values(self):
        html = substitute_tokens(
            '__SCHOOL_NAME__ __ACADEMIC_YEAR__ __CURRENT_DATE__',
            self.row,
            context={'school_name': 'Hill School', 'academic_year': '2025-2026'},
            today=date(2026, 3, 4),
        )
        self.assertEqual(html, 'Hill School 2025-2026 03/04/2026')

    def test_honor_label(self):
        self.row['honor_level'] = HONOR
        self.assertEqual(substitute_tokens('__HONOR_LEVEL__', self.row), 'Honor Roll')

    def test_values_are_escaped(self):
        self.row['last_name'] = '<b>Khan</b>'
        self.assertNotIn('<b>', substitute_tokens('__LAST_NAME__', self.row))


    def test_student_record_tokens(self):
        self.row.update({
            'date_of_birth': '2012-05-20',
            'admission_date': '2020-08-15',
            'allergies': ['Peanuts', 'Dust'],
        })
        html = substitute_tokens(
            '__AGE__|__ADMISSION_DATE__|__JOINING_DATE__|__ALLERGIES__|__ROLL_NUMBER__',
            self.row,
            today=date(2026, 5, 19),
        )
        self.assertEqual(html, '13|2020-08-15|2020-08-15|Peanuts, Dust|N/A')

    def test_catalogue_covers_every_category_token(self):
        for tokens in TOKEN_CATEGORIES.values():
            for token in tokens:
                self.assertIn(token, SUBSTITUTION_TOKENS)
        self.assertIn('__ALLERGIES__', TOKEN_CATEGORIES['Medical'])
    def test_one_page_per_student(self):
        other = dict(self.row, student_id='def', first_name='Omar')
        html = render_certificates(DEFAULT_CERTIFICATE_HTML, [self.row, other])
        self.assertEqual(html.count('class="certificate-page"'), 2)
        self.assertIn('size: landscape', html)
        self.assertNotIn('certificate-frame"', html)

    def test_frame_image(self):
        html = render_certificates('__FULL_NAME__', [self.row], frame_image='/media/frame.png')
        self.assertIn('<img class="certificate-frame" src="/media/frame.png" />', html)


class GradebookConfigParsingTest(TestCase):

    def test_boolean_values(self):
        self.assertTrue(parse_value('weight_assignments', 'true'))
        self.assertFalse(parse_value('weight_assignments', 'false'))

    def test_integer_values(self):
        self.assertEqual(parse_value('anomalous_max', '120'), 120)
        self.assertIsNone(parse_value('latency', ''))
        self.assertEqual(parse_value('anomalous_max', 'lots'), DEFAULT_CONFIG['anomalous_max'])

    def test_mapping_values(self):
        self.assertEqual(parse_value('breakoff_grades', '{"A": 90}'), {'A': 90})
        self.assertEqual(parse_value('breakoff_grades', 'not json'), {})


# ============================================================================
# API tests (MongoEngine on mongomock)
# ============================================================================

class CommentCodeScaleAPITest(MongoTestCase):

    def test_create_and_list(self):
        response = self.client.post(reverse('grades:comment-code-scale-list'), {'title': 'Behavior'})
        self.assertEqual(response.status_code, 201)
        response = self.client.get(reverse('grades:comment-code-scale-list'))
        self.assertEqual([s['title'] for s in response.data], ['Behavior'])
        self.assertEqual(response.data[0]['code_count'], 0)

    def test_missing_scale_returns_404(self):
        url = reverse('grades:comment-code-scale-detail', args=['not-an-id'])
        response = self.client.get(url)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'Comment code scale not found')

    def test_delete_is_soft_and_retires_codes(self):
        scale = CommentCodeScale(title='Effort')
        scale.save()
        CommentCode(scale=scale, title='Great').save()
        url = reverse('grades:comment-code-scale-detail', args=[str(scale.id)])
        self.assertEqual(self.client.delete(url).status_code, 204)
        scale.reload()
        self.assertFalse(scale.is_active)
        self.assertFalse(CommentCode.objects.get(scale=scale).is_active)

    def test_campus_filter_includes_shared_scales(self):
        CommentCodeScale(title='Shared').save()
        CommentCodeScale(title='North', campus_id='north').save()
        CommentCodeScale(title='South', campus_id='south').save()
        response = self.client.get(reverse('grades:comment-code-scale-list'), {'campus_id': 'north'})
        self.assertEqual(sorted(s['title'] for s in response.data), ['North', 'Shared'])

    def test_teacher_cannot_write(self):
        client = api_client_for(make_user('teacher'))
        response = client.post(reverse('grades:comment-code-scale-list'), {'title': 'Nope'})
        self.assertEqual(response.status_code, 403)


class CommentCodeBatchTest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.scale = CommentCodeScale(title='Academic')
        self.scale.save()
        self.url = reverse('grades:comment-code-batch')

    def test_new_rows_join_the_selected_scale(self):
        response = self.client.post(self.url, {
            'scale_id': str(self.scale.id),
            'rows': [{'id': 'tmp-1', '_isNew': True, 'title': 'Excellent', 'short_name': 'EX'}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['message'], 'Saved')
        self.assertEqual(CommentCode.objects.get(title='Excellent').scale.id, self.scale.id)

    def test_failed_rows_are_counted(self):
        keep = CommentCode(scale=self.scale, title='Keep')
        keep.save()
        gone = CommentCode(scale=self.scale, title='Gone')
        gone.save()
        untouched = CommentCode(scale=self.scale, title='Untouched')
        untouched.save()

        response = self.client.post(self.url, {
            'scale_id': str(self.scale.id),
            'rows': [
                {'id': str(keep.id), '_dirty': True, 'title': 'Kept'},
                {'id': str(gone.id), '_deleted': True, 'title': 'Gone'},
                {'id': str(untouched.id), 'title': 'Changed locally only'},
                {'id': 'tmp-1', '_isNew': True, 'title': ''},
                {'id': 'tmp-2', '_isNew': True, '_deleted': True, 'title': 'Never saved'},
            ],
        })
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(response.data['deleted'], 1)
        self.assertEqual(response.data['created'], 0)
        self.assertEqual(response.data['failed'], 1)
        self.assertEqual(response.data['message'], '1 operation(s) failed')

        keep.reload()
        untouched.reload()
        self.assertEqual(keep.title, 'Kept')
        self.assertEqual(untouched.title, 'Untouched')
        self.assertFalse(CommentCode.objects.get(id=gone.id).is_active)
        self.assertFalse(CommentCode.objects(title='Never saved').count())

    def test_unknown_scale_rejected(self):
        response = self.client.post(self.url, {'scale_id': 'missing', 'rows': []})
        self.assertEqual(response.status_code, 404)

    def test_rows_must_be_a_list(self):
        response = self.client.post(self.url, {'rows': 'nope'})
        self.assertEqual(response.status_code, 400)

    def test_list_filtered_by_scale(self):
        other = CommentCodeScale(title='Other')
        other.save()
        CommentCode(scale=self.scale, title='Mine').save()
        CommentCode(scale=other, title='Theirs').save()
        response = self.client.get(reverse('grades:comment-code-list'), {'scale_id': str(self.scale.id)})
        self.assertEqual([c['title'] for c in response.data], ['Mine'])


class HistoryMarkingPeriodAPITest(MongoTestCase):

    def test_batch_create_requires_school_year(self):
        response = self.client.post(reverse('grades:history-marking-period-batch'), {
            'rows': [
                {'_isNew': True, 'name': 'Quarter 1', 'mp_type': 'quarter', 'school_year': '2024'},
                {'_isNew': True, 'name': 'Quarter 2', 'mp_type': 'quarter'},
            ],
        })
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['failed'], 1)

    def test_invalid_type(self):
        response = self.client.post(reverse('grades:history-marking-period-list'), {
            'name': 'Trimester', 'mp_type': 'trimester', 'school_year': '2024',
        })
        self.assertEqual(response.status_code, 400)


class GradebookConfigAPITest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('grades:gradebook-config')

    def test_defaults(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['assignment_sorting'], 'due_date')
        self.assertEqual(response.data['anomalous_max'], 100)
        self.assertIsNone(response.data['latency'])

    def test_campus_settings_override_school_wide(self):
        self.client.put(self.url, {'anomalous_max': 120, 'weight_assignments': False})
        self.client.put(f'{self.url}?campus_id=north', {'anomalous_max': 150, 'assignment_sorting': 'title'})

        north = self.client.get(self.url, {'campus_id': 'north'}).data
        self.assertEqual(north['anomalous_max'], 150)
        self.assertEqual(north['assignment_sorting'], 'title')
        self.assertFalse(north['weight_assignments'])

        school = get_config()
        self.assertEqual(school['anomalous_max'], 120)
        self.assertEqual(school['assignment_sorting'], 'due_date')

    def test_course_period_overrides_campus(self):
        self.client.put(f'{self.url}?campus_id=north', {'latency': 3})
        self.client.put(f'{self.url}?campus_id=north&course_period_id=cp1', {'latency': 7})
        self.assertEqual(get_config('north')['latency'], 3)
        self.assertEqual(get_config('north', 'cp1')['latency'], 7)

    def test_invalid_sorting_rejected(self):
        response = self.client.put(self.url, {'assignment_sorting': 'random'})
        self.assertEqual(response.status_code, 400)


class HonorRollAPITest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.scale = GradingScale(
            title='Standard', hr_gpa_value=3.0, hhr_gpa_value=3.7,
            grades=[
                GradingScaleGrade(title='A+', gpa_value=4.0, break_off=90),
                GradingScaleGrade(title='A', gpa_value=3.7, break_off=85),
                GradingScaleGrade(title='B+', gpa_value=3.3, break_off=80),
                GradingScaleGrade(title='C', gpa_value=2.3, break_off=65),
                GradingScaleGrade(title='F', gpa_value=0.0, break_off=0),
            ],
        )
        self.scale.save()
        self.ann = self._student('S1', 'Ann', 'Young', [95, 86])
        self.bob = self._student('S2', 'Bob', 'Adams', [81, 95])
        self._student('S3', 'Cal', 'Moss', [66, 95])

    def _student(self, number, first, last, percents):
        student = Student(student_number=number, first_name=first, last_name=last, grade_level='8', section='A')
        student.save()
        for index, percent in enumerate(percents):
            FinalGrade(
                student=student, marking_period_id='q1', course_title=f'Course {index}',
                percent=percent, grading_scale=self.scale,
            ).save()
        return student

    def test_letter_grade_filled_from_scale(self):
        grade = FinalGrade.objects(student=self.ann).order_by('course_title').first()
        self.assertEqual(grade.grade_title, 'A+')
        self.assertEqual(grade.gpa_value, 4.0)

    def test_honor_roll(self):
        response = self.client.get(reverse('grades:honor-roll-list'), {'marking_period_id': 'q1'})
        self.assertEqual(response.status_code, 200)
        students = response.data['students']
        self.assertEqual([s['last_name'] for s in students], ['Young', 'Adams'])
        self.assertEqual([s['honor_level'] for s in students], [HIGH_HONOR, HONOR])
        self.assertEqual(response.data['high_honor_count'], 1)

    def test_marking_period_required(self):
        response = self.client.get(reverse('grades:honor-roll-list'))
        self.assertEqual(response.status_code, 400)

    def test_certificates_require_selection(self):
        response = self.client.post(reverse('grades:honor-roll-certificates'), {
            'marking_period_id': 'q1', 'student_ids': [],
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Please select at least one student')

    def test_certificates_for_selected_students(self):
        response = self.client.post(reverse('grades:honor-roll-certificates'), {
            'marking_period_id': 'q1',
            'student_ids': [str(self.ann.id), str(self.bob.id)],
            'school_name': 'Hill School',
        })
        self.assertEqual(response.status_code, 200)
        html = response.content.decode()
        self.assertEqual(html.count('class="certificate-page"'), 2)
        self.assertIn('Ann Young', html)
        self.assertIn('High Honor Roll', html)
        self.assertIn('Hill School', html)

    def test_token_catalogue(self):
        response = self.client.get(reverse('grades:honor-roll-tokens'))
        self.assertIn('__FULL_NAME__', response.data['tokens'])
        self.assertIn('Academic', response.data['categories'])

    def test_grade_distribution(self):
        response = self.client.get(reverse('grades:final-grade-distribution'), {'marking_period_id': 'q1'})
        self.assertEqual(response.data['total'], 6)
        self.assertEqual(response.data['rows'][0], {'name': 'A+', 'value': 3, 'percentage': '50.0'})


class SeedDefaultsCommandTest(MongoTestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_defaults', stdout=StringIO())
        call_command('seed_defaults', stdout=StringIO())
        self.assertEqual(GradingScale.objects.count(), 1)
        scale = GradingScale.objects.first()
        self.assertEqual(len(scale.grades), 8)
        self.assertEqual(scale.grade_for_percent(87).title, 'A')
        self.assertEqual(scale.grade_for_percent(12).title, 'F')
        self.assertEqual(CommentCodeScale.objects.count(), 1)
