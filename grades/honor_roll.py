# grades/honor_roll.py - Honor roll selection from posted final grades
"""
Per-grade threshold rules:

* Only grades from courses that count toward the honor roll are considered,
  and only when their grading scale defines an Honor Roll GPA threshold.
* A student is on the Honor Roll when every considered grade reaches the
  scale's Honor Roll threshold.
* A student is on the High Honor Roll when every considered grade also
  reaches the High Honor Roll threshold (which falls back to the Honor Roll
  threshold when the scale leaves it unset).
* Any considered grade below the Honor Roll threshold excludes the student.
"""
from collections import OrderedDict

from core.campus import scope_to_campus
from .models import FinalGrade

HIGH_HONOR = 'high_honor'
HONOR = 'honor'

HONOR_LEVELS = [
    {'value': HIGH_HONOR, 'label': 'High Honor Roll'},
    {'value': HONOR, 'label': 'Honor Roll'},
]


def honor_level_label(level, default='Honor Roll'):
    for item in HONOR_LEVELS:
        if item['value'] == level:
            return item['label']
    return default


def grade_thresholds(grade):
    """(honor, high honor) thresholds for one final grade, or None when it does not count"""
    scale = grade.grading_scale
    if not grade.does_honor_roll or scale is None or not scale.hr_gpa_value:
        return None
    honor = float(scale.hr_gpa_value)
    high_honor = float(scale.hhr_gpa_value) if scale.hhr_gpa_value else honor
    return honor, high_honor


def classify(grade_entries):
    """
    Honor level for one student's (gpa, honor, high honor) tuples,
    or None when the student does not qualify.
    """
    if not grade_entries:
        return None
    if not all(gpa >= honor for gpa, honor, _ in grade_entries):
        return None
    if all(gpa >= high_honor for gpa, _, high_honor in grade_entries):
        return HIGH_HONOR
    return HONOR


def build_honor_roll(final_grades):
    """Honor roll rows for a set of final grades, high honor first then by last name"""
    by_student = OrderedDict()

    for grade in final_grades:
        thresholds = grade_thresholds(grade)
        if thresholds is None:
            continue
        student = grade.student
        entry = by_student.setdefault(str(student.id), {
            'student': student,
            'teacher': grade.teacher_name,
            'grades': [],
        })
        entry['grades'].append((float(grade.gpa_value or 0), thresholds[0], thresholds[1]))

    results = []
    for student_id, entry in by_student.items():
        level = classify(entry['grades'])
        if level is None:
            continue
        student = entry['student']
        results.append({
            'student_id': student_id,
            'student_number': student.student_number,
            'first_name': student.first_name or '',
            'last_name': student.last_name or '',
            'grade_level': student.grade_level or '',
            'section': student.section or '',
            'admission_number': student.admission_number or '',
            'email': student.email or '',
            'phone': student.phone_number or '',
            'gender': student.gender or '',
            'date_of_birth': student.date_of_birth.isoformat() if student.date_of_birth else '',
            'blood_group': student.blood_group or '',
            'address': student.address or '',
            'admission_date': student.admission_date.isoformat() if student.admission_date else '',
            'allergies': list(student.allergies or []),
            'teacher': entry['teacher'],
            'honor_level': level,
        })

    results.sort(key=lambda r: (0 if r['honor_level'] == HIGH_HONOR else 1, r['last_name'].lower()))
    return results


def get_honor_roll(marking_period_id, campus_id=None):
    grades = FinalGrade.objects.filter(marking_period_id=marking_period_id, does_honor_roll=True)
    grades = scope_to_campus(grades, campus_id)
    return build_honor_roll(grades)
