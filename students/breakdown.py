# students/breakdown.py - Student breakdown chart data

from core.breakdown import aggregate

NOT_ASSIGNED = 'Not Assigned'
NOT_SPECIFIED = 'Not Specified'

BREAKDOWN_FIELDS = [
    {'id': 'grade_level', 'label': 'Grade Level'},
    {'id': 'section', 'label': 'Section'},
    {'id': 'gender', 'label': 'Gender'},
    {'id': 'blood_group', 'label': 'Blood Group'},
    {'id': 'allergies', 'label': 'Allergies'},
    {'id': 'status', 'label': 'Status (Active/Inactive)'},
]


def _grade_level(student):
    return student.grade_level or NOT_ASSIGNED


def _section(student):
    return student.section or NOT_ASSIGNED


def _gender(student):
    return student.gender or NOT_SPECIFIED


def _blood_group(student):
    return student.blood_group or NOT_SPECIFIED


def _allergies(student):
    return 'Has Allergies' if student.allergies else 'No Allergies'


def _status(student):
    return 'Active' if student.is_active else 'Inactive'


FIELD_GETTERS = {
    'grade_level': _grade_level,
    'section': _section,
    'gender': _gender,
    'blood_group': _blood_group,
    'allergies': _allergies,
    'status': _status,
}


def student_breakdown(students, field_id):
    """Chart rows for one breakdown field; raises ValueError for unknown fields"""
    if field_id not in FIELD_GETTERS:
        raise ValueError(f"Unknown breakdown field: {field_id}")
    getter = FIELD_GETTERS[field_id]
    return aggregate(getter(student) for student in students)
