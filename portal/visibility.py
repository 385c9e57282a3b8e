# portal/visibility.py - Who can see a portal item, and the audience picker helpers
"""
A portal item is shown either by role, to hand-picked students, or to
hand-picked staff members:

    roles     every user whose role is listed (no roles listed = everybody)
    students  only the listed students
    staff     only the listed staff members

Independently of the mode, an item is hidden before `visible_from` and after
`visible_until`.
"""
from datetime import timezone as dt_timezone

from django.conf import settings
from django.utils import timezone

ROLES = 'roles'
STUDENTS = 'students'
STAFF = 'staff'

VISIBILITY_MODES = [
    (ROLES, 'Roles'),
    (STUDENTS, 'Students'),
    (STAFF, 'Staff'),
]

ALL = 'all'


def _plural(count, singular, plural):
    return singular if count == 1 else plural


def visibility_summary(mode, roles=None, user_ids=None):
    """Short label shown on the picker button"""
    roles = roles or []
    user_ids = user_ids or []
    if mode == STUDENTS:
        if not user_ids:
            return 'No students selected'
        return f"{len(user_ids)} {_plural(len(user_ids), 'student', 'students')}"
    if mode == STAFF:
        if not user_ids:
            return 'No staff selected'
        return f"{len(user_ids)} {_plural(len(user_ids), 'staff member', 'staff members')}"
    if not roles or len(roles) == len(settings.USER_ROLES):
        return 'All Roles'
    return ', '.join(role.capitalize() for role in roles)


def _selected(value):
    return bool(value) and value != ALL


def filter_student_candidates(students, grade_level=None, section=None, search=None):
    """Students matching the picker's grade, section and search box"""
    results = list(students)
    if _selected(grade_level):
        results = [s for s in results if s.grade_level == grade_level]
    if _selected(section):
        results = [s for s in results if s.section == section]
    if search:
        query = search.strip().lower()
        results = [
            s for s in results
            if query in s.full_name.lower() or query in (s.admission_number or '').lower()
        ]
    return results


def filter_staff_candidates(staff, search=None):
    """Staff matching the search box by name or role tag"""
    results = list(staff)
    if search:
        query = search.strip().lower()
        results = [s for s in results if query in s.full_name.lower() or query in s.tag.lower()]
    return results


def toggle_all(selected_ids, candidate_ids):
    """Select every candidate, or clear them when all are already selected"""
    selected = list(selected_ids)
    candidates = list(candidate_ids)
    if candidates and all(c in selected for c in candidates):
        return [s for s in selected if s not in candidates]
    for candidate in candidates:
        if candidate not in selected:
            selected.append(candidate)
    return selected


def _naive_utc(value):
    # MongoDB hands back naive UTC datetimes
    if value is not None and timezone.is_aware(value):
        return timezone.make_naive(value, dt_timezone.utc)
    return value


def in_time_window(item, now=None):
    now = _naive_utc(now or timezone.now())
    start = _naive_utc(item.visible_from)
    end = _naive_utc(item.visible_until)
    if start and now < start:
        return False
    if end and now > end:
        return False
    return True


def is_visible_to(item, user, student=None, now=None):
    """Whether a signed in user (and their student record, if any) may see an item"""
    if not item.is_active or not in_time_window(item, now):
        return False

    mode = item.visibility_mode or ROLES
    user_ids = {str(i) for i in (item.user_ids or [])}

    if mode == STUDENTS:
        if student is not None and str(student.id) in user_ids:
            return True
        return str(user.pk) in user_ids
    if mode == STAFF:
        return str(user.pk) in user_ids

    roles = item.visible_to_roles or []
    return not roles or getattr(user, 'role', None) in roles
