# students/utils.py

def sort_students_by_name(students):
    """
    Sorts a list of student objects by last name, then first name (A-Z).
    """
    return sorted(students, key=lambda s: ((s.last_name or '').lower(), (s.first_name or '').lower()))


def sort_students_by_number(students):
    """
    Sorts students by student_number (numerically when possible).
    Students without a number go last.
    """
    def number_sort_key(s):
        number = s.student_number
        if not number:
            return (1, '', 0)
        if number.isdigit():
            return (0, '', int(number))
        return (0, number, 0)
    return sorted(students, key=number_sort_key)


def search_students(students, query):
    """Case-insensitive match on full name, student number, admission number or email"""
    query = (query or '').strip().lower()
    if not query:
        return list(students)

    result = []
    for student in students:
        haystack = [
            student.full_name,
            student.student_number or '',
            student.admission_number or '',
            student.email or '',
        ]
        if any(query in value.lower() for value in haystack):
            result.append(student)
    return result
