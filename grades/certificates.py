# grades/certificates.py - Honor roll certificate templates

import re
from datetime import date
from html import escape

from django.conf import settings

from .honor_roll import honor_level_label

SUBSTITUTION_TOKENS = {
    "__FIRST_NAME__": "First Name",
    "__LAST_NAME__": "Last Name",
    "__FULL_NAME__": "Full Name",
    "__EMAIL__": "Email",
    "__PHONE__": "Phone",
    "__PHOTO_URL__": "Photo URL",
    "__STUDENT_ID__": "Student ID",
    "__STUDENT_NUMBER__": "Student Number",
    "__ADMISSION_NUMBER__": "Admission Number",
    "__ROLL_NUMBER__": "Roll Number",
    "__REGISTRATION_NUMBER__": "Registration Number",
    "__GRADE_LEVEL__": "Grade Level",
    "__CLASS_NAME__": "Class Name",
    "__SECTION__": "Section",
    "__SECTION_NAME__": "Section Name",
    "__ACADEMIC_YEAR__": "Academic Year",
    "__HONOR_LEVEL__": "Honor Level",
    "__ADMISSION_DATE__": "Admission Date",
    "__JOINING_DATE__": "Joining Date",
    "__DATE_OF_BIRTH__": "Date of Birth",
    "__AGE__": "Age",
    "__GENDER__": "Gender",
    "__BLOOD_GROUP__": "Blood Group",
    "__NATIONALITY__": "Nationality",
    "__RELIGION__": "Religion",
    "__CASTE__": "Caste",
    "__MOTHER_TONGUE__": "Mother Tongue",
    "__ADDRESS__": "Address",
    "__STREET_ADDRESS__": "Street Address",
    "__CITY__": "City",
    "__STATE__": "State",
    "__COUNTRY__": "Country",
    "__POSTAL_CODE__": "Postal Code",
    "__PERMANENT_ADDRESS__": "Permanent Address",
    "__CURRENT_ADDRESS__": "Current Address",
    "__FATHER_NAME__": "Father Name",
    "__MOTHER_NAME__": "Mother Name",
    "__PARENT_NAME__": "Parent Name",
    "__GUARDIAN_NAME__": "Guardian Name",
    "__PARENT_PHONE__": "Parent Phone",
    "__FATHER_PHONE__": "Father Phone",
    "__MOTHER_PHONE__": "Mother Phone",
    "__PARENT_EMAIL__": "Parent Email",
    "__FATHER_OCCUPATION__": "Father Occupation",
    "__MOTHER_OCCUPATION__": "Mother Occupation",
    "__EMERGENCY_CONTACT__": "Emergency Contact",
    "__EMERGENCY_PHONE__": "Emergency Phone",
    "__EMERGENCY_NAME__": "Emergency Name",
    "__EMERGENCY_RELATION__": "Emergency Relation",
    "__MEDICAL_CONDITIONS__": "Medical Conditions",
    "__ALLERGIES__": "Allergies",
    "__MEDICATIONS__": "Medications",
    "__SPECIAL_NEEDS__": "Special Needs",
    "__BUS_ROUTE__": "Bus Route",
    "__TRANSPORT_MODE__": "Transport Mode",
    "__PICKUP_POINT__": "Pickup Point",
    "__DROP_POINT__": "Drop Point",
    "__CAMPUS_NAME__": "Campus Name",
    "__CAMPUS_ADDRESS__": "Campus Address",
    "__CAMPUS_PHONE__": "Campus Phone",
    "__CAMPUS_CODE__": "Campus Code",
    "__CAMPUS_EMAIL__": "Campus Email",
    "__SCHOOL_NAME__": "School Name",
    "__SCHOOL_ADDRESS__": "School Address",
    "__SCHOOL_PHONE__": "School Phone",
    "__SCHOOL_EMAIL__": "School Email",
    "__SCHOOL_LOGO__": "School Logo",
    "__SCHOOL_WEBSITE__": "School Website",
    "__SCHOOL_MOTTO__": "School Motto",
    "__CURRENT_DATE__": "Current Date",
    "__CURRENT_YEAR__": "Current Year",
    "__ISSUE_DATE__": "Issue Date",
}

TOKEN_CATEGORIES = {
    "Basic Info": [
        "__FULL_NAME__", "__FIRST_NAME__", "__LAST_NAME__", "__EMAIL__", "__PHONE__", "__PHOTO_URL__",
    ],
    "Student ID": [
        "__STUDENT_ID__", "__STUDENT_NUMBER__", "__ADMISSION_NUMBER__",
        "__ROLL_NUMBER__", "__REGISTRATION_NUMBER__",
    ],
    "Academic": [
        "__GRADE_LEVEL__", "__CLASS_NAME__", "__SECTION__", "__SECTION_NAME__",
        "__ACADEMIC_YEAR__", "__HONOR_LEVEL__",
    ],
    "Personal": [
        "__ADMISSION_DATE__", "__JOINING_DATE__", "__DATE_OF_BIRTH__", "__AGE__", "__GENDER__",
        "__BLOOD_GROUP__", "__NATIONALITY__", "__RELIGION__", "__CASTE__", "__MOTHER_TONGUE__",
    ],
    "Address": [
        "__ADDRESS__", "__STREET_ADDRESS__", "__CITY__", "__STATE__", "__COUNTRY__",
        "__POSTAL_CODE__", "__PERMANENT_ADDRESS__", "__CURRENT_ADDRESS__",
    ],
    "Parent/Guardian": [
        "__FATHER_NAME__", "__MOTHER_NAME__", "__PARENT_NAME__", "__GUARDIAN_NAME__",
        "__PARENT_PHONE__", "__FATHER_PHONE__", "__MOTHER_PHONE__", "__PARENT_EMAIL__",
        "__FATHER_OCCUPATION__", "__MOTHER_OCCUPATION__",
    ],
    "Emergency": [
        "__EMERGENCY_CONTACT__", "__EMERGENCY_PHONE__", "__EMERGENCY_NAME__", "__EMERGENCY_RELATION__",
    ],
    "Medical": ["__MEDICAL_CONDITIONS__", "__ALLERGIES__", "__MEDICATIONS__", "__SPECIAL_NEEDS__"],
    "Transport": ["__BUS_ROUTE__", "__TRANSPORT_MODE__", "__PICKUP_POINT__", "__DROP_POINT__"],
    "Campus/School": [
        "__CAMPUS_NAME__", "__CAMPUS_ADDRESS__", "__CAMPUS_PHONE__", "__CAMPUS_CODE__",
        "__CAMPUS_EMAIL__", "__SCHOOL_NAME__", "__SCHOOL_ADDRESS__", "__SCHOOL_PHONE__",
        "__SCHOOL_EMAIL__", "__SCHOOL_LOGO__", "__SCHOOL_WEBSITE__", "__SCHOOL_MOTTO__",
    ],
    "Dates": ["__CURRENT_DATE__", "__CURRENT_YEAR__", "__ISSUE_DATE__"],
}

DEFAULT_CERTIFICATE_HTML = """<div style="text-align: center; font-family: 'Times New Roman', serif; padding: 40px;">
  <h1 style="font-size: 36px; color: #022172; margin-bottom: 10px;">Certificate of Achievement</h1>
  <p style="font-size: 18px; color: #666; margin-bottom: 30px;">__SCHOOL_NAME__</p>
  <p style="font-size: 16px; margin-bottom: 10px;">This is to certify that</p>
  <h2 style="font-size: 28px; color: #0369a1; margin: 20px 0;">__FULL_NAME__</h2>
  <p style="font-size: 16px; margin-bottom: 5px;">of Grade __GRADE_LEVEL__ - Section __SECTION_NAME__</p>
  <p style="font-size: 16px; margin-bottom: 20px;">has been placed on the</p>
  <h3 style="font-size: 24px; color: #022172; margin: 15px 0;">__HONOR_LEVEL__</h3>
  <p style="font-size: 16px; margin-bottom: 30px;">for the Academic Year __ACADEMIC_YEAR__</p>
  <div style="display: flex; justify-content: space-between; margin-top: 50px; padding: 0 60px;">
    <div style="text-align: center;">
      <div style="border-top: 1px solid #333; width: 200px; margin-top: 40px; padding-top: 5px;">Principal</div>
    </div>
    <div style="text-align: center;">
      <p style="margin-bottom: 0;">__CURRENT_DATE__</p>
      <div style="border-top: 1px solid #333; width: 200px; margin-top: 5px; padding-top: 5px;">Date</div>
    </div>
  </div>
</div>"""

PRINT_STYLES = """
    @page { size: landscape; margin: 0; }
    body { margin: 0; padding: 0; }
    .certificate-page {
      width: 100vw; height: 100vh;
      page-break-after: always;
      display: flex; align-items: center; justify-content: center;
      position: relative; box-sizing: border-box;
    }
    .certificate-page:last-child { page-break-after: auto; }
    .certificate-frame {
      position: absolute; top: 0; left: 0; right: 0; bottom: 0;
      width: 100%; height: 100%; object-fit: contain; z-index: 0;
    }
    .certificate-content {
      position: relative; z-index: 1;
      width: 80%; max-width: 900px;
    }
    @media print { body { -webkit-print-color-adjust: exact; print-color-adjust: exact; } }
"""

LEFTOVER_TOKEN = re.compile(r'__[A-Z_]+__')


def age_on(born, today):
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def token_replacements(student, context=None, today=None):
    """Token values for one honor roll row (a dict as returned by the honor roll)"""
    context = context or {}
    today = today or date.today()
    empty = settings.CERTIFICATE_EMPTY_VALUE
    first = student.get('first_name') or ''
    last = student.get('last_name') or ''
    section = student.get('section') or empty
    issue_date = today.strftime('%m/%d/%Y')
    school_name = context.get('school_name') or context.get('campus_name') or empty

    values = {
        "__FIRST_NAME__": first or empty,
        "__LAST_NAME__": last or empty,
        "__FULL_NAME__": f"{first} {last}".strip() or empty,
        "__STUDENT_ID__": student.get('student_id') or empty,
        "__STUDENT_NUMBER__": student.get('student_number') or empty,
        "__GRADE_LEVEL__": student.get('grade_level') or empty,
        "__CLASS_NAME__": section,
        "__SECTION__": section,
        "__SECTION_NAME__": section,
        "__ACADEMIC_YEAR__": context.get('academic_year') or empty,
        "__HONOR_LEVEL__": honor_level_label(
            student.get('honor_level'), settings.HONOR_ROLL_DEFAULT_LABEL
        ),
        "__SCHOOL_NAME__": school_name,
        "__CAMPUS_NAME__": context.get('campus_name') or school_name,
        "__CURRENT_DATE__": issue_date,
        "__CURRENT_YEAR__": str(today.year),
        "__ISSUE_DATE__": issue_date,
    }
    for key in ('email', 'phone', 'admission_number', 'date_of_birth', 'gender', 'blood_group', 'address'):
        if student.get(key):
            values[f"__{key.upper()}__"] = str(student[key])
    if student.get('admission_date'):
        values["__ADMISSION_DATE__"] = values["__JOINING_DATE__"] = student['admission_date']
    if student.get('date_of_birth'):
        values["__AGE__"] = str(age_on(date.fromisoformat(student['date_of_birth']), today))
    if student.get('allergies'):
        values["__ALLERGIES__"] = ', '.join(student['allergies'])
    return values


def substitute_tokens(html, student, context=None, today=None):
    """Fill a certificate template for one student; unknown tokens become N/A"""
    result = html
    for token, value in token_replacements(student, context, today).items():
        result = result.replace(token, escape(value))
    return LEFTOVER_TOKEN.sub(settings.CERTIFICATE_EMPTY_VALUE, result)


def render_certificates(template_html, students, context=None, frame_image=None, today=None):
    """A printable landscape HTML document with one certificate page per student"""
    parts = [
        '<!DOCTYPE html><html><head><title>Honor Roll Certificates</title>',
        f'<style>{PRINT_STYLES}</style>',
        '</head><body>',
    ]
    for student in students:
        content = substitute_tokens(template_html, student, context, today)
        parts.append('<div class="certificate-page">')
        if frame_image:
            parts.append(f'<img class="certificate-frame" src="{escape(frame_image)}" />')
        parts.append(f'<div class="certificate-content">{content}</div></div>')
    parts.append('</body></html>')
    return ''.join(parts)
