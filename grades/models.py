# grades/models.py - Comment codes, marking period history, gradebook settings and final grades

from mongoengine import (
    Document, EmbeddedDocument, StringField, DateTimeField, ReferenceField, IntField,
    BooleanField, FloatField, DateField, ListField, EmbeddedDocumentField, CASCADE,
)
from datetime import datetime
from students.models import Student


class TimestampedDocument(Document):
    """Adds created/updated stamps to admin-managed records"""

    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {'abstract': True}

    def save(self, *args, **kwargs):
        self.updated_at = datetime.now()
        return super().save(*args, **kwargs)


class CommentCodeScale(TimestampedDocument):
    """A named group of report card comment codes (a tab on the comment codes page)"""

    title = StringField(max_length=100, required=True)
    comment = StringField()
    campus_id = StringField(max_length=64)
    sort_order = IntField()
    is_active = BooleanField(default=True)

    meta = {
        'collection': 'comment_code_scales',
        'indexes': ['campus_id', 'is_active', 'sort_order']
    }

    def __str__(self):
        return self.title


class CommentCode(TimestampedDocument):
    """A single comment code inside a scale"""

    scale = ReferenceField(CommentCodeScale, required=True, reverse_delete_rule=CASCADE)
    title = StringField(max_length=100, required=True)
    short_name = StringField(max_length=20)
    comment = StringField()
    sort_order = IntField()
    is_active = BooleanField(default=True)

    meta = {
        'collection': 'comment_codes',
        'indexes': ['scale', 'is_active', 'sort_order']
    }

    def __str__(self):
        return f"{self.short_name or self.title}"


class HistoryMarkingPeriod(TimestampedDocument):
    """Marking periods from earlier school years, used when entering historical grades"""

    MP_TYPES = [
        ('year', 'Year'),
        ('semester', 'Semester'),
        ('quarter', 'Quarter'),
    ]

    mp_type = StringField(max_length=10, choices=MP_TYPES, default='quarter')
    name = StringField(max_length=100, required=True)
    short_name = StringField(max_length=20)
    post_end_date = DateField()
    school_year = StringField(max_length=20, required=True)
    campus_id = StringField(max_length=64)

    meta = {
        'collection': 'history_marking_periods',
        'indexes': ['campus_id', 'school_year'],
        'ordering': ['-school_year', 'post_end_date'],
    }

    def __str__(self):
        return f"{self.name} ({self.school_year})"


class GradebookConfigEntry(Document):
    """One gradebook setting stored as text.

    Entries without a campus apply school-wide; entries with a course period
    override the campus level.
    """

    campus_id = StringField(max_length=64)
    course_period_id = StringField(max_length=64)
    config_key = StringField(max_length=50, required=True)
    config_value = StringField(default='')
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'gradebook_config',
        'indexes': [
            {'fields': ('campus_id', 'course_period_id', 'config_key'), 'unique': True},
        ]
    }

    def __str__(self):
        return f"{self.config_key}={self.config_value}"


class GradingScaleGrade(EmbeddedDocument):
    """A letter grade row: percentages at or above break_off earn this grade"""

    title = StringField(max_length=10, required=True)
    gpa_value = FloatField(default=0.0)
    break_off = FloatField(default=0.0)
    comment = StringField()
    sort_order = IntField(default=0)


class GradingScale(TimestampedDocument):
    """Letter grade scale with honor roll thresholds"""

    title = StringField(max_length=100, required=True)
    comment = StringField()
    is_default = BooleanField(default=False)
    hr_gpa_value = FloatField()   # Honor Roll threshold
    hhr_gpa_value = FloatField()  # High Honor Roll threshold
    grades = ListField(EmbeddedDocumentField(GradingScaleGrade))
    campus_id = StringField(max_length=64)
    is_active = BooleanField(default=True)

    meta = {
        'collection': 'grading_scales',
        'indexes': ['campus_id', 'is_default']
    }

    def __str__(self):
        return self.title

    def grade_for_percent(self, percent):
        """Highest break-off the percentage reaches, or None"""
        if percent is None:
            return None
        reached = [g for g in self.grades if percent >= g.break_off]
        if not reached:
            return None
        return max(reached, key=lambda g: g.break_off)


class FinalGrade(Document):
    """A student's posted grade for one course in one marking period"""

    student = ReferenceField(Student, required=True, reverse_delete_rule=CASCADE)
    marking_period_id = StringField(max_length=64, required=True)
    course_title = StringField(max_length=150, required=True)
    teacher_name = StringField(max_length=150)
    percent = FloatField(min_value=0)
    grade_title = StringField(max_length=10)
    gpa_value = FloatField()
    grading_scale = ReferenceField(GradingScale)
    does_honor_roll = BooleanField(default=True)
    campus_id = StringField(max_length=64)
    posted_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'final_grades',
        'indexes': [
            ('student', 'marking_period_id'),
            'marking_period_id',
            'campus_id',
        ]
    }

    def save(self, *args, **kwargs):
        """Fill in letter grade and GPA from the scale when only a percentage is given"""
        if self.grading_scale and self.percent is not None and not self.grade_title:
            grade = self.grading_scale.grade_for_percent(self.percent)
            if grade is not None:
                self.grade_title = grade.title
                if self.gpa_value is None:
                    self.gpa_value = grade.gpa_value
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.student.full_name} - {self.course_title}: {self.grade_title or self.percent}"
