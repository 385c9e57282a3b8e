# billing/models.py - School services (transport, lunch...) and student subscriptions

from mongoengine import (
    Document, EmbeddedDocument, StringField, FloatField, BooleanField, IntField, DateField,
    DateTimeField, ReferenceField, ListField, EmbeddedDocumentField, CASCADE,
)
from datetime import datetime
from students.models import Student


class GradeCharge(EmbeddedDocument):
    """Price of a service for one grade level"""

    grade_level = StringField(max_length=20, required=True)
    charge_amount = FloatField(min_value=0, required=True)
    is_active = BooleanField(default=True)


class SchoolService(Document):
    SERVICE_TYPES = [
        ('recurring', 'Recurring'),
        ('one_time', 'One Time'),
    ]

    CHARGE_FREQUENCIES = [
        ('monthly', 'Monthly'),
        ('quarterly', 'Quarterly'),
        ('yearly', 'Yearly'),
        ('one_time', 'One Time'),
    ]

    name = StringField(max_length=100, required=True)
    code = StringField(max_length=20, required=True)
    description = StringField()
    service_type = StringField(max_length=20, choices=SERVICE_TYPES, default='recurring')
    charge_frequency = StringField(max_length=20, choices=CHARGE_FREQUENCIES, default='monthly')
    default_charge = FloatField(min_value=0, default=0.0)
    is_mandatory = BooleanField(default=False)
    is_active = BooleanField(default=True)
    display_order = IntField(default=0)
    grade_charges = ListField(EmbeddedDocumentField(GradeCharge))
    campus_id = StringField(max_length=64)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'school_services',
        'indexes': [
            'campus_id', 'is_active',
            {'fields': ('campus_id', 'code'), 'unique': True},
        ],
        'ordering': ['display_order', 'name'],
    }

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        self.updated_at = datetime.now()
        return super().save(*args, **kwargs)

    def grade_charge_for(self, grade_level):
        """Active charge for a grade level, or None"""
        if not grade_level:
            return None
        for charge in self.grade_charges:
            if charge.is_active and charge.grade_level == grade_level:
                return charge.charge_amount
        return None


class StudentService(Document):
    """A student's subscription to a service"""

    student = ReferenceField(Student, required=True, reverse_delete_rule=CASCADE)
    service = ReferenceField(SchoolService, required=True, reverse_delete_rule=CASCADE, unique_with='student')
    start_date = DateField(default=lambda: datetime.now().date())
    end_date = DateField()
    custom_charge = FloatField(min_value=0)
    is_active = BooleanField(default=True)
    campus_id = StringField(max_length=64)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'student_services',
        'indexes': [('student', 'is_active'), 'service'],
    }

    def __str__(self):
        return f"{self.student.full_name} - {self.service.name}"

    @property
    def charge(self):
        """custom charge, then the grade level charge, then the service default"""
        if self.custom_charge is not None:
            return self.custom_charge
        grade_charge = self.service.grade_charge_for(self.student.grade_level)
        if grade_charge is not None:
            return grade_charge
        return self.service.default_charge or 0.0
