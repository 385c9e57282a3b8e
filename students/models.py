# students/models.py - Student records

from mongoengine import Document, StringField, EmailField, DateTimeField, ListField, BooleanField, DateField
import datetime


class Student(Document):
    """Student record as shown on the admin student pages"""

    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    ]

    BLOOD_GROUP_CHOICES = [
        ('A+', 'A+'), ('A-', 'A-'),
        ('B+', 'B+'), ('B-', 'B-'),
        ('AB+', 'AB+'), ('AB-', 'AB-'),
        ('O+', 'O+'), ('O-', 'O-'),
    ]

    # Basic Information
    student_number = StringField(max_length=50, required=True, unique=True)
    admission_number = StringField(max_length=50)
    first_name = StringField(max_length=100, required=True)
    last_name = StringField(max_length=100, required=True)
    email = EmailField()
    phone_number = StringField(max_length=20)
    date_of_birth = DateField()
    gender = StringField(max_length=10, choices=GENDER_CHOICES)
    address = StringField()
    user_id = StringField(max_length=64)  # Django User pk, when the student can log in

    # Academic Information
    grade_level = StringField(max_length=20)
    section = StringField(max_length=50)
    admission_date = DateField()

    # Medical
    blood_group = StringField(max_length=3, choices=BLOOD_GROUP_CHOICES)
    allergies = ListField(StringField(max_length=100))

    campus_id = StringField(max_length=64)
    is_active = BooleanField(default=True)

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'students',
        'indexes': [
            'student_number',
            'grade_level',
            'section',
            'campus_id',
            'is_active'
        ]
    }

    def save(self, *args, **kwargs):
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.student_number})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
