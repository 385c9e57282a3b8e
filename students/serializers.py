# students/serializers.py

from django.conf import settings
from rest_framework import serializers
from core.serializers import DocumentSerializer
from .models import Student
import datetime


class StudentSerializer(DocumentSerializer):
    """Serializer for Student model"""
    document = Student

    student_number = serializers.CharField(max_length=50)
    admission_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=Student.GENDER_CHOICES, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    user_id = serializers.CharField(max_length=64, required=False, allow_blank=True)

    # Academic Information
    grade_level = serializers.CharField(max_length=20, required=False, allow_blank=True)
    section = serializers.CharField(max_length=50, required=False, allow_blank=True)
    admission_date = serializers.DateField(required=False, allow_null=True)

    # Medical
    blood_group = serializers.ChoiceField(choices=Student.BLOOD_GROUP_CHOICES, required=False, allow_blank=True)
    allergies = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    is_active = serializers.BooleanField(default=True)
    full_name = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def validate_student_number(self, value):
        """Validate student number uniqueness"""
        existing = Student.objects.filter(student_number=value).first()
        if existing and not (self.instance and existing.id == self.instance.id):
            raise serializers.ValidationError("A student with this number already exists.")
        return value

    def validate_date_of_birth(self, value):
        if value and value > datetime.date.today():
            raise serializers.ValidationError("Date of birth cannot be in the future.")
        if value and value < datetime.date(1900, 1, 1):
            raise serializers.ValidationError("Please enter a valid date of birth.")
        return value

    def validate_grade_level(self, value):
        if value and value not in settings.STUDENT_GRADE_LEVELS:
            raise serializers.ValidationError(f"Unknown grade level: {value}")
        return value

    def validate_admission_date(self, value):
        if value and value > datetime.date.today():
            raise serializers.ValidationError("Admission date cannot be in the future.")
        return value

    def validate(self, attrs):
        # Blank choice strings are stored as missing values
        for field in ('gender', 'blood_group', 'email'):
            if attrs.get(field) == '':
                attrs[field] = None
        return attrs
