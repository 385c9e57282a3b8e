# grades/serializers.py

from rest_framework import serializers

from core.serializers import DocumentSerializer, ReferenceIdField
from students.models import Student
from .models import (
    CommentCodeScale, CommentCode, HistoryMarkingPeriod, GradingScale, GradingScaleGrade, FinalGrade,
)
from .config import ASSIGNMENT_SORTING_CHOICES


class CommentCodeScaleSerializer(DocumentSerializer):
    document = CommentCodeScale

    title = serializers.CharField(max_length=100)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    code_count = serializers.SerializerMethodField()

    def get_code_count(self, obj):
        return CommentCode.objects.filter(scale=obj, is_active=True).count()


class CommentCodeSerializer(DocumentSerializer):
    document = CommentCode

    scale_id = ReferenceIdField(CommentCodeScale, entity_name='Comment code scale', source='scale')
    title = serializers.CharField(max_length=100)
    short_name = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    sort_order = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)


class HistoryMarkingPeriodSerializer(DocumentSerializer):
    document = HistoryMarkingPeriod

    mp_type = serializers.ChoiceField(choices=HistoryMarkingPeriod.MP_TYPES, default='quarter')
    name = serializers.CharField(max_length=100)
    short_name = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    post_end_date = serializers.DateField(required=False, allow_null=True)
    school_year = serializers.CharField(max_length=20)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)


class GradingScaleGradeSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=10)
    gpa_value = serializers.FloatField(default=0.0)
    break_off = serializers.FloatField(default=0.0, min_value=0)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    sort_order = serializers.IntegerField(default=0)


class GradingScaleSerializer(DocumentSerializer):
    document = GradingScale

    title = serializers.CharField(max_length=100)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_default = serializers.BooleanField(default=False)
    hr_gpa_value = serializers.FloatField(required=False, allow_null=True)
    hhr_gpa_value = serializers.FloatField(required=False, allow_null=True)
    grades = GradingScaleGradeSerializer(many=True, required=False)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=True)

    def validate(self, attrs):
        hr = attrs.get('hr_gpa_value', getattr(self.instance, 'hr_gpa_value', None))
        hhr = attrs.get('hhr_gpa_value', getattr(self.instance, 'hhr_gpa_value', None))
        if hr is not None and hhr is not None and hhr < hr:
            raise serializers.ValidationError(
                "High Honor Roll GPA cannot be lower than Honor Roll GPA."
            )
        return attrs

    def _embed_grades(self, validated_data):
        if 'grades' in validated_data:
            rows = sorted(validated_data['grades'], key=lambda g: g.get('sort_order', 0))
            validated_data['grades'] = [GradingScaleGrade(**row) for row in rows]
        return validated_data

    def create(self, validated_data):
        return super().create(self._embed_grades(validated_data))

    def update(self, instance, validated_data):
        return super().update(instance, self._embed_grades(validated_data))


class FinalGradeSerializer(DocumentSerializer):
    document = FinalGrade

    student_id = ReferenceIdField(Student, source='student')
    student_name = serializers.SerializerMethodField()
    marking_period_id = serializers.CharField(max_length=64)
    course_title = serializers.CharField(max_length=150)
    teacher_name = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    percent = serializers.FloatField(required=False, allow_null=True, min_value=0)
    grade_title = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    gpa_value = serializers.FloatField(required=False, allow_null=True)
    grading_scale_id = ReferenceIdField(
        GradingScale, entity_name='Grading scale', source='grading_scale',
        required=False, allow_null=True,
    )
    does_honor_roll = serializers.BooleanField(default=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    posted_at = serializers.DateTimeField(read_only=True)

    def get_student_name(self, obj):
        return obj.student.full_name if obj.student else ''


class GradebookConfigSerializer(serializers.Serializer):
    """Typed gradebook settings; every key is optional on save"""

    assignment_sorting = serializers.ChoiceField(choices=ASSIGNMENT_SORTING_CHOICES, required=False)
    auto_save_final_grades = serializers.BooleanField(required=False)
    weight_assignment_types = serializers.BooleanField(required=False)
    weight_assignments = serializers.BooleanField(required=False)
    default_assigned_date = serializers.BooleanField(required=False)
    default_due_date = serializers.BooleanField(required=False)
    anomalous_max = serializers.IntegerField(required=False, min_value=0)
    latency = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    breakoff_grades = serializers.DictField(required=False)
    comment_codes = serializers.DictField(required=False)


class CertificateRequestSerializer(serializers.Serializer):
    marking_period_id = serializers.CharField(max_length=64)
    student_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    template_html = serializers.CharField(required=False, allow_blank=True)
    frame_image = serializers.CharField(required=False, allow_blank=True)
    school_name = serializers.CharField(required=False, allow_blank=True)
    campus_name = serializers.CharField(required=False, allow_blank=True)
    academic_year = serializers.CharField(required=False, allow_blank=True)
