# billing/serializers.py

from rest_framework import serializers

from core.serializers import DocumentSerializer
from .models import SchoolService, StudentService, GradeCharge


class GradeChargeSerializer(serializers.Serializer):
    grade_level = serializers.CharField(max_length=20)
    charge_amount = serializers.FloatField(min_value=0)
    is_active = serializers.BooleanField(default=True)


class SchoolServiceSerializer(DocumentSerializer):
    document = SchoolService

    name = serializers.CharField(max_length=100)
    code = serializers.CharField(max_length=20)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    service_type = serializers.ChoiceField(choices=SchoolService.SERVICE_TYPES, default='recurring')
    charge_frequency = serializers.ChoiceField(choices=SchoolService.CHARGE_FREQUENCIES, default='monthly')
    default_charge = serializers.FloatField(min_value=0, default=0.0)
    is_mandatory = serializers.BooleanField(default=False)
    is_active = serializers.BooleanField(default=True)
    display_order = serializers.IntegerField(default=0)
    grade_charges = GradeChargeSerializer(many=True, required=False)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    subscriber_count = serializers.SerializerMethodField()

    def get_subscriber_count(self, obj):
        return StudentService.objects.filter(service=obj, is_active=True).count()

    def validate_code(self, value):
        return value.strip().upper()

    def validate(self, attrs):
        if 'campus_id' in attrs and not attrs['campus_id']:
            attrs['campus_id'] = None
        code = attrs.get('code')
        if code:
            campus_id = attrs.get('campus_id', getattr(self.instance, 'campus_id', None)) or None
            existing = SchoolService.objects.filter(code=code, campus_id=campus_id).first()
            if existing and not (self.instance and existing.id == self.instance.id):
                raise serializers.ValidationError({'code': "A service with this code already exists."})
        if 'grade_charges' in attrs:
            attrs['grade_charges'] = [GradeCharge(**charge) for charge in attrs['grade_charges']]
        return attrs


class GradeChargesSerializer(serializers.Serializer):
    charges = GradeChargeSerializer(many=True)

    def validate_charges(self, value):
        levels = [charge['grade_level'] for charge in value]
        if len(levels) != len(set(levels)):
            raise serializers.ValidationError("Each grade level can only have one charge.")
        return value


class StudentServiceSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    student_id = serializers.SerializerMethodField()
    service_id = serializers.SerializerMethodField()
    service_name = serializers.SerializerMethodField()
    service_code = serializers.SerializerMethodField()
    charge_frequency = serializers.SerializerMethodField()
    start_date = serializers.DateField(read_only=True)
    end_date = serializers.DateField(read_only=True)
    custom_charge = serializers.FloatField(read_only=True)
    charge = serializers.FloatField(read_only=True)
    is_active = serializers.BooleanField(read_only=True)

    def get_student_id(self, obj):
        return str(obj.student.id)

    def get_service_id(self, obj):
        return str(obj.service.id)

    def get_service_name(self, obj):
        return obj.service.name

    def get_service_code(self, obj):
        return obj.service.code

    def get_charge_frequency(self, obj):
        return obj.service.charge_frequency


class SubscribeSerializer(serializers.Serializer):
    service_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    custom_charges = serializers.DictField(child=serializers.FloatField(min_value=0), required=False)
