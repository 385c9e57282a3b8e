# hostel/serializers.py

from rest_framework import serializers

from core.serializers import DocumentSerializer, ReferenceIdField
from students.models import Student
from .models import HostelBuilding, HostelRoom, HostelRoomAssignment, HostelVisit, HostelRentalFee
from .services import create_visit


class HostelBuildingSerializer(DocumentSerializer):
    document = HostelBuilding

    name = serializers.CharField(max_length=100)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    floors = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    room_count = serializers.IntegerField(read_only=True)


class HostelRoomSerializer(DocumentSerializer):
    document = HostelRoom

    building_id = ReferenceIdField(HostelBuilding, entity_name='Building', source='building')
    building_name = serializers.SerializerMethodField()
    room_number = serializers.CharField(max_length=20)
    floor = serializers.IntegerField(required=False, allow_null=True)
    capacity = serializers.IntegerField(min_value=1, default=1)
    room_type = serializers.ChoiceField(choices=HostelRoom.ROOM_TYPES, default='double')
    price_per_month = serializers.FloatField(min_value=0, default=0.0)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    occupancy = serializers.IntegerField(read_only=True)
    available_beds = serializers.IntegerField(read_only=True)

    def get_building_name(self, obj):
        return obj.building.name if obj.building else None

    def validate(self, attrs):
        building = attrs.get('building', getattr(self.instance, 'building', None))
        room_number = attrs.get('room_number', getattr(self.instance, 'room_number', None))
        if building is not None and room_number:
            existing = HostelRoom.objects.filter(building=building, room_number=room_number).first()
            if existing and not (self.instance and existing.id == self.instance.id):
                raise serializers.ValidationError(
                    {'room_number': "This building already has a room with this number."}
                )
        capacity = attrs.get('capacity')
        if self.instance is not None and capacity is not None and capacity < self.instance.occupancy:
            raise serializers.ValidationError(
                {'capacity': "Capacity cannot be lower than the current occupancy."}
            )
        if attrs.get('campus_id') is None and building is not None and not self.instance:
            attrs['campus_id'] = building.campus_id
        return attrs


class HostelRoomAssignmentSerializer(DocumentSerializer):
    document = HostelRoomAssignment

    room_id = serializers.SerializerMethodField()
    room_number = serializers.SerializerMethodField()
    building_name = serializers.SerializerMethodField()
    student_id = serializers.SerializerMethodField()
    student_name = serializers.SerializerMethodField()
    assigned_date = serializers.DateField(read_only=True)
    released_date = serializers.DateField(read_only=True)
    is_active = serializers.BooleanField(read_only=True)
    notes = serializers.CharField(read_only=True)

    def get_room_id(self, obj):
        return str(obj.room.id)

    def get_room_number(self, obj):
        return obj.room.room_number

    def get_building_name(self, obj):
        return obj.room.building.name if obj.room.building else None

    def get_student_id(self, obj):
        return str(obj.student.id)

    def get_student_name(self, obj):
        return obj.student.full_name


class AssignStudentSerializer(serializers.Serializer):
    room_id = serializers.CharField()
    student_id = serializers.CharField()
    assigned_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class HostelVisitSerializer(DocumentSerializer):
    document = HostelVisit

    student_id = ReferenceIdField(Student, source='student')
    student_name = serializers.SerializerMethodField()
    room_id = ReferenceIdField(
        HostelRoom, entity_name='Room', source='room', required=False, allow_null=True
    )
    room_number = serializers.SerializerMethodField()
    visitor_name = serializers.CharField(max_length=150)
    visitor_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    visitor_relation = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    purpose = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    check_in = serializers.DateTimeField(required=False)
    check_out = serializers.DateTimeField(read_only=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    campus_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)

    def get_student_name(self, obj):
        return obj.student.full_name

    def get_room_number(self, obj):
        return obj.room.room_number if obj.room else None

    def create(self, validated_data):
        student = validated_data.pop('student')
        room = validated_data.pop('room', None)
        return create_visit(student, room, **validated_data)


class HostelRentalFeeSerializer(DocumentSerializer):
    document = HostelRentalFee

    student_id = serializers.SerializerMethodField()
    student_name = serializers.SerializerMethodField()
    room_id = serializers.SerializerMethodField()
    room_number = serializers.SerializerMethodField()
    period_start = serializers.DateField(read_only=True)
    period_end = serializers.DateField(read_only=True)
    base_amount = serializers.FloatField(read_only=True)
    factor = serializers.FloatField(read_only=True)
    final_amount = serializers.FloatField(read_only=True)
    amount_paid = serializers.FloatField(read_only=True)
    balance = serializers.FloatField(read_only=True)
    status = serializers.CharField(read_only=True)
    paid_at = serializers.DateTimeField(read_only=True)
    notes = serializers.CharField(read_only=True)

    def get_student_id(self, obj):
        return str(obj.student.id)

    def get_student_name(self, obj):
        return obj.student.full_name

    def get_room_id(self, obj):
        return str(obj.room.id)

    def get_room_number(self, obj):
        return obj.room.room_number


class GenerateRentalFeesSerializer(serializers.Serializer):
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    factor = serializers.FloatField(min_value=0, default=1.0)
    building_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if attrs['period_end'] < attrs['period_start']:
            raise serializers.ValidationError({'period_end': "Period end must be on or after period start."})
        return attrs


class FeePaymentSerializer(serializers.Serializer):
    amount = serializers.FloatField(min_value=0.01)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
