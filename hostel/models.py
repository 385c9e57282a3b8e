# hostel/models.py - Buildings, rooms, room assignments and visitor log

from mongoengine import (
    Document, StringField, IntField, FloatField, BooleanField, DateField, DateTimeField,
    ReferenceField, CASCADE, NULLIFY,
)
from datetime import datetime
from students.models import Student


class HostelBuilding(Document):
    name = StringField(max_length=100, required=True)
    address = StringField()
    floors = IntField(min_value=0)
    description = StringField()
    campus_id = StringField(max_length=64)
    is_active = BooleanField(default=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'hostel_buildings',
        'indexes': ['campus_id', 'is_active'],
        'ordering': ['name'],
    }

    def __str__(self):
        return self.name

    @property
    def room_count(self):
        return HostelRoom.objects.filter(building=self, is_active=True).count()


class HostelRoom(Document):
    ROOM_TYPES = [
        ('single', 'Single'),
        ('double', 'Double'),
        ('dormitory', 'Dormitory'),
    ]

    building = ReferenceField(HostelBuilding, required=True, reverse_delete_rule=CASCADE)
    room_number = StringField(max_length=20, required=True, unique_with='building')
    floor = IntField()
    capacity = IntField(min_value=1, default=1)
    room_type = StringField(max_length=20, choices=ROOM_TYPES, default='double')
    price_per_month = FloatField(min_value=0, default=0.0)
    description = StringField()
    campus_id = StringField(max_length=64)
    is_active = BooleanField(default=True)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'hostel_rooms',
        'indexes': ['building', 'campus_id', 'is_active'],
        'ordering': ['room_number'],
    }

    def __str__(self):
        return f"{self.building.name} - {self.room_number}"

    @property
    def occupancy(self):
        return HostelRoomAssignment.objects.filter(room=self, is_active=True).count()

    @property
    def available_beds(self):
        return max((self.capacity or 0) - self.occupancy, 0)


class HostelRoomAssignment(Document):
    room = ReferenceField(HostelRoom, required=True, reverse_delete_rule=CASCADE)
    student = ReferenceField(Student, required=True, reverse_delete_rule=CASCADE)
    assigned_date = DateField(required=True)
    released_date = DateField()
    is_active = BooleanField(default=True)
    notes = StringField()
    campus_id = StringField(max_length=64)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'hostel_room_assignments',
        'indexes': [('student', 'is_active'), ('room', 'is_active'), 'campus_id'],
        'ordering': ['-created_at'],
    }

    def __str__(self):
        return f"{self.student.full_name} in {self.room.room_number}"


class HostelVisit(Document):
    student = ReferenceField(Student, required=True, reverse_delete_rule=CASCADE)
    room = ReferenceField(HostelRoom, reverse_delete_rule=NULLIFY)
    visitor_name = StringField(max_length=150, required=True)
    visitor_phone = StringField(max_length=20)
    visitor_relation = StringField(max_length=50)
    purpose = StringField()
    check_in = DateTimeField(default=datetime.now)
    check_out = DateTimeField()
    notes = StringField()
    campus_id = StringField(max_length=64)

    meta = {
        'collection': 'hostel_visits',
        'indexes': ['student', 'room', 'campus_id', 'check_in'],
        'ordering': ['-check_in'],
    }

    def __str__(self):
        return f"{self.visitor_name} visiting {self.student.full_name}"


class HostelRentalFee(Document):
    """Rent billed to a resident for one period"""

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('partial', 'Partial'),
        ('paid', 'Paid'),
        ('waived', 'Waived'),
    ]

    assignment = ReferenceField(HostelRoomAssignment, required=True, reverse_delete_rule=CASCADE)
    student = ReferenceField(Student, required=True, reverse_delete_rule=CASCADE)
    room = ReferenceField(HostelRoom, required=True, reverse_delete_rule=CASCADE)
    period_start = DateField(required=True)
    period_end = DateField(required=True)
    base_amount = FloatField(min_value=0, required=True)
    factor = FloatField(min_value=0, default=1.0)
    final_amount = FloatField(min_value=0, required=True)
    status = StringField(max_length=10, choices=STATUS_CHOICES, default='pending')
    amount_paid = FloatField(min_value=0, default=0.0)
    paid_at = DateTimeField()
    notes = StringField()
    campus_id = StringField(max_length=64)
    created_at = DateTimeField(default=datetime.now)
    updated_at = DateTimeField(default=datetime.now)

    meta = {
        'collection': 'hostel_rental_fees',
        'indexes': ['assignment', 'student', ('period_start', 'period_end'), 'campus_id'],
        'ordering': ['-period_start'],
    }

    def __str__(self):
        return f"{self.student.full_name} {self.period_start} - {self.period_end}"

    @property
    def balance(self):
        return round(max((self.final_amount or 0) - (self.amount_paid or 0), 0), 2)
