# hostel/services.py - Room assignment and visitor rules

import logging
from datetime import date, datetime

from core.campus import scope_to_campus
from core.exceptions import NotFound, CapacityExceeded, DuplicateAssignment
from core.views import get_document_or_none
from students.models import Student
from .models import HostelBuilding, HostelRoom, HostelRoomAssignment, HostelVisit, HostelRentalFee

logger = logging.getLogger(__name__)


def active_assignment_for(student):
    return HostelRoomAssignment.objects.filter(student=student, is_active=True).first()


def assign_student(room_id, student_id, assigned_date=None, notes=None, campus_id=None):
    """Place a student in a room with a free bed"""
    room = get_document_or_none(HostelRoom, room_id)
    if room is None:
        raise NotFound("Room not found")
    student = get_document_or_none(Student, student_id)
    if student is None:
        raise NotFound("Student not found")

    if room.occupancy >= room.capacity:
        raise CapacityExceeded("Room is at full capacity")

    if active_assignment_for(student) is not None:
        raise DuplicateAssignment(
            "Student already has an active room assignment. Release them first."
        )

    assignment = HostelRoomAssignment(
        room=room,
        student=student,
        assigned_date=assigned_date or date.today(),
        notes=notes,
        campus_id=campus_id or room.campus_id,
    )
    assignment.save()
    logger.info("Assigned student %s to room %s", student.student_number, room.room_number)
    return assignment


def release_assignment(assignment, notes=None):
    assignment.is_active = False
    assignment.released_date = date.today()
    assignment.updated_at = datetime.now()
    if notes:
        assignment.notes = notes
    assignment.save()
    logger.info("Released assignment %s", assignment.id)
    return assignment


def student_room(student):
    """The student's current assignment, or None"""
    return active_assignment_for(student)


def create_visit(student, room=None, **fields):
    """Log a visitor; the room defaults to where the student currently lives"""
    if room is None:
        assignment = active_assignment_for(student)
        if assignment is not None:
            room = assignment.room
    visit = HostelVisit(student=student, room=room, **fields)
    visit.save()
    return visit


def check_out_visit(visit):
    visit.check_out = datetime.now()
    visit.save()
    return visit


def release_inactive_students():
    """Free the beds of students whose records were deactivated"""
    released = 0
    for assignment in HostelRoomAssignment.objects.filter(is_active=True):
        if assignment.student.is_active:
            continue
        release_assignment(assignment, notes="Auto-released: student marked inactive")
        released += 1
    if released:
        logger.info("Auto-released %d inactive student(s) from hostel rooms", released)
    return released


def hostel_stats(campus_id=None):
    buildings = scope_to_campus(HostelBuilding.objects.filter(is_active=True), campus_id)
    rooms = scope_to_campus(HostelRoom.objects.filter(is_active=True), campus_id)
    assignments = scope_to_campus(HostelRoomAssignment.objects.filter(is_active=True), campus_id)
    visits = scope_to_campus(HostelVisit.objects.filter(check_out=None), campus_id)

    total_capacity = sum(room.capacity or 0 for room in rooms)
    occupied = assignments.count()
    return {
        'total_buildings': buildings.count(),
        'total_rooms': rooms.count(),
        'total_capacity': total_capacity,
        'occupied_beds': occupied,
        'occupancy_rate': round(occupied / total_capacity * 100) if total_capacity else 0,
        'active_visitors': visits.count(),
    }


def generate_rental_fees(period_start, period_end, factor=1.0, building_id=None, campus_id=None):
    """Bill every current resident the room's monthly price times factor.

    Returns the number of fees created and their total.
    """
    assignments = scope_to_campus(HostelRoomAssignment.objects.filter(is_active=True), campus_id)
    if building_id:
        building = get_document_or_none(HostelBuilding, building_id)
        if building is None:
            raise NotFound("Building not found")
        assignments = [a for a in assignments if a.room.building == building]

    fees = []
    for assignment in assignments:
        base_amount = float(assignment.room.price_per_month or 0)
        fee = HostelRentalFee(
            assignment=assignment,
            student=assignment.student,
            room=assignment.room,
            period_start=period_start,
            period_end=period_end,
            base_amount=base_amount,
            factor=factor,
            final_amount=round(base_amount * factor, 2),
            campus_id=assignment.campus_id,
        )
        fee.save()
        fees.append(fee)

    total = round(sum(fee.final_amount for fee in fees), 2)
    logger.info("Generated %d hostel rental fee(s) for %s - %s", len(fees), period_start, period_end)
    return {'fees_created': len(fees), 'total_amount': total}


def record_fee_payment(fee, amount, notes=None):
    """Add a payment; the fee is paid once the full amount is covered"""
    fee.amount_paid = round((fee.amount_paid or 0) + amount, 2)
    if fee.amount_paid >= fee.final_amount:
        fee.status = 'paid'
        fee.paid_at = datetime.now()
    else:
        fee.status = 'partial'
    if notes:
        fee.notes = notes
    fee.updated_at = datetime.now()
    fee.save()
    return fee
