"""
Tests for the hostel app.
Tests: room occupancy, assignment rules, release, visitor log, stats, rental fees.
"""
from datetime import date
from io import StringIO

from django.core.management import call_command
from django.urls import reverse

from students.models import Student
from test_helpers import MongoTestCase
from hostel.models import HostelBuilding, HostelRoom, HostelRoomAssignment, HostelVisit, HostelRentalFee
from hostel.services import (
    assign_student, release_inactive_students, hostel_stats, generate_rental_fees, record_fee_payment,
)
from core.exceptions import CapacityExceeded, DuplicateAssignment, NotFound


class HostelTestCase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.building = HostelBuilding(name='North Hall', floors=3)
        self.building.save()
        self.room = HostelRoom(building=self.building, room_number='101', floor=1, capacity=2)
        self.room.save()
        self.students = []
        for number in range(1, 4):
            student = Student(student_number=f'S{number}', first_name=f'First{number}', last_name='Doe')
            student.save()
            self.students.append(student)


class AssignmentRulesTest(HostelTestCase):

    def test_assign_until_full(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        assign_student(str(self.room.id), str(self.students[1].id))
        self.assertEqual(self.room.occupancy, 2)
        with self.assertRaises(CapacityExceeded) as ctx:
            assign_student(str(self.room.id), str(self.students[2].id))
        self.assertEqual(ctx.exception.message, 'Room is at full capacity')

    def test_student_cannot_hold_two_rooms(self):
        other = HostelRoom(building=self.building, room_number='102', capacity=1)
        other.save()
        assign_student(str(self.room.id), str(self.students[0].id))
        with self.assertRaises(DuplicateAssignment):
            assign_student(str(other.id), str(self.students[0].id))

    def test_missing_room(self):
        with self.assertRaises(NotFound):
            assign_student('000000000000000000000000', str(self.students[0].id))

    def test_assigned_date_defaults_to_today(self):
        assignment = assign_student(str(self.room.id), str(self.students[0].id))
        self.assertEqual(assignment.assigned_date, date.today())

    def test_inactive_students_are_released(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        assign_student(str(self.room.id), str(self.students[1].id))
        self.students[0].is_active = False
        self.students[0].save()
        self.assertEqual(release_inactive_students(), 1)
        self.assertEqual(self.room.occupancy, 1)

    def test_release_command(self):
        out = StringIO()
        call_command('release_inactive_hostel_students', stdout=out)
        self.assertIn('Released 0 assignment(s)', out.getvalue())

    def test_stats(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        stats = hostel_stats()
        self.assertEqual(stats['total_rooms'], 1)
        self.assertEqual(stats['total_capacity'], 2)
        self.assertEqual(stats['occupied_beds'], 1)
        self.assertEqual(stats['occupancy_rate'], 50)


class HostelAPITest(HostelTestCase):

    def test_building_list_has_room_count(self):
        response = self.client.get(reverse('hostel:building-list'))
        self.assertEqual(response.data[0]['room_count'], 1)

    def test_room_list_has_building_and_occupancy(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        response = self.client.get(reverse('hostel:room-list'), {'building_id': str(self.building.id)})
        self.assertEqual(response.data[0]['building_name'], 'North Hall')
        self.assertEqual(response.data[0]['occupancy'], 1)
        self.assertEqual(response.data[0]['available_beds'], 1)

    def test_duplicate_room_number_rejected(self):
        response = self.client.post(reverse('hostel:room-list'), {
            'building_id': str(self.building.id), 'room_number': '101', 'capacity': 2,
        })
        self.assertEqual(response.status_code, 400)

    def test_room_batch(self):
        response = self.client.post(reverse('hostel:room-batch'), {
            'building_id': str(self.building.id),
            'rows': [
                {'_isNew': True, 'room_number': '201', 'capacity': 3},
                {'_isNew': True, 'room_number': '202', 'capacity': 0},
                {'id': str(self.room.id), '_dirty': True, 'capacity': 4},
            ],
        })
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(response.data['message'], '1 operation(s) failed')
        self.room.reload()
        self.assertEqual(self.room.capacity, 4)

    def test_assign_full_room_returns_400(self):
        self.room.capacity = 1
        self.room.save()
        url = reverse('hostel:assignment-list')
        first = self.client.post(url, {'room_id': str(self.room.id), 'student_id': str(self.students[0].id)})
        self.assertEqual(first.status_code, 201)
        second = self.client.post(url, {'room_id': str(self.room.id), 'student_id': str(self.students[1].id)})
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.data['error'], 'Room is at full capacity')

    def test_release(self):
        assignment = assign_student(str(self.room.id), str(self.students[0].id))
        url = reverse('hostel:assignment-release', args=[str(assignment.id)])
        response = self.client.post(url)
        self.assertEqual(response.status_code, 200)
        assignment.reload()
        self.assertFalse(assignment.is_active)
        self.assertEqual(assignment.released_date, date.today())
        self.assertEqual(self.client.post(url).status_code, 400)

    def test_student_room_lookup(self):
        url = reverse('hostel:assignment-student', args=[str(self.students[0].id)])
        self.assertIsNone(self.client.get(url).data)
        assign_student(str(self.room.id), str(self.students[0].id))
        self.assertEqual(self.client.get(url).data['room_number'], '101')

    def test_visit_defaults_to_student_room(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        response = self.client.post(reverse('hostel:visit-list'), {
            'student_id': str(self.students[0].id),
            'visitor_name': 'Jane Doe',
            'visitor_relation': 'Mother',
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['room_id'], str(self.room.id))
        self.assertIsNone(response.data['check_out'])

    def test_check_out(self):
        visit = HostelVisit(student=self.students[0], visitor_name='Sam')
        visit.save()
        url = reverse('hostel:visit-check-out', args=[str(visit.id)])
        self.assertEqual(self.client.post(url).status_code, 200)
        visit.reload()
        self.assertIsNotNone(visit.check_out)
        self.assertEqual(self.client.post(url).status_code, 400)

    def test_cannot_remove_occupied_room(self):
        assign_student(str(self.room.id), str(self.students[0].id))
        response = self.client.delete(reverse('hostel:room-detail', args=[str(self.room.id)]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(HostelRoomAssignment.objects.count(), 1)

    def test_removed_room_number_can_be_reused(self):
        visit = HostelVisit(student=self.students[0], room=self.room, visitor_name='Sam')
        visit.save()
        response = self.client.delete(reverse('hostel:room-detail', args=[str(self.room.id)]))
        self.assertEqual(response.status_code, 204)
        visit.reload()
        self.assertIsNone(visit.room)
        response = self.client.post(reverse('hostel:room-list'), {
            'building_id': str(self.building.id), 'room_number': '101', 'capacity': 2,
        })
        self.assertEqual(response.status_code, 201)


class AssignmentBatchTest(HostelTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('hostel:assignment-batch')

    def test_deleted_row_releases_the_student(self):
        assignment = assign_student(str(self.room.id), str(self.students[0].id))
        response = self.client.post(self.url, {'rows': [{'id': str(assignment.id), '_deleted': True}]})
        self.assertEqual(response.data['deleted'], 1)
        assignment.reload()
        self.assertFalse(assignment.is_active)
        self.assertEqual(assignment.released_date, date.today())
        self.assertEqual(self.room.occupancy, 0)

    def test_new_rows_respect_capacity(self):
        rows = [
            {'_isNew': True, 'room_id': str(self.room.id), 'student_id': str(student.id)}
            for student in self.students
        ]
        response = self.client.post(self.url, {'rows': rows})
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['failed'], 1)
        self.assertEqual(response.data['errors'][0]['error'], 'Room is at full capacity')

    def test_edited_rows_are_refused(self):
        assignment = assign_student(str(self.room.id), str(self.students[0].id))
        response = self.client.post(self.url, {
            'rows': [{'id': str(assignment.id), '_dirty': True, 'notes': 'moved'}],
        })
        self.assertEqual(response.data['failed'], 1)
        self.assertEqual(response.data['updated'], 0)


class RentalFeeTest(HostelTestCase):

    def setUp(self):
        super().setUp()
        self.room.price_per_month = 200
        self.room.save()
        other_building = HostelBuilding(name='South Hall')
        other_building.save()
        self.south_room = HostelRoom(building=other_building, room_number='S1', capacity=1, price_per_month=150)
        self.south_room.save()
        assign_student(str(self.room.id), str(self.students[0].id))
        assign_student(str(self.south_room.id), str(self.students[1].id))

    def test_generate_for_every_resident(self):
        result = generate_rental_fees(date(2026, 9, 1), date(2026, 9, 30), factor=1.5)
        self.assertEqual(result, {'fees_created': 2, 'total_amount': 525.0})
        fee = HostelRentalFee.objects.get(room=self.room)
        self.assertEqual(fee.base_amount, 200)
        self.assertEqual(fee.final_amount, 300)
        self.assertEqual(fee.status, 'pending')

    def test_generate_for_one_building(self):
        result = generate_rental_fees(
            date(2026, 9, 1), date(2026, 9, 30), building_id=str(self.building.id)
        )
        self.assertEqual(result['fees_created'], 1)
        self.assertEqual(HostelRentalFee.objects.get().student.id, self.students[0].id)

    def test_released_students_are_not_billed(self):
        HostelRoomAssignment.objects.filter(student=self.students[1]).update(set__is_active=False)
        self.assertEqual(generate_rental_fees(date(2026, 9, 1), date(2026, 9, 30))['fees_created'], 1)

    def test_partial_then_full_payment(self):
        generate_rental_fees(date(2026, 9, 1), date(2026, 9, 30))
        fee = HostelRentalFee.objects.get(room=self.room)
        record_fee_payment(fee, 50)
        self.assertEqual(fee.status, 'partial')
        self.assertEqual(fee.balance, 150)
        self.assertIsNone(fee.paid_at)
        record_fee_payment(fee, 150, notes='Cash')
        self.assertEqual(fee.status, 'paid')
        self.assertIsNotNone(fee.paid_at)
        self.assertEqual(fee.notes, 'Cash')

    def test_api_generate_list_and_pay(self):
        response = self.client.post(reverse('hostel:fee-generate'), {
            'period_start': '2026-09-01', 'period_end': '2026-09-30',
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['total_amount'], 350.0)

        response = self.client.get(reverse('hostel:fee-list'), {'student_id': str(self.students[0].id)})
        self.assertEqual(len(response.data), 1)
        fee_id = response.data[0]['id']

        response = self.client.post(reverse('hostel:fee-pay', args=[fee_id]), {'amount': 200})
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(len(self.client.get(reverse('hostel:fee-list'), {'status': 'pending'}).data), 1)

    def test_api_rejects_bad_input(self):
        response = self.client.post(reverse('hostel:fee-generate'), {
            'period_start': '2026-09-30', 'period_end': '2026-09-01',
        })
        self.assertEqual(response.status_code, 400)
        generate_rental_fees(date(2026, 9, 1), date(2026, 9, 30))
        fee = HostelRentalFee.objects.first()
        response = self.client.post(reverse('hostel:fee-pay', args=[str(fee.id)]), {'amount': 0})
        self.assertEqual(response.status_code, 400)
        response = self.client.post(reverse('hostel:fee-pay', args=['missing']), {'amount': 10})
        self.assertEqual(response.status_code, 404)
