"""
Tests for the billing app.
Tests: service codes, grade level charges, subscriptions, totals, breakdown.
"""
from datetime import date

from django.urls import reverse

from students.models import Student
from test_helpers import MongoTestCase
from billing.models import SchoolService, StudentService, GradeCharge


class BillingTestCase(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.student = Student(student_number='S1', first_name='Lena', last_name='Park', grade_level='5')
        self.student.save()
        self.bus = SchoolService(name='Bus', code='bus', default_charge=50)
        self.bus.save()
        self.lunch = SchoolService(name='Lunch', code='LUNCH', default_charge=30)
        self.lunch.save()


class ChargeRulesTest(BillingTestCase):

    def test_code_is_upper_cased(self):
        self.assertEqual(self.bus.code, 'BUS')

    def test_default_charge(self):
        subscription = StudentService(student=self.student, service=self.bus)
        self.assertEqual(subscription.charge, 50)

    def test_grade_charge_beats_default(self):
        self.bus.grade_charges = [
            GradeCharge(grade_level='5', charge_amount=40),
            GradeCharge(grade_level='6', charge_amount=45),
        ]
        self.bus.save()
        self.assertEqual(StudentService(student=self.student, service=self.bus).charge, 40)

    def test_inactive_grade_charge_ignored(self):
        self.bus.grade_charges = [GradeCharge(grade_level='5', charge_amount=40, is_active=False)]
        self.bus.save()
        self.assertEqual(StudentService(student=self.student, service=self.bus).charge, 50)

    def test_custom_charge_beats_everything(self):
        self.bus.grade_charges = [GradeCharge(grade_level='5', charge_amount=40)]
        self.bus.save()
        subscription = StudentService(student=self.student, service=self.bus, custom_charge=0)
        self.assertEqual(subscription.charge, 0)


class ServiceAPITest(BillingTestCase):

    def test_create_upper_cases_code(self):
        response = self.client.post(reverse('billing:service-list'), {'name': 'Lab', 'code': ' lab1 '})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['code'], 'LAB1')

    def test_duplicate_code_rejected(self):
        response = self.client.post(reverse('billing:service-list'), {'name': 'Other bus', 'code': 'Bus'})
        self.assertEqual(response.status_code, 400)

    def test_set_grade_charges_replaces_all(self):
        self.bus.grade_charges = [GradeCharge(grade_level='1', charge_amount=10)]
        self.bus.save()
        url = reverse('billing:service-grade-charges', args=[str(self.bus.id)])
        response = self.client.put(url, {'charges': [
            {'grade_level': '5', 'charge_amount': 40},
            {'grade_level': '6', 'charge_amount': 45},
        ]})
        self.assertEqual(response.status_code, 200)
        self.bus.reload()
        self.assertEqual([c.grade_level for c in self.bus.grade_charges], ['5', '6'])

    def test_duplicate_grade_levels_rejected(self):
        url = reverse('billing:service-grade-charges', args=[str(self.bus.id)])
        response = self.client.put(url, {'charges': [
            {'grade_level': '5', 'charge_amount': 40},
            {'grade_level': '5', 'charge_amount': 45},
        ]})
        self.assertEqual(response.status_code, 400)

    def test_batch(self):
        response = self.client.post(reverse('billing:service-batch'), {'rows': [
            {'_isNew': True, 'name': 'Library', 'code': 'lib'},
            {'_isNew': True, 'name': 'Duplicate', 'code': 'LUNCH'},
            {'id': str(self.bus.id), '_deleted': True},
        ]})
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['deleted'], 1)
        self.assertEqual(response.data['failed'], 1)
        self.assertFalse(SchoolService.objects(id=self.bus.id).count())

    def test_shared_service_without_campus(self):
        response = self.client.post(reverse('billing:service-list'), {'name': 'Sports', 'code': 'spt'})
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(SchoolService.objects.get(code='SPT').campus_id)

    def test_same_code_on_another_campus(self):
        response = self.client.post(reverse('billing:service-list'), {
            'name': 'North bus', 'code': 'BUS', 'campus_id': 'north',
        })
        self.assertEqual(response.status_code, 201)

    def test_deleted_code_can_be_reused(self):
        self.client.post(reverse('billing:student-service-subscribe', args=[str(self.student.id)]), {
            'service_ids': [str(self.bus.id)],
        })
        url = reverse('billing:service-detail', args=[str(self.bus.id)])
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertEqual(StudentService.objects.count(), 0)
        response = self.client.post(reverse('billing:service-list'), {'name': 'New bus', 'code': 'bus'})
        self.assertEqual(response.status_code, 201)


class SubscriptionAPITest(BillingTestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('billing:student-service-detail', args=[str(self.student.id)])
        self.subscribe_url = reverse('billing:student-service-subscribe', args=[str(self.student.id)])

    def test_subscribe_and_total(self):
        response = self.client.post(self.subscribe_url, {
            'service_ids': [str(self.bus.id), str(self.lunch.id)],
            'custom_charges': {str(self.lunch.id): 25},
        })
        self.assertEqual(response.status_code, 200)
        data = self.client.get(self.url).data
        self.assertEqual(len(data['services']), 2)
        self.assertEqual(data['total'], 75)

    def test_subscribe_twice_keeps_one_row(self):
        self.client.post(self.subscribe_url, {'service_ids': [str(self.bus.id)]})
        self.client.post(self.subscribe_url, {'service_ids': [str(self.bus.id)]})
        self.assertEqual(StudentService.objects.count(), 1)

    def test_unsubscribe_then_resubscribe(self):
        self.client.post(self.subscribe_url, {'service_ids': [str(self.bus.id)]})
        url = reverse('billing:student-service-unsubscribe', args=[str(self.student.id), str(self.bus.id)])
        self.assertEqual(self.client.delete(url).status_code, 204)
        subscription = StudentService.objects.get()
        self.assertFalse(subscription.is_active)
        self.assertEqual(subscription.end_date, date.today())
        self.assertEqual(self.client.get(self.url).data['total'], 0)

        self.client.post(self.subscribe_url, {'service_ids': [str(self.bus.id)]})
        subscription.reload()
        self.assertTrue(subscription.is_active)
        self.assertIsNone(subscription.end_date)

    def test_unknown_service(self):
        response = self.client.post(self.subscribe_url, {'service_ids': ['000000000000000000000000']})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(StudentService.objects.count(), 0)

    def test_unknown_student(self):
        url = reverse('billing:student-service-detail', args=['missing'])
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_service_breakdown(self):
        other = Student(student_number='S2', first_name='Ari', last_name='Cole')
        other.save()
        self.client.post(self.subscribe_url, {'service_ids': [str(self.bus.id), str(self.lunch.id)]})
        StudentService(student=other, service=self.bus).save()
        response = self.client.get(reverse('billing:service-breakdown'))
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['rows'][0], {'name': 'Bus', 'value': 2, 'percentage': '66.7'})
