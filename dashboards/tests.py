"""
Tests for the dashboards app.
Tests: dashboard ordering, campus filter, element defaults, reorder, admin overview.
"""
from django.urls import reverse

from students.models import Student
from test_helpers import MongoTestCase, make_user, api_client_for
from dashboards.models import Dashboard, DashboardElement


class DashboardAPITest(MongoTestCase):

    def test_list_order_nulls_last_then_title(self):
        Dashboard(title='Zeta').save()
        Dashboard(title='Alpha').save()
        Dashboard(title='Second', sort_order=2).save()
        Dashboard(title='First', sort_order=1).save()
        response = self.client.get(reverse('dashboards:dashboard-list'))
        self.assertEqual([d['title'] for d in response.data], ['First', 'Second', 'Alpha', 'Zeta'])

    def test_campus_filter_includes_shared(self):
        Dashboard(title='Everyone').save()
        Dashboard(title='North', campus_id='north').save()
        Dashboard(title='South', campus_id='south').save()
        response = self.client.get(reverse('dashboards:dashboard-list'), {'campus_id': 'north'})
        self.assertEqual(sorted(d['title'] for d in response.data), ['Everyone', 'North'])

    def test_create_records_author(self):
        response = self.client.post(reverse('dashboards:dashboard-list'), {'title': 'Attendance'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['created_by'], str(self.admin.pk))

    def test_detail_embeds_sorted_elements(self):
        dashboard = Dashboard(title='Finance')
        dashboard.save()
        DashboardElement(dashboard=dashboard, url='https://example.com/c', title='Unordered').save()
        DashboardElement(dashboard=dashboard, url='https://example.com/b', title='Second', sort_order=2).save()
        DashboardElement(dashboard=dashboard, url='https://example.com/a', title='First', sort_order=1).save()
        response = self.client.get(reverse('dashboards:dashboard-detail', args=[str(dashboard.id)]))
        self.assertEqual([e['title'] for e in response.data['elements']], ['First', 'Second', 'Unordered'])

    def test_missing_dashboard(self):
        response = self.client.get(reverse('dashboards:dashboard-detail', args=['000000000000000000000000']))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'Dashboard not found')

    def test_delete_removes_elements(self):
        dashboard = Dashboard(title='Old')
        dashboard.save()
        DashboardElement(dashboard=dashboard, url='https://example.com').save()
        self.client.delete(reverse('dashboards:dashboard-detail', args=[str(dashboard.id)]))
        self.assertEqual(DashboardElement.objects.count(), 0)

    def test_teacher_can_read_but_not_write(self):
        client = api_client_for(make_user('teacher'))
        self.assertEqual(client.get(reverse('dashboards:dashboard-list')).status_code, 200)
        response = client.post(reverse('dashboards:dashboard-list'), {'title': 'Mine'})
        self.assertEqual(response.status_code, 403)


class DashboardElementAPITest(MongoTestCase):

    def setUp(self):
        super().setUp()
        self.dashboard = Dashboard(title='Reports')
        self.dashboard.save()
        self.url = reverse('dashboards:dashboard-elements', args=[str(self.dashboard.id)])

    def test_element_defaults(self):
        response = self.client.post(self.url, {'url': 'https://reports.example.com/enrolment'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['type'], 'iframe')
        self.assertEqual(response.data['width_percent'], 100)
        self.assertEqual(response.data['height_px'], 400)
        self.assertEqual(response.data['dashboard_id'], str(self.dashboard.id))

    def test_invalid_url(self):
        response = self.client.post(self.url, {'url': 'not a url'})
        self.assertEqual(response.status_code, 400)

    def test_update_and_delete_element(self):
        element = DashboardElement(dashboard=self.dashboard, url='https://example.com')
        element.save()
        url = reverse('dashboards:dashboard-element', args=[str(self.dashboard.id), str(element.id)])
        response = self.client.patch(url, {'height_px': 600})
        self.assertEqual(response.data['height_px'], 600)
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertEqual(DashboardElement.objects.count(), 0)

    def test_element_of_other_dashboard_not_found(self):
        other = Dashboard(title='Other')
        other.save()
        element = DashboardElement(dashboard=other, url='https://example.com')
        element.save()
        url = reverse('dashboards:dashboard-element', args=[str(self.dashboard.id), str(element.id)])
        self.assertEqual(self.client.delete(url).status_code, 404)

    def test_reorder(self):
        first = DashboardElement(dashboard=self.dashboard, url='https://example.com/1', title='One', sort_order=1)
        first.save()
        second = DashboardElement(dashboard=self.dashboard, url='https://example.com/2', title='Two', sort_order=2)
        second.save()
        url = reverse('dashboards:dashboard-reorder', args=[str(self.dashboard.id)])
        response = self.client.post(url, [
            {'id': str(first.id), 'sort_order': 2},
            {'id': str(second.id), 'sort_order': 1},
        ])
        self.assertEqual(response.data['updated'], 2)
        self.assertEqual([e['title'] for e in response.data['elements']], ['Two', 'One'])


class AdminOverviewTest(MongoTestCase):

    def test_counts(self):
        Student(student_number='S1', first_name='A', last_name='B').save()
        Student(student_number='S2', first_name='C', last_name='D', is_active=False).save()
        response = self.client.get(reverse('admin_overview'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_students'], 2)
        self.assertEqual(response.data['active_students'], 1)

    def test_admin_only(self):
        client = api_client_for(make_user('teacher'))
        self.assertEqual(client.get(reverse('admin_overview')).status_code, 403)
