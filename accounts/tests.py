"""
Tests for the accounts app.
Tests: User model roles, user API access, password reset, staff directory.
"""
import string

from django.test import TestCase
from django.urls import reverse

from accounts.models import User, StaffProfile
from accounts.views import generate_random_password
from core.permissions import is_admin_user
from test_helpers import MongoTestCase, make_user, api_client_for


class UserModelTest(TestCase):

    def test_create_user_defaults(self):
        user = User.objects.create_user(email='Parent@EXAMPLE.com', password='pass12345', role='parent')
        self.assertEqual(user.email, 'Parent@example.com')
        self.assertTrue(user.is_active)
        self.assertFalse(user.is_admin_role)
        self.assertEqual(user.campus_id, '')

    def test_create_user_no_email_raises(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='test')

    def test_superuser_is_admin(self):
        admin = User.objects.create_superuser(email='root@example.com', password='pass12345')
        self.assertEqual(admin.role, 'admin')
        self.assertTrue(admin.is_admin_role)
        self.assertTrue(is_admin_user(admin))

    def test_role_admin_without_staff_flag(self):
        user = User.objects.create_user(email='a@example.com', password='pass12345', role='admin')
        self.assertTrue(is_admin_user(user))

    def test_full_name(self):
        user = User.objects.create_user(
            email='t@example.com', password='pass12345', first_name='Tia', last_name='Moss'
        )
        self.assertEqual(user.full_name, 'Tia Moss')


class GeneratePasswordTest(TestCase):

    def test_length_and_character_mix(self):
        password = generate_random_password(12)
        self.assertEqual(len(password), 12)
        self.assertTrue(any(c in string.ascii_uppercase for c in password))
        self.assertTrue(any(c in string.ascii_lowercase for c in password))
        self.assertTrue(any(c in string.digits for c in password))

    def test_passwords_differ(self):
        self.assertNotEqual(generate_random_password(), generate_random_password())


class UserAPITest(MongoTestCase):

    def test_anonymous_rejected(self):
        response = api_client_for().get(reverse('accounts:current-user'))
        self.assertIn(response.status_code, (401, 403))

    def test_current_user(self):
        response = self.client.get(reverse('accounts:current-user'))
        self.assertEqual(response.data['email'], 'admin@test.com')
        self.assertEqual(response.data['role'], 'admin')

    def test_only_admin_lists_users(self):
        teacher = make_user('teacher')
        self.assertEqual(self.client.get(reverse('accounts:user-list')).status_code, 200)
        response = api_client_for(teacher).get(reverse('accounts:user-list'))
        self.assertEqual(response.status_code, 403)

    def test_user_sees_only_self(self):
        teacher = make_user('teacher')
        client = api_client_for(teacher)
        self.assertEqual(client.get(reverse('accounts:user-detail', args=[teacher.pk])).status_code, 200)
        self.assertEqual(client.get(reverse('accounts:user-detail', args=[self.admin.pk])).status_code, 403)

    def test_admin_creates_user(self):
        response = self.client.post(reverse('accounts:user-list'), {
            'email': 'new@test.com', 'password': 'longenough1', 'role': 'teacher', 'campus_id': 'north',
        })
        self.assertEqual(response.status_code, 201)
        user = User.objects.get(email='new@test.com')
        self.assertTrue(user.check_password('longenough1'))
        self.assertEqual(user.campus_id, 'north')

    def test_reset_password(self):
        teacher = make_user('teacher')
        response = self.client.post(reverse('accounts:user-reset-password', args=[teacher.pk]))
        self.assertEqual(response.status_code, 200)
        teacher.refresh_from_db()
        self.assertTrue(teacher.check_password(response.data['password']))

    def test_change_password(self):
        url = reverse('accounts:api-change-password')
        response = self.client.post(url, {
            'old_password': 'wrong', 'new_password': 'newpass123', 'confirm_password': 'newpass123',
        })
        self.assertEqual(response.status_code, 400)
        response = self.client.post(url, {
            'old_password': 'pass123', 'new_password': 'newpass123', 'confirm_password': 'newpass123',
        })
        self.assertEqual(response.status_code, 200)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password('newpass123'))


class StaffProfileAPITest(MongoTestCase):

    def test_create_and_list(self):
        url = reverse('accounts:staff-list')
        response = self.client.post(url, {
            'user_id': '5', 'email': 'lib@test.com', 'first_name': 'Lou', 'last_name': 'Bell', 'role': 'librarian',
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['tag'], 'Librarian')
        self.assertEqual(len(self.client.get(url).data), 1)

    def test_duplicate_email(self):
        StaffProfile(user_id='5', email='lib@test.com', first_name='Lou', last_name='Bell').save()
        response = self.client.post(reverse('accounts:staff-list'), {
            'user_id': '6', 'email': 'lib@test.com', 'first_name': 'Other', 'last_name': 'Person',
        })
        self.assertEqual(response.status_code, 400)

    def test_soft_delete(self):
        staff = StaffProfile(user_id='5', email='lib@test.com', first_name='Lou', last_name='Bell')
        staff.save()
        self.client.delete(reverse('accounts:staff-detail', args=[str(staff.id)]))
        staff.reload()
        self.assertFalse(staff.is_active)
        self.assertEqual(self.client.get(reverse('accounts:staff-list')).data, [])
