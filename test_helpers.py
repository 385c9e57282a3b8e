"""
Shared helpers for app tests.

MongoEngine is connected to mongomock while testing (see settings.TESTING),
so Mongo-backed records are cleared after every test the same way Django
rolls back the auth tables.
"""
from django.test import TestCase
from mongoengine.connection import get_db
from rest_framework.test import APIClient

from accounts.models import User


def clear_collections():
    """Empty every collection but keep its indexes (unique rules still apply)"""
    db = get_db()
    for name in db.list_collection_names():
        db[name].delete_many({})


def make_user(role='admin', email=None, **extra):
    email = email or f'{role}@test.com'
    if role == 'admin':
        extra.setdefault('is_staff', True)
    return User.objects.create_user(email=email, password='pass123', role=role, **extra)


def api_client_for(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


class MongoTestCase(TestCase):
    """TestCase with an authenticated admin API client and a clean Mongo database"""

    def setUp(self):
        clear_collections()
        self.admin = make_user('admin')
        self.client = api_client_for(self.admin)

    def tearDown(self):
        clear_collections()
        super().tearDown()
