"""
WSGI config for the school_admin project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'school_admin.settings')

application = get_wsgi_application()
