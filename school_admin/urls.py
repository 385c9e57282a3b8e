# school_admin/urls.py - API routes for every admin area

from django.contrib import admin
from django.urls import path, include

from dashboards.views import admin_overview

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # App URLs - each app serves its REST API under its own prefix (e.g. grades/api/)
    path('accounts/', include('accounts.urls')),
    path('students/', include('students.urls')),
    path('grades/', include('grades.urls')),
    path('hostel/', include('hostel.urls')),
    path('billing/', include('billing.urls')),
    path('dashboards/', include('dashboards.urls')),
    path('portal/', include('portal.urls')),

    # Admin landing statistics
    path('admin-overview/', admin_overview, name='admin_overview'),
]
