# billing/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'services', views.SchoolServiceViewSet, basename='service')
router.register(r'student-services', views.StudentServiceViewSet, basename='student-service')

app_name = 'billing'

urlpatterns = [
    path('api/', include(router.urls)),
]
