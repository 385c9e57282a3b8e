# students/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

# API Router for REST endpoints
router = DefaultRouter()
router.register(r'students', views.StudentViewSet, basename='student')

app_name = 'students'

urlpatterns = [
    path('api/', include(router.urls)),
]
