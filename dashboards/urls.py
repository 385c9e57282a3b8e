# dashboards/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'dashboards', views.DashboardViewSet, basename='dashboard')

app_name = 'dashboards'

urlpatterns = [
    path('api/', include(router.urls)),
]
