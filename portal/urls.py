# portal/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'items', views.PortalItemViewSet, basename='item')
router.register(r'audience', views.AudienceViewSet, basename='audience')

app_name = 'portal'

urlpatterns = [
    path('api/', include(router.urls)),
]
