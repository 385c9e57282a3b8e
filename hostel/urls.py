# hostel/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'buildings', views.HostelBuildingViewSet, basename='building')
router.register(r'rooms', views.HostelRoomViewSet, basename='room')
router.register(r'assignments', views.HostelRoomAssignmentViewSet, basename='assignment')
router.register(r'visits', views.HostelVisitViewSet, basename='visit')
router.register(r'fees', views.HostelRentalFeeViewSet, basename='fee')

app_name = 'hostel'

urlpatterns = [
    path('api/', include(router.urls)),
]
