# accounts/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'users', views.UserViewSet, basename='user')
router.register(r'staff', views.StaffProfileViewSet, basename='staff')

app_name = 'accounts'

urlpatterns = [
    path('api/current-user/', views.CurrentUserView.as_view(), name='current-user'),
    path('api/change-password/', views.ChangePasswordView.as_view(), name='api-change-password'),
    path('api/', include(router.urls)),
]
