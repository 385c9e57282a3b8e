# grades/urls.py - Grade Management URL Configuration

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'comment-code-scales', views.CommentCodeScaleViewSet, basename='comment-code-scale')
router.register(r'comment-codes', views.CommentCodeViewSet, basename='comment-code')
router.register(r'history-marking-periods', views.HistoryMarkingPeriodViewSet, basename='history-marking-period')
router.register(r'grading-scales', views.GradingScaleViewSet, basename='grading-scale')
router.register(r'final-grades', views.FinalGradeViewSet, basename='final-grade')
router.register(r'honor-roll', views.HonorRollViewSet, basename='honor-roll')

app_name = 'grades'

urlpatterns = [
    path('api/gradebook-config/', views.gradebook_config, name='gradebook-config'),
    path('api/', include(router.urls)),
]
