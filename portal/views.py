# portal/views.py - Portal items and the audience picker API

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import StaffProfile
from core.campus import get_campus_id, scope_to_campus
from core.permissions import IsAdminOrReadOnly
from core.views import DocumentViewSet
from students.models import Student
from students.utils import sort_students_by_name
from .models import PortalItem
from .serializers import (
    PortalItemSerializer, StudentCandidateSerializer, StaffCandidateSerializer, ToggleAllSerializer,
)
from .visibility import (
    filter_student_candidates, filter_staff_candidates, is_visible_to, toggle_all as toggle_selection,
)


class PortalItemViewSet(DocumentViewSet):
    document = PortalItem
    serializer_class = PortalItemSerializer
    entity_name = 'Portal item'
    campus_scoped = True
    include_shared_campus = True
    soft_delete = True
    ordering = ('sort_order', '-created_at')

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def visible(self, request):
        """Items the signed in user can see right now"""
        user = request.user
        student = Student.objects.filter(user_id=str(user.pk)).first()
        items = scope_to_campus(
            PortalItem.objects.filter(is_active=True), get_campus_id(request), include_shared=True
        ).order_by(*self.ordering)
        visible = [item for item in items if is_visible_to(item, user, student)]
        return Response(self.get_serializer(visible, many=True).data)


class AudienceViewSet(viewsets.ViewSet):
    """Candidates for the students and staff tabs of the visibility picker"""
    permission_classes = [IsAdminOrReadOnly]

    @action(detail=False, methods=['get'])
    def students(self, request):
        params = request.query_params
        students = scope_to_campus(Student.objects.filter(is_active=True), get_campus_id(request))
        candidates = filter_student_candidates(
            sort_students_by_name(students),
            grade_level=params.get('grade_level'),
            section=params.get('section'),
            search=params.get('search'),
        )
        return Response(StudentCandidateSerializer(candidates, many=True).data)

    @action(detail=False, methods=['get'])
    def staff(self, request):
        staff = scope_to_campus(StaffProfile.objects.filter(is_active=True), get_campus_id(request))
        staff = sorted(staff, key=lambda s: (s.last_name.lower(), s.first_name.lower()))
        candidates = filter_staff_candidates(staff, search=request.query_params.get('search'))
        return Response(StaffCandidateSerializer(candidates, many=True).data)

    @action(detail=False, methods=['post'], url_path='toggle-all')
    def toggle_all(self, request):
        serializer = ToggleAllSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        selected = toggle_selection(
            serializer.validated_data['selected_ids'],
            serializer.validated_data['candidate_ids'],
        )
        return Response({'selected_ids': selected})
