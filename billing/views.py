# billing/views.py - School services and student subscriptions API

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.campus import get_campus_id
from core.permissions import IsAdminOrReadOnly
from core.views import DocumentViewSet, error_response, get_document_or_none, handle_exception_response
from students.models import Student
from .models import SchoolService, StudentService
from .serializers import (
    SchoolServiceSerializer, GradeChargesSerializer, StudentServiceSerializer, SubscribeSerializer,
)
from .services import set_grade_charges, subscribe_student, unsubscribe_student, student_total, service_breakdown


class SchoolServiceViewSet(DocumentViewSet):
    """Services a school bills for (transport, lunch, lab fees...)"""
    document = SchoolService
    serializer_class = SchoolServiceSerializer
    entity_name = 'Service'
    campus_scoped = True
    include_shared_campus = True
    ordering = ('display_order', 'name')

    def get_batch_defaults(self, request):
        campus_id = get_campus_id(request)
        return {'campus_id': campus_id} if campus_id else {}

    @action(detail=True, methods=['put'], url_path='grade-charges')
    def grade_charges(self, request, pk=None):
        """Replace the per grade level prices of a service"""
        try:
            service = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        serializer = GradeChargesSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        set_grade_charges(service, serializer.validated_data['charges'])
        return Response(self.get_serializer(service).data)

    @action(detail=False, methods=['get'])
    def breakdown(self, request):
        rows = service_breakdown(get_campus_id(request))
        return Response({
            'total': sum(row['value'] for row in rows),
            'rows': rows,
        })


class StudentServiceViewSet(viewsets.ViewSet):
    """A student's service subscriptions: /student-services/<student_id>/"""
    permission_classes = [IsAdminOrReadOnly]

    def _get_student(self, pk):
        return get_document_or_none(Student, pk)

    def retrieve(self, request, pk=None):
        student = self._get_student(pk)
        if student is None:
            return error_response('Student not found', status.HTTP_404_NOT_FOUND)
        subscriptions = StudentService.objects.filter(student=student)
        if request.query_params.get('include_inactive') != 'true':
            subscriptions = subscriptions.filter(is_active=True)
        return Response({
            'student_id': str(student.id),
            'services': StudentServiceSerializer(subscriptions, many=True).data,
            'total': student_total(student),
        })

    @action(detail=True, methods=['post'])
    def subscribe(self, request, pk=None):
        student = self._get_student(pk)
        if student is None:
            return error_response('Student not found', status.HTTP_404_NOT_FOUND)
        serializer = SubscribeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            subscriptions = subscribe_student(
                student,
                serializer.validated_data['service_ids'],
                serializer.validated_data.get('custom_charges'),
            )
        except Exception as e:
            return handle_exception_response(e, 'Service')
        return Response(StudentServiceSerializer(subscriptions, many=True).data)

    @action(detail=True, methods=['delete'], url_path='services/(?P<service_id>[^/.]+)')
    def unsubscribe(self, request, pk=None, service_id=None):
        student = self._get_student(pk)
        if student is None:
            return error_response('Student not found', status.HTTP_404_NOT_FOUND)
        service = get_document_or_none(SchoolService, service_id)
        if service is None:
            return error_response('Service not found', status.HTTP_404_NOT_FOUND)
        try:
            unsubscribe_student(student, service)
        except Exception as e:
            return handle_exception_response(e, 'Subscription')
        return Response(status=status.HTTP_204_NO_CONTENT)
