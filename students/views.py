# students/views.py - Student records API

from rest_framework.response import Response
from rest_framework.decorators import action
from rest_framework import status

from core.views import DocumentViewSet, error_response
from .models import Student
from .serializers import StudentSerializer
from .utils import sort_students_by_name, sort_students_by_number, search_students
from .breakdown import BREAKDOWN_FIELDS, student_breakdown


class StudentViewSet(DocumentViewSet):
    """REST API for Student management"""
    document = Student
    serializer_class = StudentSerializer
    entity_name = 'Student'
    campus_scoped = True

    def get_queryset(self):
        students = super().get_queryset()
        params = self.request.query_params

        grade_level = params.get('grade_level', '')
        if grade_level:
            students = students.filter(grade_level=grade_level)

        section = params.get('section', '')
        if section:
            students = students.filter(section=section)

        status_filter = params.get('status', '')
        if status_filter == 'active':
            students = students.filter(is_active=True)
        elif status_filter == 'inactive':
            students = students.filter(is_active=False)
        return students

    def list(self, request):
        if request.query_params.get('sort') == 'number':
            students = sort_students_by_number(self.get_queryset())
        else:
            students = sort_students_by_name(self.get_queryset())
        search = request.query_params.get('search', '')
        if search:
            students = search_students(students, search)
        return Response(self.get_serializer(students, many=True).data)

    @action(detail=False, methods=['get'])
    def breakdown(self, request):
        """Counts of students per value of one field, for the breakdown chart"""
        field_id = request.query_params.get('field', 'grade_level')
        try:
            rows = student_breakdown(self.get_queryset(), field_id)
        except ValueError as e:
            return error_response(str(e))
        return Response({
            'field': field_id,
            'total': sum(row['value'] for row in rows),
            'rows': rows,
        })

    @action(detail=False, methods=['get'], url_path='breakdown-fields')
    def breakdown_fields(self, request):
        return Response(BREAKDOWN_FIELDS)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Totals for the admin overview"""
        students = self.get_queryset()
        total = students.count()
        active = students.filter(is_active=True).count()
        return Response({
            'total_students': total,
            'active_students': active,
            'inactive_students': total - active,
        }, status=status.HTTP_200_OK)
