# hostel/views.py - Hostel buildings, rooms, assignments, visits and rental fees API

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.campus import get_campus_id, scope_to_campus
from core.exceptions import DomainError
from core.permissions import IsAdminOrReadOnly
from core.views import DocumentViewSet, error_response, get_document_or_none, handle_exception_response
from students.models import Student
from .models import HostelBuilding, HostelRoom, HostelRoomAssignment, HostelVisit, HostelRentalFee
from .serializers import (
    HostelBuildingSerializer, HostelRoomSerializer, HostelRoomAssignmentSerializer,
    AssignStudentSerializer, HostelVisitSerializer, HostelRentalFeeSerializer,
    GenerateRentalFeesSerializer, FeePaymentSerializer,
)
from .services import (
    assign_student, release_assignment, student_room, check_out_visit, hostel_stats,
    generate_rental_fees, record_fee_payment,
)


class HostelBuildingViewSet(DocumentViewSet):
    document = HostelBuilding
    serializer_class = HostelBuildingSerializer
    entity_name = 'Building'
    campus_scoped = True
    soft_delete = True

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(hostel_stats(get_campus_id(request)))


class HostelRoomViewSet(DocumentViewSet):
    document = HostelRoom
    serializer_class = HostelRoomSerializer
    entity_name = 'Room'
    campus_scoped = True

    def get_queryset(self):
        rooms = super().get_queryset()
        building_id = self.request.query_params.get('building_id')
        if building_id:
            building = get_document_or_none(HostelBuilding, building_id)
            rooms = rooms.filter(building=building) if building else rooms.none()
        return rooms

    def get_batch_defaults(self, request):
        building_id = request.data.get('building_id') or request.query_params.get('building_id')
        return {'building_id': building_id} if building_id else {}

    def perform_destroy(self, instance):
        if instance.occupancy:
            raise DomainError("Release the students in this room before removing it")
        super().perform_destroy(instance)

    @action(detail=True, methods=['get'])
    def students(self, request, pk=None):
        """Students currently living in the room"""
        try:
            room = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        assignments = HostelRoomAssignment.objects.filter(room=room, is_active=True)
        return Response(HostelRoomAssignmentSerializer(assignments, many=True).data)


class HostelRoomAssignmentViewSet(DocumentViewSet):
    """Room assignments; created through assign, ended through release"""
    document = HostelRoomAssignment
    serializer_class = HostelRoomAssignmentSerializer
    entity_name = 'Assignment'
    campus_scoped = True
    http_method_names = ['get', 'post', 'head', 'options']

    def get_queryset(self):
        assignments = super().get_queryset()
        params = self.request.query_params
        if params.get('active_only', 'true') != 'false':
            assignments = assignments.filter(is_active=True)
        if params.get('room_id'):
            room = get_document_or_none(HostelRoom, params['room_id'])
            assignments = assignments.filter(room=room) if room else assignments.none()
        if params.get('building_id'):
            building = get_document_or_none(HostelBuilding, params['building_id'])
            rooms = HostelRoom.objects.filter(building=building) if building else []
            assignments = assignments.filter(room__in=list(rooms))
        return assignments

    def create(self, request):
        serializer = AssignStudentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            assignment = assign_student(
                campus_id=get_campus_id(request), **serializer.validated_data
            )
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        return Response(self.get_serializer(assignment).data, status=status.HTTP_201_CREATED)

    # Table rows follow the assign and release rules
    def batch_create(self, data):
        serializer = AssignStudentSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        assignment = assign_student(campus_id=get_campus_id(self.request), **serializer.validated_data)
        return str(assignment.id)

    def batch_update(self, pk, data):
        raise DomainError("Assignments cannot be edited. Release the student and assign again.")

    def batch_delete(self, pk):
        assignment = self.get_object(pk)
        if not assignment.is_active:
            raise DomainError('Assignment has already been released')
        release_assignment(assignment)

    @action(detail=True, methods=['post'])
    def release(self, request, pk=None):
        try:
            assignment = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        if not assignment.is_active:
            return error_response('Assignment has already been released')
        release_assignment(assignment)
        return Response(self.get_serializer(assignment).data)

    @action(detail=False, methods=['get'], url_path='student/(?P<student_id>[^/.]+)')
    def student(self, request, student_id=None):
        """Where a student currently lives (null when unassigned)"""
        student = get_document_or_none(Student, student_id)
        if student is None:
            return error_response('Student not found', status.HTTP_404_NOT_FOUND)
        assignment = student_room(student)
        if assignment is None:
            return Response(None)
        return Response(self.get_serializer(assignment).data)


class HostelVisitViewSet(DocumentViewSet):
    document = HostelVisit
    serializer_class = HostelVisitSerializer
    entity_name = 'Visit'
    campus_scoped = True

    def get_queryset(self):
        visits = super().get_queryset()
        params = self.request.query_params
        if params.get('student_id'):
            student = get_document_or_none(Student, params['student_id'])
            visits = visits.filter(student=student) if student else visits.none()
        if params.get('room_id'):
            room = get_document_or_none(HostelRoom, params['room_id'])
            visits = visits.filter(room=room) if room else visits.none()
        if params.get('active_only') == 'true':
            visits = visits.filter(check_out=None)
        return visits

    @action(detail=True, methods=['post'], url_path='check-out')
    def check_out(self, request, pk=None):
        try:
            visit = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        if visit.check_out is not None:
            return error_response('Visitor has already checked out')
        check_out_visit(visit)
        return Response(self.get_serializer(visit).data)


class HostelRentalFeeViewSet(viewsets.ViewSet):
    """Rental fees: generated per period for current residents, then paid off"""
    permission_classes = [IsAdminOrReadOnly]
    entity_name = 'Fee'

    def get_queryset(self):
        fees = scope_to_campus(HostelRentalFee.objects, get_campus_id(self.request))
        params = self.request.query_params
        if params.get('student_id'):
            student = get_document_or_none(Student, params['student_id'])
            fees = fees.filter(student=student) if student else fees.none()
        if params.get('status'):
            fees = fees.filter(status=params['status'])
        if params.get('period_start'):
            fees = fees.filter(period_start__gte=params['period_start'])
        if params.get('period_end'):
            fees = fees.filter(period_end__lte=params['period_end'])
        return fees

    def list(self, request):
        try:
            fees = list(self.get_queryset())
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        return Response(HostelRentalFeeSerializer(fees, many=True).data)

    def retrieve(self, request, pk=None):
        fee = get_document_or_none(HostelRentalFee, pk)
        if fee is None:
            return error_response('Fee not found', status.HTTP_404_NOT_FOUND)
        return Response(HostelRentalFeeSerializer(fee).data)

    @action(detail=False, methods=['post'])
    def generate(self, request):
        serializer = GenerateRentalFeesSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        try:
            result = generate_rental_fees(
                data['period_start'], data['period_end'], data['factor'],
                building_id=data.get('building_id') or None,
                campus_id=get_campus_id(request),
            )
        except Exception as e:
            return handle_exception_response(e, 'Building')
        return Response(result, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        fee = get_document_or_none(HostelRentalFee, pk)
        if fee is None:
            return error_response('Fee not found', status.HTTP_404_NOT_FOUND)
        serializer = FeePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if fee.status == 'waived':
            return error_response('This fee has been waived')
        record_fee_payment(fee, serializer.validated_data['amount'], serializer.validated_data.get('notes'))
        return Response(HostelRentalFeeSerializer(fee).data)
