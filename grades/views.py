# grades/views.py - Comment codes, marking period history, gradebook settings and honor roll API

import logging

from django.http import HttpResponse
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from core.breakdown import aggregate
from core.campus import get_campus_id
from core.permissions import IsAdminOrReadOnly, IsAdminRole
from core.views import DocumentViewSet, error_response, get_document_or_none
from students.models import Student
from .models import CommentCodeScale, CommentCode, HistoryMarkingPeriod, GradingScale, FinalGrade
from .serializers import (
    CommentCodeScaleSerializer, CommentCodeSerializer, HistoryMarkingPeriodSerializer,
    GradingScaleSerializer, FinalGradeSerializer, GradebookConfigSerializer,
    CertificateRequestSerializer,
)
from .config import get_config, save_config
from .honor_roll import get_honor_roll, HONOR_LEVELS
from .certificates import (
    SUBSTITUTION_TOKENS, TOKEN_CATEGORIES, DEFAULT_CERTIFICATE_HTML, render_certificates,
)

logger = logging.getLogger(__name__)


# ============================================================================
# COMMENT CODES
# ============================================================================

class CommentCodeScaleViewSet(DocumentViewSet):
    """Comment code scales (the tabs of the comment codes page)"""
    document = CommentCodeScale
    serializer_class = CommentCodeScaleSerializer
    entity_name = 'Comment code scale'
    campus_scoped = True
    include_shared_campus = True
    soft_delete = True
    ordering = ('sort_order', 'title')

    def get_batch_defaults(self, request):
        campus_id = get_campus_id(request)
        return {'campus_id': campus_id} if campus_id else {}

    def perform_destroy(self, instance):
        # Codes of a retired scale retire with it
        super().perform_destroy(instance)
        CommentCode.objects.filter(scale=instance).update(set__is_active=False)


class CommentCodeViewSet(DocumentViewSet):
    """Comment codes, listed per scale with ?scale_id="""
    document = CommentCode
    serializer_class = CommentCodeSerializer
    entity_name = 'Comment code'
    soft_delete = True
    ordering = ('sort_order', 'title')

    def get_queryset(self):
        codes = super().get_queryset()
        scale_id = self.request.query_params.get('scale_id')
        if scale_id:
            scale = get_document_or_none(CommentCodeScale, scale_id)
            if scale is None:
                return codes.none()
            codes = codes.filter(scale=scale)
        return codes

    def get_batch_defaults(self, request):
        """New rows land in the scale the table is showing"""
        scale_id = request.data.get('scale_id') or request.query_params.get('scale_id')
        if not scale_id:
            return {}
        if get_document_or_none(CommentCodeScale, scale_id) is None:
            raise CommentCodeScale.DoesNotExist(f'Comment code scale {scale_id} does not exist')
        return {'scale_id': scale_id}


# ============================================================================
# HISTORY MARKING PERIODS
# ============================================================================

class HistoryMarkingPeriodViewSet(DocumentViewSet):
    document = HistoryMarkingPeriod
    serializer_class = HistoryMarkingPeriodSerializer
    entity_name = 'Marking period'
    campus_scoped = True
    include_shared_campus = True

    def get_queryset(self):
        periods = super().get_queryset()
        school_year = self.request.query_params.get('school_year')
        if school_year:
            periods = periods.filter(school_year=school_year)
        return periods

    def get_batch_defaults(self, request):
        campus_id = get_campus_id(request)
        return {'campus_id': campus_id} if campus_id else {}


# ============================================================================
# GRADING SCALES AND FINAL GRADES
# ============================================================================

class GradingScaleViewSet(DocumentViewSet):
    document = GradingScale
    serializer_class = GradingScaleSerializer
    entity_name = 'Grading scale'
    campus_scoped = True
    include_shared_campus = True
    soft_delete = True
    ordering = ('-is_default', 'title')


class FinalGradeViewSet(DocumentViewSet):
    document = FinalGrade
    serializer_class = FinalGradeSerializer
    entity_name = 'Final grade'
    campus_scoped = True

    def get_queryset(self):
        grades = super().get_queryset()
        params = self.request.query_params
        if params.get('marking_period_id'):
            grades = grades.filter(marking_period_id=params['marking_period_id'])
        if params.get('student_id'):
            student = get_document_or_none(Student, params['student_id'])
            grades = grades.filter(student=student) if student else grades.none()
        return grades

    @action(detail=False, methods=['get'])
    def distribution(self, request):
        """Letter grade counts for the grade distribution chart"""
        grades = self.get_queryset()
        rows = aggregate([g.grade_title or 'Not Graded' for g in grades])
        return Response({
            'total': sum(row['value'] for row in rows),
            'rows': rows,
        })


# ============================================================================
# GRADEBOOK CONFIGURATION
# ============================================================================

@api_view(['GET', 'PUT'])
@permission_classes([IsAdminOrReadOnly])
def gradebook_config(request):
    """Effective gradebook settings; PUT stores the provided keys"""
    campus_id = get_campus_id(request)
    course_period_id = request.query_params.get('course_period_id') or None

    if request.method == 'GET':
        return Response(get_config(campus_id, course_period_id))

    serializer = GradebookConfigSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    config = save_config(serializer.validated_data, campus_id, course_period_id)
    return Response(config)


# ============================================================================
# HONOR ROLL AND CERTIFICATES
# ============================================================================

class HonorRollViewSet(viewsets.ViewSet):
    """Honor roll for a marking period and its printable certificates"""
    permission_classes = [IsAdminOrReadOnly]

    def list(self, request):
        marking_period_id = request.query_params.get('marking_period_id')
        if not marking_period_id:
            return error_response('marking_period_id is required')
        rows = get_honor_roll(marking_period_id, get_campus_id(request))
        return Response({
            'marking_period_id': marking_period_id,
            'count': len(rows),
            'high_honor_count': sum(1 for r in rows if r['honor_level'] == 'high_honor'),
            'students': rows,
        })

    @action(detail=False, methods=['get'])
    def levels(self, request):
        return Response(HONOR_LEVELS)

    @action(detail=False, methods=['get'])
    def tokens(self, request):
        """Substitution tokens grouped the way the template editor shows them"""
        return Response({
            'tokens': SUBSTITUTION_TOKENS,
            'categories': TOKEN_CATEGORIES,
            'default_template': DEFAULT_CERTIFICATE_HTML,
        })

    @action(detail=False, methods=['post'], permission_classes=[IsAdminRole])
    def certificates(self, request):
        serializer = CertificateRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        selected = set(data['student_ids'])
        if not selected:
            return error_response('Please select at least one student')

        rows = [
            row for row in get_honor_roll(data['marking_period_id'], get_campus_id(request))
            if row['student_id'] in selected
        ]
        if not rows:
            return error_response('Please select at least one student')

        context = {
            'school_name': data.get('school_name', ''),
            'campus_name': data.get('campus_name', ''),
            'academic_year': data.get('academic_year', ''),
        }
        html = render_certificates(
            data.get('template_html') or DEFAULT_CERTIFICATE_HTML,
            rows,
            context=context,
            frame_image=data.get('frame_image') or None,
        )
        logger.info("Rendered %d honor roll certificate(s)", len(rows))
        return HttpResponse(html, content_type='text/html')
