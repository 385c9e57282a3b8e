# dashboards/views.py - Report dashboards API and the admin overview

import logging

from rest_framework import status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from core.permissions import IsAdminRole
from core.views import DocumentViewSet, error_response, get_document_or_none, handle_exception_response
from .models import Dashboard, DashboardElement
from .serializers import (
    DashboardSerializer, DashboardDetailSerializer, DashboardElementSerializer, ElementOrderSerializer,
)

logger = logging.getLogger(__name__)


def dashboard_sort_key(dashboard):
    # sort_order ascending with unordered dashboards last, then title
    return (dashboard.sort_order is None, dashboard.sort_order or 0, (dashboard.title or '').lower())


class DashboardViewSet(DocumentViewSet):
    document = Dashboard
    serializer_class = DashboardSerializer
    entity_name = 'Dashboard'
    campus_scoped = True
    include_shared_campus = True

    def get_queryset(self):
        dashboards = super().get_queryset()
        if self.request.query_params.get('include_inactive') != 'true':
            dashboards = dashboards.filter(is_active=True)
        return dashboards

    def list(self, request):
        dashboards = sorted(self.get_queryset(), key=dashboard_sort_key)
        return Response(self.get_serializer(dashboards, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            dashboard = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        return Response(DashboardDetailSerializer(dashboard, context={'request': request}).data)

    def perform_destroy(self, instance):
        DashboardElement.objects.filter(dashboard=instance).delete()
        instance.delete()
        logger.info("Deleted dashboard %s with its elements", instance.id)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    @action(detail=True, methods=['get', 'post'])
    def elements(self, request, pk=None):
        try:
            dashboard = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

        if request.method == 'GET':
            return Response(DashboardElementSerializer(dashboard.ordered_elements(), many=True).data)

        serializer = DashboardElementSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        element = serializer.save(dashboard=dashboard)
        return Response(DashboardElementSerializer(element).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put', 'patch', 'delete'], url_path='elements/(?P<element_id>[^/.]+)')
    def element(self, request, pk=None, element_id=None):
        try:
            dashboard = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)
        element = get_document_or_none(DashboardElement, element_id, dashboard=dashboard)
        if element is None:
            return error_response('Element not found', status.HTTP_404_NOT_FOUND)

        if request.method == 'DELETE':
            element.delete()
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = DashboardElementSerializer(element, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(DashboardElementSerializer(serializer.save()).data)

    @action(detail=True, methods=['post'])
    def reorder(self, request, pk=None):
        """Bulk update element sort order from [{"id": ..., "sort_order": ...}]"""
        try:
            dashboard = self.get_object(pk)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

        items = request.data if isinstance(request.data, list) else request.data.get('elements')
        serializer = ElementOrderSerializer(data=items, many=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        updated = 0
        for item in serializer.validated_data:
            element = get_document_or_none(DashboardElement, item['id'], dashboard=dashboard)
            if element is None:
                logger.warning("Skipping element %s outside dashboard %s", item['id'], dashboard.id)
                continue
            element.sort_order = item['sort_order']
            element.save()
            updated += 1
        return Response({
            'updated': updated,
            'elements': DashboardElementSerializer(dashboard.ordered_elements(), many=True).data,
        })


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_overview(request):
    """Headline counts for the admin home page"""
    # Import here to avoid circular imports
    from students.models import Student
    from hostel.models import HostelRoomAssignment
    from billing.models import SchoolService
    from portal.models import PortalItem

    return Response({
        'total_students': Student.objects.count(),
        'active_students': Student.objects.filter(is_active=True).count(),
        'active_hostel_assignments': HostelRoomAssignment.objects.filter(is_active=True).count(),
        'active_services': SchoolService.objects.filter(is_active=True).count(),
        'portal_items': PortalItem.objects.filter(is_active=True).count(),
        'dashboards': Dashboard.objects.filter(is_active=True).count(),
    })
