# core/views.py - Shared REST plumbing for MongoEngine documents

import logging

from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.decorators import action
from mongoengine import DoesNotExist, NotUniqueError
from mongoengine.errors import ValidationError as MongoValidationError
from bson import ObjectId
from bson.errors import InvalidId

from .batch import apply_row_changes
from .campus import get_campus_id, scope_to_campus
from .exceptions import DomainError
from .permissions import IsAdminOrReadOnly

logger = logging.getLogger(__name__)


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'error': message}, status=status_code)


def get_document_or_none(document, pk, **filters):
    """Fetch a document by id; malformed ids count as missing"""
    try:
        return document.objects.get(id=ObjectId(str(pk)), **filters)
    except (DoesNotExist, InvalidId, MongoValidationError, TypeError):
        return None


def handle_exception_response(exc, entity_name):
    """Translate a storage or domain error into an API response"""
    if isinstance(exc, DomainError):
        return error_response(exc.message, exc.status_code)
    if isinstance(exc, DoesNotExist):
        return error_response(f'{entity_name} not found', status.HTTP_404_NOT_FOUND)
    if isinstance(exc, NotUniqueError):
        return error_response(f'{entity_name} already exists')
    if isinstance(exc, MongoValidationError):
        return error_response(str(exc))
    logger.exception("Unexpected error handling %s", entity_name)
    return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


class DocumentViewSet(viewsets.ViewSet):
    """
    CRUD for one MongoEngine document type.

    Subclasses set `document`, `serializer_class` and `entity_name`, and can
    narrow `get_queryset()`. Setting `campus_scoped` filters lists by the
    selected campus; `soft_delete` deactivates instead of deleting.
    """
    permission_classes = [IsAdminOrReadOnly]
    document = None
    serializer_class = None
    entity_name = 'Record'
    campus_scoped = False
    include_shared_campus = False
    soft_delete = False
    ordering = None

    def get_queryset(self):
        queryset = self.document.objects
        if self.soft_delete and self.request.query_params.get('include_inactive') != 'true':
            queryset = queryset.filter(is_active=True)
        if self.campus_scoped:
            queryset = scope_to_campus(
                queryset, get_campus_id(self.request), self.include_shared_campus
            )
        if self.ordering:
            queryset = queryset.order_by(*self.ordering)
        return queryset

    def get_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', {'request': self.request})
        return self.serializer_class(*args, **kwargs)

    def get_object(self, pk):
        instance = get_document_or_none(self.document, pk)
        if instance is None:
            raise DoesNotExist(f'{self.entity_name} {pk} does not exist')
        return instance

    def list(self, request):
        try:
            serializer = self.get_serializer(list(self.get_queryset()), many=True)
            return Response(serializer.data)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

    def retrieve(self, request, pk=None):
        try:
            serializer = self.get_serializer(self.get_object(pk))
            return Response(serializer.data)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

    def create(self, request):
        try:
            serializer = self.get_serializer(data=request.data)
            if serializer.is_valid():
                instance = serializer.save()
                logger.info("Created %s %s", self.entity_name, instance.id)
                return Response(
                    self.get_serializer(instance).data,
                    status=status.HTTP_201_CREATED
                )
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

    def update(self, request, pk=None):
        return self._update(request, pk, partial=False)

    def partial_update(self, request, pk=None):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        try:
            instance = self.get_object(pk)
            serializer = self.get_serializer(instance, data=request.data, partial=partial)
            if serializer.is_valid():
                instance = serializer.save()
                return Response(self.get_serializer(instance).data)
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

    def destroy(self, request, pk=None):
        try:
            self.perform_destroy(self.get_object(pk))
            logger.info("Deleted %s %s", self.entity_name, pk)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

    def perform_destroy(self, instance):
        if self.soft_delete:
            instance.is_active = False
            instance.save()
        else:
            instance.delete()

    # ------------------------------------------------------------------
    # Batch save of an edited table
    # ------------------------------------------------------------------

    def get_batch_defaults(self, request):
        """Values merged into every created row (e.g. the parent scale)"""
        return {}

    def batch_create(self, data):
        serializer = self.get_serializer(data=data)
        serializer.is_valid(raise_exception=True)
        return str(serializer.save().id)

    def batch_update(self, pk, data):
        serializer = self.get_serializer(self.get_object(pk), data=data, partial=True)
        serializer.is_valid(raise_exception=True)
        return str(serializer.save().id)

    def batch_delete(self, pk):
        self.perform_destroy(self.get_object(pk))

    @action(detail=False, methods=['post'])
    def batch(self, request):
        """Apply a table of rows flagged _isNew / _dirty / _deleted"""
        rows = request.data.get('rows') if hasattr(request.data, 'get') else None
        if not isinstance(rows, list):
            return error_response('rows must be a list')
        if not all(isinstance(row, dict) for row in rows):
            return error_response('each row must be an object')

        try:
            defaults = self.get_batch_defaults(request)
        except Exception as e:
            return handle_exception_response(e, self.entity_name)

        def create(data):
            return self.batch_create({**defaults, **data})

        result = apply_row_changes(rows, create, self.batch_update, self.batch_delete)
        return Response(result.to_dict())
