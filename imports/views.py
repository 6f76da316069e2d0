"""
Import endpoints for the flight school backend.

Handles CSV uploads for every dataset, structure checks, templates and
batch monitoring.
"""

import logging

from django.http import HttpResponse
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from accounts.models import Role
from accounts.permissions import IsAdminRole
from accounts.services import ADMIN_ROLES, has_role

from .importers import (
    DATA_TYPE_SLUGS,
    find_previous_import,
    get_import_status,
    get_template,
    run_import,
    validate_csv_structure,
)
from .models import ImportBatch
from .serializers import (
    CSVUploadSerializer,
    CSVValidateSerializer,
    ImportBatchDetailSerializer,
    ImportBatchListSerializer,
    ImportProgressSerializer,
    ImportRowErrorSerializer,
)

logger = logging.getLogger(__name__)

# Datasets any admin may import; the rest need super admin
ADMIN_IMPORTABLE = {'USERS'}


def _error(error, details, status_code):
    return Response(
        {
            'success': False,
            'error': error,
            'details': details,
        },
        status=status_code
    )


def _resolve_data_type(slug):
    return DATA_TYPE_SLUGS.get(slug)


def _can_import(user, data_type):
    if data_type in ADMIN_IMPORTABLE:
        return has_role(user, *ADMIN_ROLES)
    return has_role(user, Role.SUPER_ADMIN)


# =============================================================================
# UPLOAD / VALIDATE / TEMPLATE
# =============================================================================

@api_view(['POST'])
@permission_classes([IsAuthenticated])
def upload_csv(request, data_type_slug):
    """
    CSV upload endpoint.

    Request:
        POST /api/v1/imports/{data_type}/
        Content-Type: multipart/form-data
        Body: file (CSV file), notes (optional), force (optional)

    Response:
        {
            "success": true,
            "results": {"batch_id": "...", "records_created": 12, ...},
            "message": "Import completed successfully"
        }

    Error Response:
        {
            "success": false,
            "error": "Error message",
            "details": "Additional error details"
        }
    """
    data_type = _resolve_data_type(data_type_slug)
    if data_type is None:
        return _error(
            'Unknown data type',
            f"Supported data types: {', '.join(DATA_TYPE_SLUGS)}",
            status.HTTP_404_NOT_FOUND
        )

    if not _can_import(request.user, data_type):
        return _error(
            'Insufficient permissions',
            f"You are not allowed to import {data_type_slug}",
            status.HTTP_403_FORBIDDEN
        )

    if 'file' not in request.FILES:
        return _error(
            'No file provided',
            'Please upload a CSV file using the "file" field',
            status.HTTP_400_BAD_REQUEST
        )

    serializer = CSVUploadSerializer(data=request.data)
    if not serializer.is_valid():
        return _error('Invalid upload', serializer.errors, status.HTTP_400_BAD_REQUEST)

    uploaded_file = serializer.validated_data['file']
    file_hash = serializer.validated_data['file_hash']
    force = serializer.validated_data['force']

    previous = find_previous_import(data_type, file_hash)
    if previous and not force:
        return Response(
            {
                'success': False,
                'error': 'File already imported',
                'details': 'This file was already imported. Send force=true to import it again.',
                'previous_batch_id': str(previous.batch_id),
                'previous_import_date': previous.completed_at,
            },
            status=status.HTTP_409_CONFLICT
        )

    try:
        results = run_import(
            data_type,
            uploaded_file.read(),
            file_name=uploaded_file.name,
            user=request.user,
            notes=serializer.validated_data['notes'],
        )
    except Exception as e:
        logger.error(f"Import of {uploaded_file.name} ({data_type}) crashed: {str(e)}")
        return _error('Import failed', str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if results['status'] == 'failed':
        return Response(
            {
                'success': False,
                'error': results.get('error_message') or 'Import failed',
                'details': results.get('errors', []),
                'results': results,
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(
        {
            'success': True,
            'results': results,
            'message': 'Import completed successfully',
        },
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@permission_classes([IsAdminRole])
def validate_csv(request, data_type_slug):
    """Check headers and row count of a CSV without importing it."""
    data_type = _resolve_data_type(data_type_slug)
    if data_type is None:
        return _error('Unknown data type', data_type_slug, status.HTTP_404_NOT_FOUND)

    serializer = CSVValidateSerializer(data=request.data)
    if not serializer.is_valid():
        return _error('Invalid upload', serializer.errors, status.HTTP_400_BAD_REQUEST)

    result = validate_csv_structure(data_type, serializer.validated_data['file'].read())
    return Response({'success': result['valid'], **result}, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def download_template(request, data_type_slug):
    data_type = _resolve_data_type(data_type_slug)
    if data_type is None:
        return _error('Unknown data type', data_type_slug, status.HTTP_404_NOT_FOUND)

    response = HttpResponse(get_template(data_type), content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{data_type_slug}_template.csv"'
    return response


@api_view(['GET'])
@permission_classes([IsAdminRole])
def import_status(request):
    """
    Get import statistics.

    Returns record counts per dataset and the latest batch of each data type.
    """
    return Response(
        {
            'success': True,
            **get_import_status(),
        },
        status=status.HTTP_200_OK
    )


# =============================================================================
# BATCH MONITORING
# =============================================================================

class ImportBatchViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Import batch history, progress polling, row errors and cancellation.

    Batches are addressed by their ``batch_id`` UUID.
    """
    permission_classes = [IsAdminRole]
    queryset = ImportBatch.objects.select_related('created_by')
    lookup_field = 'batch_id'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['data_type', 'status', 'import_type', 'has_errors']
    search_fields = ['file_name', 'notes']
    ordering_fields = ['created_at', 'completed_at', 'quality_score']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'list':
            return ImportBatchListSerializer
        return ImportBatchDetailSerializer

    @action(detail=True, methods=['get'])
    def progress(self, request, batch_id=None):
        batch = self.get_object()
        return Response(ImportProgressSerializer(batch).data)

    @action(detail=True, methods=['get'])
    def errors(self, request, batch_id=None):
        batch = self.get_object()
        queryset = batch.errors.all()

        error_type = request.query_params.get('error_type')
        if error_type:
            queryset = queryset.filter(error_type=error_type.upper())

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ImportRowErrorSerializer(page, many=True).data)
        return Response(ImportRowErrorSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, batch_id=None):
        batch = self.get_object()
        if batch.status != 'pending':
            return _error(
                'Cannot cancel import',
                f"Only pending imports can be cancelled (current status: {batch.status})",
                status.HTTP_400_BAD_REQUEST
            )

        batch.mark_as_cancelled()
        logger.info(f"Import batch {batch.batch_id} cancelled by {request.user}")
        return Response({'success': True, 'batch': ImportBatchListSerializer(batch).data})
