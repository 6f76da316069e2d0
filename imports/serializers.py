# ===== IMPORTS SERIALIZERS =====
"""
Serializers for Import Management API endpoints.
Handles ImportBatch serialization, file upload validation,
and import progress tracking.
"""

import hashlib
import logging

from django.conf import settings
from rest_framework import serializers

from .models import ImportBatch, ImportRowError

logger = logging.getLogger(__name__)


# =============================================================================
# IMPORT BATCH SERIALIZERS
# =============================================================================

class ImportBatchListSerializer(serializers.ModelSerializer):
    """
    Simplified serializer for import batch list views.
    Shows essential information for monitoring and management.
    """

    processing_duration = serializers.SerializerMethodField()
    success_rate = serializers.SerializerMethodField()
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    data_type_display = serializers.CharField(source='get_data_type_display', read_only=True)
    import_type_display = serializers.CharField(source='get_import_type_display', read_only=True)

    class Meta:
        model = ImportBatch
        fields = [
            'id',
            'batch_id',
            'data_type',
            'data_type_display',
            'import_type',
            'import_type_display',
            'status',
            'status_display',
            'file_name',
            'file_size',
            'records_total',
            'records_processed',
            'records_created',
            'records_updated',
            'records_skipped',
            'records_failed',
            'quality_score',
            'has_errors',
            'created_at',
            'started_at',
            'completed_at',
            'processing_duration',
            'success_rate',
        ]
        read_only_fields = fields

    def get_processing_duration(self, obj):
        """Processing duration in seconds."""
        duration = obj.processing_duration
        return duration.total_seconds() if duration else None

    def get_success_rate(self, obj):
        return round(obj.success_rate, 1)


class ImportBatchDetailSerializer(ImportBatchListSerializer):
    """
    Complete serializer for import batch detail views.
    Includes batch-level errors, warnings and the most recent row errors.
    """

    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, default=None)
    error_count = serializers.SerializerMethodField()
    recent_errors = serializers.SerializerMethodField()

    class Meta(ImportBatchListSerializer.Meta):
        fields = ImportBatchListSerializer.Meta.fields + [
            'file_hash',
            'error_message',
            'validation_results',
            'notes',
            'metadata',
            'updated_at',
            'created_by_email',
            'error_count',
            'recent_errors',
        ]
        read_only_fields = fields

    def get_error_count(self, obj):
        return obj.errors.count()

    def get_recent_errors(self, obj):
        """First ten row errors in file order."""
        return ImportRowErrorSerializer(obj.errors.order_by('row_number')[:10], many=True).data


class ImportProgressSerializer(serializers.ModelSerializer):
    """Lightweight payload polled while a batch is processing."""

    progress_percent = serializers.FloatField(read_only=True)

    class Meta:
        model = ImportBatch
        fields = [
            'batch_id',
            'status',
            'records_total',
            'records_processed',
            'records_created',
            'records_updated',
            'records_skipped',
            'records_failed',
            'progress_percent',
            'started_at',
            'completed_at',
        ]
        read_only_fields = fields


# =============================================================================
# IMPORT ERROR SERIALIZERS
# =============================================================================

class ImportRowErrorSerializer(serializers.ModelSerializer):
    """Used in error reporting and troubleshooting."""

    error_type_display = serializers.CharField(source='get_error_type_display', read_only=True)

    class Meta:
        model = ImportRowError
        fields = [
            'id',
            'error_type',
            'error_type_display',
            'row_number',
            'field_name',
            'error_message',
            'raw_data',
            'created_at',
        ]
        read_only_fields = fields


# =============================================================================
# FILE UPLOAD SERIALIZERS
# =============================================================================

class CSVUploadSerializer(serializers.Serializer):
    """
    Validates a CSV upload for one of the import endpoints.

    The SHA256 hash of the file is computed during validation and exposed
    as ``validated_data['file_hash']``.
    """

    file = serializers.FileField()
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')
    force = serializers.BooleanField(required=False, default=False)

    def validate_file(self, file):
        max_size = settings.IMPORT_MAX_FILE_SIZE
        if file.size > max_size:
            raise serializers.ValidationError(
                f"File size ({file.size} bytes) exceeds limit of {max_size} bytes"
            )

        if not file.name.lower().endswith('.csv'):
            raise serializers.ValidationError('Only CSV files are supported')

        if file.size == 0:
            raise serializers.ValidationError('The uploaded file is empty')

        return file

    def validate(self, attrs):
        attrs['file_hash'] = self._calculate_file_hash(attrs['file'])
        return attrs

    def _calculate_file_hash(self, file):
        """Calculate SHA256 hash of the uploaded file."""
        hasher = hashlib.sha256()
        for chunk in file.chunks():
            hasher.update(chunk)
        file.seek(0)
        return hasher.hexdigest()


class CSVValidateSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, file):
        if not file.name.lower().endswith('.csv'):
            raise serializers.ValidationError('Only CSV files are supported')
        return file
