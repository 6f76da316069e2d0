# ===== IMPORTS MODELS =====
"""
Import tracking models for the flight school CSV processing system.
Every import run is an ImportBatch; every rejected row is an ImportRowError.
"""

import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class ImportBatch(models.Model):
    """
    Track import operations for a complete audit trail.

    Business Rules:
    - Each import operation gets a unique batch ID
    - Files are tracked by hash so the same file is not imported twice
    - Counters are saved while rows are processed so progress can be polled
    - Quality score calculated when processing finishes
    """

    # =============================================================================
    # CHOICES
    # =============================================================================

    DATA_TYPE_CHOICES = [
        ('FLIGHT_LOGS', 'Flight Logs'),
        ('USERS', 'Users'),
        ('FLEET', 'Fleet'),
        ('ICAO_TYPES', 'ICAO Reference Types'),
        ('REFERENCE_AIRPORTS', 'Reference Airports'),
    ]

    IMPORT_TYPE_CHOICES = [
        ('CSV', 'CSV Import'),
        ('JSON', 'JSON Dataset'),
        ('API', 'API Integration'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('cancelled', 'Cancelled'),
    ]

    # =============================================================================
    # IDENTITY AND TRACKING
    # =============================================================================

    batch_id = models.UUIDField(default=uuid.uuid4, unique=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='import_batches',
        help_text="User who initiated the import"
    )

    # =============================================================================
    # IMPORT CONFIGURATION
    # =============================================================================

    data_type = models.CharField(
        max_length=20,
        choices=DATA_TYPE_CHOICES,
        db_index=True,
        help_text="Dataset being imported"
    )
    import_type = models.CharField(
        max_length=10,
        choices=IMPORT_TYPE_CHOICES,
        default='CSV',
        help_text="Source format of the import"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='pending',
        db_index=True
    )

    # =============================================================================
    # FILE INFORMATION
    # =============================================================================

    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.BigIntegerField(blank=True, null=True, help_text="File size in bytes")
    file_hash = models.CharField(
        max_length=64,
        blank=True,
        db_index=True,
        help_text="SHA256 hash for duplicate detection"
    )

    # =============================================================================
    # PROCESSING METRICS
    # =============================================================================

    records_total = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    records_processed = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    records_created = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    records_updated = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    records_skipped = models.IntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Rows skipped as duplicates or unchanged"
    )
    records_failed = models.IntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Rows rejected with an error"
    )

    # =============================================================================
    # QUALITY AND VALIDATION
    # =============================================================================

    quality_score = models.IntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Overall data quality score (0-100)"
    )
    has_errors = models.BooleanField(default=False)
    error_message = models.TextField(blank=True, help_text="Batch-level error if the import failed")
    validation_results = models.JSONField(default=dict, blank=True, help_text="Warnings collected while processing")

    started_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    notes = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'import_batches'
        ordering = ['-created_at']
        verbose_name_plural = 'import batches'
        indexes = [
            models.Index(fields=['data_type', '-created_at'], name='import_batch_type_created_idx'),
            models.Index(fields=['status', '-created_at'], name='import_batch_status_created_idx'),
        ]

    def __str__(self):
        return f"Import Batch {self.batch_id} - {self.get_data_type_display()}"

    # =============================================================================
    # PROPERTIES AND METHODS
    # =============================================================================

    @property
    def processing_duration(self):
        if self.started_at and self.completed_at:
            return self.completed_at - self.started_at
        return None

    @property
    def success_rate(self):
        """Share of rows that created or updated a record, in percent."""
        if self.records_total == 0:
            return 0
        return ((self.records_created + self.records_updated) / self.records_total) * 100

    @property
    def progress_percent(self):
        if self.records_total == 0:
            return 0
        return round((self.records_processed / self.records_total) * 100, 1)

    def mark_as_processing(self):
        self.status = 'processing'
        self.started_at = timezone.now()
        self.save(update_fields=['status', 'started_at', 'updated_at'])

    def mark_as_failed(self, error_message):
        self.status = 'failed'
        self.has_errors = True
        self.error_message = error_message
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'has_errors', 'error_message', 'completed_at', 'updated_at'])

    def mark_as_cancelled(self):
        self.status = 'cancelled'
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'completed_at', 'updated_at'])


# =============================================================================
# ROW ERROR TRACKING
# =============================================================================

class ImportRowError(models.Model):
    """
    One rejected row of an import batch.

    ``row_number`` is the CSV line number: the header is line 1, so the
    first data row is 2.
    """

    ERROR_TYPE_CHOICES = [
        ('VALIDATION', 'Validation Error'),
        ('PROCESSING', 'Processing Error'),
        ('DUPLICATE', 'Duplicate Record'),
        ('MISSING_DATA', 'Missing Required Data'),
        ('FORMAT', 'Format Error'),
        ('REFERENCE', 'Unknown Reference'),
        ('BUSINESS_LOGIC', 'Business Logic Error'),
    ]

    import_batch = models.ForeignKey(
        ImportBatch,
        on_delete=models.CASCADE,
        related_name='errors'
    )
    error_type = models.CharField(max_length=20, choices=ERROR_TYPE_CHOICES)
    row_number = models.IntegerField(validators=[MinValueValidator(1)])
    field_name = models.CharField(max_length=100, blank=True)
    error_message = models.TextField()
    raw_data = models.JSONField(default=dict, help_text="Original row data that caused the error")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'import_row_errors'
        ordering = ['row_number']
        indexes = [
            models.Index(fields=['import_batch', 'error_type'], name='import_error_batch_type_idx'),
        ]

    def __str__(self):
        return f"Row {self.row_number}: {self.get_error_type_display()}"
