# ===== IMPORTS APP ADMIN CONFIGURATION =====
"""
Django Admin interface for import management
File: imports/admin.py

Admin Features:
- Import batch monitoring with status and quality badges
- Row error inspection per batch
- Export of the import log as CSV
"""

import csv

from django.contrib import admin
from django.http import HttpResponse
from django.utils import timezone
from django.utils.html import format_html

from .models import ImportBatch, ImportRowError


class ImportRowErrorInline(admin.TabularInline):
    model = ImportRowError
    extra = 0
    can_delete = False
    fields = ['row_number', 'error_type', 'field_name', 'error_message']
    readonly_fields = fields
    ordering = ['row_number']
    max_num = 0
    show_change_link = True


# =============================================================================
# IMPORT BATCH ADMIN
# =============================================================================

@admin.register(ImportBatch)
class ImportBatchAdmin(admin.ModelAdmin):
    """
    Admin interface for ImportBatch model
    """

    list_display = [
        'batch_id_display',
        'data_type',
        'file_name',
        'status_badge',
        'records_processed',
        'records_failed',
        'quality_score_display',
        'created_at',
        'processing_time_display',
    ]

    list_filter = [
        'status',
        'data_type',
        'import_type',
        ('created_at', admin.DateFieldListFilter),
        'has_errors',
    ]

    search_fields = ['file_name', 'batch_id', 'notes', 'error_message']
    ordering = ['-created_at']
    list_per_page = 25
    inlines = [ImportRowErrorInline]

    readonly_fields = [
        'batch_id',
        'created_by',
        'created_at',
        'updated_at',
        'started_at',
        'completed_at',
        'processing_time_display',
        'file_hash',
        'progress_bar',
    ]

    fieldsets = [
        ('Import Information', {
            'fields': ['batch_id', 'data_type', 'import_type', 'file_name', 'file_size', 'file_hash', 'created_by']
        }),
        ('Processing Status', {
            'fields': [
                'status',
                'progress_bar',
                'records_total',
                'records_processed',
                'records_created',
                'records_updated',
                'records_skipped',
                'records_failed',
                'quality_score',
            ]
        }),
        ('Timing Information', {
            'fields': ['created_at', 'updated_at', 'started_at', 'completed_at', 'processing_time_display']
        }),
        ('Results and Errors', {
            'fields': ['has_errors', 'error_message', 'validation_results', 'notes', 'metadata'],
            'classes': ['collapse']
        }),
    ]

    actions = ['cancel_pending_imports', 'export_import_log']

    # =============================================================================
    # CUSTOM DISPLAY METHODS
    # =============================================================================

    def batch_id_display(self, obj):
        return format_html('<strong>#{}</strong>', str(obj.batch_id)[:8])
    batch_id_display.short_description = 'Batch ID'
    batch_id_display.admin_order_field = 'batch_id'

    def status_badge(self, obj):
        status_colors = {
            'pending': '#ffc107',
            'processing': '#007bff',
            'completed': '#28a745',
            'failed': '#dc3545',
            'cancelled': '#6c757d',
        }
        color = status_colors.get(obj.status, '#6c757d')
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; border-radius: 3px; font-size: 11px; font-weight: bold;">{}</span>',
            color,
            obj.status.upper()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def quality_score_display(self, obj):
        if obj.quality_score is None:
            return format_html('<span style="color: #999;">{}</span>', 'N/A')

        if obj.quality_score >= 90:
            color = '#28a745'
        elif obj.quality_score >= 70:
            color = '#ffc107'
        else:
            color = '#dc3545'

        return format_html(
            '<span style="color: {}; font-weight: bold;">{}/100</span>',
            color,
            obj.quality_score
        )
    quality_score_display.short_description = 'Quality'
    quality_score_display.admin_order_field = 'quality_score'

    def processing_time_display(self, obj):
        duration = obj.processing_duration
        if duration is None:
            if obj.status == 'processing' and obj.started_at:
                return f'{int((timezone.now() - obj.started_at).total_seconds())}s (running)'
            return 'N/A'

        total_seconds = int(duration.total_seconds())
        if total_seconds < 60:
            return f'{total_seconds}s'
        if total_seconds < 3600:
            return f'{total_seconds // 60}m {total_seconds % 60}s'
        return f'{total_seconds // 3600}h {(total_seconds % 3600) // 60}m'
    processing_time_display.short_description = 'Processing Time'

    def progress_bar(self, obj):
        if not obj.records_total:
            return 'N/A'
        percentage = obj.progress_percent
        return format_html(
            '<div style="width: 200px; background: #f0f0f0; border-radius: 5px; overflow: hidden;">'
            '<div style="width: {}%; background: #007bff; height: 20px; line-height: 20px; color: white; text-align: center; font-size: 11px;">'
            '{}/{} ({}%)</div></div>',
            percentage,
            obj.records_processed,
            obj.records_total,
            int(percentage)
        )
    progress_bar.short_description = 'Progress'

    # =============================================================================
    # CUSTOM ADMIN ACTIONS
    # =============================================================================

    def cancel_pending_imports(self, request, queryset):
        count = 0
        for batch in queryset.filter(status='pending'):
            batch.mark_as_cancelled()
            count += 1
        self.message_user(request, f'{count} import batch(es) marked as cancelled.')
    cancel_pending_imports.short_description = 'Cancel selected pending imports'

    def export_import_log(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="import_log_{timezone.now().strftime("%Y%m%d")}.csv"'

        writer = csv.writer(response)
        writer.writerow([
            'Batch ID', 'Data Type', 'File Name', 'Status', 'Records Processed',
            'Records Failed', 'Quality Score', 'Created At', 'Has Errors'
        ])

        for batch in queryset:
            writer.writerow([
                batch.batch_id,
                batch.data_type,
                batch.file_name,
                batch.status,
                batch.records_processed,
                batch.records_failed,
                batch.quality_score if batch.quality_score is not None else 'N/A',
                batch.created_at.strftime('%Y-%m-%d %H:%M:%S'),
                'Yes' if batch.has_errors else 'No',
            ])

        return response
    export_import_log.short_description = 'Export import log as CSV'


@admin.register(ImportRowError)
class ImportRowErrorAdmin(admin.ModelAdmin):
    list_display = ['import_batch', 'row_number', 'error_type', 'field_name', 'error_message']
    list_filter = ['error_type']
    search_fields = ['error_message', 'field_name']
    readonly_fields = ['import_batch', 'error_type', 'row_number', 'field_name', 'error_message', 'raw_data', 'created_at']
    list_select_related = ['import_batch']
