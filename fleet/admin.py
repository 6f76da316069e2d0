from django.contrib import admin
from django.utils.html import format_html

from .models import Aircraft, AircraftHobbs, IcaoReferenceType


STATUS_COLORS = {
    'ACTIVE': '#28a745',
    'MAINTENANCE': '#ffc107',
    'INACTIVE': '#6c757d',
    'RETIRED': '#dc3545',
}


class AircraftHobbsInline(admin.StackedInline):
    model = AircraftHobbs
    extra = 0
    readonly_fields = ['last_hobbs_reading', 'last_hobbs_date', 'last_flight_log', 'updated_at']
    can_delete = False


@admin.register(Aircraft)
class AircraftAdmin(admin.ModelAdmin):
    list_display = ['call_sign', 'serial_number', 'icao_reference_type', 'year_of_manufacture', 'status_badge']
    list_filter = ['status', 'icao_reference_type__manufacturer']
    search_fields = ['call_sign', 'serial_number']
    autocomplete_fields = ['icao_reference_type']
    inlines = [AircraftHobbsInline]

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            STATUS_COLORS.get(obj.status, '#6c757d'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(IcaoReferenceType)
class IcaoReferenceTypeAdmin(admin.ModelAdmin):
    list_display = ['type_designator', 'manufacturer', 'model', 'engine_type', 'engine_count', 'wtc']
    list_filter = ['engine_type', 'wtc']
    search_fields = ['type_designator', 'manufacturer', 'model']
