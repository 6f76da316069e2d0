from django.contrib import admin
from django.utils.html import format_html

from services.flight_time import format_hours

from .models import FlightLog


@admin.register(FlightLog)
class FlightLogAdmin(admin.ModelAdmin):
    list_display = [
        'date', 'pilot', 'instructor', 'aircraft', 'departure_airfield',
        'arrival_airfield', 'flight_type', 'block_time', 'import_badge',
    ]
    list_filter = ['flight_type', 'date', 'aircraft']
    search_fields = ['pilot__first_name', 'pilot__last_name', 'pilot__email', 'aircraft__call_sign', 'purpose']
    date_hierarchy = 'date'
    raw_id_fields = ['pilot', 'instructor', 'payer', 'import_batch', 'created_by']
    readonly_fields = ['total_hours', 'created_at', 'updated_at']

    fieldsets = (
        ('Flight', {
            'fields': ('date', 'pilot', 'instructor', 'payer', 'aircraft', 'flight_type', 'purpose')
        }),
        ('Route & Times', {
            'fields': (
                'departure_airfield', 'arrival_airfield', 'departure_time', 'arrival_time',
                'departure_hobbs', 'arrival_hobbs', 'route', 'conditions',
            )
        }),
        ('Hours', {
            'fields': (
                'total_hours', 'pilot_in_command', 'second_in_command', 'dual_received', 'dual_given',
                'solo', 'cross_country', 'night', 'instrument', 'actual_instrument', 'simulated_instrument',
            )
        }),
        ('Landings & Fluids', {
            'fields': ('day_landings', 'night_landings', 'oil_added', 'fuel_added'),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('remarks', 'import_batch', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def block_time(self, obj):
        return format_hours(obj.total_hours)
    block_time.short_description = 'Block'

    def import_badge(self, obj):
        if obj.import_batch_id is None:
            return ''
        return format_html('<span style="color: {};">{}</span>', '#17a2b8', 'imported')
    import_badge.short_description = 'Source'
