from django.contrib import admin
from django.utils.html import format_html

from .models import Airfield, OperationalArea, ReferenceAirport


@admin.register(Airfield)
class AirfieldAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'type', 'status_badge', 'city', 'country', 'is_base', 'source']
    list_filter = ['type', 'status', 'is_base', 'source', 'country']
    search_fields = ['code', 'name', 'city']
    readonly_fields = ['created_at', 'updated_at']

    def status_badge(self, obj):
        color = '#28a745' if obj.status == 'ACTIVE' else '#6c757d'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(ReferenceAirport)
class ReferenceAirportAdmin(admin.ModelAdmin):
    list_display = ['ident', 'name', 'type', 'iso_country', 'icao_code', 'iata_code']
    list_filter = ['type', 'continent']
    search_fields = ['ident', 'name', 'icao_code', 'iata_code', 'municipality']


@admin.register(OperationalArea)
class OperationalAreaAdmin(admin.ModelAdmin):
    list_display = ['continent', 'countries', 'created_by', 'created_at']
    list_filter = ['continent']
