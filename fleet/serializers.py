"""
API serializers for the fleet app.

- ICAO reference types (read-only reference data)
- Aircraft list / detail views, with the ICAO type and Hobbs state inlined
"""

from rest_framework import serializers

from .models import Aircraft, AircraftHobbs, IcaoReferenceType


# =============================================================================
# ICAO REFERENCE TYPE SERIALIZERS
# =============================================================================

class IcaoReferenceTypeSerializer(serializers.ModelSerializer):
    engine_type_display = serializers.CharField(source='get_engine_type_display', read_only=True)
    wtc_display = serializers.CharField(source='get_wtc_display', read_only=True)

    class Meta:
        model = IcaoReferenceType
        fields = [
            'id',
            'type_designator',
            'manufacturer',
            'model',
            'description',
            'engine_type',
            'engine_type_display',
            'engine_count',
            'wtc',
            'wtc_display',
        ]
        read_only_fields = fields


# =============================================================================
# AIRCRAFT SERIALIZERS
# =============================================================================

class AircraftHobbsSerializer(serializers.ModelSerializer):
    call_sign = serializers.CharField(source='aircraft.call_sign', read_only=True)

    class Meta:
        model = AircraftHobbs
        fields = ['aircraft', 'call_sign', 'last_hobbs_reading', 'last_hobbs_date', 'last_flight_log', 'updated_at']
        read_only_fields = fields


class AircraftListSerializer(serializers.ModelSerializer):
    """Summary row for fleet tables."""

    type_designator = serializers.CharField(source='icao_reference_type.type_designator', read_only=True)
    manufacturer = serializers.CharField(source='icao_reference_type.manufacturer', read_only=True)
    model = serializers.CharField(source='icao_reference_type.model', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    last_hobbs_reading = serializers.SerializerMethodField()

    class Meta:
        model = Aircraft
        fields = [
            'id',
            'call_sign',
            'serial_number',
            'year_of_manufacture',
            'type_designator',
            'manufacturer',
            'model',
            'status',
            'status_display',
            'last_hobbs_reading',
        ]

    def get_last_hobbs_reading(self, obj):
        hobbs = getattr(obj, 'hobbs', None)
        return hobbs.last_hobbs_reading if hobbs else None


class AircraftDetailSerializer(serializers.ModelSerializer):
    """
    Full aircraft record; also used for create and update.

    ``icao_reference_type`` is written as a primary key and read back
    expanded under ``icao_type``.
    """

    icao_type = IcaoReferenceTypeSerializer(source='icao_reference_type', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    hobbs = AircraftHobbsSerializer(read_only=True)

    class Meta:
        model = Aircraft
        fields = [
            'id',
            'call_sign',
            'serial_number',
            'year_of_manufacture',
            'icao_reference_type',
            'icao_type',
            'status',
            'status_display',
            'image_path',
            'hobbs',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_call_sign(self, value):
        return value.strip().upper()

    def validate_serial_number(self, value):
        return value.strip()
