"""
API serializers for flight logs.

The list serializer flattens the related names the logbook tables show;
the detail serializer is used for create and update and validates the
airfield pair, the clock times and the Hobbs readings.
"""

import logging

from rest_framework import serializers

from services.flight_time import calculate_flight_hours, check_hobbs, format_hours, get_flight_type_label

from .models import FlightLog

logger = logging.getLogger(__name__)


def _full_name(user):
    return f"{user.first_name} {user.last_name}".strip() if user else None


class FlightLogListSerializer(serializers.ModelSerializer):
    pilot_name = serializers.SerializerMethodField()
    instructor_name = serializers.SerializerMethodField()
    aircraft_call_sign = serializers.CharField(source='aircraft.call_sign', read_only=True)
    aircraft_type = serializers.CharField(source='aircraft.icao_reference_type.type_designator', read_only=True)
    departure_airfield_code = serializers.CharField(source='departure_airfield.code', read_only=True)
    arrival_airfield_code = serializers.CharField(source='arrival_airfield.code', read_only=True)
    flight_type_display = serializers.SerializerMethodField()
    total_time = serializers.SerializerMethodField()

    class Meta:
        model = FlightLog
        fields = [
            'id',
            'date',
            'pilot',
            'pilot_name',
            'instructor',
            'instructor_name',
            'aircraft',
            'aircraft_call_sign',
            'aircraft_type',
            'departure_airfield',
            'departure_airfield_code',
            'arrival_airfield',
            'arrival_airfield_code',
            'departure_time',
            'arrival_time',
            'flight_type',
            'flight_type_display',
            'total_hours',
            'total_time',
            'day_landings',
            'night_landings',
        ]

    def get_pilot_name(self, obj):
        return _full_name(obj.pilot)

    def get_instructor_name(self, obj):
        return _full_name(obj.instructor)

    def get_flight_type_display(self, obj):
        return get_flight_type_label(obj.flight_type)

    def get_total_time(self, obj):
        return format_hours(obj.total_hours)


class FlightLogSerializer(FlightLogListSerializer):
    """Full flight log; used for retrieve, create and update."""

    class Meta(FlightLogListSerializer.Meta):
        fields = FlightLogListSerializer.Meta.fields + [
            'payer',
            'departure_hobbs',
            'arrival_hobbs',
            'purpose',
            'remarks',
            'route',
            'conditions',
            'pilot_in_command',
            'second_in_command',
            'dual_received',
            'dual_given',
            'solo',
            'cross_country',
            'night',
            'instrument',
            'actual_instrument',
            'simulated_instrument',
            'oil_added',
            'fuel_added',
            'import_batch',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'total_hours', 'import_batch', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'pilot': {'required': False},
        }

    def validate(self, attrs):
        instance = self.instance

        def current(name):
            if name in attrs:
                return attrs[name]
            return getattr(instance, name) if instance else None

        departure_time = current('departure_time')
        arrival_time = current('arrival_time')
        if departure_time and arrival_time and arrival_time <= departure_time:
            raise serializers.ValidationError({'arrival_time': 'Arrival time must be after departure time'})

        hobbs = check_hobbs(
            current('departure_hobbs'),
            current('arrival_hobbs'),
            calculate_flight_hours(departure_time, arrival_time),
        )
        if not hobbs.is_valid:
            raise serializers.ValidationError({'arrival_hobbs': hobbs.errors})

        pilot = current('pilot')
        instructor = current('instructor')
        if pilot is not None and instructor is not None and pilot.pk == instructor.pk:
            raise serializers.ValidationError({'instructor': 'Instructor cannot be the same person as the pilot'})

        return attrs


class HobbsCheckSerializer(serializers.Serializer):
    flight_log = serializers.IntegerField()
    departure_hobbs = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    arrival_hobbs = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    hobbs_time = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    block_time = serializers.DecimalField(max_digits=6, decimal_places=2)
    discrepancy = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    tolerance = serializers.DecimalField(max_digits=6, decimal_places=2)
    is_valid = serializers.BooleanField()
    within_tolerance = serializers.BooleanField()
    errors = serializers.ListField(child=serializers.CharField())
