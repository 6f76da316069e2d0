from rest_framework import serializers

from .models import Airfield, OperationalArea, ReferenceAirport


class AirfieldSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Airfield
        fields = [
            'id',
            'name',
            'code',
            'type',
            'type_display',
            'status',
            'status_display',
            'city',
            'state',
            'country',
            'latitude',
            'longitude',
            'elevation',
            'phone',
            'email',
            'website',
            'is_base',
            'source',
            'reference_airport',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'source', 'reference_airport', 'created_at', 'updated_at']

    def validate_code(self, value):
        return value.strip().upper()


class ReferenceAirportSerializer(serializers.ModelSerializer):
    imported = serializers.SerializerMethodField()

    class Meta:
        model = ReferenceAirport
        fields = [
            'id',
            'ourairports_id',
            'ident',
            'type',
            'name',
            'latitude_deg',
            'longitude_deg',
            'elevation_ft',
            'continent',
            'iso_country',
            'iso_region',
            'municipality',
            'gps_code',
            'iata_code',
            'local_code',
            'icao_code',
            'home_link',
            'imported',
        ]

    def get_imported(self, obj):
        codes = obj.codes
        return bool(codes) and Airfield.objects.filter(code__in=codes).exists()


class OperationalAreaSerializer(serializers.ModelSerializer):
    continent_display = serializers.CharField(source='get_continent_display', read_only=True)
    countries = serializers.ListField(child=serializers.CharField(max_length=2), allow_empty=False)

    class Meta:
        model = OperationalArea
        fields = ['id', 'continent', 'continent_display', 'countries', 'created_at']
        read_only_fields = ['id', 'created_at']


class ImportAirfieldsSerializer(serializers.Serializer):
    countries = serializers.ListField(child=serializers.CharField(max_length=2), allow_empty=False)
    types = serializers.ListField(child=serializers.CharField(max_length=30), required=False, allow_empty=True)
