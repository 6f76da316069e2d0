from django_filters import rest_framework as filters

from .models import FlightLog


class FlightLogFilter(filters.FilterSet):
    date_from = filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = filters.DateFilter(field_name='date', lookup_expr='lte')
    flight_type = filters.CharFilter(field_name='flight_type', lookup_expr='iexact')

    class Meta:
        model = FlightLog
        fields = [
            'flight_type',
            'pilot',
            'aircraft',
            'instructor',
            'departure_airfield',
            'arrival_airfield',
            'date_from',
            'date_to',
        ]
