from django_filters import rest_framework as filters

from .models import Airfield, ReferenceAirport


class AirfieldFilter(filters.FilterSet):
    country = filters.CharFilter(field_name='country', lookup_expr='iexact')
    city = filters.CharFilter(field_name='city', lookup_expr='icontains')

    class Meta:
        model = Airfield
        fields = ['type', 'status', 'country', 'city', 'is_base', 'source']


class ReferenceAirportFilter(filters.FilterSet):
    country = filters.CharFilter(field_name='iso_country', lookup_expr='iexact')
    type = filters.CharFilter(field_name='type', lookup_expr='iexact')
    region = filters.CharFilter(field_name='iso_region', lookup_expr='iexact')

    class Meta:
        model = ReferenceAirport
        fields = ['country', 'type', 'region', 'continent']
