from django_filters import rest_framework as filters

from .models import Aircraft, IcaoReferenceType


class AircraftFilter(filters.FilterSet):
    type_designator = filters.CharFilter(field_name='icao_reference_type__type_designator', lookup_expr='iexact')
    manufacturer = filters.CharFilter(field_name='icao_reference_type__manufacturer', lookup_expr='icontains')
    year_min = filters.NumberFilter(field_name='year_of_manufacture', lookup_expr='gte')
    year_max = filters.NumberFilter(field_name='year_of_manufacture', lookup_expr='lte')

    class Meta:
        model = Aircraft
        fields = ['status', 'type_designator', 'manufacturer', 'year_min', 'year_max']


class IcaoReferenceTypeFilter(filters.FilterSet):
    type_designator = filters.CharFilter(field_name='type_designator', lookup_expr='iexact')
    manufacturer = filters.CharFilter(field_name='manufacturer', lookup_expr='icontains')

    class Meta:
        model = IcaoReferenceType
        fields = ['type_designator', 'manufacturer', 'engine_type', 'wtc']
