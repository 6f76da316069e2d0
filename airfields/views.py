"""
Views for the airfields app.

Airfields, the OurAirports reference catalogue and operational areas.
"""

import logging

from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from accounts.permissions import HasAnyRole, IsAdminRole, IsSuperAdmin
from accounts.services import MANAGEMENT_ROLES
from services import DuplicateRecordError

from .filters import AirfieldFilter, ReferenceAirportFilter
from .models import Airfield, OperationalArea, ReferenceAirport
from .serializers import (
    AirfieldSerializer,
    ImportAirfieldsSerializer,
    OperationalAreaSerializer,
    ReferenceAirportSerializer,
)
from .services import create_operational_area, import_airfields_for_countries, import_reference_airport

logger = logging.getLogger(__name__)


# =============================================================================
# AIRFIELD VIEWSET
# =============================================================================

class AirfieldViewSet(viewsets.ModelViewSet):
    """
    API endpoint for airfields.

    Everyone signed in may read; base managers and admins may write.
    """
    queryset = Airfield.objects.all()
    serializer_class = AirfieldSerializer
    permission_classes = [HasAnyRole]
    write_roles = MANAGEMENT_ROLES
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AirfieldFilter

    search_fields = ['name', 'code', 'city']
    ordering_fields = ['name', 'code', 'country', 'created_at']
    ordering = ['name']

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user, source='manual')


# =============================================================================
# REFERENCE AIRPORT VIEWSET
# =============================================================================

class ReferenceAirportViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for the OurAirports reference catalogue.

    GET  /api/v1/airfields/reference/
    POST /api/v1/airfields/reference/{id}/import/
    """
    queryset = ReferenceAirport.objects.all()
    serializer_class = ReferenceAirportSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ReferenceAirportFilter

    search_fields = ['name', 'ident', 'icao_code', 'iata_code', 'municipality']
    ordering_fields = ['name', 'ident', 'iso_country']
    ordering = ['name']

    @action(detail=True, methods=['post'], url_path='import')
    def import_airfield(self, request, pk=None):
        reference = self.get_object()
        try:
            airfield = import_reference_airport(reference, created_by=request.user)
        except DuplicateRecordError as e:
            return Response(
                {'error': str(e), **e.details},
                status=status.HTTP_409_CONFLICT
            )

        return Response(
            {
                'message': f"Airfield {airfield.code} imported successfully",
                'airfield': AirfieldSerializer(airfield).data,
            },
            status=status.HTTP_201_CREATED
        )


# =============================================================================
# OPERATIONAL AREA VIEWSET
# =============================================================================

class OperationalAreaViewSet(mixins.ListModelMixin,
                             mixins.CreateModelMixin,
                             mixins.RetrieveModelMixin,
                             mixins.DestroyModelMixin,
                             viewsets.GenericViewSet):
    """
    API endpoint for operational areas (super admin only).

    POST /api/v1/operational-areas/                   {"continent": "EU", "countries": ["RO", "HU"]}
    POST /api/v1/operational-areas/import-airfields/  {"countries": ["RO"], "types": ["small_airport"]}
    """
    queryset = OperationalArea.objects.all()
    serializer_class = OperationalAreaSerializer
    permission_classes = [IsSuperAdmin]
    pagination_class = None

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            area = create_operational_area(
                serializer.validated_data['continent'],
                serializer.validated_data['countries'],
                created_by=request.user,
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DuplicateRecordError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        logger.info(f"Operational area {area} created by {request.user}")
        return Response(self.get_serializer(area).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='import-airfields')
    def import_airfields(self, request):
        serializer = ImportAirfieldsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = import_airfields_for_countries(
            serializer.validated_data['countries'],
            serializer.validated_data.get('types'),
            created_by=request.user,
        )
        return Response({
            'message': (
                f"Imported {len(result['created'])} airfields, "
                f"{len(result['existing'])} already existed"
            ),
            'created': AirfieldSerializer(result['created'], many=True).data,
            'existing': AirfieldSerializer(result['existing'], many=True).data,
            'skipped': result['skipped'],
        })
