"""
Views for the fleet app.

Aircraft registry with Hobbs tracking, and the ICAO reference type catalogue.
"""

import logging

from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from accounts.models import Role
from accounts.permissions import HasAnyRole
from accounts.services import ADMIN_ROLES

from .filters import AircraftFilter, IcaoReferenceTypeFilter
from .models import Aircraft, AircraftHobbs, IcaoReferenceType
from .serializers import (
    AircraftDetailSerializer,
    AircraftHobbsSerializer,
    AircraftListSerializer,
    IcaoReferenceTypeSerializer,
)
from .services import icao_statistics, recalculate_aircraft_hobbs

logger = logging.getLogger(__name__)

FLEET_READ_ROLES = ADMIN_ROLES + (Role.BASE_MANAGER, Role.INSTRUCTOR, Role.PILOT, Role.STUDENT)


# =============================================================================
# AIRCRAFT VIEWSET
# =============================================================================

class AircraftViewSet(viewsets.ModelViewSet):
    """
    API endpoint for the aircraft registry.

    Supports:
    - Read for flying and admin roles, write for admins
    - Search by call sign and serial number
    - Filter by status, ICAO designator, manufacturer and year range
    - ``hobbs`` and ``recalculate-hobbs`` per aircraft
    """
    queryset = Aircraft.objects.select_related('icao_reference_type', 'hobbs')
    permission_classes = [HasAnyRole]
    allowed_roles = FLEET_READ_ROLES
    write_roles = ADMIN_ROLES
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AircraftFilter

    search_fields = ['call_sign', 'serial_number', 'icao_reference_type__type_designator']
    ordering_fields = ['call_sign', 'year_of_manufacture', 'status', 'created_at']
    ordering = ['call_sign']

    def get_serializer_class(self):
        if self.action == 'list':
            return AircraftListSerializer
        return AircraftDetailSerializer

    def perform_create(self, serializer):
        aircraft = serializer.save()
        logger.info(f"Aircraft {aircraft.call_sign} created by {self.request.user}")

    def perform_destroy(self, instance):
        logger.info(f"Aircraft {instance.call_sign} deleted by {self.request.user}")
        instance.delete()

    @action(detail=True, methods=['get'])
    def hobbs(self, request, pk=None):
        """
        GET /api/v1/fleet/aircraft/{id}/hobbs/
        """
        aircraft = self.get_object()
        hobbs = AircraftHobbs.objects.filter(aircraft=aircraft).first()
        if hobbs is None:
            return Response(
                {'error': f"No Hobbs readings recorded for {aircraft.call_sign}"},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(AircraftHobbsSerializer(hobbs).data)

    @action(detail=True, methods=['post'], url_path='recalculate-hobbs')
    def recalculate_hobbs(self, request, pk=None):
        """
        POST /api/v1/fleet/aircraft/{id}/recalculate-hobbs/

        Rebuild the Hobbs record from the aircraft's flight logs.
        """
        aircraft = self.get_object()
        hobbs = recalculate_aircraft_hobbs(aircraft)
        return Response({
            'message': f"Hobbs recalculated for {aircraft.call_sign}",
            'hobbs': AircraftHobbsSerializer(hobbs).data if hobbs else None,
        })


# =============================================================================
# ICAO REFERENCE TYPE VIEWSET
# =============================================================================

class IcaoReferenceTypeViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for ICAO aircraft type designators.

    GET /api/v1/fleet/icao-types/
    GET /api/v1/fleet/icao-types/statistics/
    """
    queryset = IcaoReferenceType.objects.all()
    serializer_class = IcaoReferenceTypeSerializer
    permission_classes = [HasAnyRole]
    allowed_roles = FLEET_READ_ROLES
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = IcaoReferenceTypeFilter

    search_fields = ['type_designator', 'manufacturer', 'model']
    ordering_fields = ['type_designator', 'manufacturer', 'model']
    ordering = ['type_designator', 'manufacturer', 'model']

    @action(detail=False, methods=['get'])
    def statistics(self, request):
        return Response(icao_statistics())
