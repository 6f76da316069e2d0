"""
Views for the flightlogs app.

CRUD over flight logs with role-based visibility, CSV export and the
Hobbs cross-check for a single log.
"""

import csv
import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .filters import FlightLogFilter
from .serializers import FlightLogListSerializer, FlightLogSerializer, HobbsCheckSerializer
from .services import (
    EXPORT_HEADERS,
    VIEW_MODE_COMPANY,
    VIEW_MODE_PERSONAL,
    accessible_flight_logs,
    can_create_flight_log,
    can_delete_flight_log,
    can_view_reports,
    create_flight_log,
    delete_flight_log,
    export_row,
    hobbs_check_for,
    monthly_hours_by_type,
    pilot_statistics,
    update_flight_log,
    visible_flight_logs,
)

logger = logging.getLogger(__name__)


class FlightLogViewSet(viewsets.ModelViewSet):
    """
    API endpoint for flight logs.

    Query parameters:
    - ``view_mode``: ``personal`` (default) or ``company``
    - filters: flight_type, pilot, aircraft, instructor, departure_airfield,
      arrival_airfield, date_from, date_to
    - search: pilot name, aircraft call sign, purpose

    Extra endpoints:
    - GET /api/v1/flight-logs/export/            CSV download (view_mode defaults to company)
    - GET /api/v1/flight-logs/statistics/        the caller's flight and hour statistics
    - GET /api/v1/flight-logs/hours-chart/       monthly hours by flight type (managers)
    - GET /api/v1/flight-logs/{id}/hobbs-check/  Hobbs vs block time

    ``view_mode`` only scopes list and export. Single-log routes let
    admins, base managers and instructors reach any log.
    """
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = FlightLogFilter

    search_fields = [
        'pilot__first_name',
        'pilot__last_name',
        'aircraft__call_sign',
        'purpose',
    ]
    ordering_fields = ['date', 'departure_time', 'total_hours', 'created_at']
    ordering = ['-date', '-departure_time']

    def get_queryset(self):
        if self.action not in ('list', 'export'):
            return accessible_flight_logs(self.request.user)

        default_mode = VIEW_MODE_COMPANY if self.action == 'export' else VIEW_MODE_PERSONAL
        view_mode = self.request.query_params.get('view_mode', default_mode)
        return visible_flight_logs(self.request.user, view_mode)

    def get_serializer_class(self):
        if self.action == 'list':
            return FlightLogListSerializer
        return FlightLogSerializer

    def perform_create(self, serializer):
        user = self.request.user
        data = dict(serializer.validated_data)
        data.setdefault('pilot', user)

        if not can_create_flight_log(user, data['pilot']):
            raise PermissionDenied('You can only create flight logs for yourself')

        serializer.instance = create_flight_log(data, created_by=user)
        logger.info(f"Flight log {serializer.instance.pk} created by {user}")

    def perform_update(self, serializer):
        user = self.request.user
        instance = serializer.instance
        new_pilot = serializer.validated_data.get('pilot', instance.pilot)

        if not (can_create_flight_log(user, instance.pilot) and can_create_flight_log(user, new_pilot)):
            raise PermissionDenied('You can only edit your own flight logs')

        update_flight_log(instance, serializer.validated_data)

    def destroy(self, request, *args, **kwargs):
        if not can_delete_flight_log(request.user):
            return Response(
                {'error': 'Insufficient permissions to delete flight logs'},
                status=status.HTTP_403_FORBIDDEN
            )

        flight_log = self.get_object()
        log_id = flight_log.pk
        delete_flight_log(flight_log)
        logger.info(f"Flight log {log_id} deleted by {request.user}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def export(self, request):
        queryset = self.filter_queryset(self.get_queryset())

        response = HttpResponse(content_type='text/csv')
        filename = f"flight_logs_export_{timezone.now().date().isoformat()}.csv"
        response['Content-Disposition'] = f'attachment; filename="{filename}"'

        writer = csv.writer(response, quoting=csv.QUOTE_ALL)
        writer.writerow(EXPORT_HEADERS)
        count = 0
        for log in queryset.iterator():
            writer.writerow(export_row(log))
            count += 1

        logger.info(f"Exported {count} flight logs for {request.user}")
        return response

    @action(detail=False, methods=['get'])
    def statistics(self, request):
        return Response(pilot_statistics(request.user))

    @action(detail=False, methods=['get'], url_path='hours-chart')
    def hours_chart(self, request):
        if not can_view_reports(request.user):
            return Response(
                {'error': 'Insufficient permissions'},
                status=status.HTTP_403_FORBIDDEN
            )

        try:
            year = int(request.query_params.get('year', timezone.localdate().year))
        except ValueError:
            return Response(
                {'error': 'Invalid year'},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response({'year': year, 'months': monthly_hours_by_type(year)})

    @action(detail=True, methods=['get'], url_path='hobbs-check')
    def hobbs_check(self, request, pk=None):
        flight_log = self.get_object()
        return Response(HobbsCheckSerializer(hobbs_check_for(flight_log)).data)
