"""
Flight log services.

Creation, update and deletion keep two derived values in step with the
logs themselves:
- the pilot's running ``total_flight_hours``
- the aircraft's latest Hobbs reading
"""

import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from accounts.models import Role
from accounts.services import add_flight_hours, get_role_names
from fleet.models import AircraftHobbs
from fleet.services import recalculate_aircraft_hobbs, update_aircraft_hobbs
from services.flight_time import (
    TIME_CATEGORIES,
    ZERO,
    calculate_flight_hours,
    check_hobbs,
    derive_time_breakdown,
    to_hours,
)

from .models import FlightLog

logger = logging.getLogger(__name__)

VIEW_MODE_PERSONAL = 'personal'
VIEW_MODE_COMPANY = 'company'

LOG_CREATOR_ROLES = (
    Role.SUPER_ADMIN, Role.ADMIN, Role.BASE_MANAGER, Role.INSTRUCTOR, Role.PILOT, Role.STUDENT,
)
LOG_DELETER_ROLES = (Role.SUPER_ADMIN, Role.ADMIN, Role.BASE_MANAGER)
ELEVATED_ROLES = (Role.SUPER_ADMIN, Role.ADMIN, Role.BASE_MANAGER, Role.INSTRUCTOR)
REPORT_ROLES = (Role.SUPER_ADMIN, Role.ADMIN, Role.BASE_MANAGER)

# Categories that follow from the clock times, the instructor and the route
DERIVED_CATEGORIES = ('pilot_in_command', 'dual_received', 'solo', 'cross_country')
DERIVING_FIELDS = ('departure_time', 'arrival_time', 'instructor', 'departure_airfield', 'arrival_airfield')

# Flight types left out of pilot hour statistics
STATISTICS_EXCLUDED_TYPES = ('FERRY', 'DEMO', 'CHARTER')
RECENT_FLIGHTS = 3
CURRENCY_REQUIREMENTS = {
    'last_90_days': {'flights': 3, 'hours': 2},
    'last_12_months': {'flights': 12, 'hours': 12},
    'landings': 3,
}


# =============================================================================
# VISIBILITY / PERMISSIONS
# =============================================================================

def _flight_logs_for(user):
    roles = get_role_names(user)
    if Role.PROSPECT in roles and not roles & set(LOG_CREATOR_ROLES):
        raise PermissionDenied("Flight logs are not available for prospect users.")

    queryset = FlightLog.objects.select_related(
        'pilot', 'instructor', 'payer', 'aircraft', 'aircraft__icao_reference_type',
        'departure_airfield', 'arrival_airfield',
    )
    return roles, queryset


def visible_flight_logs(user, view_mode: str = VIEW_MODE_PERSONAL) -> QuerySet:
    """
    Flight logs the user may see in the given view mode.

    ``company`` shows every log. ``personal`` shows the user's own logs,
    and for instructors also the logs they instructed. Super admins always
    see everything; prospects see nothing.

    Raises:
        PermissionDenied: For prospect users
    """
    roles, queryset = _flight_logs_for(user)

    if Role.SUPER_ADMIN in roles or view_mode == VIEW_MODE_COMPANY:
        return queryset

    is_manager = bool(roles & {Role.ADMIN, Role.BASE_MANAGER})
    if Role.INSTRUCTOR in roles and not is_manager:
        return queryset.filter(Q(pilot=user) | Q(instructor=user))
    return queryset.filter(pilot=user)


def accessible_flight_logs(user) -> QuerySet:
    """
    Flight logs the user may open, edit or delete one at a time.

    Admins, base managers and instructors reach every log; pilots and
    students only their own.

    Raises:
        PermissionDenied: For prospect users
    """
    roles, queryset = _flight_logs_for(user)
    if roles & set(ELEVATED_ROLES):
        return queryset
    return queryset.filter(pilot=user)


def can_create_flight_log(user, pilot) -> bool:
    """Pilots and students without a higher role may only log their own flights."""
    roles = get_role_names(user)
    if not roles & set(LOG_CREATOR_ROLES):
        return False
    if roles & set(ELEVATED_ROLES):
        return True
    return pilot is not None and pilot.pk == user.pk


def can_delete_flight_log(user) -> bool:
    return bool(get_role_names(user) & set(LOG_DELETER_ROLES))


def can_view_reports(user) -> bool:
    return bool(get_role_names(user) & set(REPORT_ROLES))


# =============================================================================
# DUPLICATES
# =============================================================================

def find_duplicate(date, pilot, aircraft, departure_time, arrival_time,
                   departure_airfield, arrival_airfield) -> Optional[FlightLog]:
    """Return an existing log for the same flight, matched field by field."""
    return FlightLog.objects.filter(
        date=date,
        pilot=pilot,
        aircraft=aircraft,
        departure_time=departure_time,
        arrival_time=arrival_time,
        departure_airfield=departure_airfield,
        arrival_airfield=arrival_airfield,
    ).first()


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def _sync_hobbs(flight_log: FlightLog) -> None:
    if flight_log.arrival_hobbs is None:
        return
    try:
        with transaction.atomic():
            update_aircraft_hobbs(flight_log.aircraft, flight_log, flight_log.arrival_hobbs, flight_log.date)
    except Exception as e:
        # A Hobbs failure must not undo the flight log itself
        logger.error(f"Failed to update Hobbs for {flight_log.aircraft}: {str(e)}")


def _rebuild_hobbs(aircraft) -> None:
    try:
        with transaction.atomic():
            recalculate_aircraft_hobbs(aircraft)
    except Exception as e:
        logger.error(f"Failed to recalculate Hobbs for {aircraft}: {str(e)}")


@transaction.atomic
def create_flight_log(data: Dict[str, Any], created_by=None, import_batch=None) -> FlightLog:
    """
    Create a flight log from model field values.

    ``total_hours`` is computed from the clock times. Hour categories
    missing from ``data`` are filled from the default breakdown (dual with
    an instructor, solo and PIC without; cross-country when the airfields
    differ).
    """
    flight_log = FlightLog(created_by=created_by, import_batch=import_batch, **data)
    flight_log.total_hours = calculate_flight_hours(flight_log.departure_time, flight_log.arrival_time)

    breakdown = derive_time_breakdown(
        flight_log.total_hours,
        has_instructor=flight_log.instructor_id is not None,
        is_cross_country=flight_log.is_cross_country,
    ).as_dict()
    for category in TIME_CATEGORIES:
        if data.get(category) is None:
            setattr(flight_log, category, breakdown[category])

    flight_log.save()
    add_flight_hours(flight_log.pilot, flight_log.total_hours)
    _sync_hobbs(flight_log)

    logger.debug(f"Created flight log {flight_log.pk} ({flight_log.total_hours}h) for {flight_log.pilot}")
    return flight_log


@transaction.atomic
def update_flight_log(flight_log: FlightLog, data: Dict[str, Any]) -> FlightLog:
    """
    Apply changes to a flight log and re-balance derived totals.

    A pilot change moves the hours from the old pilot to the new one;
    otherwise only the difference is applied. When the times, the
    instructor or the route change, the derived hour categories not given
    in ``data`` are re-derived. Hobbs records are rebuilt when the arrival
    reading, the date or the aircraft changed.
    """
    old_pilot = flight_log.pilot
    old_total = flight_log.total_hours
    old_aircraft = flight_log.aircraft
    old_arrival_hobbs = flight_log.arrival_hobbs
    old_date = flight_log.date

    for field_name, value in data.items():
        setattr(flight_log, field_name, value)
    flight_log.total_hours = calculate_flight_hours(flight_log.departure_time, flight_log.arrival_time)

    if any(field_name in data for field_name in DERIVING_FIELDS):
        breakdown = derive_time_breakdown(
            flight_log.total_hours,
            has_instructor=flight_log.instructor_id is not None,
            is_cross_country=flight_log.is_cross_country,
        ).as_dict()
        for category in DERIVED_CATEGORIES:
            if data.get(category) is None:
                setattr(flight_log, category, breakdown[category])

    flight_log.save()

    if flight_log.pilot_id != old_pilot.pk:
        add_flight_hours(old_pilot, -old_total)
        add_flight_hours(flight_log.pilot, flight_log.total_hours)
    else:
        add_flight_hours(flight_log.pilot, flight_log.total_hours - old_total)

    if flight_log.aircraft_id != old_aircraft.pk:
        _rebuild_hobbs(old_aircraft)
        _rebuild_hobbs(flight_log.aircraft)
    elif flight_log.arrival_hobbs != old_arrival_hobbs or flight_log.date != old_date:
        _rebuild_hobbs(flight_log.aircraft)

    return flight_log


@transaction.atomic
def delete_flight_log(flight_log: FlightLog) -> None:
    """Delete a log, remove its hours from the pilot and rebuild the aircraft's Hobbs."""
    aircraft = flight_log.aircraft
    add_flight_hours(flight_log.pilot, -flight_log.total_hours)

    AircraftHobbs.objects.filter(last_flight_log=flight_log).update(last_flight_log=None)
    flight_log.delete()
    _rebuild_hobbs(aircraft)


def hobbs_check_for(flight_log: FlightLog) -> Dict[str, Any]:
    result = check_hobbs(flight_log.departure_hobbs, flight_log.arrival_hobbs, flight_log.total_hours)
    return {
        'flight_log': flight_log.pk,
        'departure_hobbs': flight_log.departure_hobbs,
        'arrival_hobbs': flight_log.arrival_hobbs,
        'hobbs_time': result.hobbs_time,
        'block_time': result.block_time,
        'discrepancy': result.discrepancy,
        'tolerance': result.tolerance,
        'is_valid': result.is_valid,
        'within_tolerance': result.within_tolerance,
        'errors': result.errors,
    }


# =============================================================================
# STATISTICS
# =============================================================================

def _summary(queryset) -> Tuple[int, Decimal]:
    totals = queryset.aggregate(flights=Count('id'), hours=Sum('total_hours'))
    return totals['flights'], to_hours(totals['hours'])


def _percent_change(current, previous) -> int:
    if previous:
        return int(round((current - previous) * 100 / previous))
    return 100 if current else 0


def pilot_statistics(user, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Flight and hour totals for one pilot, with this month against last
    month and the recency figures of the last 90 days and 12 months.

    Ferry, demo and charter flights are left out of the flight and hour
    figures. Landings count the last three flights of any type.

    Raises:
        PermissionDenied: For prospect users
    """
    _flight_logs_for(user)
    today = today or timezone.localdate()

    logs = FlightLog.objects.filter(pilot=user)
    regular = logs.exclude(flight_type__in=STATISTICS_EXCLUDED_TYPES)

    last_month_end = today.replace(day=1) - timedelta(days=1)
    total_flights, total_hours = _summary(regular)
    month_flights, month_hours = _summary(
        regular.filter(date__year=today.year, date__month=today.month)
    )
    previous_flights, previous_hours = _summary(
        regular.filter(date__year=last_month_end.year, date__month=last_month_end.month)
    )
    flights_90, hours_90 = _summary(regular.filter(date__gte=today - timedelta(days=90)))
    flights_365, hours_365 = _summary(regular.filter(date__gte=today - timedelta(days=365)))

    recent = logs.order_by('-date', '-departure_time')[:RECENT_FLIGHTS]
    landings = sum(log.day_landings + log.night_landings for log in recent)

    return {
        'flights': {
            'total': total_flights,
            'this_month': month_flights,
            'last_month': previous_flights,
            'change': _percent_change(month_flights, previous_flights),
        },
        'hours': {
            'total': total_hours,
            'this_month': month_hours,
            'last_month': previous_hours,
            'change': _percent_change(month_hours, previous_hours),
        },
        'currency': {
            'last_90_days': {
                'flights': flights_90,
                'hours': hours_90,
                'required': CURRENCY_REQUIREMENTS['last_90_days'],
            },
            'last_12_months': {
                'flights': flights_365,
                'hours': hours_365,
                'required': CURRENCY_REQUIREMENTS['last_12_months'],
            },
            'landings': {
                'total': landings,
                'required': CURRENCY_REQUIREMENTS['landings'],
            },
            'last_night_flight': logs.filter(night__gt=0).order_by('-date').values_list('date', flat=True).first(),
            'last_instrument_flight': (
                logs.filter(instrument__gt=0).order_by('-date').values_list('date', flat=True).first()
            ),
        },
    }


def monthly_hours_by_type(year: int) -> List[Dict[str, Any]]:
    """School-wide hours per month of ``year``, split by flight type."""
    rows = (
        FlightLog.objects.filter(date__year=year)
        .values('date__month', 'flight_type')
        .annotate(hours=Sum('total_hours'))
    )

    flight_types = sorted({row['flight_type'] for row in rows})
    months = [
        {
            'month': calendar.month_name[number],
            'hours': {flight_type: ZERO for flight_type in flight_types},
            'total': ZERO,
        }
        for number in range(1, 13)
    ]
    for row in rows:
        month = months[row['date__month'] - 1]
        hours = to_hours(row['hours'])
        month['hours'][row['flight_type']] = hours
        month['total'] += hours

    return months


# =============================================================================
# EXPORT
# =============================================================================

EXPORT_HEADERS = [
    'Date',
    'Departure Time',
    'Arrival Time',
    'Aircraft Model',
    'Aircraft Registration',
    'Pilot',
    'Instructor',
    'Departure Airfield',
    'Arrival Airfield',
    'Flight Type',
    'Total Hours',
    'PIC Time',
    'Dual Time',
    'Solo Time',
    'Cross Country',
    'Night',
    'Instrument',
    'Day Landings',
    'Night Landings',
    'Purpose',
    'Remarks',
    'Route',
    'Conditions',
]


def _full_name(user) -> str:
    return f"{user.first_name} {user.last_name}".strip() if user else ''


def export_row(log: FlightLog) -> List[str]:
    return [
        log.date.isoformat(),
        log.departure_time.strftime('%H:%M'),
        log.arrival_time.strftime('%H:%M'),
        log.aircraft.icao_reference_type.type_designator,
        log.aircraft.call_sign,
        _full_name(log.pilot),
        _full_name(log.instructor),
        log.departure_airfield.code,
        log.arrival_airfield.code,
        log.flight_type,
        str(log.total_hours),
        str(log.pilot_in_command),
        str(log.dual_received),
        str(log.solo),
        str(log.cross_country),
        str(log.night),
        str(log.instrument),
        str(log.day_landings),
        str(log.night_landings),
        log.purpose,
        log.remarks,
        log.route,
        log.conditions,
    ]
