"""
Flight Time Services for the flight school backend.

This module implements the arithmetic behind flight-log entry and import:
block time from departure and arrival clock times, the default split of
that time into logbook categories, Hobbs meter cross-checks and the
HH:MM presentation used by exports.

All hour values are Decimals rounded to two places, matching the
``DecimalField(max_digits=6, decimal_places=2)`` columns they are stored in.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional, Union

from django.conf import settings

from . import FlightTimeError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')


# =============================================================================
# FLIGHT TYPES
# =============================================================================

FLIGHT_TYPE_CHOICES = [
    ('INVOICED', 'Invoiced'),
    ('SCHOOL', 'School'),
    ('FERRY', 'Ferry'),
    ('CHARTER', 'Charter'),
    ('DEMO', 'Demo'),
    ('PROMO', 'Promo'),
]

DEFAULT_FLIGHT_TYPE = 'SCHOOL'

# Hour categories of a logbook entry
TIME_CATEGORIES = (
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
)


def get_flight_type_label(code: str) -> str:
    """Return the display label for a flight type code, or the code itself."""
    return dict(FLIGHT_TYPE_CHOICES).get((code or '').upper(), code)


def is_valid_flight_type(code: str) -> bool:
    return (code or '').upper() in dict(FLIGHT_TYPE_CHOICES)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class FlightTimeBreakdown:
    """Default split of block time into logbook categories."""
    total_hours: Decimal
    pilot_in_command: Decimal = ZERO
    second_in_command: Decimal = ZERO
    dual_received: Decimal = ZERO
    dual_given: Decimal = ZERO
    solo: Decimal = ZERO
    cross_country: Decimal = ZERO
    night: Decimal = ZERO
    instrument: Decimal = ZERO
    actual_instrument: Decimal = ZERO
    simulated_instrument: Decimal = ZERO

    def as_dict(self) -> Dict[str, Decimal]:
        return {name: getattr(self, name) for name in TIME_CATEGORIES}


@dataclass
class HobbsCheck:
    """Result of comparing Hobbs meter time with block time."""
    hobbs_time: Optional[Decimal]
    block_time: Decimal
    discrepancy: Optional[Decimal]
    tolerance: Decimal
    is_valid: bool
    errors: list = field(default_factory=list)

    @property
    def within_tolerance(self) -> bool:
        return self.is_valid and self.discrepancy is not None and self.discrepancy <= self.tolerance


# =============================================================================
# PARSING
# =============================================================================

TIME_FORMATS = ('%H:%M', '%H:%M:%S', '%H%M')


def parse_time(value: Union[str, time, None]) -> Optional[time]:
    """
    Parse a clock time.

    Accepts ``time`` instances and strings such as ``09:30``, ``09:30:00``
    or ``0930``. Returns None for empty values.

    Raises:
        FlightTimeError: If the value is not a recognizable time
    """
    if value is None or value == '':
        return None
    if isinstance(value, time):
        return value

    text = str(value).strip()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue

    raise FlightTimeError(f"Invalid time value: {value}")


def to_hours(value) -> Decimal:
    """Coerce a number-like value to a two-place Decimal, treating empties as zero."""
    if value is None or value == '':
        return ZERO
    try:
        return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise FlightTimeError(f"Invalid hours value: {value}") from e


# =============================================================================
# CALCULATIONS
# =============================================================================

def calculate_flight_hours(departure, arrival) -> Decimal:
    """
    Block time in hours between two clock times on the same day.

    Negative spans clamp to zero and unparsable input yields zero.

    Examples:
        >>> calculate_flight_hours('09:00', '10:30')
        Decimal('1.50')
        >>> calculate_flight_hours('10:00', '09:00')
        Decimal('0.00')
    """
    try:
        departure_time = parse_time(departure)
        arrival_time = parse_time(arrival)
    except FlightTimeError as e:
        logger.warning(f"Cannot calculate flight hours: {str(e)}")
        return ZERO

    if departure_time is None or arrival_time is None:
        return ZERO

    departure_seconds = departure_time.hour * 3600 + departure_time.minute * 60 + departure_time.second
    arrival_seconds = arrival_time.hour * 3600 + arrival_time.minute * 60 + arrival_time.second
    diff_hours = Decimal(arrival_seconds - departure_seconds) / Decimal(3600)

    return max(ZERO, diff_hours.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_hours(hours) -> str:
    """
    Render decimal hours as HH:MM.

    Examples:
        >>> format_hours(Decimal('1.5'))
        '01:30'
        >>> format_hours(12.25)
        '12:15'
    """
    if hours is None or hours == '':
        return '00:00'

    total_minutes = int((Decimal(str(hours)) * 60).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    if total_minutes < 0:
        total_minutes = 0
    whole_hours, minutes = divmod(total_minutes, 60)
    return f"{whole_hours:02d}:{minutes:02d}"


def derive_time_breakdown(total_hours, has_instructor: bool, is_cross_country: bool) -> FlightTimeBreakdown:
    """
    Split block time into logbook categories.

    With an instructor on board all time is logged as dual received and no
    PIC time is credited. Without one all time is solo and PIC. Cross-country
    time equals the block time when departure and arrival airfields differ.
    """
    total = to_hours(total_hours)
    breakdown = FlightTimeBreakdown(total_hours=total)

    if has_instructor:
        breakdown.dual_received = total
    else:
        breakdown.solo = total
        breakdown.pilot_in_command = total

    if is_cross_country:
        breakdown.cross_country = total

    return breakdown


def get_hobbs_tolerance() -> Decimal:
    return to_hours(getattr(settings, 'HOBBS_TOLERANCE_HOURS', '0.2'))


def check_hobbs(departure_hobbs, arrival_hobbs, total_hours, tolerance=None) -> HobbsCheck:
    """
    Compare the Hobbs meter span with the block time of a flight.

    Args:
        departure_hobbs: Meter reading before the flight
        arrival_hobbs: Meter reading after the flight
        total_hours: Block time computed from the clock times
        tolerance: Allowed difference in hours (defaults to HOBBS_TOLERANCE_HOURS)

    Returns:
        HobbsCheck with the Hobbs time, the absolute discrepancy and validity
    """
    block_time = to_hours(total_hours)
    tolerance = get_hobbs_tolerance() if tolerance is None else to_hours(tolerance)

    if departure_hobbs in (None, '') or arrival_hobbs in (None, ''):
        return HobbsCheck(
            hobbs_time=None,
            block_time=block_time,
            discrepancy=None,
            tolerance=tolerance,
            is_valid=True,
        )

    start = to_hours(departure_hobbs)
    end = to_hours(arrival_hobbs)

    if end < start:
        return HobbsCheck(
            hobbs_time=None,
            block_time=block_time,
            discrepancy=None,
            tolerance=tolerance,
            is_valid=False,
            errors=["Arrival Hobbs must be greater than departure Hobbs"],
        )

    hobbs_time = end - start
    return HobbsCheck(
        hobbs_time=hobbs_time,
        block_time=block_time,
        discrepancy=abs(hobbs_time - block_time),
        tolerance=tolerance,
        is_valid=True,
    )
