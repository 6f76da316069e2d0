"""
Fleet services: aircraft Hobbs tracking and ICAO reference type seeding.
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db import transaction

from .models import Aircraft, AircraftHobbs, IcaoReferenceType

logger = logging.getLogger(__name__)

ENGINE_TYPES = {choice for choice, _ in IcaoReferenceType.ENGINE_TYPE_CHOICES}
WTC_VALUES = {choice for choice, _ in IcaoReferenceType.WTC_CHOICES}


# =============================================================================
# AIRCRAFT HOBBS
# =============================================================================

def update_aircraft_hobbs(aircraft: Aircraft, flight_log, arrival_hobbs, flight_date) -> Optional[AircraftHobbs]:
    """
    Record a new Hobbs reading for an aircraft.

    The stored reading only moves forward: an older flight date never
    replaces a newer one, and on the same date only a higher reading wins.

    Returns the Hobbs record, or None when ``arrival_hobbs`` is empty.
    """
    if arrival_hobbs is None:
        return None

    arrival_hobbs = Decimal(str(arrival_hobbs))
    hobbs = AircraftHobbs.objects.filter(aircraft=aircraft).first()

    if hobbs is None:
        hobbs = AircraftHobbs.objects.create(
            aircraft=aircraft,
            last_hobbs_reading=arrival_hobbs,
            last_hobbs_date=flight_date,
            last_flight_log=flight_log,
        )
        logger.info(f"Created Hobbs record for {aircraft.call_sign}: {arrival_hobbs}")
        return hobbs

    if flight_date < hobbs.last_hobbs_date:
        return hobbs

    if flight_date == hobbs.last_hobbs_date and arrival_hobbs <= hobbs.last_hobbs_reading:
        return hobbs

    hobbs.last_hobbs_reading = arrival_hobbs
    hobbs.last_hobbs_date = flight_date
    hobbs.last_flight_log = flight_log
    hobbs.save(update_fields=['last_hobbs_reading', 'last_hobbs_date', 'last_flight_log', 'updated_at'])
    logger.debug(f"Updated Hobbs for {aircraft.call_sign}: {arrival_hobbs} on {flight_date}")
    return hobbs


def recalculate_aircraft_hobbs(aircraft: Aircraft) -> Optional[AircraftHobbs]:
    """
    Rebuild the Hobbs record from the aircraft's latest flight log
    carrying an arrival reading. Leaves the record alone when there is none.
    """
    latest = (
        aircraft.flight_logs
        .filter(arrival_hobbs__isnull=False)
        .order_by('-date', '-arrival_hobbs')
        .first()
    )
    if latest is None:
        logger.info(f"No Hobbs readings found for {aircraft.call_sign}")
        return AircraftHobbs.objects.filter(aircraft=aircraft).first()

    hobbs, _ = AircraftHobbs.objects.update_or_create(
        aircraft=aircraft,
        defaults={
            'last_hobbs_reading': latest.arrival_hobbs,
            'last_hobbs_date': latest.date,
            'last_flight_log': latest,
        }
    )
    logger.info(f"Recalculated Hobbs for {aircraft.call_sign}: {hobbs.last_hobbs_reading}")
    return hobbs


# =============================================================================
# ICAO REFERENCE TYPES
# =============================================================================

def _choice_or_default(value, allowed, default):
    value = (value or '').strip().upper() if isinstance(value, str) else value
    return value if value in allowed else default


def _engine_count(value) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 1
    return count if count > 0 else 1


def normalize_icao_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert an ICAO dataset entry to IcaoReferenceType field values.

    Two shapes are accepted:

    - comprehensive: ``icaoTypeDesignator``, ``wakeTurbulenceCategory`` and a
      ``description`` that may be a JSON document carrying ``ModelFullName``
      and ``ManufacturerCode``
    - extracted / CSV: ``typeDesignator`` (or ``type_designator``), ``wtc``

    Raises ValueError when the designator, manufacturer or model is missing.
    """
    description = entry.get('description') or ''

    if 'icaoTypeDesignator' in entry:
        designator = entry.get('icaoTypeDesignator')
        manufacturer = entry.get('manufacturer') or 'Unknown'
        model = entry.get('model') or 'Unknown'
        if isinstance(description, str) and description.startswith('{'):
            try:
                details = json.loads(description)
            except ValueError:
                details = {}
            model = details.get('ModelFullName') or model
            manufacturer = details.get('ManufacturerCode') or manufacturer
        wtc = entry.get('wakeTurbulenceCategory')
    else:
        designator = entry.get('typeDesignator') or entry.get('type_designator')
        manufacturer = entry.get('manufacturer')
        model = entry.get('model')
        wtc = entry.get('wtc')

    designator = (designator or '').strip().upper()
    manufacturer = (manufacturer or '').strip()
    model = (model or '').strip()

    if not designator or not manufacturer or not model:
        raise ValueError("Missing required fields (manufacturer, model, type_designator)")

    return {
        'type_designator': designator,
        'manufacturer': manufacturer,
        'model': model,
        'description': description,
        'engine_type': _choice_or_default(
            entry.get('engineType', entry.get('engine_type')), ENGINE_TYPES, 'PISTON'
        ),
        'engine_count': _engine_count(entry.get('engineCount', entry.get('engine_count'))),
        'wtc': _choice_or_default(wtc, WTC_VALUES, 'LIGHT'),
    }


def upsert_icao_type(data: Dict[str, Any]):
    """
    Create or refresh an ICAO type keyed by manufacturer, model and designator.

    Returns ``(icao_type, outcome)`` where outcome is ``'created'``,
    ``'updated'`` or ``'unchanged'``.
    """
    existing = IcaoReferenceType.objects.filter(
        manufacturer=data['manufacturer'],
        model=data['model'],
        type_designator=data['type_designator'],
    ).first()

    if existing is None:
        return IcaoReferenceType.objects.create(**data), 'created'

    changed = [
        field for field in ('description', 'engine_type', 'engine_count', 'wtc')
        if getattr(existing, field) != data[field]
    ]
    if not changed:
        return existing, 'unchanged'

    for field in changed:
        setattr(existing, field, data[field])
    existing.save(update_fields=changed + ['updated_at'])
    return existing, 'updated'


def load_icao_entries(entries, batch_size: int = 100) -> Dict[str, int]:
    """Seed ICAO types from a list of dataset entries, committing in batches."""
    summary = {'created': 0, 'updated': 0, 'unchanged': 0, 'errors': 0}

    for start in range(0, len(entries), batch_size):
        batch = entries[start:start + batch_size]
        with transaction.atomic():
            for entry in batch:
                try:
                    data = normalize_icao_entry(entry)
                    with transaction.atomic():
                        _, outcome = upsert_icao_type(data)
                except (ValueError, TypeError) as e:
                    summary['errors'] += 1
                    logger.warning(f"Skipping ICAO entry {entry!r:.80}: {e}")
                    continue
                summary[outcome] += 1
        logger.info(
            f"ICAO batch {start // batch_size + 1}: "
            f"{min(start + batch_size, len(entries))}/{len(entries)} entries processed"
        )

    return summary


def icao_statistics() -> Dict[str, Any]:
    from imports.models import ImportBatch

    last_batch = (
        ImportBatch.objects
        .filter(data_type='ICAO_TYPES', status='completed')
        .order_by('-completed_at')
        .first()
    )
    return {
        'total_types': IcaoReferenceType.objects.count(),
        'manufacturers': IcaoReferenceType.objects.values('manufacturer').distinct().count(),
        'last_import': {
            'batch_id': str(last_batch.batch_id),
            'file_name': last_batch.file_name,
            'completed_at': last_batch.completed_at,
            'records_created': last_batch.records_created,
            'records_updated': last_batch.records_updated,
        } if last_batch else None,
    }
