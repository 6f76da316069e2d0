"""
Airfield services: OurAirports type mapping, reference airport imports,
historical airfields met during flight-log imports and operational areas.
"""

import logging
from typing import Dict, Iterable, List, Optional

from django.db import transaction

from services import DuplicateRecordError

from .models import Airfield, OperationalArea, ReferenceAirport

logger = logging.getLogger(__name__)


# =============================================================================
# TYPE MAPPING
# =============================================================================

OURAIRPORTS_TYPE_MAP = {
    'large_airport': 'LARGE_AIRPORT',
    'medium_airport': 'MEDIUM_AIRPORT',
    'small_airport': 'SMALL_AIRPORT',
    'heliport': 'HELIPORT',
    'seaplane_base': 'SEAPLANE_BASE',
    'balloonport': 'BALLOONPORT',
    'closed': 'AIRSTRIP',
}

DEFAULT_IMPORT_TYPES = [
    'large_airport',
    'medium_airport',
    'small_airport',
    'heliport',
    'seaplane_base',
    'balloonport',
]


def map_airport_type(value: Optional[str]) -> str:
    """
    Map an OurAirports (or free text) type to an Airfield type.

    Exact OurAirports values are mapped first, then substrings.

    Examples:
        >>> map_airport_type('medium_airport')
        'MEDIUM_AIRPORT'
        >>> map_airport_type('Glider site')
        'GLIDER_PORT'
    """
    if not value:
        return 'AIRPORT'

    lowered = value.strip().lower()
    if lowered in OURAIRPORTS_TYPE_MAP:
        return OURAIRPORTS_TYPE_MAP[lowered]

    if 'heliport' in lowered:
        return 'HELIPORT'
    if 'seaplane' in lowered:
        return 'SEAPLANE_BASE'
    if 'balloon' in lowered:
        return 'BALLOONPORT'
    if 'glider' in lowered:
        return 'GLIDER_PORT'
    if 'ultralight' in lowered:
        return 'ULTRALIGHT_FIELD'
    if 'closed' in lowered or 'strip' in lowered:
        return 'AIRSTRIP'
    if 'small' in lowered:
        return 'SMALL_AIRPORT'
    if 'medium' in lowered:
        return 'MEDIUM_AIRPORT'
    if 'large' in lowered:
        return 'LARGE_AIRPORT'
    return 'AIRPORT'


def reference_code(reference: ReferenceAirport) -> str:
    """Best code for a reference airport: ICAO > IATA > GPS > local > ident."""
    for code in reference.codes:
        return code
    return reference.ident or f"REF-{reference.pk}"


def _airfield_kwargs(reference: ReferenceAirport, code: str, created_by=None) -> Dict:
    return {
        'name': reference.name,
        'code': code,
        'type': map_airport_type(reference.type),
        'status': 'ACTIVE',
        'city': reference.municipality or '',
        'state': reference.iso_region or '',
        'country': reference.iso_country or '',
        'latitude': reference.latitude_deg,
        'longitude': reference.longitude_deg,
        'elevation': reference.elevation_ft,
        'website': reference.home_link or '',
        'is_base': False,
        'source': 'imported',
        'reference_airport': reference,
        'created_by': created_by,
    }


# =============================================================================
# REFERENCE IMPORTS
# =============================================================================

def import_reference_airport(reference: ReferenceAirport, created_by=None) -> Airfield:
    """
    Create an airfield from a reference airport.

    Raises:
        DuplicateRecordError: If any of the reference's codes is already an airfield code
    """
    codes = reference.codes
    existing = list(Airfield.objects.filter(code__in=codes).values('id', 'code', 'name')) if codes else []
    if existing:
        raise DuplicateRecordError(
            f"Airfield already exists with code(s): {', '.join(a['code'] for a in existing)}",
            details={
                'existing_codes': [a['code'] for a in existing],
                'existing_names': [a['name'] for a in existing],
            }
        )

    code = reference_code(reference)
    if Airfield.objects.filter(code=code).exists():
        raise DuplicateRecordError(f"Airfield already exists with code: {code}", details={'existing_codes': [code]})

    airfield = Airfield.objects.create(**_airfield_kwargs(reference, code, created_by))
    logger.info(f"Imported airfield {airfield.code} from reference airport {reference.ourairports_id}")
    return airfield


@transaction.atomic
def import_airfields_for_countries(countries: Iterable[str], types: Optional[Iterable[str]] = None,
                                   created_by=None) -> Dict[str, List[Airfield]]:
    """
    Create airfields for every reference airport in ``countries`` of ``types``.

    Code priority is ICAO > IATA > local > ident. Reference airports with no
    code are skipped and existing airfields are reused.
    """
    countries = [c.strip().upper() for c in countries if c and c.strip()]
    types = list(types) if types else DEFAULT_IMPORT_TYPES

    created: List[Airfield] = []
    existing: List[Airfield] = []
    skipped = 0

    references = ReferenceAirport.objects.filter(iso_country__in=countries, type__in=types).order_by('name')
    for reference in references:
        code = reference.icao_code or reference.iata_code or reference.local_code or reference.ident
        if not code:
            skipped += 1
            continue

        airfield = Airfield.objects.filter(code=code).first()
        if airfield:
            existing.append(airfield)
            continue

        created.append(Airfield.objects.create(**_airfield_kwargs(reference, code, created_by)))

    logger.info(
        f"Airfield import for {countries}: {len(created)} created, "
        f"{len(existing)} existing, {skipped} without code"
    )
    return {'created': created, 'existing': existing, 'skipped': skipped}


# =============================================================================
# HISTORICAL AIRFIELDS
# =============================================================================

def get_or_create_historical_airfield(code: str, created_by=None):
    """
    Airfield for ``code``, created as an inactive historical placeholder if unknown.

    Returns:
        Tuple of (Airfield, created)
    """
    code = code.strip().upper()
    airfield = Airfield.objects.filter(code__iexact=code).first()
    if airfield:
        return airfield, False

    airfield = Airfield.objects.create(
        name=f"Historical Airfield - {code}",
        code=code,
        type='AIRPORT',
        status='INACTIVE',
        city='Unknown',
        country='Unknown',
        is_base=False,
        source='historical',
        created_by=created_by,
    )
    logger.info(f"Created historical airfield {code}")
    return airfield, True


# =============================================================================
# OPERATIONAL AREAS
# =============================================================================

def normalize_countries(countries: Iterable[str]) -> List[str]:
    return sorted({c.strip().upper() for c in countries if c and str(c).strip()})


def create_operational_area(continent: str, countries: Iterable[str], created_by=None) -> OperationalArea:
    """
    Raises:
        ValueError: If the continent or country list is missing
        DuplicateRecordError: If the same continent and country set already exists
    """
    countries = normalize_countries(countries or [])
    if not continent or not countries:
        raise ValueError("Continent and at least one country are required")

    continent = continent.strip().upper()
    for area in OperationalArea.objects.filter(continent=continent):
        if normalize_countries(area.countries) == countries:
            raise DuplicateRecordError(
                "Operational area already exists for this continent and countries combination",
                details={'existing_id': area.id}
            )

    return OperationalArea.objects.create(continent=continent, countries=countries, created_by=created_by)
