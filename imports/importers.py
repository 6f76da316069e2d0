"""
Dataset import services and the import entry points used by views and
management commands.

One CSVImportService subclass per dataset:
- FlightLogImportService     (FLIGHT_LOGS)
- UserImportService          (USERS)
- FleetImportService         (FLEET)
- IcaoTypeImportService      (ICAO_TYPES)
- ReferenceAirportImportService (REFERENCE_AIRPORTS)
"""

import hashlib
import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils import timezone

from accounts.models import Role
from accounts.services import upsert_user_from_row
from airfields.models import Airfield, ReferenceAirport
from airfields.services import get_or_create_historical_airfield
from fleet.models import Aircraft, IcaoReferenceType
from fleet.services import ENGINE_TYPES, WTC_VALUES, normalize_icao_entry, upsert_icao_type
from flightlogs.models import FlightLog
from flightlogs.services import create_flight_log, find_duplicate
from services import FlightTimeError
from services.flight_time import (
    DEFAULT_FLIGHT_TYPE,
    calculate_flight_hours,
    check_hobbs,
    is_valid_flight_type,
    parse_time,
)

from .models import ImportBatch
from .services import CSVImportService, RowProcessingError

logger = logging.getLogger(__name__)

User = get_user_model()


# =============================================================================
# FLIGHT LOGS
# =============================================================================

class FlightLogImportService(CSVImportService):
    """
    Flight log rows keyed by pilot e-mail and aircraft call sign.

    Unknown airfield codes become inactive historical airfields. Rows
    matching an existing log are skipped. A Hobbs discrepancy or an
    arrival time not after departure is recorded as a warning.
    """

    data_type = 'FLIGHT_LOGS'

    HEADERS = {
        'date': ['flight_date'],
        'pilot_email': ['pilot', 'pilotemail'],
        'aircraft_callsign': ['aircraft', 'callsign', 'call_sign', 'aircraft_call_sign', 'registration'],
        'departure_airfield_code': ['departure_airfield', 'departureairfieldcode', 'from'],
        'arrival_airfield_code': ['arrival_airfield', 'arrivalairfieldcode', 'to'],
        'departure_time': ['departuretime', 'off_block'],
        'arrival_time': ['arrivaltime', 'on_block'],
        'instructor_email': ['instructor', 'instructoremail'],
        'flight_type': ['flighttype', 'type'],
        'purpose': [],
        'remarks': ['notes'],
        'departure_hobbs': ['departurehobbs', 'hobbs_start'],
        'arrival_hobbs': ['arrivalhobbs', 'hobbs_end'],
        'day_landings': ['daylandings', 'landings'],
        'night_landings': ['nightlandings'],
        'route': [],
        'conditions': [],
        'oil_added': ['oiladded', 'oil'],
        'fuel_added': ['fueladded', 'fuel'],
    }

    REQUIRED_FIELDS = [
        'date', 'pilot_email', 'aircraft_callsign', 'departure_airfield_code',
        'arrival_airfield_code', 'departure_time', 'arrival_time',
    ]

    TEMPLATE_ROWS = [
        {
            'date': '2024-01-15',
            'pilot_email': 'pilot@example.com',
            'aircraft_callsign': 'YR-ABC',
            'departure_airfield_code': 'LRBS',
            'arrival_airfield_code': 'LRCL',
            'departure_time': '09:00',
            'arrival_time': '10:30',
            'instructor_email': 'instructor@example.com',
            'flight_type': 'SCHOOL',
            'purpose': 'Training flight',
            'departure_hobbs': '1234.5',
            'arrival_hobbs': '1236.0',
            'day_landings': '1',
            'night_landings': '0',
            'route': 'LRBS-LRCL',
            'conditions': 'VFR',
        },
        {
            'date': '2024-01-16',
            'pilot_email': 'pilot@example.com',
            'aircraft_callsign': 'YR-ABC',
            'departure_airfield_code': 'LRBS',
            'arrival_airfield_code': 'LRBS',
            'departure_time': '14:00',
            'arrival_time': '15:00',
            'flight_type': 'SCHOOL',
            'purpose': 'Circuits',
            'day_landings': '5',
            'conditions': 'VFR',
        },
    ]

    def _find_user(self, email: str, field_name: str, label: str):
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise RowProcessingError(f"{label} with email {email} not found", 'REFERENCE', field_name)
        return user

    def _airfield(self, code: str) -> Airfield:
        airfield, created = get_or_create_historical_airfield(code, created_by=self.user)
        if created:
            logger.info(f"Batch {self.import_batch.batch_id}: created historical airfield {airfield.code}")
        return airfield

    def _time(self, row, field_name):
        try:
            return parse_time(row[field_name])
        except FlightTimeError as e:
            raise RowProcessingError(str(e), 'FORMAT', field_name)

    def process_row(self, row, row_number):
        self.require(row, *self.REQUIRED_FIELDS)

        flight_date = self.parse_date(row, 'date')
        pilot = self._find_user(row['pilot_email'], 'pilot_email', 'Pilot')

        aircraft = Aircraft.objects.filter(call_sign__iexact=row['aircraft_callsign']).first()
        if aircraft is None:
            raise RowProcessingError(
                f"Aircraft with call sign {row['aircraft_callsign']} not found",
                'REFERENCE',
                'aircraft_callsign'
            )

        instructor = None
        if row.get('instructor_email'):
            instructor = self._find_user(row['instructor_email'], 'instructor_email', 'Instructor')

        departure_time = self._time(row, 'departure_time')
        arrival_time = self._time(row, 'arrival_time')

        flight_type = (row.get('flight_type') or DEFAULT_FLIGHT_TYPE).upper()
        if not is_valid_flight_type(flight_type):
            raise RowProcessingError(f"Invalid flight type: {row['flight_type']}", 'VALIDATION', 'flight_type')

        departure_airfield = self._airfield(row['departure_airfield_code'])
        arrival_airfield = self._airfield(row['arrival_airfield_code'])

        if find_duplicate(flight_date, pilot, aircraft, departure_time, arrival_time,
                          departure_airfield, arrival_airfield):
            logger.debug(f"Batch {self.import_batch.batch_id} row {row_number}: duplicate flight log skipped")
            return 'skipped'

        departure_hobbs = self.parse_decimal(row, 'departure_hobbs')
        arrival_hobbs = self.parse_decimal(row, 'arrival_hobbs')

        if arrival_time <= departure_time:
            self.warn(row_number, "Arrival time is not after departure time; total hours set to 0")

        hobbs = check_hobbs(departure_hobbs, arrival_hobbs, calculate_flight_hours(departure_time, arrival_time))
        if not hobbs.is_valid:
            self.warn(row_number, '; '.join(hobbs.errors))
        elif hobbs.discrepancy is not None and not hobbs.within_tolerance:
            self.warn(
                row_number,
                f"Hobbs time {hobbs.hobbs_time} differs from block time {hobbs.block_time} by {hobbs.discrepancy}"
            )

        create_flight_log(
            {
                'date': flight_date,
                'pilot': pilot,
                'instructor': instructor,
                'aircraft': aircraft,
                'departure_airfield': departure_airfield,
                'arrival_airfield': arrival_airfield,
                'departure_time': departure_time,
                'arrival_time': arrival_time,
                'departure_hobbs': departure_hobbs,
                'arrival_hobbs': arrival_hobbs,
                'flight_type': flight_type,
                'purpose': row.get('purpose', ''),
                'remarks': row.get('remarks', ''),
                'route': row.get('route', ''),
                'conditions': row.get('conditions', ''),
                'day_landings': self.parse_int(row, 'day_landings', 0),
                'night_landings': self.parse_int(row, 'night_landings', 0),
                'oil_added': self.parse_decimal(row, 'oil_added'),
                'fuel_added': self.parse_decimal(row, 'fuel_added'),
            },
            created_by=self.user,
            import_batch=self.import_batch,
        )
        return 'created'


# =============================================================================
# USERS
# =============================================================================

class UserImportService(CSVImportService):
    """Users with their pilot profile; existing e-mails are updated, never duplicated."""

    data_type = 'USERS'

    HEADERS = {
        'email': ['e_mail', 'email_address'],
        'first_name': ['firstname', 'given_name'],
        'last_name': ['lastname', 'surname', 'family_name'],
        'personal_number': ['personalnumber', 'cnp'],
        'phone': ['phone_number', 'phonenumber', 'telephone'],
        'date_of_birth': ['dateofbirth', 'dob', 'birth_date'],
        'address': ['street'],
        'city': [],
        'state': ['county', 'region'],
        'zip_code': ['zipcode', 'zip', 'postal_code'],
        'country': [],
        'status': [],
        'total_flight_hours': ['totalflighthours', 'flight_hours'],
        'license_number': ['licensenumber', 'licence_number'],
        'medical_class': ['medicalclass'],
        'instructor_rating': ['instructorrating'],
        'role': ['roles'],
        'password': [],
    }

    REQUIRED_FIELDS = ['email', 'first_name', 'last_name']

    TEMPLATE_ROWS = [
        {
            'email': 'jane.doe@example.com',
            'first_name': 'Jane',
            'last_name': 'Doe',
            'phone': '+40712345678',
            'date_of_birth': '1990-05-20',
            'city': 'Bucharest',
            'country': 'Romania',
            'status': 'ACTIVE',
            'total_flight_hours': '120.5',
            'license_number': 'RO.FCL.PPL.1234',
            'medical_class': 'Class 2',
            'role': 'PILOT',
        },
        {
            'email': 'john.smith@example.com',
            'first_name': 'John',
            'last_name': 'Smith',
            'status': 'ACTIVE',
            'role': 'STUDENT',
        },
    ]

    VALID_ROLES = {name for name, _ in Role.NAME_CHOICES}

    def process_row(self, row, row_number):
        self.require(row, *self.REQUIRED_FIELDS)

        try:
            validate_email(row['email'])
        except ValidationError:
            raise RowProcessingError(f"Invalid email: {row['email']}", 'VALIDATION', 'email')

        data = dict(row)
        if row.get('role'):
            data['role'] = row['role'].strip().upper()
            if data['role'] not in self.VALID_ROLES:
                raise RowProcessingError(f"Unknown role: {row['role']}", 'REFERENCE', 'role')

        if row.get('date_of_birth'):
            data['date_of_birth'] = self.parse_date(row, 'date_of_birth')

        try:
            _, created = upsert_user_from_row(data, created_by=self.user)
        except ValueError as e:
            raise RowProcessingError(str(e), 'VALIDATION')

        return 'created' if created else 'updated'


# =============================================================================
# FLEET
# =============================================================================

class FleetImportService(CSVImportService):
    """Aircraft rows; the ICAO type must already exist and call sign / serial must be new."""

    data_type = 'FLEET'

    HEADERS = {
        'call_sign': ['callsign', 'registration'],
        'serial_number': ['serialnumber', 'msn'],
        'year_of_manufacture': ['yearofmanufacture', 'year'],
        'icao_type_designator': ['icaotypedesignator', 'type_designator', 'icao_type'],
        'model': [],
        'manufacturer': [],
        'status': [],
        'image_path': ['imagepath'],
    }

    REQUIRED_FIELDS = [
        'call_sign', 'serial_number', 'year_of_manufacture', 'icao_type_designator',
        'model', 'manufacturer', 'status',
    ]

    TEMPLATE_ROWS = [
        {
            'call_sign': 'YR-ABC',
            'serial_number': '17280001',
            'year_of_manufacture': '2005',
            'icao_type_designator': 'C172',
            'model': '172 Skyhawk',
            'manufacturer': 'CESSNA',
            'status': 'ACTIVE',
        },
        {
            'call_sign': 'YR-DEF',
            'serial_number': '28R-7918001',
            'year_of_manufacture': '1979',
            'icao_type_designator': 'P28R',
            'model': 'PA-28R Arrow',
            'manufacturer': 'PIPER',
            'status': 'MAINTENANCE',
        },
    ]

    VALID_STATUSES = [choice for choice, _ in Aircraft.STATUS_CHOICES]

    def process_row(self, row, row_number):
        self.require(row, *self.REQUIRED_FIELDS)

        year = self.parse_int(row, 'year_of_manufacture')
        max_year = timezone.now().year + 1
        if year is None or year < 1900 or year > max_year:
            raise RowProcessingError("Invalid year of manufacture", 'VALIDATION', 'year_of_manufacture')

        status = row['status'].upper()
        if status not in self.VALID_STATUSES:
            raise RowProcessingError(
                f"Invalid status. Must be one of: {', '.join(self.VALID_STATUSES)}",
                'VALIDATION',
                'status'
            )

        call_sign = row['call_sign'].upper()
        serial_number = row['serial_number']
        if Aircraft.objects.filter(call_sign__iexact=call_sign).exists() or \
                Aircraft.objects.filter(serial_number=serial_number).exists():
            raise RowProcessingError(
                f"Aircraft with call sign {call_sign} or serial number {serial_number} already exists",
                'DUPLICATE',
                'call_sign'
            )

        icao_type = IcaoReferenceType.objects.filter(
            type_designator__iexact=row['icao_type_designator'],
            manufacturer__iexact=row['manufacturer'],
            model__iexact=row['model'],
        ).first()
        if icao_type is None:
            raise RowProcessingError(
                f"ICAO reference type not found for {row['icao_type_designator']} - "
                f"{row['manufacturer']} {row['model']}",
                'REFERENCE',
                'icao_type_designator'
            )

        Aircraft.objects.create(
            call_sign=call_sign,
            serial_number=serial_number,
            year_of_manufacture=year,
            icao_reference_type=icao_type,
            status=status,
            image_path=row.get('image_path', ''),
        )
        return 'created'


# =============================================================================
# ICAO TYPES
# =============================================================================

class IcaoTypeImportService(CSVImportService):
    """ICAO type designators, upserted on manufacturer + model + designator."""

    data_type = 'ICAO_TYPES'

    HEADERS = {
        'manufacturer': [],
        'model': [],
        'type_designator': ['typedesignator', 'icao_type_designator', 'designator'],
        'description': [],
        'engine_type': ['enginetype'],
        'engine_count': ['enginecount', 'engines'],
        'wtc': ['wake_turbulence_category', 'waketurbulencecategory'],
    }

    REQUIRED_FIELDS = ['manufacturer', 'model', 'type_designator']

    TEMPLATE_ROWS = [
        {
            'manufacturer': 'CESSNA',
            'model': '172 Skyhawk',
            'type_designator': 'C172',
            'description': 'Single-engine piston trainer',
            'engine_type': 'PISTON',
            'engine_count': '1',
            'wtc': 'LIGHT',
        },
        {
            'manufacturer': 'DIAMOND',
            'model': 'DA-42 Twin Star',
            'type_designator': 'DA42',
            'description': 'Twin-engine trainer',
            'engine_type': 'PISTON',
            'engine_count': '2',
            'wtc': 'LIGHT',
        },
    ]

    def process_row(self, row, row_number):
        self.require(row, *self.REQUIRED_FIELDS)

        engine_type = row.get('engine_type', '').upper()
        if engine_type and engine_type not in ENGINE_TYPES:
            raise RowProcessingError(
                f"Invalid engine type: {row['engine_type']}. Must be one of: {', '.join(sorted(ENGINE_TYPES))}",
                'VALIDATION',
                'engine_type'
            )
        wtc = row.get('wtc', '').upper()
        if wtc and wtc not in WTC_VALUES:
            raise RowProcessingError(
                f"Invalid WTC: {row['wtc']}. Must be one of: {', '.join(sorted(WTC_VALUES))}",
                'VALIDATION',
                'wtc'
            )

        data = normalize_icao_entry({
            'type_designator': row['type_designator'],
            'manufacturer': row['manufacturer'],
            'model': row['model'],
            'description': row.get('description', ''),
            'engine_type': engine_type,
            'engine_count': self.parse_int(row, 'engine_count', 1),
            'wtc': wtc,
        })
        _, outcome = upsert_icao_type(data)
        return 'skipped' if outcome == 'unchanged' else outcome


# =============================================================================
# REFERENCE AIRPORTS
# =============================================================================

class ReferenceAirportImportService(CSVImportService):
    """OurAirports airports.csv rows, upserted by OurAirports id."""

    data_type = 'REFERENCE_AIRPORTS'

    HEADERS = {
        'ourairports_id': ['id'],
        'ident': [],
        'type': [],
        'name': [],
        'latitude_deg': [],
        'longitude_deg': [],
        'elevation_ft': [],
        'continent': [],
        'iso_country': [],
        'iso_region': [],
        'municipality': [],
        'gps_code': [],
        'iata_code': [],
        'local_code': [],
        'icao_code': [],
        'home_link': [],
    }

    REQUIRED_FIELDS = ['ourairports_id', 'ident', 'type', 'name']

    TEMPLATE_ROWS = [
        {
            'ourairports_id': '4294',
            'ident': 'LROP',
            'type': 'large_airport',
            'name': 'Henri Coandă International Airport',
            'latitude_deg': '44.5711111',
            'longitude_deg': '26.085',
            'elevation_ft': '314',
            'continent': 'EU',
            'iso_country': 'RO',
            'iso_region': 'RO-IF',
            'municipality': 'Bucharest',
            'gps_code': 'LROP',
            'iata_code': 'OTP',
            'icao_code': 'LROP',
        },
    ]

    TEXT_FIELDS = (
        'ident', 'type', 'name', 'continent', 'iso_country', 'iso_region', 'municipality',
        'gps_code', 'iata_code', 'local_code', 'icao_code', 'home_link',
    )

    def process_row(self, row, row_number):
        self.require(row, *self.REQUIRED_FIELDS)

        ourairports_id = self.parse_int(row, 'ourairports_id')
        defaults: Dict[str, Any] = {name: row.get(name, '') for name in self.TEXT_FIELDS}
        defaults['latitude_deg'] = self.parse_decimal(row, 'latitude_deg')
        defaults['longitude_deg'] = self.parse_decimal(row, 'longitude_deg')
        defaults['elevation_ft'] = self.parse_int(row, 'elevation_ft')

        _, created = ReferenceAirport.objects.update_or_create(
            ourairports_id=ourairports_id,
            defaults=defaults,
        )
        return 'created' if created else 'updated'


# =============================================================================
# REGISTRY AND ENTRY POINTS
# =============================================================================

IMPORT_SERVICES = {
    service.data_type: service
    for service in (
        FlightLogImportService,
        UserImportService,
        FleetImportService,
        IcaoTypeImportService,
        ReferenceAirportImportService,
    )
}

# URL slug -> data type
DATA_TYPE_SLUGS = {
    'flight-logs': 'FLIGHT_LOGS',
    'users': 'USERS',
    'fleet': 'FLEET',
    'icao-types': 'ICAO_TYPES',
    'reference-airports': 'REFERENCE_AIRPORTS',
}


def get_import_service(data_type: str):
    try:
        return IMPORT_SERVICES[data_type]
    except KeyError:
        raise ValueError(f"Unknown data type: {data_type}")


def compute_file_hash(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def find_previous_import(data_type: str, file_hash: str) -> Optional[ImportBatch]:
    """An earlier completed batch of the same data type with the same file hash."""
    if not file_hash:
        return None
    return ImportBatch.objects.filter(
        data_type=data_type,
        file_hash=file_hash,
        status='completed',
    ).order_by('-completed_at').first()


def run_import(data_type: str, file_content, file_name: str = '', user=None,
               import_type: str = 'CSV', notes: str = '') -> Dict[str, Any]:
    """
    Create an import batch for ``file_content`` and process it.

    Args:
        data_type: One of ImportBatch.DATA_TYPE_CHOICES
        file_content: CSV bytes or text
        file_name: Original file name, kept on the batch
        user: User running the import
        import_type: Source format recorded on the batch
        notes: Free text kept on the batch

    Returns:
        Processing results dictionary (see CSVImportService)
    """
    service_class = get_import_service(data_type)
    raw = file_content if isinstance(file_content, bytes) else file_content.encode('utf-8')

    import_batch = ImportBatch.objects.create(
        data_type=data_type,
        import_type=import_type,
        file_name=file_name or '',
        file_size=len(raw),
        file_hash=compute_file_hash(raw),
        created_by=user,
        notes=notes or '',
    )
    return service_class(import_batch, user=user).process_csv_file(raw)


def validate_csv_structure(data_type: str, file_content) -> Dict[str, Any]:
    """
    Check headers and count rows without processing anything.

    Returns:
        Dict with ``valid``, ``headers``, ``row_count``, ``missing_required`` and ``message``
    """
    service = get_import_service(data_type)(ImportBatch(data_type=data_type))
    try:
        headers, rows = service._parse_csv_content(service._decode(file_content))
    except ValueError as e:
        return {
            'valid': False,
            'error': str(e),
            'message': 'Failed to parse CSV structure',
        }

    missing_required = [field for field in service.REQUIRED_FIELDS if field not in headers]

    return {
        'valid': not missing_required,
        'headers': headers,
        'row_count': len(rows),
        'missing_required': missing_required,
        'message': 'CSV structure is valid' if not missing_required
        else f"Missing required columns: {', '.join(missing_required)}",
    }


def get_template(data_type: str) -> str:
    return get_import_service(data_type).template_csv()


def get_import_status() -> Dict[str, Any]:
    """Record counts per dataset and the latest batch of each data type."""
    latest = {}
    for data_type, label in ImportBatch.DATA_TYPE_CHOICES:
        batch = ImportBatch.objects.filter(data_type=data_type).order_by('-created_at').first()
        latest[data_type] = {
            'label': label,
            'batch_id': str(batch.batch_id) if batch else None,
            'status': batch.status if batch else None,
            'created_at': batch.created_at if batch else None,
            'records_created': batch.records_created if batch else 0,
            'records_failed': batch.records_failed if batch else 0,
        }

    return {
        'counts': {
            'FLIGHT_LOGS': FlightLog.objects.count(),
            'USERS': User.objects.count(),
            'FLEET': Aircraft.objects.count(),
            'ICAO_TYPES': IcaoReferenceType.objects.count(),
            'REFERENCE_AIRPORTS': ReferenceAirport.objects.count(),
        },
        'latest_batches': latest,
    }
