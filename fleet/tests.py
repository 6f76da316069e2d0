# ===== FLEET APP TEST SUITE =====
"""
Test suite for fleet app functionality
File: fleet/tests.py

Test Coverage:
- Hobbs tracking (forward-only updates, recalculation from flight logs)
- ICAO dataset normalization and upserts
- Aircraft API permissions, validation and Hobbs endpoints
- load_icao_types and recalculate_hobbs management commands
"""

import json
import os
import tempfile
from datetime import date, time
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DataError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from accounts.services import assign_role
from airfields.models import Airfield
from flightlogs.models import FlightLog
from imports.models import ImportBatch

from .models import Aircraft, AircraftHobbs, IcaoReferenceType
from .services import (
    icao_statistics,
    load_icao_entries,
    normalize_icao_entry,
    recalculate_aircraft_hobbs,
    update_aircraft_hobbs,
    upsert_icao_type,
)

User = get_user_model()


def make_user(email, *roles):
    user = User.objects.create_user(username=email, email=email, password='testpass123')
    for role in roles:
        assign_role(user, role)
    return user


def make_icao_type(designator='C172', manufacturer='CESSNA', model='172 Skyhawk'):
    return IcaoReferenceType.objects.create(
        type_designator=designator,
        manufacturer=manufacturer,
        model=model,
    )


def make_aircraft(call_sign='YR-ABC', icao_type=None, **extra):
    return Aircraft.objects.create(
        call_sign=call_sign,
        serial_number=extra.pop('serial_number', f'SN-{call_sign}'),
        year_of_manufacture=extra.pop('year_of_manufacture', 2005),
        icao_reference_type=icao_type or make_icao_type(),
        **extra
    )


# =============================================================================
# HOBBS TESTS
# =============================================================================

class AircraftHobbsTest(TestCase):

    def setUp(self):
        self.aircraft = make_aircraft()

    def test_first_reading_creates_record(self):
        hobbs = update_aircraft_hobbs(self.aircraft, None, Decimal('1200.50'), date(2024, 5, 1))

        self.assertEqual(hobbs.last_hobbs_reading, Decimal('1200.50'))
        self.assertEqual(hobbs.last_hobbs_date, date(2024, 5, 1))

    def test_empty_reading_is_ignored(self):
        self.assertIsNone(update_aircraft_hobbs(self.aircraft, None, None, date(2024, 5, 1)))
        self.assertFalse(AircraftHobbs.objects.exists())

    def test_older_date_does_not_replace_newer(self):
        update_aircraft_hobbs(self.aircraft, None, Decimal('1200.00'), date(2024, 5, 2))
        hobbs = update_aircraft_hobbs(self.aircraft, None, Decimal('1300.00'), date(2024, 5, 1))

        self.assertEqual(hobbs.last_hobbs_reading, Decimal('1200.00'))
        self.assertEqual(hobbs.last_hobbs_date, date(2024, 5, 2))

    def test_same_date_keeps_highest_reading(self):
        update_aircraft_hobbs(self.aircraft, None, Decimal('1200.00'), date(2024, 5, 1))
        update_aircraft_hobbs(self.aircraft, None, Decimal('1199.00'), date(2024, 5, 1))
        hobbs = update_aircraft_hobbs(self.aircraft, None, Decimal('1201.30'), date(2024, 5, 1))

        self.assertEqual(hobbs.last_hobbs_reading, Decimal('1201.30'))

    def test_newer_date_always_wins(self):
        update_aircraft_hobbs(self.aircraft, None, Decimal('1200.00'), date(2024, 5, 1))
        hobbs = update_aircraft_hobbs(self.aircraft, None, Decimal('900.00'), date(2024, 5, 3))

        self.assertEqual(hobbs.last_hobbs_reading, Decimal('900.00'))

    def test_recalculate_from_flight_logs(self):
        pilot = make_user('pilot@school.ro', Role.PILOT)
        airfield = Airfield.objects.create(name='Cluj', code='LRCL')

        def log(day, arrival_hobbs):
            return FlightLog.objects.create(
                date=day,
                pilot=pilot,
                aircraft=self.aircraft,
                departure_airfield=airfield,
                arrival_airfield=airfield,
                departure_time=time(9, 0),
                arrival_time=time(10, 0),
                arrival_hobbs=arrival_hobbs,
            )

        log(date(2024, 5, 1), Decimal('100.00'))
        latest = log(date(2024, 5, 2), Decimal('101.20'))
        log(date(2024, 5, 3), None)

        hobbs = recalculate_aircraft_hobbs(self.aircraft)

        self.assertEqual(hobbs.last_hobbs_reading, Decimal('101.20'))
        self.assertEqual(hobbs.last_flight_log, latest)

    def test_recalculate_without_logs(self):
        self.assertIsNone(recalculate_aircraft_hobbs(self.aircraft))


# =============================================================================
# ICAO REFERENCE TYPE TESTS
# =============================================================================

class IcaoNormalizationTest(TestCase):

    def test_comprehensive_shape(self):
        data = normalize_icao_entry({
            'icaoTypeDesignator': 'c172',
            'manufacturer': 'Cessna',
            'model': '172',
            'description': json.dumps({'ModelFullName': '172 Skyhawk', 'ManufacturerCode': 'CESSNA'}),
            'wakeTurbulenceCategory': 'L',
            'engineType': 'Piston',
            'engineCount': '1',
        })

        self.assertEqual(data['type_designator'], 'C172')
        self.assertEqual(data['manufacturer'], 'CESSNA')
        self.assertEqual(data['model'], '172 Skyhawk')
        self.assertEqual(data['engine_type'], 'PISTON')
        self.assertEqual(data['engine_count'], 1)
        # Unknown categories fall back to LIGHT
        self.assertEqual(data['wtc'], 'LIGHT')

    def test_extracted_shape(self):
        data = normalize_icao_entry({
            'typeDesignator': 'DA42',
            'manufacturer': 'DIAMOND',
            'model': 'DA-42 Twin Star',
            'engineType': 'piston',
            'engineCount': 2,
            'wtc': 'light',
        })

        self.assertEqual(data['type_designator'], 'DA42')
        self.assertEqual(data['engine_count'], 2)
        self.assertEqual(data['wtc'], 'LIGHT')

    def test_missing_fields(self):
        with self.assertRaises(ValueError):
            normalize_icao_entry({'typeDesignator': 'C152', 'manufacturer': 'CESSNA'})

    def test_upsert_outcomes(self):
        data = normalize_icao_entry({'typeDesignator': 'C152', 'manufacturer': 'CESSNA', 'model': '152'})

        _, outcome = upsert_icao_type(data)
        self.assertEqual(outcome, 'created')

        _, outcome = upsert_icao_type(data)
        self.assertEqual(outcome, 'unchanged')

        icao_type, outcome = upsert_icao_type(dict(data, description='Two-seat trainer'))
        self.assertEqual(outcome, 'updated')
        self.assertEqual(icao_type.description, 'Two-seat trainer')

    def test_load_entries_counts_errors(self):
        summary = load_icao_entries([
            {'typeDesignator': 'C152', 'manufacturer': 'CESSNA', 'model': '152'},
            {'typeDesignator': 'C172', 'manufacturer': 'CESSNA', 'model': '172'},
            {'typeDesignator': 'C152', 'manufacturer': 'CESSNA', 'model': '152'},
            {'manufacturer': 'NOBODY'},
        ], batch_size=2)

        self.assertEqual(summary, {'created': 2, 'updated': 0, 'unchanged': 1, 'errors': 1})
        self.assertEqual(IcaoReferenceType.objects.count(), 2)

    def test_statistics(self):
        make_icao_type('C152', 'CESSNA', '152')
        make_icao_type('DA42', 'DIAMOND', 'DA-42')

        stats = icao_statistics()

        self.assertEqual(stats['total_types'], 2)
        self.assertEqual(stats['manufacturers'], 2)
        self.assertIsNone(stats['last_import'])


# =============================================================================
# API TESTS
# =============================================================================

class AircraftAPITest(APITestCase):

    def setUp(self):
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        self.pilot = make_user('pilot@school.ro', Role.PILOT)
        self.prospect = make_user('prospect@school.ro', Role.PROSPECT)
        self.icao_type = make_icao_type()
        self.aircraft = make_aircraft('YR-ABC', self.icao_type)

    def test_pilot_can_list(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/fleet/aircraft/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data['results'][0]
        self.assertEqual(row['call_sign'], 'YR-ABC')
        self.assertEqual(row['type_designator'], 'C172')
        self.assertIsNone(row['last_hobbs_reading'])

    def test_prospect_cannot_list(self):
        self.client.force_authenticate(self.prospect)
        response = self.client.get('/api/v1/fleet/aircraft/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pilot_cannot_create(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post('/api/v1/fleet/aircraft/', {
            'call_sign': 'YR-NEW',
            'serial_number': 'SN-NEW',
            'year_of_manufacture': 2010,
            'icao_reference_type': self.icao_type.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_aircraft(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/v1/fleet/aircraft/', {
            'call_sign': 'yr-new',
            'serial_number': ' 17280001 ',
            'year_of_manufacture': 2010,
            'icao_reference_type': self.icao_type.pk,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['call_sign'], 'YR-NEW')
        self.assertEqual(response.data['serial_number'], '17280001')
        self.assertEqual(response.data['icao_type']['type_designator'], 'C172')
        self.assertIsNone(response.data['hobbs'])

    def test_duplicate_serial_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/v1/fleet/aircraft/', {
            'call_sign': 'YR-XYZ',
            'serial_number': 'SN-YR-ABC',
            'year_of_manufacture': 2010,
            'icao_reference_type': self.icao_type.pk,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('serial_number', response.data)

    def test_year_out_of_range_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/v1/fleet/aircraft/', {
            'call_sign': 'YR-OLD',
            'serial_number': 'SN-OLD',
            'year_of_manufacture': 1850,
            'icao_reference_type': self.icao_type.pk,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('year_of_manufacture', response.data)

    def test_filter_by_type_designator(self):
        make_aircraft('YR-DAA', make_icao_type('DA42', 'DIAMOND', 'DA-42'))
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/fleet/aircraft/', {'type_designator': 'da42'})

        self.assertEqual([a['call_sign'] for a in response.data['results']], ['YR-DAA'])

    def test_hobbs_endpoint(self):
        self.client.force_authenticate(self.pilot)
        url = f'/api/v1/fleet/aircraft/{self.aircraft.pk}/hobbs/'

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        update_aircraft_hobbs(self.aircraft, None, Decimal('512.40'), date(2024, 6, 1))
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['last_hobbs_reading']), Decimal('512.40'))

    def test_recalculate_hobbs_requires_admin(self):
        url = f'/api/v1/fleet/aircraft/{self.aircraft.pk}/recalculate-hobbs/'

        self.client.force_authenticate(self.pilot)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['hobbs'])

    def test_icao_statistics_endpoint(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/fleet/icao-types/statistics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_types'], 1)


# =============================================================================
# MANAGEMENT COMMAND TESTS
# =============================================================================

class FleetCommandTest(TestCase):

    def test_load_icao_types_records_batch(self):
        payload = {'aircraft': [
            {'typeDesignator': 'C152', 'manufacturer': 'CESSNA', 'model': '152'},
            {'typeDesignator': 'P28A', 'manufacturer': 'PIPER', 'model': 'PA-28 Warrior'},
        ]}
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
            json.dump(payload, f)
        self.addCleanup(os.unlink, f.name)

        call_command('load_icao_types', f.name, stdout=StringIO())

        self.assertEqual(IcaoReferenceType.objects.count(), 2)
        batch = ImportBatch.objects.get(data_type='ICAO_TYPES')
        self.assertEqual(batch.status, 'completed')
        self.assertEqual(batch.import_type, 'JSON')
        self.assertEqual(batch.records_created, 2)
        self.assertEqual(icao_statistics()['last_import']['batch_id'], str(batch.batch_id))

    def write_json(self, payload):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
            json.dump(payload, f)
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_load_icao_types_quality_score(self):
        path = self.write_json([
            {'typeDesignator': 'C152', 'manufacturer': 'CESSNA', 'model': '152'},
            {'typeDesignator': 'C172', 'manufacturer': 'CESSNA', 'model': '172'},
            {'manufacturer': 'NOBODY'},
        ])

        call_command('load_icao_types', path, stdout=StringIO())

        batch = ImportBatch.objects.get(data_type='ICAO_TYPES')
        self.assertEqual(batch.records_failed, 1)
        self.assertTrue(batch.has_errors)
        self.assertEqual(batch.quality_score, 83)

    @patch('imports.management.commands.load_icao_types.load_icao_entries')
    def test_load_icao_types_marks_batch_failed_on_database_error(self, mock_load):
        mock_load.side_effect = DataError('value too long for type character varying(10)')
        path = self.write_json([{'typeDesignator': 'C152ABCDEFGH', 'manufacturer': 'CESSNA', 'model': '152'}])

        with self.assertRaises(CommandError):
            call_command('load_icao_types', path, stdout=StringIO())

        batch = ImportBatch.objects.get(data_type='ICAO_TYPES')
        self.assertEqual(batch.status, 'failed')
        self.assertIn('value too long', batch.error_message)

    def test_load_icao_types_rejects_bad_json(self):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
            f.write('{"not": "a list"}')
        self.addCleanup(os.unlink, f.name)

        with self.assertRaises(CommandError):
            call_command('load_icao_types', f.name, stdout=StringIO())

    def test_recalculate_hobbs_unknown_aircraft(self):
        with self.assertRaises(CommandError):
            call_command('recalculate_hobbs', aircraft='YR-NONE', stdout=StringIO())
