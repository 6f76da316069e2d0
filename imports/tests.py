# ===== IMPORTS APP TEST SUITE =====
"""
Test suite for imports app functionality
File: imports/tests.py

Test Coverage:
- ImportBatch model operations
- CSV pipeline for every dataset: row errors, skips and quality scoring
- Structure validation and templates
- API endpoints for upload, validation, templates and batch monitoring
- import_csv and sync_reference_airports management commands
"""

import os
import tempfile
from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

import requests
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from accounts.services import assign_role, get_pilot_profile, get_role_names
from airfields.models import Airfield, ReferenceAirport
from fleet.models import Aircraft, IcaoReferenceType
from flightlogs.models import FlightLog

from .importers import UserImportService, get_template, run_import, validate_csv_structure
from .models import ImportBatch, ImportRowError

User = get_user_model()


def make_user(email, *roles):
    user = User.objects.create_user(username=email, email=email, password='testpass123')
    for role in roles:
        assign_role(user, role)
    return user


def csv_text(*lines):
    return '\n'.join(lines) + '\n'


FLIGHT_LOG_HEADER = (
    'date,pilot_email,aircraft_callsign,departure_airfield_code,arrival_airfield_code,'
    'departure_time,arrival_time,departure_hobbs,arrival_hobbs'
)

FLIGHT_LOG_CSV = csv_text(
    FLIGHT_LOG_HEADER,
    '2024-05-01,pilot@school.ro,YR-ABC,LRCL,LRCL,09:00,10:30,1000.0,1001.9',
    '2024-05-01,pilot@school.ro,YR-ABC,LRCL,LRCL,09:00,10:30,1000.0,1001.9',
    '2024-05-02,ghost@school.ro,YR-ABC,LRCL,LRCL,09:00,10:00,,',
    '2024-05-03,pilot@school.ro,YR-ABC,LRCL,LRXX,11:00,12:00,,',
)

USERS_CSV = csv_text(
    'Email,First Name,Last Name,Role,Total Flight Hours',
    'new@school.ro,Ana,Pop,STUDENT,12.5',
    'pilot@school.ro,Ion,Popescu,,',
    'not-an-email,X,Y,,',
)


# =============================================================================
# MODEL TESTS
# =============================================================================

class ImportBatchModelTest(TestCase):

    def test_new_batch_is_pending(self):
        batch = ImportBatch.objects.create(data_type='USERS', file_name='users.csv')

        self.assertEqual(batch.status, 'pending')
        self.assertIsNotNone(batch.batch_id)
        self.assertEqual(batch.progress_percent, 0)
        self.assertEqual(batch.success_rate, 0)

    def test_status_transitions(self):
        batch = ImportBatch.objects.create(data_type='USERS')

        batch.mark_as_processing()
        self.assertEqual(batch.status, 'processing')
        self.assertIsNotNone(batch.started_at)

        batch.mark_as_failed('Broken file')
        batch.refresh_from_db()
        self.assertEqual(batch.status, 'failed')
        self.assertTrue(batch.has_errors)
        self.assertIsNotNone(batch.processing_duration)

    def test_rates(self):
        batch = ImportBatch(
            data_type='FLEET', records_total=4, records_processed=2,
            records_created=2, records_updated=1,
        )
        self.assertEqual(batch.progress_percent, 50.0)
        self.assertEqual(batch.success_rate, 75.0)


# =============================================================================
# PIPELINE TESTS
# =============================================================================

class FlightLogImportTest(TestCase):

    def setUp(self):
        self.pilot = make_user('pilot@school.ro', Role.PILOT)
        icao_type = IcaoReferenceType.objects.create(
            type_designator='C172', manufacturer='CESSNA', model='172 Skyhawk'
        )
        Aircraft.objects.create(
            call_sign='YR-ABC', serial_number='17280001', year_of_manufacture=2005,
            icao_reference_type=icao_type,
        )
        Airfield.objects.create(name='Cluj', code='LRCL')

    def test_import_results(self):
        results = run_import('FLIGHT_LOGS', FLIGHT_LOG_CSV, file_name='logs.csv')

        self.assertEqual(results['status'], 'completed')
        self.assertEqual(results['records_total'], 4)
        self.assertEqual(results['records_created'], 2)
        self.assertEqual(results['records_skipped'], 1)
        self.assertEqual(results['records_failed'], 1)
        self.assertEqual(results['warning_count'], 1)
        self.assertEqual(results['quality_score'], 82)
        self.assertIn('Row 4', results['errors'][0])

    def test_row_errors_are_recorded_with_line_numbers(self):
        results = run_import('FLIGHT_LOGS', FLIGHT_LOG_CSV)

        error = ImportRowError.objects.get()
        self.assertEqual(str(error.import_batch.batch_id), results['batch_id'])
        self.assertEqual(error.row_number, 4)
        self.assertEqual(error.error_type, 'REFERENCE')
        self.assertEqual(error.field_name, 'pilot_email')
        self.assertEqual(error.raw_data['pilot_email'], 'ghost@school.ro')

    def test_unknown_airfield_becomes_historical(self):
        run_import('FLIGHT_LOGS', FLIGHT_LOG_CSV)

        airfield = Airfield.objects.get(code='LRXX')
        self.assertEqual(airfield.source, 'historical')
        self.assertEqual(airfield.status, 'INACTIVE')

    def test_logs_are_linked_and_hours_added(self):
        results = run_import('FLIGHT_LOGS', FLIGHT_LOG_CSV)

        self.assertEqual(FlightLog.objects.filter(import_batch__batch_id=results['batch_id']).count(), 2)
        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('2.50'))

    def test_hobbs_discrepancy_is_a_warning(self):
        results = run_import('FLIGHT_LOGS', FLIGHT_LOG_CSV)

        self.assertIn('differs from block time', results['warnings'][0])
        batch = ImportBatch.objects.get(batch_id=results['batch_id'])
        self.assertEqual(batch.validation_results['warning_count'], 1)

    def test_missing_columns_fail_the_batch(self):
        results = run_import('FLIGHT_LOGS', csv_text('date,pilot_email', '2024-05-01,pilot@school.ro'))

        self.assertEqual(results['status'], 'failed')
        self.assertIn('Missing required columns', results['error_message'])
        self.assertFalse(FlightLog.objects.exists())

    def test_empty_file_fails_the_batch(self):
        results = run_import('FLIGHT_LOGS', b'')
        self.assertEqual(results['status'], 'failed')
        self.assertEqual(results['error_message'], 'CSV file is empty')

    def test_semicolon_delimiter_and_bom(self):
        content = '\ufeff' + csv_text(
            FLIGHT_LOG_HEADER.replace(',', ';'),
            '2024-05-01;pilot@school.ro;YR-ABC;LRCL;LRCL;09:00;10:00;;',
        )
        results = run_import('FLIGHT_LOGS', content.encode('utf-8'))

        self.assertEqual(results['status'], 'completed')
        self.assertEqual(results['records_created'], 1)


class UserImportTest(TestCase):

    def setUp(self):
        self.pilot = make_user('pilot@school.ro', Role.PILOT)

    def test_users_are_created_and_updated(self):
        results = run_import('USERS', USERS_CSV)

        self.assertEqual(results['records_created'], 1)
        self.assertEqual(results['records_updated'], 1)
        self.assertEqual(results['records_failed'], 1)

        new_user = User.objects.get(email='new@school.ro')
        self.assertFalse(new_user.has_usable_password())
        self.assertEqual(get_role_names(new_user), {Role.STUDENT})
        self.assertEqual(get_pilot_profile(new_user).total_flight_hours, Decimal('12.50'))

        self.pilot.refresh_from_db()
        self.assertEqual(self.pilot.last_name, 'Popescu')
        self.assertEqual(User.objects.filter(email='pilot@school.ro').count(), 1)

    def test_invalid_email_is_a_validation_error(self):
        run_import('USERS', USERS_CSV)

        error = ImportRowError.objects.get()
        self.assertEqual(error.row_number, 4)
        self.assertEqual(error.error_type, 'VALIDATION')

    @override_settings(IMPORT_PROGRESS_INTERVAL=2)
    def test_progress_is_saved_during_the_run(self):
        saved_progress = []
        process_row = UserImportService.process_row

        def recording_process_row(service, row, row_number):
            batch = ImportBatch.objects.get(pk=service.import_batch.pk)
            saved_progress.append(batch.records_processed)
            return process_row(service, row, row_number)

        with patch.object(UserImportService, 'process_row', recording_process_row):
            results = run_import('USERS', USERS_CSV)

        self.assertEqual(saved_progress, [0, 0, 2])
        self.assertEqual(results['records_processed'], 3)

    def test_unknown_role_is_rejected(self):
        results = run_import('USERS', csv_text('email,first_name,last_name,role', 'a@school.ro,A,B,PILOTE'))

        self.assertEqual(results['records_failed'], 1)
        self.assertEqual(ImportRowError.objects.get().error_type, 'REFERENCE')


class FleetImportTest(TestCase):

    def setUp(self):
        IcaoReferenceType.objects.create(type_designator='C172', manufacturer='CESSNA', model='172 Skyhawk')

    def test_fleet_rows(self):
        content = csv_text(
            'call_sign,serial_number,year_of_manufacture,icao_type_designator,model,manufacturer,status',
            'yr-abc,17280001,2005,C172,172 Skyhawk,CESSNA,active',
            'YR-ABC,17280009,2006,C172,172 Skyhawk,CESSNA,ACTIVE',
            'YR-DEF,28R-001,1979,P28R,PA-28R Arrow,PIPER,ACTIVE',
            'YR-GHI,17280003,1850,C172,172 Skyhawk,CESSNA,ACTIVE',
        )
        results = run_import('FLEET', content)

        self.assertEqual(results['records_created'], 1)
        self.assertEqual(results['records_failed'], 3)
        self.assertEqual(Aircraft.objects.get().call_sign, 'YR-ABC')

        error_types = list(ImportRowError.objects.values_list('row_number', 'error_type'))
        self.assertEqual(error_types, [(3, 'DUPLICATE'), (4, 'REFERENCE'), (5, 'VALIDATION')])


class IcaoTypeImportTest(TestCase):

    CONTENT = csv_text(
        'manufacturer,model,type_designator,engine_type,engine_count,wtc',
        'CESSNA,172 Skyhawk,C172,PISTON,1,LIGHT',
        'DIAMOND,DA-42 Twin Star,DA42,PISTON,2,LIGHT',
        'PIPER,PA-28,P28A,STEAM,1,LIGHT',
    )

    def test_upsert_and_rerun(self):
        first = run_import('ICAO_TYPES', self.CONTENT)
        self.assertEqual(first['records_created'], 2)
        self.assertEqual(first['records_failed'], 1)

        second = run_import('ICAO_TYPES', self.CONTENT)
        self.assertEqual(second['records_created'], 0)
        self.assertEqual(second['records_skipped'], 2)
        self.assertEqual(IcaoReferenceType.objects.count(), 2)


class ReferenceAirportImportTest(TestCase):

    def test_ourairports_rows_are_upserted(self):
        content = csv_text(
            'id,ident,type,name,latitude_deg,longitude_deg,elevation_ft,iso_country,icao_code',
            '4294,LROP,large_airport,Henri Coanda,44.5711111,26.085,314,RO,LROP',
        )
        first = run_import('REFERENCE_AIRPORTS', content)
        second = run_import('REFERENCE_AIRPORTS', content.replace('Henri Coanda', 'Otopeni'))

        self.assertEqual(first['records_created'], 1)
        self.assertEqual(second['records_updated'], 1)

        airport = ReferenceAirport.objects.get(ourairports_id=4294)
        self.assertEqual(airport.name, 'Otopeni')
        self.assertEqual(airport.elevation_ft, 314)


class StructureAndTemplateTest(TestCase):

    def test_validate_reports_missing_columns(self):
        result = validate_csv_structure('USERS', b'email,first_name\na@b.ro,A\n')

        self.assertFalse(result['valid'])
        self.assertEqual(result['row_count'], 1)
        self.assertEqual(result['missing_required'], ['last_name'])
        self.assertEqual(ImportBatch.objects.count(), 0)

    def test_validate_accepts_aliases(self):
        result = validate_csv_structure('USERS', 'E-mail,Firstname,Surname\na@b.ro,A,B\n')
        self.assertTrue(result['valid'])

    def test_template_header(self):
        template = get_template('FLEET')
        self.assertTrue(template.startswith(
            'call_sign,serial_number,year_of_manufacture,icao_type_designator,model,manufacturer,status'
        ))
        self.assertEqual(len(template.strip().split('\n')), 3)


# =============================================================================
# API TESTS
# =============================================================================

class ImportAPITest(APITestCase):

    def setUp(self):
        self.super_admin = make_user('boss@school.ro', Role.SUPER_ADMIN)
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        self.pilot = make_user('pilot@school.ro', Role.PILOT)

    def upload(self, slug, content, name='data.csv', **extra):
        payload = {'file': SimpleUploadedFile(name, content.encode('utf-8'), content_type='text/csv')}
        payload.update(extra)
        return self.client.post(f'/api/v1/imports/{slug}/', payload, format='multipart')

    def test_admin_imports_users(self):
        self.client.force_authenticate(self.admin)
        response = self.upload('users', USERS_CSV)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['results']['records_created'], 1)

        batch = ImportBatch.objects.get()
        self.assertEqual(batch.created_by, self.admin)
        self.assertEqual(batch.file_name, 'data.csv')

    def test_admin_cannot_import_fleet(self):
        self.client.force_authenticate(self.admin)
        response = self.upload('fleet', 'call_sign\nYR-ABC\n')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_pilot_cannot_import_users(self):
        self.client.force_authenticate(self.pilot)
        response = self.upload('users', USERS_CSV)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_data_type(self):
        self.client.force_authenticate(self.super_admin)
        response = self.upload('invoices', 'a,b\n1,2\n')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_file(self):
        self.client.force_authenticate(self.super_admin)
        response = self.client.post('/api/v1/imports/users/', {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No file provided')

    def test_non_csv_rejected(self):
        self.client.force_authenticate(self.super_admin)
        response = self.upload('users', USERS_CSV, name='users.xlsx')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_file_twice_conflicts_unless_forced(self):
        self.client.force_authenticate(self.super_admin)
        first = self.upload('users', USERS_CSV)
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)

        second = self.upload('users', USERS_CSV)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['previous_batch_id'], first.data['results']['batch_id'])

        forced = self.upload('users', USERS_CSV, force='true')
        self.assertEqual(forced.status_code, status.HTTP_201_CREATED)
        self.assertEqual(forced.data['results']['records_updated'], 2)

    def test_failed_batch_returns_400(self):
        self.client.force_authenticate(self.super_admin)
        response = self.upload('users', 'email\na@b.ro\n')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['results']['status'], 'failed')

    def test_validate_endpoint(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            '/api/v1/imports/users/validate/',
            {'file': SimpleUploadedFile('users.csv', USERS_CSV.encode('utf-8'))},
            format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['row_count'], 3)

    def test_template_download(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/imports/flight-logs/template/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('flight-logs_template.csv', response['Content-Disposition'])
        self.assertTrue(response.content.decode('utf-8').startswith('date,pilot_email,'))

    def test_status_endpoint(self):
        run_import('USERS', USERS_CSV)
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/imports/status/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['USERS'], 4)
        self.assertEqual(response.data['latest_batches']['USERS']['status'], 'completed')
        self.assertIsNone(response.data['latest_batches']['FLEET']['batch_id'])


class ImportBatchAPITest(APITestCase):

    def setUp(self):
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        make_user('pilot@school.ro', Role.PILOT)
        self.results = run_import('USERS', USERS_CSV, file_name='users.csv')
        self.client.force_authenticate(self.admin)

    def test_list_and_filter(self):
        ImportBatch.objects.create(data_type='FLEET')

        response = self.client.get('/api/v1/imports/batches/', {'data_type': 'USERS'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['file_name'], 'users.csv')

    def test_detail_has_recent_errors(self):
        response = self.client.get(f"/api/v1/imports/batches/{self.results['batch_id']}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['error_count'], 1)
        self.assertEqual(response.data['recent_errors'][0]['row_number'], 4)

    def test_progress(self):
        response = self.client.get(f"/api/v1/imports/batches/{self.results['batch_id']}/progress/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['progress_percent'], 100.0)

    def test_errors_filtered_by_type(self):
        url = f"/api/v1/imports/batches/{self.results['batch_id']}/errors/"

        response = self.client.get(url, {'error_type': 'validation'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(url, {'error_type': 'DUPLICATE'})
        self.assertEqual(response.data['count'], 0)

    def test_cancel_only_pending(self):
        url = f"/api/v1/imports/batches/{self.results['batch_id']}/cancel/"
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        pending = ImportBatch.objects.create(data_type='FLEET')
        response = self.client.post(f'/api/v1/imports/batches/{pending.batch_id}/cancel/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        pending.refresh_from_db()
        self.assertEqual(pending.status, 'cancelled')

    def test_pilot_is_forbidden(self):
        self.client.force_authenticate(User.objects.get(email='pilot@school.ro'))
        response = self.client.get('/api/v1/imports/batches/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


# =============================================================================
# MANAGEMENT COMMAND TESTS
# =============================================================================

class ImportCsvCommandTest(TestCase):

    def setUp(self):
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        handle, self.path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(handle, 'w') as f:
            f.write(USERS_CSV)
        self.addCleanup(os.remove, self.path)

    def test_import_then_refuse_repeat(self):
        call_command('import_csv', 'users', self.path, '--user', 'admin@school.ro', '--notes', 'staff list')

        batch = ImportBatch.objects.get()
        self.assertEqual(batch.created_by, self.admin)
        self.assertEqual(batch.notes, 'staff list')
        self.assertTrue(User.objects.filter(email='new@school.ro').exists())

        with self.assertRaises(CommandError):
            call_command('import_csv', 'users', self.path)

        call_command('import_csv', 'users', self.path, '--force')
        self.assertEqual(ImportBatch.objects.count(), 2)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_csv', 'users', '/nonexistent/users.csv')

    def test_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command('import_csv', 'users', self.path, '--user', 'ghost@school.ro')

    def test_failed_batch_raises(self):
        with open(self.path, 'w') as f:
            f.write('email\na@b.ro\n')
        with self.assertRaises(CommandError):
            call_command('import_csv', 'users', self.path)


AIRPORTS_CSV = csv_text(
    'id,ident,type,name,latitude_deg,longitude_deg,elevation_ft,iso_country',
    '4294,LROP,large_airport,Henri Coanda,44.5711111,26.085,314,RO',
    '2039,LHBP,large_airport,Budapest Ferenc Liszt,47.42976,19.261093,495,HU',
    '3632,EDDF,large_airport,Frankfurt,50.036249,8.559294,364,DE',
)


class SyncReferenceAirportsCommandTest(TestCase):

    def mock_response(self, text):
        response = Mock()
        response.text = text
        response.encoding = 'utf-8'
        response.raise_for_status.return_value = None
        return response

    @patch('services.ourairports.requests.get')
    def test_sync_records_api_batch(self, mock_get):
        mock_get.return_value = self.mock_response(AIRPORTS_CSV)

        call_command('sync_reference_airports', stdout=StringIO())

        self.assertEqual(ReferenceAirport.objects.count(), 3)
        batch = ImportBatch.objects.get()
        self.assertEqual(batch.data_type, 'REFERENCE_AIRPORTS')
        self.assertEqual(batch.import_type, 'API')
        self.assertEqual(batch.file_name, 'airports.csv')
        self.assertEqual(batch.status, 'completed')
        self.assertEqual(batch.records_created, 3)
        self.assertTrue(mock_get.call_args[0][0].endswith('/airports.csv'))

    @patch('services.ourairports.requests.get')
    def test_countries_filter(self, mock_get):
        mock_get.return_value = self.mock_response(AIRPORTS_CSV)

        call_command('sync_reference_airports', countries='ro, hu', stdout=StringIO())

        self.assertEqual(
            set(ReferenceAirport.objects.values_list('ident', flat=True)),
            {'LROP', 'LHBP'}
        )
        self.assertEqual(ImportBatch.objects.get().notes, 'Countries: RO, HU')

    @patch('services.ourairports.requests.get')
    def test_rerun_updates_airports(self, mock_get):
        mock_get.return_value = self.mock_response(AIRPORTS_CSV)
        call_command('sync_reference_airports', stdout=StringIO())

        mock_get.return_value = self.mock_response(AIRPORTS_CSV.replace('Frankfurt', 'Frankfurt am Main'))
        call_command('sync_reference_airports', stdout=StringIO())

        self.assertEqual(ImportBatch.objects.count(), 2)
        self.assertTrue(ImportBatch.objects.filter(records_updated=3, records_created=0).exists())
        self.assertEqual(ReferenceAirport.objects.get(ident='EDDF').name, 'Frankfurt am Main')

    @patch('services.ourairports.requests.get')
    def test_download_failure(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('Connection refused')

        with self.assertRaises(CommandError):
            call_command('sync_reference_airports', stdout=StringIO())

        self.assertFalse(ImportBatch.objects.exists())
        self.assertFalse(ReferenceAirport.objects.exists())
