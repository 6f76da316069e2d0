# ===== AIRFIELDS APP TEST SUITE =====
"""
Test suite for airfields app functionality
File: airfields/tests.py

Test Coverage:
- OurAirports type mapping
- Reference airport imports and duplicate detection
- Historical airfields created by flight-log imports
- Operational areas and bulk airfield creation
- Airfield API permissions
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from accounts.services import assign_role
from services import DuplicateRecordError

from .models import Airfield, OperationalArea, ReferenceAirport
from .services import (
    create_operational_area,
    get_or_create_historical_airfield,
    import_airfields_for_countries,
    import_reference_airport,
    map_airport_type,
    reference_code,
)

User = get_user_model()


def make_user(email, *roles):
    user = User.objects.create_user(username=email, email=email, password='testpass123')
    for role in roles:
        assign_role(user, role)
    return user


def make_reference(ourairports_id, ident, **extra):
    defaults = {
        'type': 'small_airport',
        'name': f'Airport {ident}',
        'iso_country': 'RO',
        'latitude_deg': Decimal('46.78520000'),
        'longitude_deg': Decimal('23.68620000'),
        'elevation_ft': 1036,
    }
    defaults.update(extra)
    return ReferenceAirport.objects.create(ourairports_id=ourairports_id, ident=ident, **defaults)


# =============================================================================
# SERVICE TESTS
# =============================================================================

class AirportTypeMappingTest(TestCase):

    def test_exact_ourairports_values(self):
        self.assertEqual(map_airport_type('large_airport'), 'LARGE_AIRPORT')
        self.assertEqual(map_airport_type('heliport'), 'HELIPORT')
        self.assertEqual(map_airport_type('closed'), 'AIRSTRIP')

    def test_free_text_values(self):
        self.assertEqual(map_airport_type('Glider site'), 'GLIDER_PORT')
        self.assertEqual(map_airport_type('Ultralight field'), 'ULTRALIGHT_FIELD')
        self.assertEqual(map_airport_type('grass strip'), 'AIRSTRIP')

    def test_empty_and_unknown(self):
        self.assertEqual(map_airport_type(None), 'AIRPORT')
        self.assertEqual(map_airport_type('spaceport'), 'AIRPORT')


class ReferenceImportTest(TestCase):

    def test_code_priority(self):
        reference = make_reference(1, 'LRCL', icao_code='LRCL', iata_code='CLJ', local_code='CLJ1')
        self.assertEqual(reference_code(reference), 'LRCL')

        no_icao = make_reference(2, 'RO-0002', iata_code='XYZ')
        self.assertEqual(reference_code(no_icao), 'XYZ')

        bare = make_reference(3, 'RO-0003')
        self.assertEqual(reference_code(bare), 'RO-0003')

    def test_import_creates_airfield(self):
        reference = make_reference(1, 'LRCL', icao_code='LRCL', municipality='Cluj-Napoca')
        airfield = import_reference_airport(reference)

        self.assertEqual(airfield.code, 'LRCL')
        self.assertEqual(airfield.type, 'SMALL_AIRPORT')
        self.assertEqual(airfield.city, 'Cluj-Napoca')
        self.assertEqual(airfield.source, 'imported')
        self.assertEqual(airfield.reference_airport, reference)

    def test_import_conflicts_on_any_code(self):
        Airfield.objects.create(name='Cluj', code='CLJ')
        reference = make_reference(1, 'LRCL', icao_code='LRCL', iata_code='CLJ')

        with self.assertRaises(DuplicateRecordError) as ctx:
            import_reference_airport(reference)
        self.assertEqual(ctx.exception.details['existing_codes'], ['CLJ'])

    def test_bulk_import_for_countries(self):
        make_reference(1, 'LRCL', icao_code='LRCL')
        make_reference(2, 'LRTM', icao_code='LRTM')
        make_reference(3, 'LHBP', icao_code='LHBP', iso_country='HU')
        make_reference(4, 'RO-HEL', type='heliport', local_code='HEL1')
        make_reference(5, 'RO-CLOSED', type='closed', icao_code='LRXX')
        Airfield.objects.create(name='Timisoara', code='LRTM')

        result = import_airfields_for_countries(['ro'])

        self.assertEqual(sorted(a.code for a in result['created']), ['HEL1', 'LRCL'])
        self.assertEqual([a.code for a in result['existing']], ['LRTM'])
        self.assertFalse(Airfield.objects.filter(code__in=['LHBP', 'LRXX']).exists())


class HistoricalAirfieldTest(TestCase):

    def test_unknown_code_creates_inactive_airfield(self):
        airfield, created = get_or_create_historical_airfield('lrxx')

        self.assertTrue(created)
        self.assertEqual(airfield.code, 'LRXX')
        self.assertEqual(airfield.status, 'INACTIVE')
        self.assertEqual(airfield.source, 'historical')
        self.assertEqual(airfield.name, 'Historical Airfield - LRXX')

    def test_existing_code_is_reused(self):
        existing = Airfield.objects.create(name='Cluj', code='LRCL')
        airfield, created = get_or_create_historical_airfield('lrcl')

        self.assertFalse(created)
        self.assertEqual(airfield, existing)


class OperationalAreaTest(TestCase):

    def test_countries_are_normalized(self):
        area = create_operational_area('eu', ['ro', 'HU', 'ro'])
        self.assertEqual(area.continent, 'EU')
        self.assertEqual(area.countries, ['HU', 'RO'])

    def test_duplicate_area_rejected(self):
        create_operational_area('EU', ['RO', 'HU'])
        with self.assertRaises(DuplicateRecordError):
            create_operational_area('EU', ['hu', 'ro'])

    def test_missing_countries_rejected(self):
        with self.assertRaises(ValueError):
            create_operational_area('EU', [])


# =============================================================================
# API TESTS
# =============================================================================

class AirfieldAPITest(APITestCase):

    def setUp(self):
        self.pilot = make_user('pilot@school.ro', Role.PILOT)
        self.manager = make_user('manager@school.ro', Role.BASE_MANAGER)
        Airfield.objects.create(name='Cluj', code='LRCL', country='RO', is_base=True)

    def test_pilot_can_read(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/airfields/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_pilot_cannot_create(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post('/api/v1/airfields/', {'name': 'Brasov', 'code': 'LRBV'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_airfield(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post('/api/v1/airfields/', {'name': 'Brasov', 'code': 'lrbv'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'LRBV')
        self.assertEqual(response.data['source'], 'manual')

    def test_filter_by_base(self):
        Airfield.objects.create(name='Arad', code='LRAR', country='RO')
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/airfields/', {'is_base': 'true'})
        self.assertEqual([a['code'] for a in response.data['results']], ['LRCL'])


class ReferenceAirportAPITest(APITestCase):

    def setUp(self):
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        self.reference = make_reference(1, 'LRBV', icao_code='LRBV')

    def test_import_then_conflict(self):
        self.client.force_authenticate(self.admin)
        url = f'/api/v1/airfields/reference/{self.reference.pk}/import/'

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['airfield']['code'], 'LRBV')

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['existing_codes'], ['LRBV'])

    def test_list_marks_imported(self):
        Airfield.objects.create(name='Brasov', code='LRBV')
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/airfields/reference/', {'country': 'ro'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['results'][0]['imported'])


class OperationalAreaAPITest(APITestCase):

    def setUp(self):
        self.super_admin = make_user('boss@school.ro', Role.SUPER_ADMIN)
        self.admin = make_user('admin@school.ro', Role.ADMIN)

    def test_admin_is_forbidden(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/operational-areas/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_and_conflict(self):
        self.client.force_authenticate(self.super_admin)
        payload = {'continent': 'EU', 'countries': ['RO', 'HU']}

        response = self.client.post('/api/v1/operational-areas/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(OperationalArea.objects.count(), 1)

        response = self.client.post('/api/v1/operational-areas/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_import_airfields(self):
        make_reference(1, 'LRCL', icao_code='LRCL')
        self.client.force_authenticate(self.super_admin)

        response = self.client.post(
            '/api/v1/operational-areas/import-airfields/',
            {'countries': ['RO']},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['code'] for a in response.data['created']], ['LRCL'])
