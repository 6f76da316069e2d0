# ===== FLIGHTLOGS APP TEST SUITE =====
"""
Test suite for flightlogs app functionality
File: flightlogs/tests.py

Test Coverage:
- Flight log creation with derived hours and Hobbs tracking
- Update and delete keeping pilot totals and Hobbs in step
- Personal and company visibility per role
- API validation, permissions, CSV export and Hobbs check
"""

import csv
import io
from datetime import date, time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Role
from accounts.services import assign_role, get_pilot_profile
from airfields.models import Airfield
from fleet.models import Aircraft, AircraftHobbs, IcaoReferenceType

from .models import FlightLog
from .services import (
    EXPORT_HEADERS,
    accessible_flight_logs,
    create_flight_log,
    delete_flight_log,
    find_duplicate,
    monthly_hours_by_type,
    pilot_statistics,
    update_flight_log,
    visible_flight_logs,
)

User = get_user_model()


def make_user(email, *roles, **extra):
    user = User.objects.create_user(username=email, email=email, password='testpass123', **extra)
    for role in roles:
        assign_role(user, role)
    return user


class FlightLogFixturesMixin:

    def create_fixtures(self):
        self.icao_type = IcaoReferenceType.objects.create(
            type_designator='C172', manufacturer='CESSNA', model='172 Skyhawk'
        )
        self.aircraft = Aircraft.objects.create(
            call_sign='YR-ABC', serial_number='17280001', year_of_manufacture=2005,
            icao_reference_type=self.icao_type,
        )
        self.other_aircraft = Aircraft.objects.create(
            call_sign='YR-XYZ', serial_number='17280002', year_of_manufacture=2008,
            icao_reference_type=self.icao_type,
        )
        self.cluj = Airfield.objects.create(name='Cluj', code='LRCL', is_base=True)
        self.arad = Airfield.objects.create(name='Arad', code='LRAR')

        self.pilot = make_user('pilot@school.ro', Role.PILOT, first_name='Ion', last_name='Pop')
        self.student = make_user('student@school.ro', Role.STUDENT, first_name='Ana', last_name='Mar')
        self.instructor = make_user('cfi@school.ro', Role.INSTRUCTOR, first_name='Dan', last_name='Vlad')
        self.manager = make_user('manager@school.ro', Role.BASE_MANAGER)

    def log_data(self, **overrides):
        data = {
            'date': date(2024, 5, 1),
            'pilot': self.pilot,
            'aircraft': self.aircraft,
            'departure_airfield': self.cluj,
            'arrival_airfield': self.cluj,
            'departure_time': time(9, 0),
            'arrival_time': time(10, 30),
        }
        data.update(overrides)
        return data


# =============================================================================
# SERVICE TESTS
# =============================================================================

class FlightLogServiceTest(FlightLogFixturesMixin, TestCase):

    def setUp(self):
        self.create_fixtures()

    def test_solo_local_flight(self):
        log = create_flight_log(self.log_data())

        self.assertEqual(log.total_hours, Decimal('1.50'))
        self.assertEqual(log.solo, Decimal('1.50'))
        self.assertEqual(log.pilot_in_command, Decimal('1.50'))
        self.assertEqual(log.dual_received, Decimal('0.00'))
        self.assertEqual(log.cross_country, Decimal('0.00'))
        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('1.50'))

    def test_dual_cross_country_flight(self):
        log = create_flight_log(self.log_data(
            pilot=self.student,
            instructor=self.instructor,
            arrival_airfield=self.arad,
        ))

        self.assertEqual(log.dual_received, Decimal('1.50'))
        self.assertEqual(log.pilot_in_command, Decimal('0.00'))
        self.assertEqual(log.cross_country, Decimal('1.50'))

    def test_explicit_categories_are_kept(self):
        log = create_flight_log(self.log_data(night=Decimal('0.50')))
        self.assertEqual(log.night, Decimal('0.50'))

    def test_hobbs_is_tracked(self):
        log = create_flight_log(self.log_data(
            departure_hobbs=Decimal('1000.00'),
            arrival_hobbs=Decimal('1001.50'),
        ))

        hobbs = AircraftHobbs.objects.get(aircraft=self.aircraft)
        self.assertEqual(hobbs.last_hobbs_reading, Decimal('1001.50'))
        self.assertEqual(hobbs.last_flight_log, log)

    def test_update_moves_hours_between_pilots(self):
        log = create_flight_log(self.log_data())
        update_flight_log(log, {'pilot': self.student, 'arrival_time': time(11, 0)})

        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('0.00'))
        self.assertEqual(get_pilot_profile(self.student).total_flight_hours, Decimal('2.00'))

    def test_update_applies_difference(self):
        log = create_flight_log(self.log_data())
        update_flight_log(log, {'arrival_time': time(10, 0)})

        log.refresh_from_db()
        self.assertEqual(log.total_hours, Decimal('1.00'))
        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('1.00'))

    def test_update_aircraft_rebuilds_hobbs(self):
        create_flight_log(self.log_data(date=date(2024, 4, 30), arrival_hobbs=Decimal('999.00')))
        log = create_flight_log(self.log_data(arrival_hobbs=Decimal('1001.50')))

        update_flight_log(log, {'aircraft': self.other_aircraft})

        self.assertEqual(
            AircraftHobbs.objects.get(aircraft=self.aircraft).last_hobbs_reading, Decimal('999.00')
        )
        self.assertEqual(
            AircraftHobbs.objects.get(aircraft=self.other_aircraft).last_hobbs_reading, Decimal('1001.50')
        )

    def test_update_corrects_hobbs_downwards(self):
        log = create_flight_log(self.log_data(
            departure_hobbs=Decimal('100.00'),
            arrival_hobbs=Decimal('101.50'),
        ))

        update_flight_log(log, {'arrival_hobbs': Decimal('101.40')})

        hobbs = AircraftHobbs.objects.get(aircraft=self.aircraft)
        self.assertEqual(hobbs.last_hobbs_reading, Decimal('101.40'))
        self.assertEqual(hobbs.last_flight_log, log)

    def test_update_rederives_categories(self):
        log = create_flight_log(self.log_data(night=Decimal('0.50')))

        update_flight_log(log, {'arrival_time': time(11, 0)})

        log.refresh_from_db()
        self.assertEqual(log.total_hours, Decimal('2.00'))
        self.assertEqual(log.pilot_in_command, Decimal('2.00'))
        self.assertEqual(log.solo, Decimal('2.00'))
        self.assertEqual(log.night, Decimal('0.50'))

    def test_update_to_dual_moves_time_to_dual_received(self):
        log = create_flight_log(self.log_data(pilot=self.student))

        update_flight_log(log, {'instructor': self.instructor, 'arrival_airfield': self.arad})

        log.refresh_from_db()
        self.assertEqual(log.dual_received, Decimal('1.50'))
        self.assertEqual(log.pilot_in_command, Decimal('0.00'))
        self.assertEqual(log.solo, Decimal('0.00'))
        self.assertEqual(log.cross_country, Decimal('1.50'))

    def test_update_keeps_given_categories(self):
        log = create_flight_log(self.log_data())

        update_flight_log(log, {'arrival_time': time(11, 0), 'pilot_in_command': Decimal('1.00')})

        log.refresh_from_db()
        self.assertEqual(log.pilot_in_command, Decimal('1.00'))
        self.assertEqual(log.solo, Decimal('2.00'))

    def test_delete_removes_hours_and_rebuilds_hobbs(self):
        create_flight_log(self.log_data(date=date(2024, 4, 30), arrival_hobbs=Decimal('999.00')))
        log = create_flight_log(self.log_data(arrival_hobbs=Decimal('1001.50')))

        delete_flight_log(log)

        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('1.50'))
        hobbs = AircraftHobbs.objects.get(aircraft=self.aircraft)
        self.assertEqual(hobbs.last_hobbs_reading, Decimal('999.00'))
        self.assertEqual(hobbs.last_hobbs_date, date(2024, 4, 30))

    def test_find_duplicate(self):
        data = self.log_data()
        log = create_flight_log(data)
        lookup = {k: v for k, v in data.items()}
        self.assertEqual(find_duplicate(**lookup), log)

        lookup['arrival_time'] = time(11, 0)
        self.assertIsNone(find_duplicate(**lookup))


class FlightLogVisibilityTest(FlightLogFixturesMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        self.own = create_flight_log(self.log_data())
        self.dual = create_flight_log(self.log_data(pilot=self.student, instructor=self.instructor))
        self.other = create_flight_log(self.log_data(pilot=self.student))

    def test_pilot_sees_own_logs(self):
        self.assertEqual(list(visible_flight_logs(self.pilot)), [self.own])

    def test_instructor_sees_instructed_logs(self):
        self.assertEqual(list(visible_flight_logs(self.instructor)), [self.dual])

    def test_company_view_shows_everything(self):
        self.assertEqual(visible_flight_logs(self.pilot, 'company').count(), 3)

    def test_super_admin_always_sees_everything(self):
        boss = make_user('boss@school.ro', Role.SUPER_ADMIN)
        self.assertEqual(visible_flight_logs(boss).count(), 3)

    def test_single_log_access_by_role(self):
        self.assertEqual(accessible_flight_logs(self.manager).count(), 3)
        self.assertEqual(accessible_flight_logs(self.instructor).count(), 3)
        self.assertEqual(list(accessible_flight_logs(self.pilot)), [self.own])
        self.assertEqual(accessible_flight_logs(self.student).count(), 2)

    def test_prospect_is_refused(self):
        prospect = make_user('prospect@school.ro', Role.PROSPECT)
        with self.assertRaises(PermissionDenied):
            accessible_flight_logs(prospect)


class PilotStatisticsTest(FlightLogFixturesMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        create_flight_log(self.log_data(date=date(2024, 5, 1), day_landings=2))
        create_flight_log(self.log_data(
            date=date(2024, 4, 10), arrival_time=time(10, 0), day_landings=1, night=Decimal('0.50'),
        ))
        create_flight_log(self.log_data(
            date=date(2024, 5, 10), arrival_time=time(11, 0), flight_type='FERRY', day_landings=1,
        ))
        create_flight_log(self.log_data(
            date=date(2023, 12, 1), arrival_time=time(10, 0), instrument=Decimal('0.30'),
        ))
        create_flight_log(self.log_data(date=date(2023, 1, 15), arrival_time=time(10, 0)))

    def test_totals_leave_out_ferry_flights(self):
        stats = pilot_statistics(self.pilot, today=date(2024, 5, 20))

        self.assertEqual(stats['flights']['total'], 4)
        self.assertEqual(stats['hours']['total'], Decimal('4.50'))

    def test_this_month_against_last_month(self):
        stats = pilot_statistics(self.pilot, today=date(2024, 5, 20))

        self.assertEqual(stats['flights']['this_month'], 1)
        self.assertEqual(stats['flights']['last_month'], 1)
        self.assertEqual(stats['flights']['change'], 0)
        self.assertEqual(stats['hours']['this_month'], Decimal('1.50'))
        self.assertEqual(stats['hours']['last_month'], Decimal('1.00'))
        self.assertEqual(stats['hours']['change'], 50)

    def test_currency(self):
        currency = pilot_statistics(self.pilot, today=date(2024, 5, 20))['currency']

        self.assertEqual(currency['last_90_days']['flights'], 2)
        self.assertEqual(currency['last_90_days']['hours'], Decimal('2.50'))
        self.assertEqual(currency['last_12_months']['flights'], 3)
        self.assertEqual(currency['last_12_months']['hours'], Decimal('3.50'))
        self.assertEqual(currency['landings']['total'], 4)
        self.assertEqual(currency['last_night_flight'], date(2024, 4, 10))
        self.assertEqual(currency['last_instrument_flight'], date(2023, 12, 1))

    def test_january_compares_with_december(self):
        stats = pilot_statistics(self.pilot, today=date(2024, 1, 10))

        self.assertEqual(stats['flights']['this_month'], 0)
        self.assertEqual(stats['flights']['last_month'], 1)
        self.assertEqual(stats['hours']['change'], -100)

    def test_pilot_without_flights(self):
        stats = pilot_statistics(self.student, today=date(2024, 5, 20))

        self.assertEqual(stats['flights']['total'], 0)
        self.assertEqual(stats['hours']['total'], Decimal('0.00'))
        self.assertEqual(stats['hours']['change'], 0)
        self.assertIsNone(stats['currency']['last_night_flight'])

    def test_monthly_hours_by_type(self):
        months = monthly_hours_by_type(2024)

        self.assertEqual(len(months), 12)
        self.assertEqual(months[0]['month'], 'January')
        self.assertEqual(months[0]['total'], Decimal('0.00'))
        self.assertEqual(months[4]['hours'], {'FERRY': Decimal('2.00'), 'SCHOOL': Decimal('1.50')})
        self.assertEqual(months[4]['total'], Decimal('3.50'))
        self.assertEqual(months[3]['hours']['SCHOOL'], Decimal('1.00'))


# =============================================================================
# API TESTS
# =============================================================================

class FlightLogAPITest(FlightLogFixturesMixin, APITestCase):

    def setUp(self):
        self.create_fixtures()

    def payload(self, **overrides):
        data = {
            'date': '2024-05-01',
            'aircraft': self.aircraft.pk,
            'departure_airfield': self.cluj.pk,
            'arrival_airfield': self.arad.pk,
            'departure_time': '09:00',
            'arrival_time': '10:30',
            'departure_hobbs': '1000.00',
            'arrival_hobbs': '1001.50',
        }
        data.update(overrides)
        return data

    def test_pilot_creates_own_log(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post('/api/v1/flight-logs/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['pilot'], self.pilot.pk)
        self.assertEqual(response.data['total_hours'], '1.50')
        self.assertEqual(response.data['total_time'], '01:30')
        self.assertEqual(response.data['cross_country'], '1.50')

        log = FlightLog.objects.get()
        self.assertEqual(log.created_by, self.pilot)

    def test_pilot_cannot_log_for_someone_else(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post('/api/v1/flight-logs/', self.payload(pilot=self.student.pk), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(FlightLog.objects.exists())

    def test_instructor_logs_for_student(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            '/api/v1/flight-logs/',
            self.payload(pilot=self.student.pk, instructor=self.instructor.pk),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['dual_received'], '1.50')

    def test_arrival_before_departure_rejected(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post(
            '/api/v1/flight-logs/',
            self.payload(departure_time='10:30', arrival_time='09:00'),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('arrival_time', response.data)

    def test_decreasing_hobbs_rejected(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.post(
            '/api/v1/flight-logs/',
            self.payload(departure_hobbs='1001.50', arrival_hobbs='1000.00'),
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('arrival_hobbs', response.data)

    def test_instructor_cannot_be_pilot(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            '/api/v1/flight-logs/',
            self.payload(pilot=self.instructor.pk, instructor=self.instructor.pk),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_prospect_is_refused(self):
        prospect = make_user('prospect@school.ro', Role.PROSPECT)
        self.client.force_authenticate(prospect)
        response = self.client.get('/api/v1/flight-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_personal_and_company_views(self):
        create_flight_log(self.log_data())
        create_flight_log(self.log_data(pilot=self.student))
        self.client.force_authenticate(self.pilot)

        response = self.client.get('/api/v1/flight-logs/')
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/flight-logs/', {'view_mode': 'company'})
        self.assertEqual(response.data['count'], 2)

    def test_filters(self):
        create_flight_log(self.log_data(date=date(2024, 4, 1)))
        create_flight_log(self.log_data(date=date(2024, 5, 10), flight_type='FERRY'))
        self.client.force_authenticate(self.pilot)

        response = self.client.get('/api/v1/flight-logs/', {'date_from': '2024-05-01'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/flight-logs/', {'flight_type': 'ferry'})
        self.assertEqual(response.data['results'][0]['flight_type_display'], 'Ferry')

    def test_update_own_log(self):
        log = create_flight_log(self.log_data())
        self.client.force_authenticate(self.pilot)

        response = self.client.patch(f'/api/v1/flight-logs/{log.pk}/', {'arrival_time': '11:00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_hours'], '2.00')
        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('2.00'))

    def test_pilot_cannot_delete(self):
        log = create_flight_log(self.log_data())
        self.client.force_authenticate(self.pilot)

        response = self.client.delete(f'/api/v1/flight-logs/{log.pk}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Insufficient permissions to delete flight logs')

    def test_manager_deletes(self):
        log = create_flight_log(self.log_data())
        self.client.force_authenticate(self.manager)

        response = self.client.delete(f'/api/v1/flight-logs/{log.pk}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(FlightLog.objects.exists())
        self.assertEqual(get_pilot_profile(self.pilot).total_flight_hours, Decimal('0.00'))

    def test_admin_opens_any_log(self):
        log = create_flight_log(self.log_data())
        admin = make_user('admin@school.ro', Role.ADMIN)
        self.client.force_authenticate(admin)

        response = self.client.get(f'/api/v1/flight-logs/{log.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pilot'], self.pilot.pk)

    def test_instructor_edits_student_solo_log(self):
        log = create_flight_log(self.log_data(pilot=self.student))
        self.client.force_authenticate(self.instructor)

        response = self.client.patch(f'/api/v1/flight-logs/{log.pk}/', {'arrival_time': '11:00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_hours'], '2.00')
        self.assertEqual(response.data['solo'], '2.00')

    def test_pilot_cannot_open_other_pilots_log(self):
        log = create_flight_log(self.log_data(pilot=self.student))
        self.client.force_authenticate(self.pilot)

        response = self.client.get(f'/api/v1/flight-logs/{log.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_statistics(self):
        create_flight_log(self.log_data(day_landings=3))
        create_flight_log(self.log_data(pilot=self.student))
        self.client.force_authenticate(self.pilot)

        response = self.client.get('/api/v1/flight-logs/statistics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['flights']['total'], 1)
        self.assertEqual(response.data['hours']['total'], Decimal('1.50'))
        self.assertEqual(response.data['currency']['landings']['total'], 3)

    def test_statistics_refused_for_prospect(self):
        prospect = make_user('prospect@school.ro', Role.PROSPECT)
        self.client.force_authenticate(prospect)

        response = self.client.get('/api/v1/flight-logs/statistics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_hours_chart(self):
        create_flight_log(self.log_data())
        create_flight_log(self.log_data(date=date(2024, 5, 2), flight_type='DEMO'))
        self.client.force_authenticate(self.manager)

        response = self.client.get('/api/v1/flight-logs/hours-chart/', {'year': '2024'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['year'], 2024)
        self.assertEqual(response.data['months'][4]['total'], Decimal('3.00'))

    def test_hours_chart_requires_manager(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/flight-logs/hours-chart/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_hours_chart_invalid_year(self):
        self.client.force_authenticate(self.manager)
        response = self.client.get('/api/v1/flight-logs/hours-chart/', {'year': 'soon'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_export_csv(self):
        create_flight_log(self.log_data(instructor=self.instructor, purpose='Circuits'))
        self.client.force_authenticate(self.instructor)

        response = self.client.get('/api/v1/flight-logs/export/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="flight_logs_export_', response['Content-Disposition'])

        rows = list(csv.reader(io.StringIO(response.content.decode('utf-8'))))
        self.assertEqual(rows[0], EXPORT_HEADERS)
        self.assertEqual(rows[1][:5], ['2024-05-01', '09:00', '10:30', 'C172', 'YR-ABC'])
        self.assertEqual(rows[1][5:7], ['Ion Pop', 'Dan Vlad'])
        self.assertEqual(rows[1][19], 'Circuits')

    def test_hobbs_check(self):
        log = create_flight_log(self.log_data(
            departure_hobbs=Decimal('1000.00'),
            arrival_hobbs=Decimal('1001.90'),
        ))
        self.client.force_authenticate(self.pilot)

        response = self.client.get(f'/api/v1/flight-logs/{log.pk}/hobbs-check/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['hobbs_time'], '1.90')
        self.assertEqual(response.data['discrepancy'], '0.40')
        self.assertTrue(response.data['is_valid'])
        self.assertFalse(response.data['within_tolerance'])
