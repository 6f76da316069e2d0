# ===== SERVICES LAYER TEST SUITE =====
"""
Test suite for services layer functionality
File: services/tests.py

Test Coverage:
- Flight time parsing, block time and HH:MM formatting
- Logbook category breakdown
- Hobbs meter checks and tolerance
- OurAirports dataset download with mocked HTTP
- Country filtering of the airports dataset
"""

from datetime import time
from decimal import Decimal
from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase, override_settings

from . import ExternalDatasetError, FlightTimeError
from .flight_time import (
    calculate_flight_hours,
    check_hobbs,
    derive_time_breakdown,
    format_hours,
    get_flight_type_label,
    get_hobbs_tolerance,
    is_valid_flight_type,
    parse_time,
    to_hours,
)
from .ourairports import OurAirportsClient


# =============================================================================
# FLIGHT TIME TESTS
# =============================================================================

class ParseTimeTest(SimpleTestCase):

    def test_supported_formats(self):
        self.assertEqual(parse_time('09:30'), time(9, 30))
        self.assertEqual(parse_time('09:30:15'), time(9, 30, 15))
        self.assertEqual(parse_time('0930'), time(9, 30))
        self.assertEqual(parse_time(' 14:05 '), time(14, 5))

    def test_passthrough_and_empty(self):
        self.assertEqual(parse_time(time(8, 0)), time(8, 0))
        self.assertIsNone(parse_time(''))
        self.assertIsNone(parse_time(None))

    def test_invalid_value(self):
        with self.assertRaises(FlightTimeError):
            parse_time('25:99')
        with self.assertRaises(FlightTimeError):
            parse_time('noon')


class FlightHoursTest(SimpleTestCase):

    def test_block_time(self):
        self.assertEqual(calculate_flight_hours('09:00', '10:30'), Decimal('1.50'))
        self.assertEqual(calculate_flight_hours(time(9, 0), time(9, 20)), Decimal('0.33'))

    def test_negative_span_clamps_to_zero(self):
        self.assertEqual(calculate_flight_hours('10:00', '09:00'), Decimal('0.00'))

    def test_unparsable_or_missing_is_zero(self):
        self.assertEqual(calculate_flight_hours('abc', '10:00'), Decimal('0.00'))
        self.assertEqual(calculate_flight_hours(None, '10:00'), Decimal('0.00'))

    def test_to_hours(self):
        self.assertEqual(to_hours('1.255'), Decimal('1.26'))
        self.assertEqual(to_hours(None), Decimal('0.00'))
        with self.assertRaises(FlightTimeError):
            to_hours('many')

    def test_format_hours(self):
        self.assertEqual(format_hours(Decimal('1.5')), '01:30')
        self.assertEqual(format_hours(12.25), '12:15')
        self.assertEqual(format_hours(None), '00:00')
        self.assertEqual(format_hours(Decimal('-1')), '00:00')


class FlightTypeTest(SimpleTestCase):

    def test_labels(self):
        self.assertEqual(get_flight_type_label('school'), 'School')
        self.assertEqual(get_flight_type_label('UNKNOWN'), 'UNKNOWN')

    def test_validity(self):
        self.assertTrue(is_valid_flight_type('charter'))
        self.assertFalse(is_valid_flight_type('AEROBATIC'))
        self.assertFalse(is_valid_flight_type(None))


class TimeBreakdownTest(SimpleTestCase):

    def test_solo_local(self):
        breakdown = derive_time_breakdown(Decimal('1.5'), has_instructor=False, is_cross_country=False)

        self.assertEqual(breakdown.solo, Decimal('1.50'))
        self.assertEqual(breakdown.pilot_in_command, Decimal('1.50'))
        self.assertEqual(breakdown.dual_received, Decimal('0.00'))
        self.assertEqual(breakdown.cross_country, Decimal('0.00'))

    def test_dual_cross_country(self):
        breakdown = derive_time_breakdown('2', has_instructor=True, is_cross_country=True)
        values = breakdown.as_dict()

        self.assertEqual(values['dual_received'], Decimal('2.00'))
        self.assertEqual(values['pilot_in_command'], Decimal('0.00'))
        self.assertEqual(values['solo'], Decimal('0.00'))
        self.assertEqual(values['cross_country'], Decimal('2.00'))
        self.assertEqual(len(values), 10)


class HobbsCheckTest(SimpleTestCase):

    def test_missing_reading_is_valid(self):
        result = check_hobbs(None, Decimal('100.0'), Decimal('1.0'))

        self.assertTrue(result.is_valid)
        self.assertIsNone(result.hobbs_time)
        self.assertFalse(result.within_tolerance)

    def test_decreasing_reading_is_invalid(self):
        result = check_hobbs(Decimal('101.0'), Decimal('100.0'), Decimal('1.0'))

        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors, ['Arrival Hobbs must be greater than departure Hobbs'])

    def test_within_tolerance(self):
        result = check_hobbs(Decimal('100.0'), Decimal('101.6'), Decimal('1.5'))

        self.assertEqual(result.hobbs_time, Decimal('1.60'))
        self.assertEqual(result.discrepancy, Decimal('0.10'))
        self.assertTrue(result.within_tolerance)

    def test_outside_tolerance(self):
        result = check_hobbs('100.0', '102.0', '1.5', tolerance='0.3')

        self.assertEqual(result.discrepancy, Decimal('0.50'))
        self.assertTrue(result.is_valid)
        self.assertFalse(result.within_tolerance)

    @override_settings(HOBBS_TOLERANCE_HOURS='0.5')
    def test_tolerance_from_settings(self):
        self.assertEqual(get_hobbs_tolerance(), Decimal('0.50'))


# =============================================================================
# OURAIRPORTS CLIENT TESTS
# =============================================================================

AIRPORTS_CSV = (
    'id,ident,type,name,iso_country\n'
    '4294,LROP,large_airport,Henri Coanda,RO\n'
    '2039,LHBP,large_airport,Budapest Ferenc Liszt,HU\n'
    '3632,EDDF,large_airport,Frankfurt,DE\n'
)


class OurAirportsClientTest(SimpleTestCase):

    def setUp(self):
        self.ourairports = OurAirportsClient(base_url='https://data.example.org/', timeout=5)

    def test_airports_url(self):
        self.assertEqual(self.ourairports.airports_url, 'https://data.example.org/airports.csv')

    @patch('services.ourairports.requests.get')
    def test_download_success(self, mock_get):
        mock_response = Mock()
        mock_response.text = AIRPORTS_CSV
        mock_response.encoding = 'utf-8'
        mock_response.raise_for_status.return_value = None
        mock_get.return_value = mock_response

        content = self.ourairports.download_airports_csv()

        self.assertEqual(content, AIRPORTS_CSV)
        mock_get.assert_called_once_with('https://data.example.org/airports.csv', timeout=5)

    @patch('services.ourairports.requests.get')
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('Connection refused')

        with self.assertRaises(ExternalDatasetError):
            self.ourairports.download_airports_csv()

    @patch('services.ourairports.requests.get')
    def test_http_error(self, mock_get):
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = requests.HTTPError('404 Not Found')
        mock_get.return_value = mock_response

        with self.assertRaises(ExternalDatasetError):
            self.ourairports.download_airports_csv()

    @patch('services.ourairports.requests.get')
    def test_empty_dataset(self, mock_get):
        mock_response = Mock()
        mock_response.text = '  \n'
        mock_response.encoding = 'utf-8'
        mock_get.return_value = mock_response

        with self.assertRaises(ExternalDatasetError):
            self.ourairports.download_airports_csv()

    @override_settings(OURAIRPORTS_BASE_URL='')
    def test_unconfigured_client(self):
        with self.assertRaises(ExternalDatasetError):
            OurAirportsClient().download_airports_csv()

    def test_filter_countries(self):
        filtered = OurAirportsClient.filter_countries(AIRPORTS_CSV, ['ro', ' hu '])

        lines = filtered.strip().split('\n')
        self.assertEqual(lines[0], 'id,ident,type,name,iso_country')
        self.assertEqual(len(lines), 3)
        self.assertNotIn('EDDF', filtered)

    def test_filter_without_countries_keeps_everything(self):
        self.assertEqual(OurAirportsClient.filter_countries(AIRPORTS_CSV, []), AIRPORTS_CSV)
