# services/ourairports.py
"""
OurAirports reference data client for the flight school backend.
Downloads the public airports dataset used to seed reference airports.
"""

import csv
import io
import logging
from typing import Iterable, Optional

import requests
from django.conf import settings

from . import ExternalDatasetError

logger = logging.getLogger(__name__)


class OurAirportsClient:
    """
    Client for the OurAirports open data files.
    Handles download, decoding and country filtering of airports.csv.
    """

    AIRPORTS_FILE = 'airports.csv'

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.base_url = (base_url or getattr(settings, 'OURAIRPORTS_BASE_URL', '')).rstrip('/')
        if not self.base_url:
            logger.warning("OURAIRPORTS_BASE_URL not configured")
        self.timeout = timeout or getattr(settings, 'OURAIRPORTS_TIMEOUT', 60)

    @property
    def airports_url(self) -> str:
        return f"{self.base_url}/{self.AIRPORTS_FILE}"

    def download_airports_csv(self) -> str:
        """
        Download airports.csv and return its text.

        Raises:
            ExternalDatasetError: On network failure or an empty response
        """
        if not self.base_url:
            raise ExternalDatasetError("OurAirports base URL is not configured")

        try:
            response = requests.get(self.airports_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Network error downloading {self.airports_url}: {str(e)}")
            raise ExternalDatasetError(f"Failed to download airports dataset: {str(e)}") from e

        response.encoding = response.encoding or 'utf-8'
        content = response.text
        if not content.strip():
            raise ExternalDatasetError("Airports dataset is empty")

        logger.info(f"Downloaded airports dataset ({len(content)} bytes) from {self.airports_url}")
        return content

    @staticmethod
    def filter_countries(content: str, countries: Iterable[str]) -> str:
        """Keep only the rows whose iso_country is in ``countries``."""
        wanted = {c.strip().upper() for c in countries if c and c.strip()}
        if not wanted:
            return content

        reader = csv.DictReader(io.StringIO(content))
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=reader.fieldnames, lineterminator='\n')
        writer.writeheader()
        kept = 0
        for row in reader:
            if (row.get('iso_country') or '').upper() in wanted:
                writer.writerow(row)
                kept += 1

        logger.info(f"Filtered airports dataset to {kept} rows for {sorted(wanted)}")
        return output.getvalue()


# Module-level client instance
ourairports_client = OurAirportsClient()
