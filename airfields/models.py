"""
Airfield models for the flight school backend.

- Airfield: a place flights depart from or arrive at
- ReferenceAirport: a row of the OurAirports public dataset
- OperationalArea: a continent plus the countries the school operates in
"""

from django.conf import settings
from django.db import models


# =============================================================================
# AIRFIELD
# =============================================================================

class Airfield(models.Model):

    TYPE_CHOICES = [
        ('AIRPORT', 'Airport'),
        ('LARGE_AIRPORT', 'Large Airport'),
        ('MEDIUM_AIRPORT', 'Medium Airport'),
        ('SMALL_AIRPORT', 'Small Airport'),
        ('HELIPORT', 'Heliport'),
        ('SEAPLANE_BASE', 'Seaplane Base'),
        ('BALLOONPORT', 'Balloonport'),
        ('GLIDER_PORT', 'Glider Port'),
        ('ULTRALIGHT_FIELD', 'Ultralight Field'),
        ('AIRSTRIP', 'Airstrip'),
        ('UNKNOWN', 'Unknown'),
    ]

    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
    ]

    SOURCE_CHOICES = [
        ('manual', 'Manual'),
        ('imported', 'Imported'),
        ('historical', 'Historical'),
    ]

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, unique=True, help_text="ICAO, IATA or local code")
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='AIRPORT')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='ACTIVE', db_index=True)

    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True, db_index=True)
    latitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    longitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    elevation = models.IntegerField(null=True, blank=True, help_text="Elevation in feet")

    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    website = models.URLField(max_length=500, blank=True)

    is_base = models.BooleanField(default=False, help_text="School operates from this airfield")
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='manual')
    reference_airport = models.ForeignKey(
        'ReferenceAirport',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='airfields'
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'airfields'
        ordering = ['name']
        indexes = [
            models.Index(fields=['type', 'status'], name='airfields_type_status_idx'),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"


# =============================================================================
# REFERENCE AIRPORT (OurAirports)
# =============================================================================

class ReferenceAirport(models.Model):
    """One row of OurAirports' airports.csv."""

    ourairports_id = models.BigIntegerField(unique=True)
    ident = models.CharField(max_length=20, db_index=True)
    type = models.CharField(max_length=30, db_index=True)
    name = models.CharField(max_length=255)
    latitude_deg = models.DecimalField(max_digits=12, decimal_places=8, null=True, blank=True)
    longitude_deg = models.DecimalField(max_digits=12, decimal_places=8, null=True, blank=True)
    elevation_ft = models.IntegerField(null=True, blank=True)
    continent = models.CharField(max_length=2, blank=True)
    iso_country = models.CharField(max_length=2, blank=True, db_index=True)
    iso_region = models.CharField(max_length=10, blank=True)
    municipality = models.CharField(max_length=255, blank=True)
    gps_code = models.CharField(max_length=10, blank=True)
    iata_code = models.CharField(max_length=10, blank=True)
    local_code = models.CharField(max_length=10, blank=True)
    icao_code = models.CharField(max_length=10, blank=True)
    home_link = models.URLField(max_length=500, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reference_airports'
        ordering = ['name']

    def __str__(self):
        return f"{self.ident} - {self.name}"

    @property
    def codes(self):
        """Non-empty codes in priority order."""
        return [c for c in (self.icao_code, self.iata_code, self.gps_code, self.local_code) if c]


# =============================================================================
# OPERATIONAL AREA
# =============================================================================

class OperationalArea(models.Model):

    CONTINENT_CHOICES = [
        ('AF', 'Africa'),
        ('AN', 'Antarctica'),
        ('AS', 'Asia'),
        ('EU', 'Europe'),
        ('NA', 'North America'),
        ('OC', 'Oceania'),
        ('SA', 'South America'),
    ]

    continent = models.CharField(max_length=2, choices=CONTINENT_CHOICES)
    countries = models.JSONField(default=list, help_text="ISO 3166-1 alpha-2 country codes")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'operational_areas'
        ordering = ['continent', 'created_at']

    def __str__(self):
        return f"{self.get_continent_display()}: {', '.join(self.countries)}"
