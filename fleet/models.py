"""
Fleet models for the flight school backend.

- IcaoReferenceType: ICAO aircraft type designators (reference data)
- Aircraft: the school's registered aircraft
- AircraftHobbs: the latest known Hobbs meter reading per aircraft
"""

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


def validate_year_of_manufacture(value):
    max_year = date.today().year + 1
    if value < 1900 or value > max_year:
        raise ValidationError(f"Year of manufacture must be between 1900 and {max_year}")


# =============================================================================
# ICAO REFERENCE TYPE
# =============================================================================

class IcaoReferenceType(models.Model):
    """An ICAO aircraft type designator entry (e.g. C172 / CESSNA / 172 Skyhawk)."""

    ENGINE_TYPE_CHOICES = [
        ('PISTON', 'Piston'),
        ('TURBOPROP', 'Turboprop'),
        ('TURBOFAN', 'Turbofan'),
        ('TURBOSHAFT', 'Turboshaft'),
        ('ELECTRIC', 'Electric'),
        ('HYBRID', 'Hybrid'),
    ]

    WTC_CHOICES = [
        ('LIGHT', 'Light'),
        ('MEDIUM', 'Medium'),
        ('HEAVY', 'Heavy'),
        ('SUPER', 'Super'),
    ]

    type_designator = models.CharField(max_length=10, db_index=True)
    manufacturer = models.CharField(max_length=255)
    model = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    engine_type = models.CharField(max_length=20, choices=ENGINE_TYPE_CHOICES, default='PISTON')
    engine_count = models.PositiveSmallIntegerField(default=1)
    wtc = models.CharField(max_length=10, choices=WTC_CHOICES, default='LIGHT', help_text="Wake turbulence category")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'icao_reference_types'
        ordering = ['type_designator', 'manufacturer', 'model']
        verbose_name = 'ICAO reference type'
        constraints = [
            models.UniqueConstraint(
                fields=['manufacturer', 'model', 'type_designator'],
                name='unique_icao_reference_type'
            ),
        ]

    def __str__(self):
        return f"{self.type_designator} - {self.manufacturer} {self.model}"


# =============================================================================
# AIRCRAFT
# =============================================================================

class Aircraft(models.Model):

    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('MAINTENANCE', 'Maintenance'),
        ('INACTIVE', 'Inactive'),
        ('RETIRED', 'Retired'),
    ]

    call_sign = models.CharField(max_length=20, unique=True, help_text="Registration, e.g. YR-ABC")
    serial_number = models.CharField(max_length=100, unique=True)
    year_of_manufacture = models.PositiveIntegerField(validators=[validate_year_of_manufacture])
    icao_reference_type = models.ForeignKey(
        IcaoReferenceType,
        on_delete=models.PROTECT,
        related_name='aircraft'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE', db_index=True)
    image_path = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'aircraft'
        ordering = ['call_sign']
        verbose_name_plural = 'aircraft'

    def __str__(self):
        return self.call_sign


# =============================================================================
# AIRCRAFT HOBBS
# =============================================================================

class AircraftHobbs(models.Model):
    """Latest Hobbs reading of an aircraft and the flight log it came from."""

    aircraft = models.OneToOneField(Aircraft, on_delete=models.CASCADE, related_name='hobbs')
    last_hobbs_reading = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    last_hobbs_date = models.DateField()
    last_flight_log = models.ForeignKey(
        'flightlogs.FlightLog',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'aircraft_hobbs'
        verbose_name_plural = 'aircraft hobbs'

    def __str__(self):
        return f"{self.aircraft.call_sign}: {self.last_hobbs_reading} ({self.last_hobbs_date})"
