"""
Flight log model for the flight school backend.

One row per flight leg: who flew what from where to where, the clock and
Hobbs times, and the logbook hour categories derived from them.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from services.flight_time import DEFAULT_FLIGHT_TYPE, FLIGHT_TYPE_CHOICES


def hours_field(**kwargs):
    return models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        **kwargs
    )


class FlightLog(models.Model):

    date = models.DateField(db_index=True)
    pilot = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='flight_logs'
    )
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='instructed_flight_logs'
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='paid_flight_logs'
    )
    aircraft = models.ForeignKey(
        'fleet.Aircraft',
        on_delete=models.PROTECT,
        related_name='flight_logs'
    )
    departure_airfield = models.ForeignKey(
        'airfields.Airfield',
        on_delete=models.PROTECT,
        related_name='departures'
    )
    arrival_airfield = models.ForeignKey(
        'airfields.Airfield',
        on_delete=models.PROTECT,
        related_name='arrivals'
    )

    # Times
    departure_time = models.TimeField()
    arrival_time = models.TimeField()
    departure_hobbs = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    arrival_hobbs = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    flight_type = models.CharField(max_length=20, choices=FLIGHT_TYPE_CHOICES, default=DEFAULT_FLIGHT_TYPE, db_index=True)
    purpose = models.CharField(max_length=255, blank=True)
    remarks = models.TextField(blank=True)
    route = models.CharField(max_length=255, blank=True)
    conditions = models.CharField(max_length=100, blank=True)

    # Hour categories
    total_hours = hours_field()
    pilot_in_command = hours_field()
    second_in_command = hours_field()
    dual_received = hours_field()
    dual_given = hours_field()
    solo = hours_field()
    cross_country = hours_field()
    night = hours_field()
    instrument = hours_field()
    actual_instrument = hours_field()
    simulated_instrument = hours_field()

    day_landings = models.PositiveIntegerField(default=0)
    night_landings = models.PositiveIntegerField(default=0)
    oil_added = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True, help_text="Litres")
    fuel_added = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True, help_text="Litres")

    import_batch = models.ForeignKey(
        'imports.ImportBatch',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='flight_logs'
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
        db_table = 'flight_logs'
        ordering = ['-date', '-departure_time']
        indexes = [
            models.Index(fields=['pilot', 'date'], name='flight_logs_pilot_date_idx'),
            models.Index(fields=['aircraft', 'date'], name='flight_logs_aircraft_date_idx'),
        ]

    def __str__(self):
        return f"{self.date} {self.aircraft} {self.departure_airfield.code}-{self.arrival_airfield.code}"

    @property
    def is_cross_country(self):
        return self.departure_airfield_id != self.arrival_airfield_id
