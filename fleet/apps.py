from django.apps import AppConfig


class FleetConfig(AppConfig):
    """Aircraft registry, ICAO reference types and Hobbs tracking."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fleet'
    verbose_name = 'Fleet'
