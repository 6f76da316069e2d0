from django.apps import AppConfig


class AirfieldsConfig(AppConfig):
    """Airfields, OurAirports reference data and operational areas."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'airfields'
    verbose_name = 'Airfields'
