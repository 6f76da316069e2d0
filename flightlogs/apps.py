from django.apps import AppConfig


class FlightlogsConfig(AppConfig):
    """Flight logs, derived flight time and CSV export."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'flightlogs'
    verbose_name = 'Flight Logs'
