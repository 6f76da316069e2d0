"""
Django application configuration for the services app.

The services app holds the shared service layer: exceptions, pagination,
flight-time arithmetic and the OurAirports reference data client.
"""

from django.apps import AppConfig


class ServicesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'services'
    verbose_name = 'Services'
