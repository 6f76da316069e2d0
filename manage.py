#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Flight School Specific Commands:
  python manage.py seed_roles                          # Create roles and default capabilities
  python manage.py import_csv flight-logs <file>       # Import a CSV dataset
  python manage.py load_icao_types <file.json>         # Seed ICAO aircraft types
  python manage.py sync_reference_airports             # Download OurAirports reference data
  python manage.py recalculate_hobbs                   # Rebuild aircraft Hobbs readings
"""

import os
import sys


def main():
    """Run administrative tasks."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'flightschool.settings')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
