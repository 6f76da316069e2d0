# imports/management/commands/sync_reference_airports.py
"""
Django management command to refresh reference airports from OurAirports.

Usage:
    python manage.py sync_reference_airports
    python manage.py sync_reference_airports --countries RO,HU,BG
"""

from django.core.management.base import BaseCommand, CommandError

from imports.importers import run_import
from services import ExternalDatasetError
from services.ourairports import ourairports_client


class Command(BaseCommand):
    help = 'Download the OurAirports airports dataset and upsert reference airports'

    def add_arguments(self, parser):
        parser.add_argument(
            '--countries',
            type=str,
            default='',
            help='Comma separated ISO country codes to keep (default: all)',
        )

    def handle(self, *args, **options):
        countries = [c for c in options['countries'].split(',') if c.strip()]

        self.stdout.write(f'Downloading {ourairports_client.airports_url}...')
        try:
            content = ourairports_client.download_airports_csv()
        except ExternalDatasetError as e:
            raise CommandError(str(e))

        if countries:
            content = ourairports_client.filter_countries(content, countries)

        results = run_import(
            'REFERENCE_AIRPORTS',
            content,
            file_name=ourairports_client.AIRPORTS_FILE,
            import_type='API',
            notes=f"Countries: {', '.join(c.strip().upper() for c in countries)}" if countries else '',
        )

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('REFERENCE AIRPORTS SYNC COMPLETE')
        self.stdout.write('=' * 60)
        self.stdout.write(f"Batch:       {results['batch_id']}")
        self.stdout.write(self.style.SUCCESS(f"✓ Created:   {results['records_created']}"))
        self.stdout.write(self.style.SUCCESS(f"✓ Updated:   {results['records_updated']}"))
        if results['records_failed']:
            self.stdout.write(self.style.ERROR(f"✗ Failed:    {results['records_failed']}"))

        if results['status'] == 'failed':
            raise CommandError(results['error_message'] or 'Reference airport import failed')
