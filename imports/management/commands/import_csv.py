# imports/management/commands/import_csv.py
"""
Django management command to import a CSV file through the import pipeline.

Usage:
    python manage.py import_csv flight-logs logs.csv
    python manage.py import_csv users staff.csv --user admin@school.ro
    python manage.py import_csv fleet aircraft.csv --force

The same services back POST /api/v1/imports/{data_type}/, so batches,
row errors and quality scores look the same whichever way a file came in.
"""

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from imports.importers import DATA_TYPE_SLUGS, compute_file_hash, find_previous_import, run_import


class Command(BaseCommand):
    help = 'Import a CSV file (flight-logs, users, fleet, icao-types, reference-airports)'

    def add_arguments(self, parser):
        parser.add_argument(
            'data_type',
            type=str,
            choices=sorted(DATA_TYPE_SLUGS),
            help='Dataset contained in the file',
        )
        parser.add_argument(
            'csv_file',
            type=str,
            help='Path to CSV file',
        )
        parser.add_argument(
            '--user',
            type=str,
            help='E-mail of the user recorded as the importer',
        )
        parser.add_argument(
            '--force',
            action='store_true',
            help='Import even if the same file was already imported',
        )
        parser.add_argument(
            '--notes',
            type=str,
            default='',
            help='Free text stored on the import batch',
        )

    def handle(self, *args, **options):
        csv_path = options['csv_file']
        data_type = DATA_TYPE_SLUGS[options['data_type']]

        if not os.path.exists(csv_path):
            raise CommandError(f'CSV file not found: {csv_path}')

        user = None
        if options['user']:
            User = get_user_model()
            user = User.objects.filter(email__iexact=options['user']).first()
            if user is None:
                raise CommandError(f"User {options['user']} not found")

        with open(csv_path, 'rb') as f:
            content = f.read()

        previous = find_previous_import(data_type, compute_file_hash(content))
        if previous and not options['force']:
            raise CommandError(
                f'File already imported in batch {previous.batch_id} '
                f'on {previous.completed_at:%Y-%m-%d %H:%M}. Use --force to import it again.'
            )

        self.stdout.write(f'Importing {csv_path} as {data_type}...')
        results = run_import(
            data_type,
            content,
            file_name=os.path.basename(csv_path),
            user=user,
            notes=options['notes'],
        )

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('IMPORT COMPLETE' if results['status'] == 'completed' else 'IMPORT FAILED')
        self.stdout.write('=' * 60)
        self.stdout.write(f"Batch:            {results['batch_id']}")
        self.stdout.write(f"Rows:             {results['records_total']}")
        self.stdout.write(self.style.SUCCESS(f"✓ Created:        {results['records_created']}"))
        self.stdout.write(self.style.SUCCESS(f"✓ Updated:        {results['records_updated']}"))
        self.stdout.write(self.style.WARNING(f"⊘ Skipped:        {results['records_skipped']}"))
        if results['records_failed']:
            self.stdout.write(self.style.ERROR(f"✗ Failed:         {results['records_failed']}"))
        self.stdout.write(f"Quality score:    {results['quality_score']}")

        if results['status'] == 'failed':
            raise CommandError(results['error_message'] or 'Import failed')

        if results['errors']:
            self.stdout.write('\nFirst errors:')
            for error in results['errors']:
                self.stdout.write(self.style.ERROR(f'  {error}'))

        if results['warnings']:
            self.stdout.write('\nFirst warnings:')
            for warning in results['warnings']:
                self.stdout.write(self.style.WARNING(f'  {warning}'))
