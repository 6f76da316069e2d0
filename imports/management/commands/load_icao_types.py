# imports/management/commands/load_icao_types.py
"""
Django management command to seed ICAO reference types from a JSON dataset.

Usage:
    python manage.py load_icao_types icao_aircraft_types.json
    python manage.py load_icao_types extracted_types.json --batch-size 500

Accepts a list of entries, or an object holding that list under
``aircraft``, ``types`` or ``data``. Each entry may use the comprehensive
(``icaoTypeDesignator``) or the extracted (``typeDesignator``) shape.
"""

import json
import os

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from fleet.services import load_icao_entries
from imports.importers import compute_file_hash
from imports.models import ImportBatch
from imports.services import quality_score

LIST_KEYS = ('aircraft', 'types', 'data')


def extract_entries(payload):
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise CommandError('Expected a JSON list of ICAO type entries')


class Command(BaseCommand):
    help = 'Load ICAO aircraft type designators from a JSON file'

    def add_arguments(self, parser):
        parser.add_argument('json_file', type=str, help='Path to JSON file')
        parser.add_argument(
            '--batch-size',
            type=int,
            default=100,
            help='Entries committed per transaction (default: 100)',
        )

    def handle(self, *args, **options):
        json_path = options['json_file']
        if not os.path.exists(json_path):
            raise CommandError(f'JSON file not found: {json_path}')

        with open(json_path, 'rb') as f:
            raw = f.read()

        try:
            entries = extract_entries(json.loads(raw.decode('utf-8-sig')))
        except (UnicodeDecodeError, ValueError) as e:
            raise CommandError(f'Invalid JSON file: {e}')

        batch = ImportBatch.objects.create(
            data_type='ICAO_TYPES',
            import_type='JSON',
            file_name=os.path.basename(json_path),
            file_size=len(raw),
            file_hash=compute_file_hash(raw),
            records_total=len(entries),
        )
        batch.mark_as_processing()

        self.stdout.write(f'Loading {len(entries)} ICAO type entries from {json_path}...')
        try:
            summary = load_icao_entries(entries, batch_size=options['batch_size'])
        except Exception as e:
            batch.mark_as_failed(str(e))
            raise CommandError(f'ICAO type load failed: {e}')

        batch.records_processed = len(entries)
        batch.records_created = summary['created']
        batch.records_updated = summary['updated']
        batch.records_skipped = summary['unchanged']
        batch.records_failed = summary['errors']
        batch.has_errors = summary['errors'] > 0
        batch.quality_score = quality_score(len(entries), summary['errors'])
        batch.status = 'completed'
        batch.completed_at = timezone.now()
        batch.save()

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('ICAO TYPES LOADED')
        self.stdout.write('=' * 60)
        self.stdout.write(self.style.SUCCESS(f"✓ Created:    {summary['created']}"))
        self.stdout.write(self.style.SUCCESS(f"✓ Updated:    {summary['updated']}"))
        self.stdout.write(self.style.WARNING(f"⊘ Unchanged:  {summary['unchanged']}"))
        if summary['errors']:
            self.stdout.write(self.style.ERROR(f"✗ Invalid:    {summary['errors']}"))
