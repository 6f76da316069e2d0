# fleet/management/commands/recalculate_hobbs.py
"""
Django management command to rebuild aircraft Hobbs records from flight logs.

Usage:
    python manage.py recalculate_hobbs
    python manage.py recalculate_hobbs --aircraft YR-ABC
"""

from django.core.management.base import BaseCommand, CommandError

from fleet.models import Aircraft
from fleet.services import recalculate_aircraft_hobbs


class Command(BaseCommand):
    help = 'Rebuild aircraft Hobbs records from the latest flight log readings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--aircraft',
            type=str,
            help='Recalculate a single aircraft by call sign',
        )

    def handle(self, *args, **options):
        call_sign = options['aircraft']

        queryset = Aircraft.objects.all()
        if call_sign:
            queryset = queryset.filter(call_sign__iexact=call_sign)
            if not queryset.exists():
                raise CommandError(f'Aircraft {call_sign} not found')

        updated = 0
        missing = 0
        for aircraft in queryset:
            hobbs = recalculate_aircraft_hobbs(aircraft)
            if hobbs is None:
                missing += 1
                self.stdout.write(self.style.WARNING(f'⊘ {aircraft.call_sign}: no Hobbs readings'))
                continue
            updated += 1
            self.stdout.write(f'{aircraft.call_sign}: {hobbs.last_hobbs_reading} ({hobbs.last_hobbs_date})')

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('HOBBS RECALCULATION COMPLETE')
        self.stdout.write('=' * 60)
        self.stdout.write(self.style.SUCCESS(f'✓ Aircraft updated:   {updated}'))
        self.stdout.write(self.style.WARNING(f'⊘ Without readings:   {missing}'))
