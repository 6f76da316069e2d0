from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import fleet.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='IcaoReferenceType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type_designator', models.CharField(db_index=True, max_length=10)),
                ('manufacturer', models.CharField(max_length=255)),
                ('model', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('engine_type', models.CharField(choices=[('PISTON', 'Piston'), ('TURBOPROP', 'Turboprop'), ('TURBOFAN', 'Turbofan'), ('TURBOSHAFT', 'Turboshaft'), ('ELECTRIC', 'Electric'), ('HYBRID', 'Hybrid')], default='PISTON', max_length=20)),
                ('engine_count', models.PositiveSmallIntegerField(default=1)),
                ('wtc', models.CharField(choices=[('LIGHT', 'Light'), ('MEDIUM', 'Medium'), ('HEAVY', 'Heavy'), ('SUPER', 'Super')], default='LIGHT', help_text='Wake turbulence category', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'ICAO reference type',
                'db_table': 'icao_reference_types',
                'ordering': ['type_designator', 'manufacturer', 'model'],
                'constraints': [models.UniqueConstraint(fields=('manufacturer', 'model', 'type_designator'), name='unique_icao_reference_type')],
            },
        ),
        migrations.CreateModel(
            name='Aircraft',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('call_sign', models.CharField(help_text='Registration, e.g. YR-ABC', max_length=20, unique=True)),
                ('serial_number', models.CharField(max_length=100, unique=True)),
                ('year_of_manufacture', models.PositiveIntegerField(validators=[fleet.models.validate_year_of_manufacture])),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('MAINTENANCE', 'Maintenance'), ('INACTIVE', 'Inactive'), ('RETIRED', 'Retired')], db_index=True, default='ACTIVE', max_length=20)),
                ('image_path', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('icao_reference_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='aircraft', to='fleet.icaoreferencetype')),
            ],
            options={
                'verbose_name_plural': 'aircraft',
                'db_table': 'aircraft',
                'ordering': ['call_sign'],
            },
        ),
        migrations.CreateModel(
            name='AircraftHobbs',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_hobbs_reading', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('last_hobbs_date', models.DateField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('aircraft', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='hobbs', to='fleet.aircraft')),
            ],
            options={
                'verbose_name_plural': 'aircraft hobbs',
                'db_table': 'aircraft_hobbs',
            },
        ),
    ]
