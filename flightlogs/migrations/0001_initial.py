from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('airfields', '0001_initial'),
        ('fleet', '0001_initial'),
        ('imports', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FlightLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('departure_time', models.TimeField()),
                ('arrival_time', models.TimeField()),
                ('departure_hobbs', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('arrival_hobbs', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('flight_type', models.CharField(choices=[('INVOICED', 'Invoiced'), ('SCHOOL', 'School'), ('FERRY', 'Ferry'), ('CHARTER', 'Charter'), ('DEMO', 'Demo'), ('PROMO', 'Promo')], db_index=True, default='SCHOOL', max_length=20)),
                ('purpose', models.CharField(blank=True, max_length=255)),
                ('remarks', models.TextField(blank=True)),
                ('route', models.CharField(blank=True, max_length=255)),
                ('conditions', models.CharField(blank=True, max_length=100)),
                ('total_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('pilot_in_command', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('second_in_command', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('dual_received', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('dual_given', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('solo', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('cross_country', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('night', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('instrument', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('actual_instrument', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('simulated_instrument', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('day_landings', models.PositiveIntegerField(default=0)),
                ('night_landings', models.PositiveIntegerField(default=0)),
                ('oil_added', models.DecimalField(blank=True, decimal_places=2, help_text='Litres', max_digits=6, null=True)),
                ('fuel_added', models.DecimalField(blank=True, decimal_places=2, help_text='Litres', max_digits=7, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('aircraft', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='flight_logs', to='fleet.aircraft')),
                ('arrival_airfield', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='arrivals', to='airfields.airfield')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('departure_airfield', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='departures', to='airfields.airfield')),
                ('import_batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='flight_logs', to='imports.importbatch')),
                ('instructor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='instructed_flight_logs', to=settings.AUTH_USER_MODEL)),
                ('payer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paid_flight_logs', to=settings.AUTH_USER_MODEL)),
                ('pilot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='flight_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'flight_logs',
                'ordering': ['-date', '-departure_time'],
                'indexes': [models.Index(fields=['pilot', 'date'], name='flight_logs_pilot_date_idx'), models.Index(fields=['aircraft', 'date'], name='flight_logs_aircraft_date_idx')],
            },
        ),
    ]
