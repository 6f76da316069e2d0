import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ReferenceAirport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ourairports_id', models.BigIntegerField(unique=True)),
                ('ident', models.CharField(db_index=True, max_length=20)),
                ('type', models.CharField(db_index=True, max_length=30)),
                ('name', models.CharField(max_length=255)),
                ('latitude_deg', models.DecimalField(blank=True, decimal_places=8, max_digits=12, null=True)),
                ('longitude_deg', models.DecimalField(blank=True, decimal_places=8, max_digits=12, null=True)),
                ('elevation_ft', models.IntegerField(blank=True, null=True)),
                ('continent', models.CharField(blank=True, max_length=2)),
                ('iso_country', models.CharField(blank=True, db_index=True, max_length=2)),
                ('iso_region', models.CharField(blank=True, max_length=10)),
                ('municipality', models.CharField(blank=True, max_length=255)),
                ('gps_code', models.CharField(blank=True, max_length=10)),
                ('iata_code', models.CharField(blank=True, max_length=10)),
                ('local_code', models.CharField(blank=True, max_length=10)),
                ('icao_code', models.CharField(blank=True, max_length=10)),
                ('home_link', models.URLField(blank=True, max_length=500)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'reference_airports',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='OperationalArea',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('continent', models.CharField(choices=[('AF', 'Africa'), ('AN', 'Antarctica'), ('AS', 'Asia'), ('EU', 'Europe'), ('NA', 'North America'), ('OC', 'Oceania'), ('SA', 'South America')], max_length=2)),
                ('countries', models.JSONField(default=list, help_text='ISO 3166-1 alpha-2 country codes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'operational_areas',
                'ordering': ['continent', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='Airfield',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('code', models.CharField(help_text='ICAO, IATA or local code', max_length=20, unique=True)),
                ('type', models.CharField(choices=[('AIRPORT', 'Airport'), ('LARGE_AIRPORT', 'Large Airport'), ('MEDIUM_AIRPORT', 'Medium Airport'), ('SMALL_AIRPORT', 'Small Airport'), ('HELIPORT', 'Heliport'), ('SEAPLANE_BASE', 'Seaplane Base'), ('BALLOONPORT', 'Balloonport'), ('GLIDER_PORT', 'Glider Port'), ('ULTRALIGHT_FIELD', 'Ultralight Field'), ('AIRSTRIP', 'Airstrip'), ('UNKNOWN', 'Unknown')], default='AIRPORT', max_length=20)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], db_index=True, default='ACTIVE', max_length=10)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('country', models.CharField(blank=True, db_index=True, max_length=100)),
                ('latitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('elevation', models.IntegerField(blank=True, help_text='Elevation in feet', null=True)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('website', models.URLField(blank=True, max_length=500)),
                ('is_base', models.BooleanField(default=False, help_text='School operates from this airfield')),
                ('source', models.CharField(choices=[('manual', 'Manual'), ('imported', 'Imported'), ('historical', 'Historical')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('reference_airport', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='airfields', to='airfields.referenceairport')),
            ],
            options={
                'db_table': 'airfields',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['type', 'status'], name='airfields_type_status_idx')],
            },
        ),
    ]
