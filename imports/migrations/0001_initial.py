import uuid

import django.core.validators
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
            name='ImportBatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_id', models.UUIDField(db_index=True, default=uuid.uuid4, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('data_type', models.CharField(choices=[('FLIGHT_LOGS', 'Flight Logs'), ('USERS', 'Users'), ('FLEET', 'Fleet'), ('ICAO_TYPES', 'ICAO Reference Types'), ('REFERENCE_AIRPORTS', 'Reference Airports')], db_index=True, help_text='Dataset being imported', max_length=20)),
                ('import_type', models.CharField(choices=[('CSV', 'CSV Import'), ('JSON', 'JSON Dataset'), ('API', 'API Integration')], default='CSV', help_text='Source format of the import', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('file_name', models.CharField(blank=True, max_length=255)),
                ('file_size', models.BigIntegerField(blank=True, help_text='File size in bytes', null=True)),
                ('file_hash', models.CharField(blank=True, db_index=True, help_text='SHA256 hash for duplicate detection', max_length=64)),
                ('records_total', models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('records_processed', models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('records_created', models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('records_updated', models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('records_skipped', models.IntegerField(default=0, help_text='Rows skipped as duplicates or unchanged', validators=[django.core.validators.MinValueValidator(0)])),
                ('records_failed', models.IntegerField(default=0, help_text='Rows rejected with an error', validators=[django.core.validators.MinValueValidator(0)])),
                ('quality_score', models.IntegerField(blank=True, help_text='Overall data quality score (0-100)', null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('has_errors', models.BooleanField(default=False)),
                ('error_message', models.TextField(blank=True, help_text='Batch-level error if the import failed')),
                ('validation_results', models.JSONField(blank=True, default=dict, help_text='Warnings collected while processing')),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who initiated the import', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='import_batches', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'import batches',
                'db_table': 'import_batches',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['data_type', '-created_at'], name='import_batch_type_created_idx'), models.Index(fields=['status', '-created_at'], name='import_batch_status_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='ImportRowError',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('error_type', models.CharField(choices=[('VALIDATION', 'Validation Error'), ('PROCESSING', 'Processing Error'), ('DUPLICATE', 'Duplicate Record'), ('MISSING_DATA', 'Missing Required Data'), ('FORMAT', 'Format Error'), ('REFERENCE', 'Unknown Reference'), ('BUSINESS_LOGIC', 'Business Logic Error')], max_length=20)),
                ('row_number', models.IntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('field_name', models.CharField(blank=True, max_length=100)),
                ('error_message', models.TextField()),
                ('raw_data', models.JSONField(default=dict, help_text='Original row data that caused the error')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('import_batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='errors', to='imports.importbatch')),
            ],
            options={
                'db_table': 'import_row_errors',
                'ordering': ['row_number'],
                'indexes': [models.Index(fields=['import_batch', 'error_type'], name='import_error_batch_type_idx')],
            },
        ),
    ]
