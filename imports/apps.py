# ===== IMPORTS APP CONFIGURATION =====
"""
Django App Configuration for Imports
File: imports/apps.py

App Configuration:
- Manages import batch tracking and row error reporting
- Registers a system check for the upload size limit
"""

from django.apps import AppConfig


class ImportsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'imports'
    verbose_name = 'Data Import Management'

    def ready(self):
        """
        Register custom Django checks for import system validation.
        """
        from django.conf import settings
        from django.core.checks import Tags, Warning, register

        @register(Tags.compatibility)
        def check_imports_configuration(app_configs, **kwargs):
            errors = []

            max_size = getattr(settings, 'IMPORT_MAX_FILE_SIZE', None)
            if not max_size or max_size <= 0:
                errors.append(
                    Warning(
                        'IMPORT_MAX_FILE_SIZE is not a positive number of bytes',
                        hint='Set IMPORT_MAX_FILE_SIZE, e.g. 52428800 for 50MB',
                        obj='imports.serializers.CSVUploadSerializer',
                        id='imports.W001',
                    )
                )

            interval = getattr(settings, 'IMPORT_PROGRESS_INTERVAL', None)
            if not interval or interval <= 0:
                errors.append(
                    Warning(
                        'IMPORT_PROGRESS_INTERVAL must be at least 1',
                        hint='Progress is saved every IMPORT_PROGRESS_INTERVAL rows',
                        obj='imports.services.CSVImportService',
                        id='imports.W002',
                    )
                )

            return errors
