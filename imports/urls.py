"""
URL configuration for imports app.

Endpoints:
    GET  /api/v1/imports/status/                      - Record counts and latest batches
    GET  /api/v1/imports/batches/                     - Import batch history
    GET  /api/v1/imports/batches/{batch_id}/          - Batch detail
    GET  /api/v1/imports/batches/{batch_id}/progress/ - Progress polling
    GET  /api/v1/imports/batches/{batch_id}/errors/   - Row errors
    POST /api/v1/imports/batches/{batch_id}/cancel/   - Cancel a pending batch
    POST /api/v1/imports/{data_type}/                 - Upload and process a CSV file
    GET  /api/v1/imports/{data_type}/template/        - Sample CSV
    POST /api/v1/imports/{data_type}/validate/        - Structure check only

data_type is one of: flight-logs, users, fleet, icao-types, reference-airports
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'batches', views.ImportBatchViewSet, basename='import-batch')

urlpatterns = [
    # Import Status
    path('status/', views.import_status, name='import-status'),

    # Batch monitoring
    path('', include(router.urls)),

    # CSV Import per dataset
    path('<slug:data_type_slug>/template/', views.download_template, name='import-template'),
    path('<slug:data_type_slug>/validate/', views.validate_csv, name='import-validate'),
    path('<slug:data_type_slug>/', views.upload_csv, name='import-upload'),
]
