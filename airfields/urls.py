"""
URL configuration for airfields app.

Endpoints (included at /api/v1/):
    /airfields/reference/                     - OurAirports catalogue (GET)
    /airfields/reference/{id}/import/         - Create an airfield from a reference airport (POST)
    /airfields/                               - Airfield list/create
    /airfields/{id}/                          - Airfield detail/update/delete
    /operational-areas/                       - Operational area list/create
    /operational-areas/{id}/                  - Operational area detail/delete
    /operational-areas/import-airfields/      - Bulk airfield creation for countries (POST)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import AirfieldViewSet, OperationalAreaViewSet, ReferenceAirportViewSet

router = SimpleRouter()
# Registered before airfields so 'reference' is not captured as an airfield id
router.register(r'airfields/reference', ReferenceAirportViewSet, basename='reference-airport')
router.register(r'airfields', AirfieldViewSet, basename='airfield')
router.register(r'operational-areas', OperationalAreaViewSet, basename='operational-area')

urlpatterns = [
    path('', include(router.urls)),
]
