"""
URL configuration for fleet app.

Included at /api/v1/fleet/:
    /aircraft/                          - Aircraft list/create
    /aircraft/{id}/                     - Aircraft detail/update/delete
    /aircraft/{id}/hobbs/               - Latest Hobbs reading (GET)
    /aircraft/{id}/recalculate-hobbs/   - Rebuild Hobbs from flight logs (POST)
    /icao-types/                        - ICAO reference types (GET)
    /icao-types/statistics/             - ICAO catalogue statistics (GET)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AircraftViewSet, IcaoReferenceTypeViewSet

router = DefaultRouter()
router.register(r'aircraft', AircraftViewSet, basename='aircraft')
router.register(r'icao-types', IcaoReferenceTypeViewSet, basename='icao-type')

urlpatterns = [
    path('', include(router.urls)),
]
