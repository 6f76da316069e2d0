"""
URL configuration for flightlogs app.

Included at /api/v1/flight-logs/:
    /                       - Flight log list/create
    /{id}/                  - Flight log detail/update/delete
    /export/                - CSV export (GET)
    /{id}/hobbs-check/      - Hobbs cross-check (GET)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import FlightLogViewSet

# SimpleRouter: a DefaultRouter API root would shadow the list route at ''
router = SimpleRouter()
router.register(r'', FlightLogViewSet, basename='flight-log')

urlpatterns = [
    path('', include(router.urls)),
]
