"""
URL configuration for the flightschool project.

All API endpoints are served under /api/v1/.
"""

import logging
import sys

from django.conf import settings
from django.contrib import admin
from django.db import connection
from django.http import JsonResponse
from django.urls import include, path
from django.utils import timezone
from django.views.decorators.cache import cache_control
from django.views.decorators.http import require_http_methods
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

logger = logging.getLogger(__name__)


# =============================================================================
# HEALTH CHECK ENDPOINT
# =============================================================================

@require_http_methods(["GET"])
@cache_control(no_cache=True, must_revalidate=True, no_store=True)
def health_check(request):
    """
    Health check endpoint for deployment monitoring.

    Returns:
        JSON response with system status and database connectivity
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "database": "connected",
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}",
            "timestamp": timezone.now().isoformat(),
        }, status=200)

    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JsonResponse({
            "status": "unhealthy",
            "database": "error",
            "error": str(e) if settings.DEBUG else "Database connection failed"
        }, status=503)


# =============================================================================
# API INFO ENDPOINT
# =============================================================================

@require_http_methods(["GET"])
def api_info(request):
    """API information endpoint listing the available endpoint groups."""
    return JsonResponse({
        "api_name": "Flight School Operations API",
        "version": "1.0",
        "endpoints": {
            "authentication": {
                "token_obtain": "/api/v1/auth/token/",
                "token_refresh": "/api/v1/auth/token/refresh/",
                "token_verify": "/api/v1/auth/token/verify/",
            },
            "accounts": {
                "users": "/api/v1/users/",
                "me": "/api/v1/users/me/",
                "roles": "/api/v1/roles/",
                "role_capabilities": "/api/v1/roles/{id}/capabilities/",
            },
            "fleet": {
                "aircraft": "/api/v1/fleet/aircraft/",
                "icao_types": "/api/v1/fleet/icao-types/",
            },
            "airfields": {
                "airfields": "/api/v1/airfields/",
                "reference": "/api/v1/airfields/reference/",
                "operational_areas": "/api/v1/operational-areas/",
            },
            "flight_logs": {
                "list_create": "/api/v1/flight-logs/",
                "export": "/api/v1/flight-logs/export/",
            },
            "imports": {
                "upload": "/api/v1/imports/{data_type}/",
                "template": "/api/v1/imports/{data_type}/template/",
                "batches": "/api/v1/imports/batches/",
                "status": "/api/v1/imports/status/",
            },
            "utilities": {
                "health": "/api/v1/health/",
            },
        },
    })


# =============================================================================
# MAIN URL PATTERNS
# =============================================================================

urlpatterns = [
    path('admin/', admin.site.urls),

    # Health and System Status
    path('api/v1/health/', health_check, name='health-check'),
    path('api/v1/info/', api_info, name='api-info'),
    path('api/v1/', api_info, name='api-root'),

    # Authentication Endpoints (JWT)
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/v1/auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Core Application Endpoints
    path('api/v1/', include('accounts.urls')),
    path('api/v1/', include('airfields.urls')),
    path('api/v1/fleet/', include('fleet.urls')),
    path('api/v1/flight-logs/', include('flightlogs.urls')),
    path('api/v1/imports/', include('imports.urls')),
]


# =============================================================================
# CUSTOM ERROR HANDLERS
# =============================================================================

def custom_404_handler(request, exception):
    """Custom 404 handler for API endpoints"""
    if request.path.startswith('/api/'):
        return JsonResponse({
            'error': 'API endpoint not found',
            'message': f'The requested endpoint {request.path} does not exist',
            'available_endpoints': '/api/v1/info/'
        }, status=404)

    from django.views.defaults import page_not_found
    return page_not_found(request, exception)


def custom_500_handler(request):
    """Custom 500 handler for API endpoints"""
    if request.path.startswith('/api/'):
        return JsonResponse({
            'error': 'Internal server error',
            'message': 'An unexpected error occurred',
        }, status=500)

    from django.views.defaults import server_error
    return server_error(request)


handler404 = custom_404_handler
handler500 = custom_500_handler
