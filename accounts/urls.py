"""
URL configuration for accounts app.

Endpoints (included at /api/v1/):
    /users/                       - User list/create (admin)
    /users/{id}/                  - User detail/update/delete (admin)
    /users/me/                    - Current user profile and capabilities
    /users/{id}/upgrade-role/     - Prospect upgrade
    /roles/                       - Role list
    /roles/{id}/capabilities/     - Role capability matrix (GET, PUT)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import RoleViewSet, UserViewSet

router = SimpleRouter()
router.register(r'users', UserViewSet, basename='user')
router.register(r'roles', RoleViewSet, basename='role')

urlpatterns = [
    path('', include(router.urls)),
]
