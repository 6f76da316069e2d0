"""
Views for the accounts app.

User management, the current user's profile, role listing and the role
capability matrix.
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .filters import UserFilter
from .models import Role
from .permissions import HasAnyRole, IsAdminRole, IsSuperAdmin
from .serializers import (
    CurrentUserSerializer,
    RoleCapabilitiesUpdateSerializer,
    RoleSerializer,
    UpgradeRoleSerializer,
    UserSerializer,
)
from .services import (
    MANAGEMENT_ROLES,
    get_role_capabilities,
    update_role_capabilities,
    upgrade_prospect,
)

logger = logging.getLogger(__name__)

User = get_user_model()


# =============================================================================
# USER VIEWSET
# =============================================================================

class UserViewSet(viewsets.ModelViewSet):
    """
    API endpoint for users.

    Supports:
    - List / create / retrieve / update / delete (admin roles)
    - Filtering by role and profile status
    - Search by name, e-mail, personal number and licence number
    - ``me`` for the authenticated user's own profile and capabilities
    - ``upgrade-role`` to turn a prospect into a student, pilot or instructor
    """
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = UserFilter

    search_fields = [
        'first_name',
        'last_name',
        'email',
        'profile__personal_number',
        'profile__license_number',
    ]
    ordering_fields = ['last_name', 'first_name', 'email', 'date_joined']
    ordering = ['last_name', 'first_name']

    # Roles allowed to upgrade prospects
    allowed_roles = MANAGEMENT_ROLES + (Role.INSTRUCTOR,)

    def get_queryset(self):
        return User.objects.select_related('profile').distinct()

    def get_permissions(self):
        if self.action == 'me':
            return [IsAuthenticated()]
        if self.action == 'upgrade_role':
            return [HasAnyRole()]
        return super().get_permissions()

    @action(detail=False, methods=['get'])
    def me(self, request):
        """
        GET /api/v1/users/me/

        The current user's profile, roles and granted capability names.
        """
        serializer = CurrentUserSerializer(request.user, context={'request': request})
        return Response(serializer.data)

    @action(detail=True, methods=['post'], url_path='upgrade-role')
    def upgrade_role(self, request, pk=None):
        """
        POST /api/v1/users/{id}/upgrade-role/

        Replace the PROSPECT role with STUDENT, PILOT or INSTRUCTOR.
        """
        user = get_object_or_404(User, pk=pk)
        serializer = UpgradeRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        new_role = data.pop('new_role')

        try:
            upgrade_prospect(user, new_role, data, upgraded_by=request.user)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"User {user.email} upgraded from PROSPECT to {new_role} by {request.user}")
        return Response({
            'message': f"User role upgraded from PROSPECT to {new_role} successfully",
            'user': UserSerializer(user, context={'request': request}).data,
        })


# =============================================================================
# ROLE VIEWSET
# =============================================================================

class RoleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for roles and their capability matrix.

    GET  /api/v1/roles/
    GET  /api/v1/roles/{id}/capabilities/   grouped by resource type and name
    PUT  /api/v1/roles/{id}/capabilities/   {"capabilities": [{"id": 1, "is_granted": true}]}
    """
    serializer_class = RoleSerializer
    permission_classes = [IsAdminRole]
    pagination_class = None

    def get_queryset(self):
        return Role.objects.annotate(user_count=Count('user_roles')).order_by('name')

    def get_permissions(self):
        if self.action == 'capabilities':
            return [IsSuperAdmin()]
        return super().get_permissions()

    @action(detail=True, methods=['get', 'put'])
    def capabilities(self, request, pk=None):
        role = self.get_object()

        if request.method == 'GET':
            return Response({
                'role': RoleSerializer(role).data,
                'capabilities': get_role_capabilities(role),
            })

        if not isinstance(request.data.get('capabilities'), list):
            return Response(
                {'error': 'Invalid capabilities data'},
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = RoleCapabilitiesUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = update_role_capabilities(
            role,
            serializer.validated_data['capabilities'],
            granted_by=request.user,
        )
        logger.info(f"{request.user} updated capabilities of role {role.name}: {result['message']}")
        return Response(result)
