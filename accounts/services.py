"""
Accounts services: role lookups, capability checks and user upserts.

Every other app asks this module who a user is (``get_role_names``,
``has_role``) and what they may do (``has_capability`` and friends).
Django superusers are treated as SUPER_ADMIN regardless of assigned roles.
"""

import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Set

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F

from services import ReferenceDataError

from .models import Capability, PilotProfile, Role, RoleCapability, UserRole

logger = logging.getLogger(__name__)

User = get_user_model()

ADMIN_ROLES = (Role.SUPER_ADMIN, Role.ADMIN)
MANAGEMENT_ROLES = (Role.SUPER_ADMIN, Role.ADMIN, Role.BASE_MANAGER)
UPGRADE_TARGET_ROLES = (Role.STUDENT, Role.PILOT, Role.INSTRUCTOR)

PROFILE_FIELDS = (
    'personal_number', 'phone', 'date_of_birth', 'address', 'city', 'state',
    'zip_code', 'country', 'status', 'total_flight_hours', 'license_number',
    'medical_class', 'instructor_rating',
)


# =============================================================================
# ROLES
# =============================================================================

def get_role_names(user) -> Set[str]:
    """Names of every role the user holds."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return set()

    cached = getattr(user, '_role_names_cache', None)
    if cached is not None:
        return cached

    names = set(
        UserRole.objects.filter(user=user).values_list('role__name', flat=True)
    )
    if user.is_superuser:
        names.add(Role.SUPER_ADMIN)

    user._role_names_cache = names
    return names


def has_role(user, *role_names: str) -> bool:
    return bool(get_role_names(user) & set(role_names))


def is_super_admin_role(user) -> bool:
    return has_role(user, Role.SUPER_ADMIN)


def clear_role_cache(user) -> None:
    if hasattr(user, '_role_names_cache'):
        del user._role_names_cache


def assign_role(user, role_name: str, assigned_by=None) -> UserRole:
    """
    Give ``user`` the named role, creating the assignment if needed.

    Raises:
        ReferenceDataError: If the role name is unknown
    """
    role_name = (role_name or '').strip().upper()
    try:
        role = Role.objects.get(name=role_name)
    except Role.DoesNotExist:
        if role_name not in dict(Role.NAME_CHOICES):
            raise ReferenceDataError(f"Unknown role: {role_name}")
        role = Role.objects.create(name=role_name)

    user_role, created = UserRole.objects.get_or_create(
        user=user,
        role=role,
        defaults={'assigned_by': assigned_by}
    )
    if created:
        logger.info(f"Assigned role {role_name} to {user.email or user.username}")
    clear_role_cache(user)
    return user_role


@transaction.atomic
def upgrade_prospect(user, new_role: str, validation_data: Dict[str, Any], upgraded_by=None) -> UserRole:
    """
    Replace the PROSPECT role of ``user`` with a flying role.

    Raises:
        ValueError: If the user is not a prospect or the role is not an upgrade target
    """
    new_role = (new_role or '').upper()
    if new_role not in UPGRADE_TARGET_ROLES:
        raise ValueError(f"Invalid role specified: {new_role}")
    if Role.PROSPECT not in get_role_names(user):
        raise ValueError("User is not a prospect and cannot be upgraded")

    profile, _ = PilotProfile.objects.get_or_create(user=user)
    for field_name in ('license_number', 'medical_class', 'instructor_rating', 'total_flight_hours'):
        value = (validation_data or {}).get(field_name)
        if value not in (None, ''):
            setattr(profile, field_name, value)
    profile.save()

    UserRole.objects.filter(user=user, role__name=Role.PROSPECT).delete()
    clear_role_cache(user)
    return assign_role(user, new_role, assigned_by=upgraded_by)


# =============================================================================
# CAPABILITIES
# =============================================================================

def get_user_capabilities(user) -> List[Capability]:
    """Capabilities granted to any of the user's roles (all of them for super admins)."""
    if is_super_admin_role(user):
        return list(Capability.objects.all())

    return list(
        Capability.objects.filter(
            role_capabilities__role__name__in=get_role_names(user),
            role_capabilities__is_granted=True,
        ).distinct()
    )


def has_capability(user, capability_name: str) -> bool:
    if is_super_admin_role(user):
        return True
    roles = get_role_names(user)
    if not roles:
        return False
    return RoleCapability.objects.filter(
        role__name__in=roles,
        capability__name=capability_name,
        is_granted=True,
    ).exists()


def can_access_menu(user, menu_path: str) -> bool:
    return has_capability(user, f"{menu_path.replace('/', '', 1)}.view")


def can_perform_action(user, resource_name: str, action: str) -> bool:
    return has_capability(user, f"{resource_name}.{action}")


def can_access_data(user, data_type: str, action: str) -> bool:
    return has_capability(user, f"data.{data_type}.{action}")


def can_access_api(user, api_name: str, action: str) -> bool:
    return has_capability(user, f"api.{api_name}.{action}")


def is_admin(user) -> bool:
    return has_capability(user, 'admin.access')


def is_super_admin(user) -> bool:
    return has_capability(user, 'super_admin.access')


def get_role_capabilities(role: Role) -> Dict[str, List[Dict[str, Any]]]:
    """
    All capabilities with the role's grant state, grouped by
    ``<resource_type>.<resource_name>``.
    """
    granted = dict(
        RoleCapability.objects.filter(role=role).values_list('capability_id', 'is_granted')
    )

    grouped: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for capability in Capability.objects.all():
        key = f"{capability.resource_type}.{capability.resource_name}"
        grouped.setdefault(key, []).append({
            'id': capability.id,
            'name': capability.name,
            'resource_type': capability.resource_type,
            'resource_name': capability.resource_name,
            'action': capability.action,
            'description': capability.description,
            'is_granted': granted.get(capability.id, False),
        })
    return grouped


def update_role_capabilities(role: Role, updates: Iterable[Dict[str, Any]], granted_by=None) -> Dict[str, Any]:
    """
    Grant or revoke capabilities for a role.

    Each update is ``{'id': <capability id>, 'is_granted': bool}``. Updates
    are applied one by one so a bad id does not block the others.
    """
    results = []
    for update in updates:
        capability_id = update.get('id')
        is_granted = bool(update.get('is_granted', update.get('isGranted', False)))
        try:
            capability = Capability.objects.get(pk=capability_id)
            RoleCapability.objects.update_or_create(
                role=role,
                capability=capability,
                defaults={'is_granted': is_granted, 'granted_by': granted_by},
            )
            results.append({'id': capability_id, 'success': True, 'is_granted': is_granted})
        except (Capability.DoesNotExist, ValueError, TypeError) as e:
            logger.warning(f"Capability update failed for role {role.name}, id {capability_id}: {str(e)}")
            results.append({'id': capability_id, 'success': False, 'error': 'Capability not found'})

    success_count = sum(1 for r in results if r['success'])
    return {
        'message': f"Updated {success_count} capabilities for role {role.name}",
        'results': results,
        'success_count': success_count,
        'failure_count': len(results) - success_count,
    }


# =============================================================================
# USER UPSERT
# =============================================================================

def _clean_profile_value(field_name: str, value):
    if field_name == 'total_flight_hours':
        if value in (None, ''):
            return Decimal('0.00')
        try:
            return Decimal(str(value).replace(',', ''))
        except InvalidOperation:
            raise ValueError(f"Invalid total flight hours: {value}")
    if field_name == 'date_of_birth':
        return value or None
    if field_name == 'status':
        return str(value).upper() if value else 'ACTIVE'
    if value is None:
        return ''
    return value


@transaction.atomic
def upsert_user_from_row(data: Dict[str, Any], created_by=None):
    """
    Create or update a user and profile keyed by e-mail.

    ``data`` holds ``email``, ``first_name``, ``last_name``, any profile
    field, an optional ``role`` (default PILOT, applied to new users only)
    and an optional ``password``. New users without a password get an
    unusable one.

    Returns:
        Tuple of (user, created)
    """
    email = (data.get('email') or '').strip().lower()
    if not email:
        raise ValueError("Email is required")

    user = User.objects.filter(email__iexact=email).first()
    created = user is None

    if created:
        user = User(username=email[:150], email=email)
        password = data.get('password')
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

    user.first_name = data.get('first_name') or user.first_name
    user.last_name = data.get('last_name') or user.last_name
    user.save()

    profile, _ = PilotProfile.objects.get_or_create(
        user=user,
        defaults={'created_by': created_by}
    )
    for field_name in PROFILE_FIELDS:
        if field_name in data:
            setattr(profile, field_name, _clean_profile_value(field_name, data[field_name]))
    profile.full_clean(exclude=['user', 'created_by'])
    profile.save()

    if created:
        assign_role(user, data.get('role') or Role.PILOT, assigned_by=created_by)

    return user, created


def get_pilot_profile(user) -> PilotProfile:
    profile, _ = PilotProfile.objects.get_or_create(user=user)
    return profile


def add_flight_hours(user, hours) -> None:
    """Add hours to a pilot's running total; negative values remove them."""
    hours = Decimal(str(hours or 0))
    if not hours:
        return
    profile = get_pilot_profile(user)
    PilotProfile.objects.filter(pk=profile.pk).update(
        total_flight_hours=F('total_flight_hours') + hours
    )
