"""
Accounts models for the flight school backend.

Users are Django's stock auth users. This module adds:
- PilotProfile: the operational profile of a person (licence, medical, hours)
- Role / UserRole: the seven school roles and their assignment
- Capability / RoleCapability: fine grained, role based permissions
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


# =============================================================================
# ROLES
# =============================================================================

class Role(models.Model):
    """A school role. Users may hold several roles at once."""

    SUPER_ADMIN = 'SUPER_ADMIN'
    ADMIN = 'ADMIN'
    BASE_MANAGER = 'BASE_MANAGER'
    INSTRUCTOR = 'INSTRUCTOR'
    PILOT = 'PILOT'
    STUDENT = 'STUDENT'
    PROSPECT = 'PROSPECT'

    NAME_CHOICES = [
        (SUPER_ADMIN, 'Super Admin'),
        (ADMIN, 'Admin'),
        (BASE_MANAGER, 'Base Manager'),
        (INSTRUCTOR, 'Instructor'),
        (PILOT, 'Pilot'),
        (STUDENT, 'Student'),
        (PROSPECT, 'Prospect'),
    ]

    name = models.CharField(max_length=20, choices=NAME_CHOICES, unique=True)
    description = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'roles'
        ordering = ['name']

    def __str__(self):
        return self.get_name_display()


class UserRole(models.Model):
    """Assignment of a role to a user."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='user_roles')
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_roles'
        constraints = [
            models.UniqueConstraint(fields=['user', 'role'], name='unique_user_role'),
        ]

    def __str__(self):
        return f"{self.user} - {self.role.name}"


# =============================================================================
# PILOT PROFILE
# =============================================================================

class PilotProfile(models.Model):
    """
    Operational profile attached one-to-one to an auth user.

    ``total_flight_hours`` is maintained by flight-log create, update and
    delete operations.
    """

    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
        ('SUSPENDED', 'Suspended'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )

    # Identity and contact
    personal_number = models.CharField(max_length=50, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE', db_index=True)

    # Aviation
    total_flight_hours = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Accumulated flight hours"
    )
    license_number = models.CharField(max_length=100, blank=True)
    medical_class = models.CharField(max_length=50, blank=True)
    instructor_rating = models.CharField(max_length=100, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pilot_profiles'
        ordering = ['user__last_name', 'user__first_name']

    def __str__(self):
        return self.user.get_full_name() or self.user.email or self.user.username


# =============================================================================
# CAPABILITIES
# =============================================================================

class Capability(models.Model):
    """
    A named permission.

    Names are dotted: ``<path>.view`` for menus, ``data.<type>.<action>``
    for data access, ``api.<name>.<action>`` for endpoints.
    """

    RESOURCE_TYPE_CHOICES = [
        ('menu', 'Menu'),
        ('data', 'Data'),
        ('api', 'API'),
        ('action', 'Action'),
        ('system', 'System'),
    ]

    name = models.CharField(max_length=150, unique=True)
    resource_type = models.CharField(max_length=20, choices=RESOURCE_TYPE_CHOICES, db_index=True)
    resource_name = models.CharField(max_length=100)
    action = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = 'capabilities'
        ordering = ['resource_type', 'resource_name', 'action']
        verbose_name_plural = 'capabilities'

    def __str__(self):
        return self.name


class RoleCapability(models.Model):
    """Grant (or explicit revocation) of a capability to a role."""

    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='role_capabilities')
    capability = models.ForeignKey(Capability, on_delete=models.CASCADE, related_name='role_capabilities')
    is_granted = models.BooleanField(default=True)
    granted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    granted_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'role_capabilities'
        verbose_name_plural = 'role capabilities'
        constraints = [
            models.UniqueConstraint(fields=['role', 'capability'], name='unique_role_capability'),
        ]

    def __str__(self):
        state = 'granted' if self.is_granted else 'revoked'
        return f"{self.role.name}: {self.capability.name} ({state})"
