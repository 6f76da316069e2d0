"""
Create the school roles and the default capability set.

Usage:
    python manage.py seed_roles
    python manage.py seed_roles --reset-grants
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import Capability, Role, RoleCapability

ROLE_DESCRIPTIONS = {
    Role.SUPER_ADMIN: 'Full system access',
    Role.ADMIN: 'School administration',
    Role.BASE_MANAGER: 'Manages a base and its fleet',
    Role.INSTRUCTOR: 'Flight instructor',
    Role.PILOT: 'Licensed pilot',
    Role.STUDENT: 'Student pilot',
    Role.PROSPECT: 'Prospective student',
}

# (name, resource_type, resource_name, action, description)
DEFAULT_CAPABILITIES = [
    ('dashboard.view', 'menu', 'dashboard', 'view', 'Dashboard menu'),
    ('flight-logs.view', 'menu', 'flight-logs', 'view', 'Flight logs menu'),
    ('fleet.view', 'menu', 'fleet', 'view', 'Fleet menu'),
    ('airfields.view', 'menu', 'airfields', 'view', 'Airfields menu'),
    ('users.view', 'menu', 'users', 'view', 'Users menu'),
    ('role-management.view', 'menu', 'role-management', 'view', 'Role management menu'),
    ('data.flight-logs.read', 'data', 'flight-logs', 'read', 'Read flight logs'),
    ('data.flight-logs.write', 'data', 'flight-logs', 'write', 'Create and edit flight logs'),
    ('data.flight-logs.export', 'data', 'flight-logs', 'export', 'Export flight logs'),
    ('data.users.read', 'data', 'users', 'read', 'Read users'),
    ('data.users.write', 'data', 'users', 'write', 'Create and edit users'),
    ('data.fleet.write', 'data', 'fleet', 'write', 'Create and edit aircraft'),
    ('api.imports.create', 'api', 'imports', 'create', 'Run CSV imports'),
    ('api.operational-areas.manage', 'api', 'operational-areas', 'manage', 'Manage operational areas'),
    ('admin.access', 'system', 'admin', 'access', 'Administrative access'),
    ('super_admin.access', 'system', 'super_admin', 'access', 'Super administrative access'),
]

FLYING_CAPABILITIES = ['dashboard.view', 'flight-logs.view', 'data.flight-logs.read', 'data.flight-logs.write']

DEFAULT_GRANTS = {
    Role.ADMIN: [name for name, *_ in DEFAULT_CAPABILITIES if name != 'super_admin.access'],
    Role.BASE_MANAGER: FLYING_CAPABILITIES + ['fleet.view', 'airfields.view', 'data.flight-logs.export', 'data.fleet.write'],
    Role.INSTRUCTOR: FLYING_CAPABILITIES + ['fleet.view', 'data.flight-logs.export'],
    Role.PILOT: FLYING_CAPABILITIES,
    Role.STUDENT: FLYING_CAPABILITIES,
    Role.PROSPECT: ['dashboard.view'],
}


class Command(BaseCommand):
    help = 'Create roles and the default capability set'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset-grants',
            action='store_true',
            help='Overwrite existing role grants with the defaults',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        reset = options['reset_grants']

        for name, _label in Role.NAME_CHOICES:
            role, created = Role.objects.get_or_create(
                name=name,
                defaults={'description': ROLE_DESCRIPTIONS.get(name, '')}
            )
            if created:
                self.stdout.write(f"Created role {name}")

        capabilities = {}
        for name, resource_type, resource_name, action, description in DEFAULT_CAPABILITIES:
            capability, _ = Capability.objects.update_or_create(
                name=name,
                defaults={
                    'resource_type': resource_type,
                    'resource_name': resource_name,
                    'action': action,
                    'description': description,
                }
            )
            capabilities[name] = capability

        grant_count = 0
        for role_name, capability_names in DEFAULT_GRANTS.items():
            role = Role.objects.get(name=role_name)
            for capability_name in capability_names:
                if reset:
                    RoleCapability.objects.update_or_create(
                        role=role,
                        capability=capabilities[capability_name],
                        defaults={'is_granted': True},
                    )
                    grant_count += 1
                else:
                    _, created = RoleCapability.objects.get_or_create(
                        role=role,
                        capability=capabilities[capability_name],
                        defaults={'is_granted': True},
                    )
                    grant_count += int(created)

        self.stdout.write("=" * 70)
        self.stdout.write(self.style.SUCCESS("ROLES SEEDED"))
        self.stdout.write("=" * 70)
        self.stdout.write(f"Roles: {Role.objects.count()}")
        self.stdout.write(f"Capabilities: {Capability.objects.count()}")
        self.stdout.write(f"Grants written: {grant_count}")
