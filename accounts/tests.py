# ===== ACCOUNTS APP TEST SUITE =====
"""
Test suite for accounts app functionality
File: accounts/tests.py

Test Coverage:
- Role assignment and lookups, superuser handling
- Capability checks and role capability updates
- User upsert used by the users import
- Prospect upgrade
- User and role API endpoints
"""

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from services import ReferenceDataError

from .models import Capability, PilotProfile, Role, RoleCapability, UserRole
from .services import (
    add_flight_hours,
    assign_role,
    can_access_api,
    can_access_data,
    can_access_menu,
    can_perform_action,
    get_pilot_profile,
    get_role_capabilities,
    get_role_names,
    has_capability,
    has_role,
    is_admin,
    is_super_admin,
    update_role_capabilities,
    upgrade_prospect,
    upsert_user_from_row,
)

User = get_user_model()


def make_user(email, *roles, **extra):
    user = User.objects.create_user(username=email, email=email, password='testpass123', **extra)
    for role in roles:
        assign_role(user, role)
    return user


# =============================================================================
# ROLE SERVICE TESTS
# =============================================================================

class RoleServiceTest(TestCase):

    def test_roles_are_seeded_by_migration(self):
        names = set(Role.objects.values_list('name', flat=True))
        self.assertEqual(names, {name for name, _ in Role.NAME_CHOICES})

    def test_assign_role_is_idempotent(self):
        user = make_user('pilot@school.ro')
        assign_role(user, Role.PILOT)
        assign_role(user, 'pilot')

        self.assertEqual(UserRole.objects.filter(user=user).count(), 1)
        self.assertEqual(get_role_names(user), {Role.PILOT})

    def test_assign_unknown_role_raises(self):
        user = make_user('pilot@school.ro')
        with self.assertRaises(ReferenceDataError):
            assign_role(user, 'ASTRONAUT')

    def test_superuser_counts_as_super_admin(self):
        user = User.objects.create_superuser('root', 'root@school.ro', 'testpass123')
        self.assertTrue(has_role(user, Role.SUPER_ADMIN))

    def test_user_may_hold_several_roles(self):
        user = make_user('cfi@school.ro', Role.PILOT, Role.INSTRUCTOR)
        self.assertTrue(has_role(user, Role.INSTRUCTOR))
        self.assertTrue(has_role(user, Role.PILOT))
        self.assertFalse(has_role(user, Role.ADMIN))


class CapabilityServiceTest(TestCase):

    def setUp(self):
        self.capability = Capability.objects.create(
            name='data.flight-logs.export',
            resource_type='data',
            resource_name='flight-logs',
            action='export',
        )
        self.instructor_role = Role.objects.get(name=Role.INSTRUCTOR)

    def test_granted_capability(self):
        user = make_user('cfi@school.ro', Role.INSTRUCTOR)
        RoleCapability.objects.create(role=self.instructor_role, capability=self.capability)
        self.assertTrue(has_capability(user, 'data.flight-logs.export'))

    def test_revoked_capability(self):
        user = make_user('cfi@school.ro', Role.INSTRUCTOR)
        RoleCapability.objects.create(role=self.instructor_role, capability=self.capability, is_granted=False)
        self.assertFalse(has_capability(user, 'data.flight-logs.export'))

    def test_super_admin_has_every_capability(self):
        user = make_user('boss@school.ro', Role.SUPER_ADMIN)
        self.assertTrue(has_capability(user, 'anything.at.all'))

    def test_update_role_capabilities_reports_bad_ids(self):
        result = update_role_capabilities(
            self.instructor_role,
            [{'id': self.capability.id, 'is_granted': True}, {'id': 999999, 'is_granted': True}],
        )
        self.assertEqual(result['success_count'], 1)
        self.assertEqual(result['failure_count'], 1)

        grouped = get_role_capabilities(self.instructor_role)
        self.assertTrue(grouped['data.flight-logs'][0]['is_granted'])


class CapabilityCheckTest(TestCase):

    GRANTS = {
        Role.INSTRUCTOR: [
            ('flight-logs.view', 'menu', 'flight-logs', 'view'),
            ('aircraft.update', 'action', 'aircraft', 'update'),
            ('data.flight-logs.export', 'data', 'flight-logs', 'export'),
            ('api.imports.read', 'api', 'imports', 'read'),
        ],
        Role.ADMIN: [
            ('admin.access', 'system', 'admin', 'access'),
        ],
    }

    def setUp(self):
        for role_name, capabilities in self.GRANTS.items():
            role = Role.objects.get(name=role_name)
            for name, resource_type, resource_name, action in capabilities:
                capability = Capability.objects.create(
                    name=name, resource_type=resource_type, resource_name=resource_name, action=action,
                )
                RoleCapability.objects.create(role=role, capability=capability)

        self.instructor = make_user('cfi@school.ro', Role.INSTRUCTOR)
        self.pilot = make_user('pilot@school.ro', Role.PILOT)

    def test_menu_path_maps_to_view_capability(self):
        self.assertTrue(can_access_menu(self.instructor, '/flight-logs'))
        self.assertFalse(can_access_menu(self.instructor, '/reports'))
        self.assertFalse(can_access_menu(self.pilot, '/flight-logs'))

    def test_resource_action(self):
        self.assertTrue(can_perform_action(self.instructor, 'aircraft', 'update'))
        self.assertFalse(can_perform_action(self.instructor, 'aircraft', 'delete'))

    def test_data_access(self):
        self.assertTrue(can_access_data(self.instructor, 'flight-logs', 'export'))
        self.assertFalse(can_access_data(self.pilot, 'flight-logs', 'export'))

    def test_api_access(self):
        self.assertTrue(can_access_api(self.instructor, 'imports', 'read'))
        self.assertFalse(can_access_api(self.instructor, 'imports', 'write'))

    def test_admin_checks(self):
        admin = make_user('admin@school.ro', Role.ADMIN)
        boss = make_user('boss@school.ro', Role.SUPER_ADMIN)

        self.assertTrue(is_admin(admin))
        self.assertFalse(is_super_admin(admin))
        self.assertFalse(is_admin(self.instructor))
        self.assertTrue(is_admin(boss))
        self.assertTrue(is_super_admin(boss))

    def test_user_without_roles_has_nothing(self):
        nobody = make_user('nobody@school.ro')
        self.assertFalse(can_access_menu(nobody, '/flight-logs'))
        self.assertFalse(is_admin(nobody))


# =============================================================================
# USER UPSERT AND PROFILE TESTS
# =============================================================================

class UserUpsertTest(TestCase):

    def test_new_user_gets_pilot_role_and_unusable_password(self):
        user, created = upsert_user_from_row({
            'email': 'New.Pilot@School.ro',
            'first_name': 'Ana',
            'last_name': 'Pop',
            'license_number': 'RO.FCL.123',
        })

        self.assertTrue(created)
        self.assertEqual(user.email, 'new.pilot@school.ro')
        self.assertFalse(user.has_usable_password())
        self.assertEqual(get_role_names(user), {Role.PILOT})
        self.assertEqual(user.profile.license_number, 'RO.FCL.123')

    def test_existing_user_is_updated(self):
        existing = make_user('pilot@school.ro', Role.PILOT, first_name='Old')
        user, created = upsert_user_from_row({
            'email': 'PILOT@school.ro',
            'first_name': 'New',
            'last_name': 'Name',
            'role': Role.INSTRUCTOR,
        })

        self.assertFalse(created)
        self.assertEqual(user.pk, existing.pk)
        self.assertEqual(user.first_name, 'New')
        # Role applies to new users only
        self.assertEqual(get_role_names(user), {Role.PILOT})

    def test_password_is_set_when_given(self):
        user, _ = upsert_user_from_row({
            'email': 'student@school.ro',
            'first_name': 'S',
            'last_name': 'T',
            'role': Role.STUDENT,
            'password': 's3cret-pass',
        })
        self.assertTrue(user.check_password('s3cret-pass'))

    def test_missing_email_raises(self):
        with self.assertRaises(ValueError):
            upsert_user_from_row({'first_name': 'No', 'last_name': 'Mail'})

    def test_add_flight_hours(self):
        user = make_user('pilot@school.ro', Role.PILOT)
        add_flight_hours(user, Decimal('1.50'))
        add_flight_hours(user, Decimal('0.25'))
        add_flight_hours(user, Decimal('-0.75'))

        self.assertEqual(get_pilot_profile(user).total_flight_hours, Decimal('1.00'))


class UpgradeProspectTest(TestCase):

    def test_prospect_becomes_student(self):
        user = make_user('prospect@school.ro', Role.PROSPECT)
        upgrade_prospect(user, 'student', {'medical_class': 'Class 2'})

        self.assertEqual(get_role_names(user), {Role.STUDENT})
        self.assertEqual(PilotProfile.objects.get(user=user).medical_class, 'Class 2')

    def test_non_prospect_cannot_be_upgraded(self):
        user = make_user('pilot@school.ro', Role.PILOT)
        with self.assertRaises(ValueError):
            upgrade_prospect(user, Role.INSTRUCTOR, {})

    def test_invalid_target_role(self):
        user = make_user('prospect@school.ro', Role.PROSPECT)
        with self.assertRaises(ValueError):
            upgrade_prospect(user, Role.ADMIN, {})


# =============================================================================
# API TESTS
# =============================================================================

class UserAPITest(APITestCase):

    def setUp(self):
        self.admin = make_user('admin@school.ro', Role.ADMIN)
        self.pilot = make_user('pilot@school.ro', Role.PILOT, first_name='Ion', last_name='Ionescu')

    def test_admin_creates_user(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/v1/users/', {
            'email': 'Student@School.ro',
            'first_name': 'Maria',
            'last_name': 'Popescu',
            'role': Role.STUDENT,
            'profile': {'phone': '+40 700 000 000'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'student@school.ro')
        self.assertEqual(response.data['roles'], [Role.STUDENT])
        self.assertEqual(response.data['profile']['phone'], '+40 700 000 000')

    def test_duplicate_email_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/v1/users/', {
            'email': 'PILOT@school.ro',
            'first_name': 'Dup',
            'last_name': 'Licate',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pilot_cannot_list_users(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_role(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/users/', {'role': Role.PILOT})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        emails = [u['email'] for u in response.data['results']]
        self.assertEqual(emails, ['pilot@school.ro'])

    def test_me(self):
        self.client.force_authenticate(self.pilot)
        response = self.client.get('/api/v1/users/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'pilot@school.ro')
        self.assertEqual(response.data['roles'], [Role.PILOT])
        self.assertIn('capabilities', response.data)

    def test_unauthenticated_me(self):
        response = self.client.get('/api/v1/users/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_instructor_upgrades_prospect(self):
        instructor = make_user('cfi@school.ro', Role.INSTRUCTOR)
        prospect = make_user('prospect@school.ro', Role.PROSPECT)
        self.client.force_authenticate(instructor)

        response = self.client.post(
            f'/api/v1/users/{prospect.pk}/upgrade-role/',
            {'new_role': Role.STUDENT},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['roles'], [Role.STUDENT])

    def test_upgrade_of_non_prospect_is_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            f'/api/v1/users/{self.pilot.pk}/upgrade-role/',
            {'new_role': Role.INSTRUCTOR},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_pilot_cannot_upgrade(self):
        prospect = make_user('prospect@school.ro', Role.PROSPECT)
        self.client.force_authenticate(self.pilot)
        response = self.client.post(
            f'/api/v1/users/{prospect.pk}/upgrade-role/',
            {'new_role': Role.STUDENT},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RoleAPITest(APITestCase):

    def setUp(self):
        call_command('seed_roles', stdout=StringIO())
        self.super_admin = make_user('boss@school.ro', Role.SUPER_ADMIN)
        self.admin = make_user('admin@school.ro', Role.ADMIN)

    def test_list_roles_with_user_counts(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/v1/roles/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        counts = {r['name']: r['user_count'] for r in response.data}
        self.assertEqual(counts[Role.ADMIN], 1)
        self.assertEqual(counts[Role.PILOT], 0)

    def test_capabilities_require_super_admin(self):
        role = Role.objects.get(name=Role.PILOT)
        self.client.force_authenticate(self.admin)
        response = self.client.get(f'/api/v1/roles/{role.pk}/capabilities/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_capabilities(self):
        role = Role.objects.get(name=Role.PILOT)
        capability = Capability.objects.get(name='data.flight-logs.export')
        self.client.force_authenticate(self.super_admin)

        response = self.client.put(
            f'/api/v1/roles/{role.pk}/capabilities/',
            {'capabilities': [{'id': capability.id, 'is_granted': True}]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['success_count'], 1)
        self.assertTrue(
            RoleCapability.objects.get(role=role, capability=capability).is_granted
        )

    def test_invalid_capabilities_payload(self):
        role = Role.objects.get(name=Role.PILOT)
        self.client.force_authenticate(self.super_admin)
        response = self.client.put(
            f'/api/v1/roles/{role.pk}/capabilities/',
            {'capabilities': 'all'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
