"""
Serializers for users, roles and capabilities.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from .models import Capability, PilotProfile, Role
from .services import assign_role, get_role_names, get_user_capabilities

logger = logging.getLogger(__name__)

User = get_user_model()


# =============================================================================
# PROFILE & USER SERIALIZERS
# =============================================================================

class PilotProfileSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = PilotProfile
        fields = [
            'personal_number',
            'phone',
            'date_of_birth',
            'address',
            'city',
            'state',
            'zip_code',
            'country',
            'status',
            'status_display',
            'total_flight_hours',
            'license_number',
            'medical_class',
            'instructor_rating',
        ]


class UserSerializer(serializers.ModelSerializer):
    """
    User with nested profile and role names.

    ``role`` is accepted on create only and defaults to PILOT.
    """

    profile = PilotProfileSerializer(required=False)
    roles = serializers.SerializerMethodField()
    full_name = serializers.SerializerMethodField()
    role = serializers.ChoiceField(choices=Role.NAME_CHOICES, write_only=True, required=False)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'is_active',
            'date_joined',
            'profile',
            'roles',
            'role',
            'password',
        ]
        read_only_fields = ['id', 'date_joined']
        extra_kwargs = {
            'email': {'required': True},
            'first_name': {'required': True},
            'last_name': {'required': True},
        }

    def get_roles(self, obj):
        return sorted(get_role_names(obj))

    def get_full_name(self, obj):
        return obj.get_full_name()

    def validate_email(self, value):
        value = value.strip().lower()
        queryset = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A user with this email already exists")
        return value

    @transaction.atomic
    def create(self, validated_data):
        profile_data = validated_data.pop('profile', {})
        role_name = validated_data.pop('role', Role.PILOT)
        password = validated_data.pop('password', None)
        request = self.context.get('request')
        creator = request.user if request else None

        user = User(username=validated_data['email'][:150], **validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()

        PilotProfile.objects.create(user=user, created_by=creator, **profile_data)
        assign_role(user, role_name, assigned_by=creator)
        logger.info(f"Created user {user.email} with role {role_name}")
        return user

    @transaction.atomic
    def update(self, instance, validated_data):
        profile_data = validated_data.pop('profile', None)
        validated_data.pop('role', None)
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()

        if profile_data is not None:
            profile, _ = PilotProfile.objects.get_or_create(user=instance)
            for attr, value in profile_data.items():
                setattr(profile, attr, value)
            profile.save()

        return instance


class CurrentUserSerializer(UserSerializer):
    capabilities = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['capabilities']

    def get_capabilities(self, obj):
        return sorted(c.name for c in get_user_capabilities(obj))


class UpgradeRoleSerializer(serializers.Serializer):
    new_role = serializers.ChoiceField(choices=[
        (Role.STUDENT, 'Student'),
        (Role.PILOT, 'Pilot'),
        (Role.INSTRUCTOR, 'Instructor'),
    ])
    license_number = serializers.CharField(required=False, allow_blank=True)
    medical_class = serializers.CharField(required=False, allow_blank=True)
    instructor_rating = serializers.CharField(required=False, allow_blank=True)
    total_flight_hours = serializers.DecimalField(max_digits=8, decimal_places=2, required=False)


# =============================================================================
# ROLE & CAPABILITY SERIALIZERS
# =============================================================================

class RoleSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(source='get_name_display', read_only=True)
    user_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Role
        fields = ['id', 'name', 'display_name', 'description', 'user_count']


class CapabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Capability
        fields = ['id', 'name', 'resource_type', 'resource_name', 'action', 'description']


class CapabilityUpdateItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    is_granted = serializers.BooleanField()


class RoleCapabilitiesUpdateSerializer(serializers.Serializer):
    capabilities = CapabilityUpdateItemSerializer(many=True, allow_empty=True)
