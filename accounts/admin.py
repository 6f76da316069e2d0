"""
Accounts Admin - Django admin configuration for profiles, roles and capabilities.
"""

from django.contrib import admin

from .models import Capability, PilotProfile, Role, RoleCapability, UserRole


class UserRoleInline(admin.TabularInline):
    model = UserRole
    fk_name = 'role'
    extra = 0
    fields = ['user', 'assigned_by', 'assigned_at']
    readonly_fields = ['assigned_at']


class RoleCapabilityInline(admin.TabularInline):
    model = RoleCapability
    extra = 0
    fields = ['capability', 'is_granted', 'granted_by', 'granted_at']
    readonly_fields = ['granted_at']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'user_count']
    search_fields = ['name', 'description']
    inlines = [UserRoleInline, RoleCapabilityInline]

    def user_count(self, obj):
        return obj.user_roles.count()
    user_count.short_description = 'Users'


@admin.register(PilotProfile)
class PilotProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'status', 'total_flight_hours', 'license_number', 'medical_class']
    list_filter = ['status', 'medical_class']
    search_fields = ['user__email', 'user__first_name', 'user__last_name', 'personal_number', 'license_number']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('User', {
            'fields': ('user', 'status')
        }),
        ('Personal', {
            'fields': ('personal_number', 'phone', 'date_of_birth')
        }),
        ('Address', {
            'fields': ('address', 'city', 'state', 'zip_code', 'country'),
            'classes': ('collapse',)
        }),
        ('Aviation', {
            'fields': ('total_flight_hours', 'license_number', 'medical_class', 'instructor_rating')
        }),
        ('Timestamps', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Capability)
class CapabilityAdmin(admin.ModelAdmin):
    list_display = ['name', 'resource_type', 'resource_name', 'action']
    list_filter = ['resource_type']
    search_fields = ['name', 'resource_name', 'description']
