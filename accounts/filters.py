from django.contrib.auth import get_user_model
from django_filters import rest_framework as filters

from .models import PilotProfile, Role

User = get_user_model()


class UserFilter(filters.FilterSet):
    """Filter users by role name and profile status."""

    role = filters.ChoiceFilter(
        field_name='user_roles__role__name',
        choices=Role.NAME_CHOICES,
        help_text='Filter by role name (e.g. PILOT)'
    )
    status = filters.ChoiceFilter(
        field_name='profile__status',
        choices=PilotProfile.STATUS_CHOICES,
        help_text='Filter by profile status'
    )
    is_active = filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = User
        fields = ['role', 'status', 'is_active']
