"""
Shared pytest fixtures for the registry test suite.
"""
import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from accounts.models import Role, UserRoleAssignment
from accounts.permissions_config import DEFAULT_ROLE_PERMISSIONS

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear cache before and after each test to prevent pollution."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


def _user_with_role(username, role_name, user_role, **extra):
    user = User.objects.create_user(
        username=username,
        email=f'{username}@ccsa.test',
        password='testpass123',
        first_name=extra.pop('first_name', username.title()),
        last_name=extra.pop('last_name', 'Tester'),
        role=user_role,
        **extra
    )
    if role_name:
        role, _ = Role.objects.get_or_create(
            name=role_name,
            defaults={'permissions': list(DEFAULT_ROLE_PERMISSIONS[role_name]), 'is_system': True}
        )
        UserRoleAssignment.objects.create(user=user, role=role)
    return user


@pytest.fixture
def admin_user(db):
    """Super administrator holding every permission."""
    return _user_with_role('admin', None, User.UserRole.SUPER_ADMIN)


@pytest.fixture
def supervisor_user(db):
    return _user_with_role('supervisor', 'Supervisor', User.UserRole.SUPERVISOR)


@pytest.fixture
def agent_user(db):
    """Field agent with the default field agent role."""
    return _user_with_role('agent', 'Field Agent', User.UserRole.AGENT, first_name='Musa', last_name='Bello')


@pytest.fixture
def viewer_user(db):
    """Authenticated user without any role."""
    return _user_with_role('viewer', None, User.UserRole.VIEWER)


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def agent_client(api_client, agent_user):
    api_client.force_authenticate(user=agent_user)
    return api_client


@pytest.fixture
def viewer_client(api_client, viewer_user):
    api_client.force_authenticate(user=viewer_user)
    return api_client


@pytest.fixture
def make_farmer(db, agent_user):
    """Factory creating farmers with unique NIN and phone numbers."""
    from farmers.models import Farmer

    counter = {'n': 0}

    def _make(**kwargs):
        counter['n'] += 1
        n = counter['n']
        defaults = {
            'nin': f'{12345678900 + n}',
            'first_name': f'Farmer{n}',
            'last_name': 'Okafor',
            'phone': f'+234803{1000000 + n}',
            'gender': 'Male',
            'state': 'Kano',
            'lga': 'Nassarawa',
            'agent': agent_user,
        }
        defaults.update(kwargs)
        return Farmer.objects.create(**defaults)

    return _make


@pytest.fixture
def make_farm(db):
    """Factory creating farms for a given farmer."""
    from farms.models import Farm

    def _make(farmer, **kwargs):
        defaults = {
            'primary_crop': 'Maize',
            'farm_size': 2.5,
            'farm_state': farmer.state,
            'farm_local_government': farmer.lga,
            'farm_latitude': 9.05,
            'farm_longitude': 7.49,
        }
        defaults.update(kwargs)
        return Farm.objects.create(farmer=farmer, **defaults)

    return _make
