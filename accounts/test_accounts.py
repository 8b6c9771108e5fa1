"""
Tests for authentication, roles, permission resolution, phone verification,
user administration, passwords and system statistics.
"""
import uuid
from datetime import timedelta
from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.utils import timezone
from rest_framework import status

from accounts.authorization import get_user_permissions, sync_system_roles, user_has_permission
from accounts.models import Role, UserRoleAssignment
from accounts.permissions_config import ALL_PERMISSIONS, DEFAULT_ROLE_PERMISSIONS, PERMISSIONS

User = get_user_model()

ROLES_URL = '/api/auth/roles/'
SEND_CODE_URL = '/api/sms/send-verification/'
VERIFY_CODE_URL = '/api/sms/verify-code/'
USERS_URL = '/api/users/'
PASSWORD_URL = '/api/users/password/'
FORGOT_URL = '/api/auth/forgot-password/'
RESET_URL = '/api/auth/reset-password/'
STATS_URL = '/api/settings/stats/'

STRONG_PASSWORD = 'Harmattan#2026'


# =============================================================================
# PERMISSION RESOLUTION
# =============================================================================

@pytest.mark.django_db
class TestPermissionResolution:

    def test_roles_are_unioned(self, agent_user):
        extra = Role.objects.create(name='Exporter', permissions=[PERMISSIONS['FARMERS_EXPORT']])
        UserRoleAssignment.objects.create(user=agent_user, role=extra)

        granted = get_user_permissions(agent_user)

        assert PERMISSIONS['FARMERS_EXPORT'] in granted
        assert PERMISSIONS['FARMS_CREATE'] in granted
        assert PERMISSIONS['AGENTS_READ'] not in granted

    def test_any_of_semantics(self, agent_user):
        assert user_has_permission(agent_user, PERMISSIONS['AGENTS_READ'], PERMISSIONS['FARMERS_READ'])
        assert not user_has_permission(agent_user, PERMISSIONS['AGENTS_READ'])

    def test_super_admin_role_holds_everything(self, admin_user):
        assert get_user_permissions(admin_user) == set(ALL_PERMISSIONS)

    def test_configured_super_admin_email(self, db):
        user = User.objects.create_user(username='root', email='ROOT@ccsa.test', password='x')
        assert get_user_permissions(user) == set(ALL_PERMISSIONS)

    def test_user_without_roles_holds_nothing(self, viewer_user):
        assert get_user_permissions(viewer_user) == set()

    def test_sync_system_roles_is_idempotent(self, db):
        first = sync_system_roles()
        second = sync_system_roles()

        assert first['created'] == len(DEFAULT_ROLE_PERMISSIONS)
        assert second == {'created': 0, 'updated': 0, 'total': len(DEFAULT_ROLE_PERMISSIONS)}

    def test_sync_restores_edited_system_role(self, db):
        sync_system_roles()
        Role.objects.filter(name='Viewer').update(permissions=[])

        assert sync_system_roles()['updated'] == 1
        assert Role.objects.get(name='Viewer').permissions == DEFAULT_ROLE_PERMISSIONS['Viewer']

    def test_sync_roles_command(self, db):
        out = StringIO()
        call_command('sync_roles', stdout=out)
        assert 'created' in out.getvalue()
        assert Role.objects.filter(is_system=True).count() == len(DEFAULT_ROLE_PERMISSIONS)


# =============================================================================
# AUTHENTICATION & PROFILE
# =============================================================================

@pytest.mark.django_db
class TestLoginAndProfile:

    def test_login_returns_tokens_and_permissions(self, api_client, agent_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'agent', 'password': 'testpass123'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data and 'refresh' in response.data
        assert response.data['user']['role'] == User.UserRole.AGENT
        assert PERMISSIONS['FARMERS_CREATE'] in response.data['user']['permissions']

        agent_user.refresh_from_db()
        assert agent_user.last_login is not None

    def test_login_with_wrong_password(self, api_client, agent_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'agent', 'password': 'nope'
        }, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_profile(self, agent_client):
        response = agent_client.get('/api/auth/profile/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['full_name'] == 'Musa Bello'
        assert response.data['roles'] == ['Field Agent']

    def test_changing_phone_clears_verification(self, agent_client, agent_user):
        agent_user.phone = '+2348031234567'
        agent_user.phone_verified = True
        agent_user.save()

        response = agent_client.patch('/api/auth/profile/', {'phone': '08059876543'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['phone'] == '+2348059876543'
        assert response.data['phone_verified'] is False


# =============================================================================
# ROLES
# =============================================================================

@pytest.mark.django_db
class TestRoles:

    def test_supervisor_cannot_manage_roles(self, api_client, supervisor_user):
        api_client.force_authenticate(user=supervisor_user)
        assert api_client.get(ROLES_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_create_role(self, admin_client):
        response = admin_client.post(ROLES_URL, {
            'name': 'State Coordinator',
            'permissions': [PERMISSIONS['FARMERS_READ'], PERMISSIONS['FARMERS_READ'], PERMISSIONS['GIS_VIEW']],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['permissions'] == [PERMISSIONS['FARMERS_READ'], PERMISSIONS['GIS_VIEW']]
        assert response.data['is_system'] is False

    def test_unknown_permission_rejected(self, admin_client):
        response = admin_client.post(ROLES_URL, {
            'name': 'Broken', 'permissions': ['farmers.fly']
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'permissions' in response.data['details']

    def test_duplicate_name_conflicts(self, admin_client):
        Role.objects.create(name='Auditor')

        response = admin_client.post(ROLES_URL, {'name': 'auditor', 'permissions': []}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_system_role_cannot_be_deleted(self, admin_client):
        sync_system_roles()
        role = Role.objects.get(name='Viewer')

        response = admin_client.delete(f'{ROLES_URL}{role.id}/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Role.objects.filter(pk=role.pk).exists()

    def test_custom_role_is_deleted(self, admin_client):
        role = Role.objects.create(name='Temporary')

        response = admin_client.delete(f'{ROLES_URL}{role.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert not Role.objects.filter(pk=role.pk).exists()

    def test_permission_catalogue(self, admin_client):
        response = admin_client.get('/api/auth/permissions/')

        codenames = {item['codename'] for item in response.data['permissions']}
        assert codenames == set(ALL_PERMISSIONS)


# =============================================================================
# PHONE VERIFICATION
# =============================================================================

def _issued_code(verification_id):
    return cache.get(f'sms_otp:{verification_id}')['code']


@pytest.mark.django_db
class TestPhoneVerification:

    def test_send_and_verify(self, agent_client, agent_user):
        agent_user.phone = '+2348031234567'
        agent_user.save()

        sent = agent_client.post(SEND_CODE_URL, {'phone_number': '0803 123 4567'}, format='json')

        assert sent.status_code == status.HTTP_200_OK
        assert sent.data['phoneNumber'] == '+2348031234567'
        verification_id = sent.data['verificationId']

        verified = agent_client.post(VERIFY_CODE_URL, {
            'verification_id': verification_id,
            'code': _issued_code(verification_id),
            'phone_number': '08031234567',
        }, format='json')

        assert verified.status_code == status.HTTP_200_OK
        assert verified.data['verified'] is True
        agent_user.refresh_from_db()
        assert agent_user.phone_verified is True

    def test_invalid_phone_number(self, api_client):
        response = api_client.post(SEND_CODE_URL, {'phone_number': '12345'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_wrong_code(self, api_client):
        sent = api_client.post(SEND_CODE_URL, {'phone_number': '08031234567'}, format='json')
        code = _issued_code(sent.data['verificationId'])
        wrong = '100000' if code != '100000' else '100001'

        response = api_client.post(VERIFY_CODE_URL, {
            'verification_id': sent.data['verificationId'], 'code': wrong,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['verified'] is False

    def test_code_is_single_use(self, api_client):
        sent = api_client.post(SEND_CODE_URL, {'phone_number': '08031234567'}, format='json')
        payload = {
            'verification_id': sent.data['verificationId'],
            'code': _issued_code(sent.data['verificationId']),
        }

        first = api_client.post(VERIFY_CODE_URL, payload, format='json')
        second = api_client.post(VERIFY_CODE_URL, payload, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST

    def test_code_bound_to_phone_number(self, api_client):
        sent = api_client.post(SEND_CODE_URL, {'phone_number': '08031234567'}, format='json')

        response = api_client.post(VERIFY_CODE_URL, {
            'verification_id': sent.data['verificationId'],
            'code': _issued_code(sent.data['verificationId']),
            'phone_number': '08059999999',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# USER ADMINISTRATION
# =============================================================================

@pytest.mark.django_db
class TestUserAdministration:

    def test_supervisor_cannot_list_users(self, api_client, supervisor_user):
        api_client.force_authenticate(user=supervisor_user)
        assert api_client.get(USERS_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_list_filters_by_role_and_search(self, admin_client, agent_user, supervisor_user):
        by_role = admin_client.get(USERS_URL, {'role': 'field agent'})
        by_search = admin_client.get(USERS_URL, {'search': 'musa'})

        assert by_role.status_code == status.HTTP_200_OK
        assert [user['username'] for user in by_role.data['users']] == ['agent']
        assert by_role.data['users'][0]['roles'][0]['name'] == 'Field Agent'
        assert PERMISSIONS['FARMS_CREATE'] in by_role.data['users'][0]['permissions']
        assert [user['username'] for user in by_search.data['users']] == ['agent']
        assert admin_client.get(USERS_URL).data['pagination']['total'] == 3

    def test_create_user_with_role(self, admin_client, admin_user):
        role = Role.objects.create(name='State Coordinator', permissions=[PERMISSIONS['FARMERS_READ']])

        response = admin_client.post(USERS_URL, {
            'first_name': 'Amina',
            'last_name': 'Yusuf',
            'email': 'Amina.Yusuf@ccsa.test',
            'password': STRONG_PASSWORD,
            'role_id': str(role.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['username'] == 'amina.yusuf@ccsa.test'
        assert response.data['name'] == 'Amina Yusuf'
        assert [r['name'] for r in response.data['roles']] == ['State Coordinator']
        assert 'password' not in response.data

        user = User.objects.get(email='amina.yusuf@ccsa.test')
        assert user.check_password(STRONG_PASSWORD)
        assert user.role_assignments.get().assigned_by == admin_user

    def test_duplicate_email_rejected(self, admin_client, agent_user):
        response = admin_client.post(USERS_URL, {
            'first_name': 'Other', 'last_name': 'Agent',
            'email': 'AGENT@ccsa.test', 'password': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data['details']

    def test_weak_password_rejected(self, admin_client):
        response = admin_client.post(USERS_URL, {
            'first_name': 'Bala', 'last_name': 'Garba',
            'email': 'bala@ccsa.test', 'password': '12345678',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data['details']

    def test_update_replaces_role_and_password(self, admin_client, agent_user):
        supervisor = Role.objects.create(name='Supervisor', permissions=[PERMISSIONS['AGENTS_READ']])

        response = admin_client.patch(f'{USERS_URL}{agent_user.id}/', {
            'role_id': str(supervisor.id),
            'password': STRONG_PASSWORD,
            'is_active': False,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert [r['name'] for r in response.data['roles']] == ['Supervisor']
        agent_user.refresh_from_db()
        assert agent_user.check_password(STRONG_PASSWORD)
        assert agent_user.is_active is False

    def test_unknown_user(self, admin_client):
        response = admin_client.get(f'{USERS_URL}{uuid.uuid4()}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cannot_delete_own_account(self, admin_client, admin_user):
        response = admin_client.delete(f'{USERS_URL}{admin_user.id}/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert User.objects.filter(pk=admin_user.pk).exists()

    def test_delete_user(self, admin_client, viewer_user):
        response = admin_client.delete(f'{USERS_URL}{viewer_user.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert not User.objects.filter(pk=viewer_user.pk).exists()


# =============================================================================
# PASSWORDS
# =============================================================================

@pytest.mark.django_db
class TestChangePassword:

    def test_change_password(self, agent_client, agent_user):
        response = agent_client.put(PASSWORD_URL, {
            'current_password': 'testpass123', 'new_password': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        agent_user.refresh_from_db()
        assert agent_user.check_password(STRONG_PASSWORD)

    def test_wrong_current_password(self, agent_client):
        response = agent_client.put(PASSWORD_URL, {
            'current_password': 'not-it', 'new_password': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'current_password' in response.data['details']

    def test_new_password_needs_special_character(self, agent_client):
        response = agent_client.put(PASSWORD_URL, {
            'current_password': 'testpass123', 'new_password': 'Harmattan2026',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'new_password' in response.data['details']

    def test_requires_authentication(self, api_client):
        response = api_client.put(PASSWORD_URL, {}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPasswordReset:

    def test_forgot_password_emails_token(self, api_client, agent_user, mailoutbox):
        response = api_client.post(FORGOT_URL, {'email': 'Agent@ccsa.test'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        agent_user.refresh_from_db()
        assert agent_user.password_reset_token
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['agent@ccsa.test']
        assert agent_user.password_reset_token in mailoutbox[0].body

    def test_unknown_email_gets_same_answer(self, api_client, agent_user, mailoutbox):
        known = api_client.post(FORGOT_URL, {'email': 'agent@ccsa.test'}, format='json')
        unknown = api_client.post(FORGOT_URL, {'email': 'nobody@ccsa.test'}, format='json')

        assert unknown.status_code == status.HTTP_200_OK
        assert unknown.data == known.data
        assert len(mailoutbox) == 1

    def test_reset_with_token_is_single_use(self, api_client, agent_user):
        api_client.post(FORGOT_URL, {'email': 'agent@ccsa.test'}, format='json')
        agent_user.refresh_from_db()
        payload = {'token': agent_user.password_reset_token, 'new_password': STRONG_PASSWORD}

        first = api_client.post(RESET_URL, payload, format='json')
        second = api_client.post(RESET_URL, payload, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        agent_user.refresh_from_db()
        assert agent_user.check_password(STRONG_PASSWORD)
        assert agent_user.password_reset_token is None

    def test_expired_token(self, api_client, agent_user):
        agent_user.password_reset_token = 'a' * 64
        agent_user.password_reset_token_expires = timezone.now() - timedelta(minutes=1)
        agent_user.save()

        response = api_client.post(RESET_URL, {
            'token': 'a' * 64, 'new_password': STRONG_PASSWORD,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'expired' in response.data['error']


# =============================================================================
# SYSTEM STATISTICS
# =============================================================================

@pytest.mark.django_db
class TestSystemStats:

    def test_field_agent_is_forbidden(self, agent_client):
        assert agent_client.get(STATS_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_counts(self, admin_client, agent_user, make_farmer, make_farm, settings):
        settings.REGISTRY_VERSION = '9.9.9'
        make_farm(make_farmer())
        make_farmer()

        response = admin_client.get(STATS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['users'] == {'total': 2, 'agents': 1, 'recent': 2}
        assert response.data['farmers'] == {'total': 2}
        assert response.data['farms'] == {'total': 1, 'recent': 1}
        assert response.data['certificates'] == {'total': 0, 'recent': 0}
        assert response.data['system'] == {'status': 'healthy', 'version': '9.9.9'}
