"""
Tests for organizations and access control

Tests cover:
1. Permission policy - which roles may perform which actions
2. Organization context - resolution, switching, no-organization state
3. Organization lifecycle - creation makes the creator owner, deletion is owner-only
4. Members - listing and removal rules
5. Invitations - creation, duplicates, acceptance and expiry
"""
from datetime import timedelta
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.permissions import Action, allowed_roles, can_perform

from .context import ContextState, resolve_context
from .models import Invitation, InvitationStatus, Membership, Organization, OrganizationRole

User = get_user_model()


def create_user(email):
    return User.objects.create_user(email=email, password='testpass123', full_name=email.split('@')[0])


def create_membership(organization, user, role):
    return Membership.objects.create(organization=organization, user=user, role=OrganizationRole(role).value)


class PermissionPolicyTests(SimpleTestCase):
    """The shared role/action table"""

    def test_viewer_is_read_only(self):
        self.assertTrue(can_perform('viewer', Action.VIEW_PROJECT))
        self.assertTrue(can_perform('viewer', Action.LIST_CUSTOM_FILES))
        self.assertFalse(can_perform('viewer', Action.CREATE_PROJECT))
        self.assertFalse(can_perform('viewer', Action.UPLOAD_CUSTOM_FILES))

    def test_custom_file_deletion_needs_admin(self):
        self.assertEqual(allowed_roles(Action.DELETE_CUSTOM_FILE), ['owner', 'admin'])
        self.assertFalse(can_perform('member', Action.DELETE_CUSTOM_FILE))

    def test_only_owner_deletes_organization(self):
        self.assertEqual(allowed_roles(Action.DELETE_ORGANIZATION), ['owner'])

    def test_unknown_role_or_action(self):
        self.assertFalse(can_perform(None, Action.VIEW_PROJECT))
        self.assertFalse(can_perform('guest', Action.VIEW_PROJECT))
        self.assertFalse(can_perform('owner', 'launch_rockets'))

    def test_accepts_role_enum(self):
        self.assertTrue(can_perform(OrganizationRole.ADMIN, Action.INVITE_MEMBER))


class OrganizationContextTests(TestCase):
    """Resolving which organization a request acts in"""

    def setUp(self):
        self.user = create_user('test@example.com')
        self.first = Organization.objects.create(name='First')
        self.second = Organization.objects.create(name='Second')
        create_membership(self.first, self.user, 'owner')
        create_membership(self.second, self.user, 'viewer')

    def test_defaults_to_first_membership(self):
        context = resolve_context(self.user)
        self.assertEqual(context.state, ContextState.READY)
        self.assertEqual(context.organization, self.first)
        self.assertEqual(context.role, 'owner')
        self.assertEqual(len(context.memberships), 2)

    def test_requested_organization_wins(self):
        context = resolve_context(self.user, str(self.second.id))
        self.assertEqual(context.organization, self.second)
        self.assertEqual(context.role, 'viewer')
        self.assertFalse(context.can(Action.CREATE_PROJECT))

    def test_foreign_or_malformed_organization_is_ignored(self):
        stranger = Organization.objects.create(name='Stranger')
        self.assertEqual(resolve_context(self.user, str(stranger.id)).organization, self.first)
        self.assertEqual(resolve_context(self.user, 'not-a-uuid').organization, self.first)

    def test_switch(self):
        context = resolve_context(self.user).switch(self.second.id)
        self.assertEqual(context.organization, self.second)

    def test_no_organization(self):
        context = resolve_context(create_user('loner@example.com'))
        self.assertEqual(context.state, ContextState.NO_ORGANIZATION)
        self.assertIsNone(context.organization)
        self.assertFalse(context.can(Action.VIEW_PROJECT))

    def test_anonymous(self):
        context = resolve_context(SimpleNamespace(is_authenticated=False))
        self.assertEqual(context.state, ContextState.NO_ORGANIZATION)


class OrganizationApiTests(APITestCase):

    def setUp(self):
        self.owner = create_user('owner@example.com')
        self.admin = create_user('admin@example.com')
        self.member = create_user('member@example.com')
        self.organization = Organization.objects.create(name='Acme', domain='acme.com')
        self.owner_membership = create_membership(self.organization, self.owner, 'owner')
        create_membership(self.organization, self.admin, 'admin')
        self.member_membership = create_membership(self.organization, self.member, 'member')
        self.url = f'/api/v1/organizations/{self.organization.id}/'

    def test_creator_becomes_owner(self):
        user = create_user('founder@example.com')
        self.client.force_authenticate(user=user)

        response = self.client.post('/api/v1/organizations/', {'name': 'New Co'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        membership = Membership.objects.get(user=user)
        self.assertEqual(membership.organization.name, 'New Co')
        self.assertEqual(membership.role, 'owner')

    def test_list_memberships(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.get('/api/v1/organizations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['role'], 'member')

    def test_current_context_follows_header(self):
        other = Organization.objects.create(name='Other')
        create_membership(other, self.member, 'viewer')
        self.client.force_authenticate(user=self.member)

        response = self.client.get('/api/v1/organizations/current/', HTTP_X_ORGANIZATION_ID=str(other.id))

        self.assertEqual(response.data['state'], 'ready')
        self.assertEqual(response.data['organization']['name'], 'Other')
        self.assertEqual(response.data['role'], 'viewer')

    def test_current_without_organization(self):
        self.client.force_authenticate(user=create_user('loner@example.com'))
        response = self.client.get('/api/v1/organizations/current/')
        self.assertEqual(response.data['state'], 'no-organization')
        self.assertIsNone(response.data['organization'])

    def test_member_cannot_update(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.patch(self.url, {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_updates(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(self.url, {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.name, 'Renamed')

    def test_admin_cannot_delete(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Only the owner can delete this organization.')

    def test_owner_deletes_everything(self):
        from projects.models import Project

        Project.objects.create(organization=self.organization, domain='example.com', source_platform='woo')
        self.client.force_authenticate(user=self.owner)

        response = self.client.delete(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Organization.objects.filter(pk=self.organization.pk).exists())
        self.assertFalse(Membership.objects.filter(organization_id=self.organization.pk).exists())
        self.assertFalse(Project.objects.exists())

    def test_outsider_sees_nothing(self):
        self.client.force_authenticate(user=create_user('outsider@example.com'))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_members_listed(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.get(f'{self.url}members/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)

    def test_owner_cannot_be_removed(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'{self.url}members/{self.owner_membership.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Membership.objects.filter(pk=self.owner_membership.pk).exists())

    def test_admin_removes_member(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'{self.url}members/{self.member_membership.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Membership.objects.filter(pk=self.member_membership.pk).exists())

    def test_member_cannot_remove_members(self):
        self.client.force_authenticate(user=self.member)
        response = self.client.delete(f'{self.url}members/{self.owner_membership.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class InvitationApiTests(APITestCase):

    def setUp(self):
        self.admin = create_user('admin@example.com')
        self.invitee = create_user('invitee@example.com')
        self.organization = Organization.objects.create(name='Acme')
        create_membership(self.organization, self.admin, 'admin')
        self.url = f'/api/v1/organizations/{self.organization.id}/invitations/'

    def _invite(self, email='Invitee@Example.com', role='member'):
        self.client.force_authenticate(user=self.admin)
        return self.client.post(self.url, {'email': email, 'role': role}, format='json')

    def test_create_invitation(self):
        response = self._invite()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invitation = Invitation.objects.get()
        self.assertEqual(invitation.invited_email, 'invitee@example.com')
        self.assertEqual(invitation.invited_by, self.admin)
        self.assertEqual(invitation.state, 'valid')
        self.assertTrue(invitation.token)

    def test_duplicate_pending_invitation(self):
        self._invite()
        response = self._invite()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_existing_member_cannot_be_invited(self):
        response = self._invite(email='admin@example.com')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_role_cannot_be_granted(self):
        response = self._invite(role='owner')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

    def test_member_cannot_invite(self):
        member = create_user('member@example.com')
        create_membership(self.organization, member, 'member')
        self.client.force_authenticate(user=member)

        response = self.client.post(self.url, {'email': 'new@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_accept(self):
        invitation_id = self._invite(role='admin').data['id']
        self.client.force_authenticate(user=self.invitee)

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        membership = Membership.objects.get(user=self.invitee)
        self.assertEqual(membership.role, 'admin')
        self.assertEqual(Invitation.objects.get().status, InvitationStatus.ACCEPTED)

    def test_accept_keeps_existing_membership_role(self):
        invitation_id = self._invite(role='member').data['id']
        create_membership(self.organization, self.invitee, 'admin')
        self.client.force_authenticate(user=self.invitee)

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['membership']['role'], 'admin')
        self.assertEqual(Membership.objects.get(user=self.invitee).role, 'admin')
        self.assertEqual(Membership.objects.filter(user=self.invitee).count(), 1)

    def test_accept_requires_matching_email(self):
        invitation_id = self._invite().data['id']
        self.client.force_authenticate(user=create_user('someone@example.com'))

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Membership.objects.filter(user__email='someone@example.com').exists())

    def test_expired_invitation(self):
        invitation_id = self._invite().data['id']
        Invitation.objects.filter(pk=invitation_id).update(expires_at=timezone.now() - timedelta(days=1))
        self.client.force_authenticate(user=self.invitee)

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['state'], 'expired')
        self.assertFalse(Membership.objects.filter(user=self.invitee).exists())

    def test_accepted_invitation_cannot_be_reused(self):
        invitation_id = self._invite().data['id']
        self.client.force_authenticate(user=self.invitee)
        self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/accept/')
        self.assertEqual(response.data['state'], 'used')

    def test_pending_for_current_user(self):
        self._invite()
        self.client.force_authenticate(user=self.invitee)

        response = self.client.get('/api/v1/invitations/pending/')

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['organization_name'], 'Acme')

    def test_lookup_by_token(self):
        self._invite()
        token = Invitation.objects.get().token
        self.client.force_authenticate(user=self.invitee)

        response = self.client.get(f'/api/v1/invitations/token/{token}/')
        self.assertEqual(response.data['state'], 'valid')

        response = self.client.get('/api/v1/invitations/token/unknown/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['state'], 'invalid')

    def test_decline(self):
        invitation_id = self._invite().data['id']
        self.client.force_authenticate(user=self.invitee)

        response = self.client.post(f'/api/v1/invitations/{invitation_id}/decline/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Invitation.objects.get().status, InvitationStatus.DECLINED)

    def test_cancel(self):
        invitation_id = self._invite().data['id']
        response = self.client.delete(f'{self.url}{invitation_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Invitation.objects.exists())
