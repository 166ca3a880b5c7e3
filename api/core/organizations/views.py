"""
Organization ViewSets
=====================
API endpoints for organizations, members and invitations.
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import Action
from projects.cleanup import CleanupAborted, delete_organization

from .context import membership_for
from .models import Invitation, InvitationStatus, Membership, Organization
from .permissions import get_organization_context, require_action
from .serializers import (
    InvitationSerializer,
    InviteMemberSerializer,
    MemberSerializer,
    MembershipSerializer,
    OrganizationCreateSerializer,
    OrganizationSerializer,
)

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=['Organizations'], summary="List the user's organizations"),
    create=extend_schema(tags=['Organizations'], summary='Create organization (creator becomes owner)'),
    retrieve=extend_schema(tags=['Organizations'], summary='Get organization details'),
    update=extend_schema(tags=['Organizations'], summary='Update organization (owner/admin)'),
    partial_update=extend_schema(tags=['Organizations'], summary='Partially update organization (owner/admin)'),
    destroy=extend_schema(tags=['Organizations'], summary='Delete organization and all of its data (owner)'),
    current=extend_schema(tags=['Organizations'], summary='Resolve the current organization context'),
    members=extend_schema(tags=['Organizations'], summary='List organization members'),
    remove_member=extend_schema(tags=['Organizations'], summary='Remove a member'),
    invitations=extend_schema(tags=['Organizations'], summary='List or create invitations'),
    cancel_invitation=extend_schema(tags=['Organizations'], summary='Cancel a pending invitation'),
)
class OrganizationViewSet(viewsets.ModelViewSet):
    """
    list:       GET /organizations/               - Memberships of the user
    create:     POST /organizations/              - Create organization (user becomes owner)
    retrieve:   GET /organizations/{id}/          - Organization details
    update:     PATCH /organizations/{id}/        - Update organization (owner/admin)
    destroy:    DELETE /organizations/{id}/       - Delete organization (owner)
    """
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Organization.objects.filter(memberships__user=self.request.user).distinct()

    def get_serializer_class(self):
        if self.action == 'create':
            return OrganizationCreateSerializer
        return OrganizationSerializer

    def _membership(self, organization):
        membership = membership_for(self.request.user, organization)
        if membership is None:
            raise PermissionDenied('You are not a member of this organization.')
        return membership

    def list(self, request):
        memberships = Membership.objects.filter(user=request.user).select_related('organization')
        return Response(MembershipSerializer(memberships, many=True).data)

    def perform_update(self, serializer):
        membership = self._membership(serializer.instance)
        require_action(membership.role, Action.UPDATE_ORGANIZATION, 'Admin access required to update the organization.')
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        organization = self.get_object()
        membership = self._membership(organization)
        require_action(membership.role, Action.DELETE_ORGANIZATION, 'Only the owner can delete this organization.')

        try:
            report = delete_organization(organization)
        except CleanupAborted as exc:
            return Response({
                'error': exc.message,
                'warnings': exc.report.warnings,
            }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'message': 'Organization deleted successfully',
            'warnings': report.warnings,
        })

    @action(detail=False, methods=['get'])
    def current(self, request):
        context = get_organization_context(request)
        return Response({
            'state': context.state.value,
            'organization': OrganizationSerializer(context.organization).data if context.organization else None,
            'role': context.role,
            'organizations': MembershipSerializer(context.memberships, many=True).data,
        })

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        organization = self.get_object()
        self._membership(organization)
        memberships = organization.memberships.select_related('user')
        return Response(MemberSerializer(memberships, many=True).data)

    @action(detail=True, methods=['delete'], url_path='members/(?P<membership_id>[^/.]+)')
    def remove_member(self, request, pk=None, membership_id=None):
        organization = self.get_object()
        membership = self._membership(organization)
        require_action(membership.role, Action.REMOVE_MEMBER, 'Admin access required to remove members.')

        target = get_object_or_404(Membership, organization=organization, pk=membership_id)
        if target.is_owner:
            return Response({
                'error': 'Cannot remove the owner from the organization.'
            }, status=status.HTTP_400_BAD_REQUEST)

        target.delete()
        return Response({'message': 'Member removed successfully.'})

    @action(detail=True, methods=['get', 'post'])
    def invitations(self, request, pk=None):
        organization = self.get_object()
        membership = self._membership(organization)

        if request.method == 'GET':
            pending = organization.invitations.filter(status=InvitationStatus.PENDING)
            return Response(InvitationSerializer(pending, many=True).data)

        require_action(membership.role, Action.INVITE_MEMBER, 'Admin access required to invite users.')
        serializer = InviteMemberSerializer(
            data=request.data,
            context={'request': request, 'organization': organization},
        )
        serializer.is_valid(raise_exception=True)
        invitation = serializer.save()
        logger.info("Invitation %s created for %s in organization %s",
                    invitation.id, invitation.invited_email, organization.id)
        return Response(InvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path='invitations/(?P<invitation_id>[^/.]+)')
    def cancel_invitation(self, request, pk=None, invitation_id=None):
        organization = self.get_object()
        membership = self._membership(organization)
        require_action(membership.role, Action.CANCEL_INVITATION, 'Admin access required to cancel invitations.')

        invitation = get_object_or_404(Invitation, organization=organization, pk=invitation_id)
        invitation.delete()
        return Response({'message': 'Invitation cancelled.'})


@extend_schema_view(
    pending=extend_schema(tags=['Organizations'], summary="Pending invitations for the user's email"),
    by_token=extend_schema(tags=['Organizations'], summary='Look up an invitation by token'),
    accept=extend_schema(tags=['Organizations'], summary='Accept an invitation'),
    decline=extend_schema(tags=['Organizations'], summary='Decline an invitation'),
)
class InvitationViewSet(viewsets.ViewSet):
    """
    pending:  GET  /invitations/pending/
    by_token: GET  /invitations/token/{token}/
    accept:   POST /invitations/{id}/accept/
    decline:  POST /invitations/{id}/decline/
    """
    permission_classes = [IsAuthenticated]
    serializer_class = InvitationSerializer

    def _get_own_invitation(self, request, pk):
        invitation = get_object_or_404(Invitation.objects.select_related('organization'), pk=pk)
        if invitation.invited_email.lower() != request.user.email.lower():
            raise PermissionDenied('This invitation was sent to a different email address.')
        return invitation

    @action(detail=False, methods=['get'])
    def pending(self, request):
        invitations = Invitation.objects.filter(
            invited_email__iexact=request.user.email,
            status=InvitationStatus.PENDING,
        ).select_related('organization', 'invited_by')

        valid_invitations = [inv for inv in invitations if inv.is_valid]
        return Response(InvitationSerializer(valid_invitations, many=True).data)

    @action(detail=False, methods=['get'], url_path='token/(?P<token>[^/]+)')
    def by_token(self, request, token=None):
        invitation = Invitation.objects.select_related('organization').filter(token=token).first()
        if invitation is None:
            return Response({
                'state': 'invalid',
                'error': 'Invitation not found.'
            }, status=status.HTTP_404_NOT_FOUND)
        return Response({
            'state': invitation.state,
            'invitation': InvitationSerializer(invitation).data,
        })

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        invitation = self._get_own_invitation(request, pk)

        if not invitation.is_valid:
            return Response({
                'error': 'This invitation has expired or was already used.',
                'state': invitation.state,
            }, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            membership, _ = Membership.objects.get_or_create(
                organization=invitation.organization,
                user=request.user,
                defaults={'role': invitation.role},
            )
            invitation.status = InvitationStatus.ACCEPTED
            invitation.save(update_fields=['status', 'updated_at'])

        return Response({
            'message': 'Invitation accepted successfully.',
            'membership': MembershipSerializer(membership).data,
        })

    @action(detail=True, methods=['post'])
    def decline(self, request, pk=None):
        invitation = self._get_own_invitation(request, pk)

        if not invitation.is_pending:
            return Response({
                'error': 'This invitation was already used.',
                'state': invitation.state,
            }, status=status.HTTP_400_BAD_REQUEST)

        invitation.status = InvitationStatus.DECLINED
        invitation.save(update_fields=['status', 'updated_at'])
        return Response({'message': 'Invitation declined.'})
