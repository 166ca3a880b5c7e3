"""
Organization Serializers
========================
DRF serializers for Organization, Membership and Invitation models.
"""

from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from .models import (
    Invitation,
    InvitationStatus,
    Membership,
    Organization,
    OrganizationRole,
)


class OrganizationSerializer(serializers.ModelSerializer):
    member_count = serializers.ReadOnlyField()

    class Meta:
        model = Organization
        fields = ['id', 'name', 'domain', 'country', 'member_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'member_count', 'created_at', 'updated_at']


class OrganizationCreateSerializer(serializers.ModelSerializer):
    """Creates an organization and makes the creator its owner"""

    class Meta:
        model = Organization
        fields = ['id', 'name', 'domain', 'country']
        read_only_fields = ['id']

    def create(self, validated_data):
        request = self.context['request']
        with transaction.atomic():
            organization = Organization.objects.create(**validated_data)
            Membership.objects.create(
                organization=organization,
                user=request.user,
                role=OrganizationRole.OWNER.value,
            )
        return organization


class MembershipSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)
    user_name = serializers.CharField(source='user.full_name', read_only=True)
    organization = OrganizationSerializer(read_only=True)

    class Meta:
        model = Membership
        fields = ['id', 'role', 'user', 'user_email', 'user_name', 'organization', 'created_at']
        read_only_fields = fields


class MemberSerializer(serializers.ModelSerializer):
    """Membership as listed on the team page"""
    user_email = serializers.EmailField(source='user.email', read_only=True)
    user_name = serializers.CharField(source='user.full_name', read_only=True)

    class Meta:
        model = Membership
        fields = ['id', 'role', 'user', 'user_email', 'user_name', 'created_at']
        read_only_fields = fields


class InvitationSerializer(serializers.ModelSerializer):
    organization_name = serializers.CharField(source='organization.name', read_only=True)
    invited_by_email = serializers.EmailField(source='invited_by.email', read_only=True, default=None)
    is_expired = serializers.ReadOnlyField()
    state = serializers.ReadOnlyField()

    class Meta:
        model = Invitation
        fields = [
            'id', 'organization', 'organization_name', 'invited_email', 'role',
            'status', 'state', 'invited_by', 'invited_by_email',
            'expires_at', 'is_expired', 'created_at'
        ]
        read_only_fields = fields


class InviteMemberSerializer(serializers.Serializer):
    """Validates and creates an invitation for the organization in context"""
    email = serializers.EmailField()
    role = serializers.ChoiceField(
        choices=OrganizationRole.choices(),
        default=OrganizationRole.MEMBER.value
    )

    def validate_role(self, value):
        if value == OrganizationRole.OWNER.value:
            raise serializers.ValidationError("Invitations cannot grant the owner role.")
        return value

    def validate_email(self, value):
        organization = self.context['organization']
        email = value.strip().lower()

        if Membership.objects.filter(organization=organization, user__email__iexact=email).exists():
            raise serializers.ValidationError("This user is already a member of the organization.")

        if Invitation.objects.filter(
            organization=organization,
            invited_email__iexact=email,
            status=InvitationStatus.PENDING,
            expires_at__gt=timezone.now(),
        ).exists():
            raise serializers.ValidationError("An invitation is already pending for this email.")
        return email

    def create(self, validated_data):
        request = self.context['request']
        return Invitation.objects.create(
            organization=self.context['organization'],
            invited_email=validated_data['email'],
            role=validated_data['role'],
            invited_by=request.user,
            expires_at=timezone.now() + timedelta(days=settings.INVITATION_EXPIRY_DAYS),
        )
