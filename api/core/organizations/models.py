"""
Organization & Membership Models
================================
Tenant boundary of the dashboard with role-based access control.
"""

import secrets
from enum import Enum

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class OrganizationRole(str, Enum):
    """Roles within an organization"""
    OWNER = 'owner'     # Full access, can delete the organization
    ADMIN = 'admin'     # Manage members, invitations & settings
    MEMBER = 'member'   # Create and manage projects
    VIEWER = 'viewer'   # Read-only access

    @classmethod
    def choices(cls):
        return [(tag.value, tag.value.capitalize()) for tag in cls]

    @classmethod
    def values(cls):
        return [tag.value for tag in cls]


class InvitationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    DECLINED = 'declined', 'Declined'


class Organization(BaseModel):
    """
    A customer organization. Owns projects and memberships; deleting it
    cascades to all of its data.
    """
    name = models.CharField(max_length=200, help_text="Organization name")
    domain = models.CharField(max_length=253, blank=True, help_text="Primary web domain")
    country = models.CharField(max_length=100, blank=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'

    def __str__(self):
        return self.name

    @property
    def member_count(self):
        return self.memberships.count()


class Membership(BaseModel):
    """
    Links a user to an organization with a role.
    """
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(
        max_length=20,
        choices=OrganizationRole.choices(),
        default=OrganizationRole.VIEWER.value
    )

    class Meta:
        unique_together = ['organization', 'user']
        ordering = ['created_at']
        verbose_name = 'Membership'
        verbose_name_plural = 'Memberships'

    def __str__(self):
        return f"{self.user.email} @ {self.organization.name} ({self.role})"

    @property
    def is_owner(self):
        return self.role == OrganizationRole.OWNER.value


def generate_invitation_token():
    return secrets.token_urlsafe(32)


class Invitation(BaseModel):
    """
    Invitation for an email address to join an organization. Expiry is
    evaluated when the invitation is read; nothing sweeps stale rows.
    """
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='invitations')
    invited_email = models.EmailField()
    role = models.CharField(
        max_length=20,
        choices=OrganizationRole.choices(),
        default=OrganizationRole.MEMBER.value
    )
    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING
    )
    token = models.CharField(max_length=100, unique=True, default=generate_invitation_token)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invitations_sent'
    )
    expires_at = models.DateTimeField()

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Invitation'
        verbose_name_plural = 'Invitations'

    def __str__(self):
        return f"Invitation to {self.invited_email} for {self.organization.name}"

    @property
    def is_expired(self):
        return timezone.now() > self.expires_at

    @property
    def is_pending(self):
        return self.status == InvitationStatus.PENDING

    @property
    def is_valid(self):
        return self.is_pending and not self.is_expired

    @property
    def state(self):
        """Read-time state: valid, expired or used."""
        if not self.is_pending:
            return 'used'
        if self.is_expired:
            return 'expired'
        return 'valid'
