"""
Organization Context
====================
Explicit tenant scoping passed into every operation that needs it.

A context starts in ``loading`` and ends either ``ready`` (a current
organization and membership are known) or ``no_organization``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional

from django.core.exceptions import ValidationError

from core.permissions import can_perform

from .models import Membership


class ContextState(str, Enum):
    LOADING = 'loading'
    READY = 'ready'
    NO_ORGANIZATION = 'no-organization'


@dataclass(frozen=True)
class OrganizationContext:
    user: Any
    state: ContextState = ContextState.LOADING
    membership: Optional[Membership] = None
    memberships: List[Membership] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.state == ContextState.READY

    @property
    def organization(self):
        return self.membership.organization if self.membership else None

    @property
    def organization_id(self):
        return self.membership.organization_id if self.membership else None

    @property
    def role(self) -> Optional[str]:
        return self.membership.role if self.membership else None

    def can(self, action) -> bool:
        return self.is_ready and can_perform(self.role, action)

    def switch(self, organization_id) -> 'OrganizationContext':
        """Return a ready context for another of the user's organizations."""
        for membership in self.memberships:
            if str(membership.organization_id) == str(organization_id):
                return replace(self, state=ContextState.READY, membership=membership)
        return self


def membership_for(user, organization) -> Optional[Membership]:
    """The user's membership in ``organization``, or None."""
    if user is None or not user.is_authenticated or organization is None:
        return None
    return Membership.objects.select_related('organization').filter(
        user=user, organization=organization
    ).first()


def resolve_context(user, organization_id=None) -> OrganizationContext:
    """
    Resolve the user's organization context.

    The requested organization wins when the user belongs to it; otherwise
    the first membership is used. Users without memberships end up in the
    ``no-organization`` state.
    """
    context = OrganizationContext(user=user)
    if user is None or not user.is_authenticated:
        return replace(context, state=ContextState.NO_ORGANIZATION)

    memberships = list(
        Membership.objects.filter(user=user).select_related('organization').order_by('created_at')
    )
    context = replace(context, memberships=memberships)
    if not memberships:
        return replace(context, state=ContextState.NO_ORGANIZATION)

    if organization_id:
        try:
            switched = context.switch(organization_id)
        except (ValueError, ValidationError):
            switched = context
        if switched.is_ready:
            return switched

    return replace(context, state=ContextState.READY, membership=memberships[0])
