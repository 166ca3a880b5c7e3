import uuid
from django.db import models


class BaseModel(models.Model):
    id = models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# Organization models live in their own module; importing them here
# registers them with the core app at startup.
from core.organizations.models import (  # noqa: E402,F401
    Organization,
    Membership,
    Invitation,
    InvitationStatus,
    OrganizationRole,
)

__all__ = [
    'BaseModel',
    'Organization',
    'Membership',
    'Invitation',
    'InvitationStatus',
    'OrganizationRole',
]
