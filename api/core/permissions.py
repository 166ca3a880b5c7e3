"""
Permission Policy
=================
Single source of truth for "may this role do that" questions.

Usage:
    from core.permissions import Action, can_perform

    if not can_perform(membership.role, Action.DELETE_CUSTOM_FILE):
        ...
"""

from enum import Enum

from core.organizations.models import OrganizationRole

OWNER = OrganizationRole.OWNER.value
ADMIN = OrganizationRole.ADMIN.value
MEMBER = OrganizationRole.MEMBER.value
VIEWER = OrganizationRole.VIEWER.value


class Action(str, Enum):
    VIEW_PROJECT = 'view_project'
    CREATE_PROJECT = 'create_project'
    EDIT_PROJECT = 'edit_project'
    DELETE_PROJECT = 'delete_project'
    LIST_CUSTOM_FILES = 'list_custom_files'
    UPLOAD_CUSTOM_FILES = 'upload_custom_files'
    DELETE_CUSTOM_FILE = 'delete_custom_file'
    UPDATE_ORGANIZATION = 'update_organization'
    DELETE_ORGANIZATION = 'delete_organization'
    INVITE_MEMBER = 'invite_member'
    REMOVE_MEMBER = 'remove_member'
    CANCEL_INVITATION = 'cancel_invitation'


POLICY = {
    Action.VIEW_PROJECT: {OWNER, ADMIN, MEMBER, VIEWER},
    Action.LIST_CUSTOM_FILES: {OWNER, ADMIN, MEMBER, VIEWER},
    Action.CREATE_PROJECT: {OWNER, ADMIN, MEMBER},
    Action.EDIT_PROJECT: {OWNER, ADMIN, MEMBER},
    Action.DELETE_PROJECT: {OWNER, ADMIN, MEMBER},
    Action.UPLOAD_CUSTOM_FILES: {OWNER, ADMIN, MEMBER},
    Action.DELETE_CUSTOM_FILE: {OWNER, ADMIN},
    Action.UPDATE_ORGANIZATION: {OWNER, ADMIN},
    Action.INVITE_MEMBER: {OWNER, ADMIN},
    Action.REMOVE_MEMBER: {OWNER, ADMIN},
    Action.CANCEL_INVITATION: {OWNER, ADMIN},
    Action.DELETE_ORGANIZATION: {OWNER},
}


def can_perform(role, action) -> bool:
    """Return True when ``role`` is allowed to perform ``action``."""
    if role is None:
        return False
    if isinstance(role, OrganizationRole):
        role = role.value
    try:
        allowed = POLICY[Action(action)]
    except ValueError:
        return False
    return role in allowed


def allowed_roles(action):
    """Roles allowed to perform ``action``, owner first."""
    order = OrganizationRole.values()
    return sorted(POLICY[Action(action)], key=order.index)
