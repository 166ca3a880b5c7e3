from django.contrib import admin

from .organizations.models import Invitation, Membership, Organization


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0
    raw_id_fields = ['user']


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'domain', 'country', 'member_count', 'created_at']
    search_fields = ['name', 'domain']
    inlines = [MembershipInline]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ['user', 'organization', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['user__email', 'organization__name']
    raw_id_fields = ['user', 'organization']


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ['invited_email', 'organization', 'role', 'status', 'expires_at', 'invited_by']
    list_filter = ['status', 'role']
    search_fields = ['invited_email', 'organization__name']
    readonly_fields = ['token']
    raw_id_fields = ['organization', 'invited_by']
