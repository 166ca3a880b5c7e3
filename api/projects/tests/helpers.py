"""Shared fixtures for the project tests."""

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile

from core.organizations.models import Membership, Organization, OrganizationRole
from projects.models import Platform, Project, ProjectStatus

User = get_user_model()

IN_MEMORY = {'BACKEND': 'django.core.files.storage.InMemoryStorage'}

IN_MEMORY_STORAGES = {
    'default': IN_MEMORY,
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    'project-files': IN_MEMORY,
    'projects': IN_MEMORY,
    'preview-files': IN_MEMORY,
}

VALID_TOKEN = 'shpat_1234567890abcdef'


def make_user(email, **extra):
    return User.objects.create_user(email=email, password='testpass123', **extra)


def make_organization(name='Acme', **extra):
    return Organization.objects.create(name=name, domain='acme.com', **extra)


def add_member(organization, user, role=OrganizationRole.MEMBER):
    return Membership.objects.create(organization=organization, user=user, role=OrganizationRole(role).value)


def make_platform(slug, **fields):
    return Platform.objects.create(id=slug, name=fields.pop('name', slug.title()), **fields)


def make_project(organization, user=None, **fields):
    defaults = {
        'domain': 'example.com',
        'source_platform': 'woocommerce',
        'shopify_url': 'test.myshopify.com',
        'access_token': VALID_TOKEN,
        'items': ['product'],
        'status': ProjectStatus.SUBMITTED,
        'created_by': user,
    }
    defaults.update(fields)
    return Project.objects.create(organization=organization, **defaults)


def csv_upload(name='products.csv', content=b'handle,title\nshirt,Shirt\n'):
    return SimpleUploadedFile(name, content, content_type='text/csv')
