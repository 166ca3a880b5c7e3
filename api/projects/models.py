"""
Project Models
==============
Migration projects, the platforms they migrate from, their uploaded files
and the read-only previews produced by the migration engine.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.models import BaseModel
from core.organizations.models import Organization

from .storage import PROJECT_FILES_BUCKET


class ItemType(models.TextChoices):
    """Shopify data types a project can migrate"""
    PRODUCT = 'product', 'Products'
    ORDER = 'order', 'Orders'
    CUSTOMER = 'customer', 'Customers'
    COLLECTION = 'collection', 'Collections'
    GIFTCARD = 'giftcard', 'Gift cards'
    DISCOUNT_CODE = 'discountCode', 'Discount codes'


class ProjectStatus(models.TextChoices):
    """Project lifecycle, in order"""
    SUBMITTED = 'submitted', 'Submitted'
    IN_PROGRESS = 'in_progress', 'In Progress'
    IN_REVIEW = 'in_review', 'In Review'
    APPROVED = 'approved', 'Approved'
    MIGRATING = 'migrating', 'Migrating'
    COMPLETED = 'completed', 'Completed'

    @classmethod
    def descriptions(cls):
        return {
            cls.SUBMITTED: 'The project was submitted and is waiting to be picked up.',
            cls.IN_PROGRESS: 'Our team is preparing the migration.',
            cls.IN_REVIEW: 'A preview of the migrated data is ready for your review.',
            cls.APPROVED: 'You approved the preview; the migration is scheduled.',
            cls.MIGRATING: 'Data is being migrated to your Shopify store.',
            cls.COMPLETED: 'The migration has finished.',
        }


class Platform(models.Model):
    """
    A source platform and what it needs to start a migration.

    Exactly one intake mode applies to every stored platform:
    - csv:    ``files`` lists the required file kinds
    - api:    ``api`` maps credential fields to their config, no plugin
    - plugin: ``api`` and ``plugin`` are both set
    - custom: nothing is set; the customer uploads whatever they have
    """
    id = models.SlugField(max_length=64, primary_key=True)
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    files = models.JSONField(null=True, blank=True, help_text="Required file kinds for CSV migrations")
    api = models.JSONField(null=True, blank=True, help_text="Credential field -> config for API migrations")
    plugin = models.URLField(null=True, blank=True, help_text="Plugin/extension install URL")
    video_guide = models.URLField(null=True, blank=True)
    items = models.JSONField(null=True, blank=True, help_text="Supported data types")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        if not self.files:
            self.files = None
        if not self.api:
            self.api = None

        if self.files is not None and not isinstance(self.files, list):
            raise ValidationError({'files': 'Files must be a list of file kinds.'})
        if self.api is not None and not isinstance(self.api, dict):
            raise ValidationError({'api': 'API requirements must be a mapping.'})
        if self.plugin and self.api is None:
            raise ValidationError({'plugin': 'Plugin platforms must declare their API fields.'})
        if self.files is not None and self.api is not None:
            raise ValidationError('A platform takes either files or API credentials, not both.')

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class Project(BaseModel):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='projects')
    domain = models.CharField(max_length=253)
    source_platform = models.CharField(max_length=64)
    shopify_url = models.CharField(max_length=255, blank=True)
    access_token = models.CharField(max_length=255, blank=True)
    items = models.JSONField(default=list, blank=True)
    source_api = models.JSONField(null=True, blank=True)
    special_demands = models.TextField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=ProjectStatus.choices,
        default=ProjectStatus.SUBMITTED
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='projects_created'
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.domain} ({self.source_platform})"

    @property
    def is_editable(self):
        return self.status == ProjectStatus.SUBMITTED


class ProjectFile(BaseModel):
    """Metadata for one uploaded artifact; the bytes live in the object store at ``file_path``."""
    CUSTOM_CSV = 'custom-csv'

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='files')
    file_name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100)
    file_path = models.CharField(max_length=500)
    bucket = models.CharField(max_length=63, default=PROJECT_FILES_BUCKET, help_text="Object store bucket holding file_path")
    file_size = models.BigIntegerField(default=0)
    description = models.TextField(null=True, blank=True)
    upload_date = models.DateTimeField(default=timezone.now)
    is_initial = models.BooleanField(default=True)

    class Meta:
        ordering = ['-upload_date']

    def __str__(self):
        return self.file_name

    @property
    def is_custom_csv(self):
        return self.file_type == self.CUSTOM_CSV


class PreviewFile(models.Model):
    """JSONL file of preview records for one data type, written by the migration engine."""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='preview_files')
    type = models.CharField(max_length=50)
    file_path = models.CharField(max_length=500)
    length = models.IntegerField(null=True, blank=True)
    size = models.BigIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} preview for {self.project_id}"


class Preview(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='previews')
    type = models.CharField(max_length=50)
    data = models.JSONField(default=dict)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} preview record"
