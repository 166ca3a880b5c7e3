from django.contrib import admin

from .capabilities import Capabilities
from .models import Platform, PreviewFile, Project, ProjectFile


@admin.register(Platform)
class PlatformAdmin(admin.ModelAdmin):
    """Operators maintain the platform registry here; ``Platform.clean`` rejects mixed intake modes."""
    list_display = ['id', 'name', 'migration_mode', 'created_at']
    search_fields = ['id', 'name']
    prepopulated_fields = {'id': ('name',)}

    fieldsets = (
        (None, {
            'fields': ('id', 'name', 'description', 'items')
        }),
        ('Intake', {
            'fields': ('files', 'api', 'plugin', 'video_guide')
        }),
    )

    @admin.display(description='Mode')
    def migration_mode(self, obj):
        return Capabilities.for_platform(obj).mode


class ProjectFileInline(admin.TabularInline):
    model = ProjectFile
    extra = 0
    fields = ['file_name', 'file_type', 'bucket', 'file_path', 'file_size', 'is_initial', 'upload_date']
    readonly_fields = fields


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['domain', 'organization', 'source_platform', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'source_platform']
    search_fields = ['domain', 'shopify_url', 'organization__name']
    raw_id_fields = ['organization', 'created_by']
    inlines = [ProjectFileInline]


@admin.register(PreviewFile)
class PreviewFileAdmin(admin.ModelAdmin):
    list_display = ['project', 'type', 'file_path', 'length', 'size', 'created_at']
    list_filter = ['type']
    raw_id_fields = ['project']
