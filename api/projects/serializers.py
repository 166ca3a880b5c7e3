from rest_framework import serializers

from .capabilities import Capabilities
from .form_data import AdditionalFile, ProjectFormData, UploadedFile
from .models import ItemType, Platform, PreviewFile, Project, ProjectFile, ProjectStatus
from .validation import (
    normalize_domain,
    normalize_shopify_url,
    validate_domain,
    validate_shopify_access_token,
    validate_shopify_url,
)
from .wizard import Direction, WizardStep


class PlatformSerializer(serializers.ModelSerializer):
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = Platform
        fields = ['id', 'name', 'description', 'files', 'api', 'plugin', 'video_guide', 'items', 'capabilities']
        read_only_fields = fields

    def get_capabilities(self, obj):
        return Capabilities.for_platform(obj).as_dict()


class ProjectFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectFile
        fields = [
            'id', 'project', 'file_name', 'file_type', 'file_path', 'file_size',
            'description', 'upload_date', 'is_initial'
        ]
        read_only_fields = fields


class ProjectSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = Project
        fields = [
            'id', 'organization', 'domain', 'source_platform', 'shopify_url', 'access_token',
            'items', 'source_api', 'special_demands', 'status', 'status_display',
            'created_by', 'created_by_email', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProjectDetailSerializer(ProjectSerializer):
    files = ProjectFileSerializer(many=True, read_only=True)

    class Meta(ProjectSerializer.Meta):
        fields = ProjectSerializer.Meta.fields + ['files']
        read_only_fields = fields


def _validate_items(value):
    unknown = [item for item in value if item not in ItemType.values]
    if unknown:
        raise serializers.ValidationError(f"Unknown data type: {', '.join(unknown)}")
    return value


class ProjectUpdateSerializer(serializers.ModelSerializer):
    """Fields a customer may still change while the project is submitted"""
    items = serializers.ListField(child=serializers.CharField(), allow_empty=False)

    class Meta:
        model = Project
        fields = ['domain', 'shopify_url', 'access_token', 'items', 'special_demands', 'source_api']

    def validate_domain(self, value):
        value = normalize_domain(value)
        if not validate_domain(value):
            raise serializers.ValidationError('Please enter a valid domain (e.g., example.com)')
        return value

    def validate_shopify_url(self, value):
        value = normalize_shopify_url(value)
        if not validate_shopify_url(value):
            raise serializers.ValidationError('Please enter a valid Shopify URL (e.g., mystore.myshopify.com)')
        return value

    def validate_access_token(self, value):
        if not validate_shopify_access_token(value):
            raise serializers.ValidationError('Please enter a valid Shopify access token')
        return value

    def validate_items(self, value):
        return _validate_items(value)

    def validate_source_api(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError('Source API must be an object.')
        return value

    def validate_special_demands(self, value):
        return value or None


class ProjectSubmissionSerializer(serializers.Serializer):
    """
    Multipart body of a new project. Presence and syntax checks are left to
    the wizard validation so the messages match the form.

    ``files[i]`` is described by ``file_types[i]``, ``file_names[i]`` and
    ``file_descriptions[i]``; ``additional_files`` likewise.
    """
    domain = serializers.CharField(required=False, allow_blank=True, default='')
    source_platform = serializers.CharField(required=False, allow_blank=True, default='')
    special_demands = serializers.CharField(required=False, allow_blank=True, default='')
    shopify_url = serializers.CharField(required=False, allow_blank=True, default='')
    shopify_access_token = serializers.CharField(required=False, allow_blank=True, default='')
    items = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    api = serializers.JSONField(required=False, default=dict)

    files = serializers.ListField(child=serializers.FileField(), required=False, default=list)
    file_types = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    file_names = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    file_descriptions = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, default=list
    )
    additional_files = serializers.ListField(child=serializers.FileField(), required=False, default=list)
    additional_names = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, default=list
    )
    additional_descriptions = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False, default=list
    )

    def validate_items(self, value):
        return _validate_items(value)

    def validate_api(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError('API credentials must be an object.')
        return {str(key): '' if val is None else str(val) for key, val in value.items()}

    def validate(self, attrs):
        if len(attrs['additional_names']) > len(attrs['additional_files']):
            raise serializers.ValidationError({'additional_names': 'More names than additional files.'})
        return attrs

    @staticmethod
    def _at(values, index):
        return values[index] if index < len(values) else ''

    def to_form(self):
        """Returns ``(form_data, files, additional_files)``."""
        data = self.validated_data
        form_data = ProjectFormData(
            domain=data['domain'].strip(),
            source_platform=data['source_platform'].strip(),
            special_demands=data['special_demands'],
            shopify_url=data['shopify_url'].strip(),
            shopify_access_token=data['shopify_access_token'].strip(),
            items=list(data['items']),
            api=data['api'],
        )
        files = [
            UploadedFile.from_upload(
                upload,
                selected_type=self._at(data['file_types'], index),
                custom_name=self._at(data['file_names'], index),
                description=self._at(data['file_descriptions'], index),
            )
            for index, upload in enumerate(data['files'])
        ]
        additional_files = [
            AdditionalFile(
                name=self._at(data['additional_names'], index) or upload.name,
                description=self._at(data['additional_descriptions'], index),
                content=upload,
            )
            for index, upload in enumerate(data['additional_files'])
        ]
        return form_data, files, additional_files


class FileDescriptorSerializer(serializers.Serializer):
    """A pending file as the wizard sees it; the bytes are sent on submit."""
    name = serializers.CharField()
    size = serializers.IntegerField(required=False, default=0, min_value=0)
    selected_type = serializers.CharField(required=False, allow_blank=True, default='')
    custom_name = serializers.CharField(required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')


class WizardFormSerializer(serializers.Serializer):
    domain = serializers.CharField(required=False, allow_blank=True, default='')
    source_platform = serializers.CharField(required=False, allow_blank=True, default='')
    special_demands = serializers.CharField(required=False, allow_blank=True, default='')
    shopify_url = serializers.CharField(required=False, allow_blank=True, default='')
    shopify_access_token = serializers.CharField(required=False, allow_blank=True, default='')
    items = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    api = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)
    files = FileDescriptorSerializer(many=True, required=False, default=list)


class WizardRequestSerializer(serializers.Serializer):
    step = serializers.ChoiceField(choices=[step.value for step in WizardStep], default=WizardStep.BASIC_INFO.value)
    direction = serializers.ChoiceField(choices=[d.value for d in Direction], default=Direction.NEXT.value)
    form = WizardFormSerializer(required=False, default=dict)

    def to_form_fields(self):
        """Returns ``(form field values, files)`` for ``ProjectForm``."""
        form = dict(self.validated_data.get('form') or {})
        files = [UploadedFile(**descriptor) for descriptor in form.pop('files', [])]
        return form, files


class PreviewFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = PreviewFile
        fields = ['id', 'project', 'type', 'file_path', 'length', 'size', 'created_at']
        read_only_fields = fields


class ProjectStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProjectStatus.choices)
    name = serializers.CharField()
    description = serializers.CharField()
