"""
Project ViewSets
================
Platforms, the new-project wizard, project management, custom CSV files
and previews.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.organizations.context import membership_for
from core.organizations.permissions import (
    OrganizationContextPermission,
    get_organization_context,
    require_action,
)
from core.permissions import Action

from . import previews
from .capabilities import fetch_platforms
from .cleanup import CleanupAborted, delete_project
from .custom_files import delete_custom_file, list_custom_files, upload_custom_files
from .exceptions import FileUploadError, PlatformLoadError, SubmissionError
from .models import Platform, Project, ProjectStatus
from .serializers import (
    PlatformSerializer,
    PreviewFileSerializer,
    ProjectDetailSerializer,
    ProjectFileSerializer,
    ProjectSerializer,
    ProjectStatusSerializer,
    ProjectSubmissionSerializer,
    ProjectUpdateSerializer,
    WizardRequestSerializer,
)
from .wizard import ProjectForm

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=['Platforms'], summary='List source platforms with their capabilities'),
    retrieve=extend_schema(tags=['Platforms'], summary='Get a source platform'),
)
class PlatformViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = PlatformSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
    queryset = Platform.objects.all()

    def list(self, request, *args, **kwargs):
        try:
            platforms = fetch_platforms()
        except PlatformLoadError as exc:
            return Response({'error': exc.message}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(self.get_serializer(platforms, many=True).data)


@extend_schema_view(
    list=extend_schema(tags=['Projects'], summary="List the current organization's projects"),
    create=extend_schema(
        tags=['Projects'],
        summary='Submit a new project',
        description='Validates every applicable wizard step, creates the project and uploads its files. '
                    'If any file fails the project is removed again.',
        request={'multipart/form-data': ProjectSubmissionSerializer},
    ),
    retrieve=extend_schema(tags=['Projects'], summary='Get a project with its files'),
    partial_update=extend_schema(
        tags=['Projects'], summary='Edit a project (only while submitted)', request=ProjectUpdateSerializer
    ),
    destroy=extend_schema(tags=['Projects'], summary='Delete a project (only while submitted)'),
    statuses=extend_schema(tags=['Projects'], summary='Project lifecycle', responses=ProjectStatusSerializer(many=True)),
    wizard=extend_schema(tags=['Projects'], summary='Validate and navigate the new-project wizard',
                         request=WizardRequestSerializer),
    custom_files=extend_schema(tags=['Project Files'], summary='List, upload or delete custom CSV files'),
    preview_files=extend_schema(tags=['Previews'], summary='Latest preview file per data type'),
    preview=extend_schema(
        tags=['Previews'],
        summary='One page of preview records',
        parameters=[
            OpenApiParameter('type', str, description='Data type, e.g. product'),
            OpenApiParameter('page', int, description='Page number, starting at 1'),
        ],
    ),
)
class ProjectViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     viewsets.GenericViewSet):
    """
    list:           GET    /projects/?status=&source_platform=&search=&ordering=
    create:         POST   /projects/
    retrieve:       GET    /projects/{id}/
    partial_update: PATCH  /projects/{id}/
    destroy:        DELETE /projects/{id}/
    custom_files:   GET|POST|DELETE /projects/{id}/custom-files/
    preview_files:  GET    /projects/{id}/preview-files/
    preview:        GET    /projects/{id}/preview/?type=&page=
    """
    permission_classes = [IsAuthenticated, OrganizationContextPermission]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'source_platform']
    search_fields = ['domain', 'shopify_url']
    ordering_fields = ['created_at', 'domain', 'status']
    ordering = ['-created_at']

    def get_queryset(self):
        if self.action == 'list':
            context = get_organization_context(self.request)
            return Project.objects.filter(organization_id=context.organization_id).select_related('created_by')
        return Project.objects.filter(
            organization__memberships__user=self.request.user
        ).select_related('organization')

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ProjectDetailSerializer
        if self.action == 'partial_update':
            return ProjectUpdateSerializer
        return ProjectSerializer

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound('Project not found or access denied')

    def _role_for(self, project):
        membership = membership_for(self.request.user, project.organization)
        if membership is None:
            raise PermissionDenied('Access denied: You do not have permission to access this project')
        return membership.role

    def create(self, request, *args, **kwargs):
        context = get_organization_context(request)
        require_action(context.role, Action.CREATE_PROJECT)

        serializer = ProjectSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        form_data, files, additional_files = serializer.to_form()

        form = ProjectForm()
        form.load_platforms()
        if form.errors:
            return Response({'errors': form.errors}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        form.update(**vars(form_data))
        form.files = files
        form.additional_files = additional_files
        if not form.validate_all():
            return Response({'errors': form.errors}, status=status.HTTP_400_BAD_REQUEST)

        try:
            project_id = form.submit(context)
        except (SubmissionError, FileUploadError) as exc:
            return Response({'error': exc.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        project = Project.objects.get(pk=project_id)
        return Response(ProjectDetailSerializer(project).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        project = self.get_object()
        require_action(self._role_for(project), Action.EDIT_PROJECT)
        if not project.is_editable:
            return Response({
                'error': 'Project can only be edited when status is "submitted"',
                'currentStatus': project.status,
            }, status=status.HTTP_400_BAD_REQUEST)

        serializer = ProjectUpdateSerializer(project, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ProjectDetailSerializer(project).data)

    def destroy(self, request, *args, **kwargs):
        project = self.get_object()
        require_action(self._role_for(project), Action.DELETE_PROJECT)

        if project.status != ProjectStatus.SUBMITTED:
            return Response({
                'error': 'Project can only be deleted when status is "submitted"',
                'currentStatus': project.status,
            }, status=status.HTTP_400_BAD_REQUEST)

        try:
            report = delete_project(project)
        except CleanupAborted as exc:
            return Response({
                'error': exc.message,
                'warnings': exc.report.warnings,
            }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'message': 'Project deleted successfully',
            'warnings': report.warnings,
        })

    @action(detail=False, methods=['get'])
    def statuses(self, request):
        descriptions = ProjectStatus.descriptions()
        data = [
            {'status': value, 'name': label, 'description': descriptions[value]}
            for value, label in ProjectStatus.choices
        ]
        return Response(data)

    @action(detail=False, methods=['post'])
    def wizard(self, request):
        serializer = WizardRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields, files = serializer.to_form_fields()

        form = ProjectForm()
        form.load_platforms()
        if form.errors:
            return Response({
                'step': serializer.validated_data['step'],
                'errors': form.errors,
                'capabilities': form.capabilities.as_dict(),
            }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        form.update(**fields)
        form.files = files
        form.go_to(serializer.validated_data['step'])
        step = form.apply(serializer.validated_data['direction'])
        return Response({
            'step': int(step),
            'errors': form.errors,
            'capabilities': form.capabilities.as_dict(),
        })

    @action(detail=True, methods=['get', 'post', 'delete'], url_path='custom-files',
            parser_classes=[MultiPartParser, FormParser, JSONParser])
    def custom_files(self, request, pk=None):
        project = self.get_object()
        role = self._role_for(project)

        if request.method == 'GET':
            require_action(role, Action.LIST_CUSTOM_FILES)
            files = list_custom_files(project)
            return Response({'success': True, 'files': ProjectFileSerializer(files, many=True).data})

        if request.method == 'POST':
            uploads = request.FILES.getlist('files')
            if not uploads:
                return Response({'error': 'No files provided'}, status=status.HTTP_400_BAD_REQUEST)
            require_action(role, Action.UPLOAD_CUSTOM_FILES)
            results = upload_custom_files(project, uploads)
            return Response({'success': True, 'results': results})

        file_id = request.data.get('fileId')
        if not file_id:
            return Response({'error': 'File ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        require_action(role, Action.DELETE_CUSTOM_FILE, 'Insufficient permissions to delete files')

        try:
            project_file = list_custom_files(project).filter(pk=file_id).first()
        except DjangoValidationError:
            project_file = None
        if project_file is None:
            return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            delete_custom_file(project_file)
        except DatabaseError:
            logger.exception("Error deleting custom file %s", file_id)
            return Response({'error': 'Failed to delete file'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({'success': True, 'message': 'File deleted successfully'})

    @action(detail=True, methods=['get'], url_path='preview-files')
    def preview_files(self, request, pk=None):
        project = self.get_object()
        require_action(self._role_for(project), Action.VIEW_PROJECT)
        files = previews.list_available_preview_kinds(project.id)
        return Response(PreviewFileSerializer(files, many=True).data)

    @action(detail=True, methods=['get'])
    def preview(self, request, pk=None):
        project = self.get_object()
        require_action(self._role_for(project), Action.VIEW_PROJECT)

        kind = request.query_params.get('type') or previews.DEFAULT_KIND
        try:
            page = int(request.query_params.get('page', '1'))
        except ValueError:
            return Response({'error': 'Page must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        if page < 1:
            return Response({'error': 'Page must be >= 1'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = previews.fetch_preview_page(project.id, kind, page)
        except OSError:
            logger.exception("Error reading preview file for project %s", project.id)
            return Response({'error': 'Failed to fetch preview data'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        result['contexts'] = [previews.render_context(kind, item) for item in result['items']]
        return Response(result)

