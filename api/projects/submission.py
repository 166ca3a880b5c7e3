"""
Project Submission
==================
Creates a project and uploads its files as one logical operation.

The project row is inserted first (file paths are namespaced by its id).
Each file is then uploaded and recorded; a failed record insert removes the
object it was recording. If any file fails, everything uploaded so far is
removed and the project row is deleted, which also drops the file rows
already written.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from . import storage
from .exceptions import FileUploadError, SubmissionError
from .models import Project, ProjectFile, ProjectStatus
from .validation import normalize_domain, normalize_shopify_url

logger = logging.getLogger(__name__)


def build_project_payload(form_data, organization, user):
    """Map form fields onto project columns."""
    return {
        'organization': organization,
        'domain': normalize_domain(form_data.domain),
        'source_platform': form_data.source_platform,
        'shopify_url': normalize_shopify_url(form_data.shopify_url),
        'access_token': form_data.shopify_access_token,
        'items': list(form_data.items or []),
        'source_api': dict(form_data.api) if form_data.api else None,
        'special_demands': form_data.special_demands or None,
        'status': ProjectStatus.SUBMITTED,
        'created_by': user,
    }


def _store_file(project, name, content, uploaded, **record):
    path = storage.upload_file(storage.PROJECT_FILES_BUCKET, f'{project.id}/{name}', content)
    try:
        with transaction.atomic():
            ProjectFile.objects.create(
                project=project, bucket=storage.PROJECT_FILES_BUCKET, file_path=path, **record
            )
    except DatabaseError:
        _remove_quietly([path])
        raise
    uploaded.append(path)


def _upload_project_files(project, files, additional_files, uploaded):
    for item in files:
        _store_file(
            project, item.name, item.content, uploaded,
            file_name=item.custom_name or item.name,
            file_size=item.size,
            file_type=item.selected_type or 'unknown',
            description=item.description or None,
            upload_date=timezone.now(),
            is_initial=True,
        )

    for item in additional_files:
        _store_file(
            project, item.name, item.content, uploaded,
            file_name=item.name,
            file_size=item.size,
            file_type=ProjectFile.CUSTOM_CSV,
            description=item.description or None,
            upload_date=timezone.now(),
            is_initial=True,
        )


def _remove_quietly(paths):
    try:
        storage.remove_files(storage.PROJECT_FILES_BUCKET, paths)
    except storage.StorageError as exc:
        logger.warning("Could not remove uploaded files during rollback: %s", exc)


def _compensate(project, uploaded):
    _remove_quietly(uploaded)
    try:
        with transaction.atomic():
            Project.objects.filter(pk=project.pk).delete()
        logger.info("Deleted project %s after failed file upload", project.pk)
    except DatabaseError:
        logger.exception("Failed to delete project %s after failed file upload", project.pk)


def submit_project(context, form_data, files=(), additional_files=()):
    """
    Create the project for ``context``'s organization and upload its files.

    Returns the new project id. Raises ``SubmissionError`` when the project
    cannot be created and ``FileUploadError`` when any file fails.
    """
    if not context.is_ready:
        raise SubmissionError('User is not part of an organization')

    payload = build_project_payload(form_data, context.organization, context.user)
    try:
        with transaction.atomic():
            project = Project.objects.create(**payload)
    except DatabaseError as exc:
        logger.error("Error creating project: %s", exc)
        raise SubmissionError(str(exc)) from exc

    files = list(files)
    additional_files = list(additional_files)
    if files or additional_files:
        uploaded = []
        try:
            _upload_project_files(project, files, additional_files, uploaded)
        except Exception as exc:
            logger.error("File upload failed for project %s: %s", project.pk, exc)
            _compensate(project, uploaded)
            raise FileUploadError() from exc

    logger.info("Project %s submitted by %s", project.pk, getattr(context.user, 'email', None))
    return project.id
