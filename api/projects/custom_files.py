"""
Custom CSV Files
================
Ad-hoc CSV uploads attached to an existing project. Each file is checked,
stored and recorded on its own; one bad file never fails the batch.
"""

import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from . import storage
from .models import ProjectFile

logger = logging.getLogger(__name__)

CSV_EXTENSION = '.csv'


def custom_file_path(project, file_name):
    timestamp = int(timezone.now().timestamp() * 1000)
    return f'projects/{project.id}/{timestamp}-{file_name}'


def check_custom_file(upload):
    """The rejection message for ``upload``, or None when it is acceptable."""
    if not upload.name.lower().endswith(CSV_EXTENSION):
        return 'Only CSV files are allowed for custom uploads'
    if upload.size > settings.CUSTOM_CSV_MAX_SIZE:
        limit_mb = settings.CUSTOM_CSV_MAX_SIZE // (1024 * 1024)
        return f'File size must be less than {limit_mb}MB'
    return None


def upload_custom_file(project, upload):
    """Store one custom CSV. Returns its entry of the per-file results."""
    error = check_custom_file(upload)
    if error:
        return {'name': upload.name, 'success': False, 'error': error}

    try:
        path = storage.upload_file(storage.CUSTOM_FILES_BUCKET, custom_file_path(project, upload.name), upload)
    except storage.StorageError as exc:
        logger.error("Error uploading file %s: %s", upload.name, exc)
        return {'name': upload.name, 'success': False, 'error': str(exc) or 'Failed to upload file'}

    try:
        with transaction.atomic():
            ProjectFile.objects.create(
                project=project,
                file_name=upload.name,
                file_type=ProjectFile.CUSTOM_CSV,
                bucket=storage.CUSTOM_FILES_BUCKET,
                file_path=path,
                file_size=upload.size,
                is_initial=False,
            )
    except DatabaseError as exc:
        logger.error("Error recording file %s: %s", upload.name, exc)
        try:
            storage.remove_files(storage.CUSTOM_FILES_BUCKET, [path])
        except storage.StorageError as cleanup_exc:
            logger.warning("Could not remove %s after failed insert: %s", path, cleanup_exc)
        return {'name': upload.name, 'success': False, 'error': 'Failed to upload file'}

    logger.info("Custom file %s uploaded to project %s", path, project.id)
    return {'name': upload.name, 'success': True, 'size': upload.size, 'path': path}


def upload_custom_files(project, uploads):
    return [upload_custom_file(project, upload) for upload in uploads]


def list_custom_files(project):
    return project.files.filter(file_type=ProjectFile.CUSTOM_CSV).order_by('-upload_date')


def delete_custom_file(project_file):
    """
    Remove the stored object (best-effort) and then the row. Row deletion
    errors propagate.
    """
    try:
        storage.remove_files(project_file.bucket, [project_file.file_path])
    except storage.StorageError as exc:
        logger.error("Storage deletion error: %s", exc)

    with transaction.atomic():
        ProjectFile.objects.filter(pk=project_file.pk).delete()
