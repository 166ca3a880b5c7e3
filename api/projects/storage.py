"""
Object Store Access
===================
Thin wrapper over Django's named storages, one alias per bucket.

- project-files: files uploaded with a new project, ``<project_id>/<name>``
- projects:      custom CSVs, ``projects/<project_id>/<timestamp>-<name>``
- preview-files: JSONL previews written by the migration engine
"""

import logging

from django.core.exceptions import SuspiciousFileOperation
from django.core.files.storage import storages

logger = logging.getLogger(__name__)

PROJECT_FILES_BUCKET = 'project-files'
CUSTOM_FILES_BUCKET = 'projects'
PREVIEW_FILES_BUCKET = 'preview-files'


class StorageError(Exception):
    pass


def get_bucket(bucket_name):
    return storages[bucket_name]


def upload_file(bucket_name, path, content):
    """
    Store ``content`` at ``path``. Existing objects are never overwritten.
    Returns the stored path.
    """
    bucket = get_bucket(bucket_name)
    if bucket.exists(path):
        raise StorageError(f"The resource already exists: {path}")

    logger.info("Uploading file to storage: bucket=%s, path=%s, size=%s",
                bucket_name, path, getattr(content, 'size', '?'))
    try:
        return bucket.save(path, content)
    except (OSError, SuspiciousFileOperation) as exc:
        logger.error("Failed to upload to storage: %s", exc)
        raise StorageError(str(exc)) from exc


def remove_files(bucket_name, paths):
    """
    Delete every path in ``paths``. All deletions are attempted; failures
    are raised together afterwards.
    """
    paths = [p for p in paths if p]
    if not paths:
        return

    bucket = get_bucket(bucket_name)
    failed = []
    for path in paths:
        try:
            bucket.delete(path)
        except OSError as exc:
            logger.error("Failed to delete %s from storage bucket %s: %s", path, bucket_name, exc)
            failed.append(path)

    if failed:
        raise StorageError(f"Failed to delete {len(failed)} of {len(paths)} files from {bucket_name}")
    logger.info("Deleted %d files from storage: bucket=%s", len(paths), bucket_name)


def open_file(bucket_name, path):
    """Open a stored object for reading; missing objects raise FileNotFoundError."""
    bucket = get_bucket(bucket_name)
    if not bucket.exists(path):
        raise FileNotFoundError(path)
    return bucket.open(path, 'rb')
