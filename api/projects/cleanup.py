"""
Project Cleanup
===============
Deleting a project is an ordered list of independent cleanup actions.

Storage removals are best-effort: a failure is recorded in the report and
the next action still runs. Row deletions are fatal: a failure stops the
cascade with a ``CleanupAborted`` carrying the user-facing message.
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional

from django.db import transaction

from . import storage
from .models import Preview, PreviewFile, Project, ProjectFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupAction:
    name: str
    run: Callable[[], None]
    fatal_message: Optional[str] = None


@dataclass
class CleanupFailure:
    action: str
    error: str


@dataclass
class CleanupReport:
    failures: List[CleanupFailure] = field(default_factory=list)

    @property
    def ok(self):
        return not self.failures

    @property
    def warnings(self):
        return [f'{failure.action}: {failure.error}' for failure in self.failures]


class CleanupAborted(Exception):
    def __init__(self, message, report):
        self.message = message
        self.report = report
        super().__init__(message)


def run_cleanup(actions):
    """Run ``actions`` in order and return the report of non-fatal failures."""
    report = CleanupReport()
    for action in actions:
        try:
            action.run()
        except Exception as exc:
            if action.fatal_message:
                logger.exception("Cleanup step '%s' failed", action.name)
                raise CleanupAborted(action.fatal_message, report) from exc
            logger.warning("Cleanup step '%s' failed, continuing: %s", action.name, exc)
            report.failures.append(CleanupFailure(action.name, str(exc)))

    if report.failures:
        logger.warning("Cleanup finished with %d warning(s): %s", len(report.failures), report.warnings)
    return report


def _remove_project_file_objects(project):
    by_bucket = {}
    for bucket_name, path in project.files.values_list('bucket', 'file_path'):
        by_bucket.setdefault(bucket_name, []).append(path)

    errors = []
    for bucket_name, paths in by_bucket.items():
        try:
            storage.remove_files(bucket_name, paths)
        except storage.StorageError as exc:
            errors.append(str(exc))
    if errors:
        raise storage.StorageError('; '.join(errors))


def _remove_preview_file_objects(project):
    paths = list(project.preview_files.values_list('file_path', flat=True))
    storage.remove_files(storage.PREVIEW_FILES_BUCKET, paths)


def _delete_rows(model, **lookup):
    with transaction.atomic():
        model.objects.filter(**lookup).delete()


def _delete_project_files(project):
    _delete_rows(ProjectFile, project=project)


def _delete_preview_files(project):
    _delete_rows(PreviewFile, project=project)


def _delete_previews(project):
    _delete_rows(Preview, project=project)


def _delete_project_row(project):
    _delete_rows(Project, pk=project.pk)


def project_cleanup_actions(project):
    return [
        CleanupAction('remove project file objects', partial(_remove_project_file_objects, project)),
        CleanupAction('delete project file records', partial(_delete_project_files, project),
                      fatal_message='Failed to delete project files'),
        CleanupAction('remove preview file objects', partial(_remove_preview_file_objects, project)),
        CleanupAction('delete preview file records', partial(_delete_preview_files, project),
                      fatal_message='Failed to delete preview files'),
        CleanupAction('delete preview records', partial(_delete_previews, project)),
        CleanupAction('delete project', partial(_delete_project_row, project),
                      fatal_message='Failed to delete project'),
    ]


def delete_project(project):
    """Delete ``project`` with everything attached to it."""
    report = run_cleanup(project_cleanup_actions(project))
    logger.info("Deleted project %s", project.pk)
    return report


def delete_organization(organization):
    """
    Delete ``organization``. Every project goes through the project cleanup
    first so stored objects are removed too; memberships and invitations
    go with the organization row.
    """
    report = CleanupReport()
    for project in list(organization.projects.all()):
        report.failures.extend(delete_project(project).failures)

    run_cleanup([
        CleanupAction('delete organization', partial(_delete_rows, type(organization), pk=organization.pk),
                      fatal_message='Failed to delete organization'),
    ])
    logger.info("Deleted organization %s", organization.pk)
    return report
