"""
Tests for custom CSV files

Tests cover:
1. Per-file acceptance rules (extension, size limit)
2. Batch upload with partial success
3. Listing newest first
4. Deletion permissions and errors
"""
from datetime import timedelta
from types import SimpleNamespace
from unittest import mock

from django.core.files.storage import storages
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from projects import storage
from projects.custom_files import check_custom_file, custom_file_path, upload_custom_file
from projects.models import ProjectFile

from .helpers import IN_MEMORY_STORAGES, add_member, csv_upload, make_organization, make_project, make_user

MB = 1024 * 1024


class CheckCustomFileTests(SimpleTestCase):

    def test_csv_within_limit(self):
        self.assertIsNone(check_custom_file(SimpleNamespace(name='data.CSV', size=10)))

    def test_other_extensions_rejected(self):
        self.assertEqual(
            check_custom_file(SimpleNamespace(name='notes.txt', size=10)),
            'Only CSV files are allowed for custom uploads'
        )

    def test_size_limit(self):
        self.assertEqual(
            check_custom_file(SimpleNamespace(name='big.csv', size=51 * MB)),
            'File size must be less than 50MB'
        )
        self.assertIsNone(check_custom_file(SimpleNamespace(name='edge.csv', size=50 * MB)))

    @override_settings(CUSTOM_CSV_MAX_SIZE=10 * MB)
    def test_limit_comes_from_settings(self):
        self.assertEqual(
            check_custom_file(SimpleNamespace(name='big.csv', size=11 * MB)),
            'File size must be less than 10MB'
        )


@override_settings(STORAGES=IN_MEMORY_STORAGES)
class UploadCustomFileTests(TestCase):

    def setUp(self):
        self.project = make_project(make_organization())

    def test_path_is_namespaced_by_project(self):
        path = custom_file_path(self.project, 'data.csv')
        self.assertTrue(path.startswith(f'projects/{self.project.id}/'))
        self.assertTrue(path.endswith('-data.csv'))

    def test_stored_and_recorded(self):
        result = upload_custom_file(self.project, csv_upload('data.csv'))

        self.assertTrue(result['success'])
        self.assertTrue(storages[storage.CUSTOM_FILES_BUCKET].exists(result['path']))
        project_file = ProjectFile.objects.get(project=self.project)
        self.assertEqual(project_file.file_type, ProjectFile.CUSTOM_CSV)
        self.assertFalse(project_file.is_initial)
        self.assertEqual(project_file.bucket, storage.CUSTOM_FILES_BUCKET)

    def test_record_failure_removes_object(self):
        with mock.patch('projects.storage.upload_file', wraps=storage.upload_file) as upload, \
                mock.patch.object(ProjectFile.objects, 'create', side_effect=DatabaseError('insert failed')):
            result = upload_custom_file(self.project, csv_upload('data.csv'))

        self.assertEqual(result, {'name': 'data.csv', 'success': False, 'error': 'Failed to upload file'})
        stored_path = upload.call_args_list[0].args[1]
        self.assertFalse(storages[storage.CUSTOM_FILES_BUCKET].exists(stored_path))


@override_settings(STORAGES=IN_MEMORY_STORAGES)
class CustomFilesApiTests(APITestCase):

    def setUp(self):
        self.organization = make_organization()
        self.member = make_user('member@example.com')
        self.admin = make_user('admin@example.com')
        add_member(self.organization, self.member, 'member')
        add_member(self.organization, self.admin, 'admin')
        self.project = make_project(self.organization, self.member)
        self.url = f'/api/v1/projects/{self.project.id}/custom-files/'
        self.client.force_authenticate(user=self.member)

    def _custom_file(self, name, minutes_ago=0):
        path = f'projects/{self.project.id}/{name}'
        storages[storage.CUSTOM_FILES_BUCKET].save(path, csv_upload(name))
        return ProjectFile.objects.create(
            project=self.project,
            file_name=name,
            file_type=ProjectFile.CUSTOM_CSV,
            bucket=storage.CUSTOM_FILES_BUCKET,
            file_path=path,
            file_size=10,
            is_initial=False,
            upload_date=timezone.now() - timedelta(minutes=minutes_ago),
        )

    def test_batch_with_partial_success(self):
        response = self.client.post(self.url, {
            'files': [csv_upload('notes.txt'), csv_upload('data.csv')],
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        results = {r['name']: r for r in response.data['results']}
        self.assertFalse(results['notes.txt']['success'])
        self.assertEqual(results['notes.txt']['error'], 'Only CSV files are allowed for custom uploads')
        self.assertTrue(results['data.csv']['success'])
        self.assertEqual(ProjectFile.objects.filter(project=self.project).count(), 1)

    def test_no_files(self):
        response = self.client.post(self.url, {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No files provided')

    def test_list_newest_first(self):
        self._custom_file('old.csv', minutes_ago=10)
        self._custom_file('new.csv')
        ProjectFile.objects.create(project=self.project, file_name='products.csv', file_type='products',
                                   file_path=f'{self.project.id}/products.csv')

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([f['file_name'] for f in response.data['files']], ['new.csv', 'old.csv'])

    def test_member_cannot_delete(self):
        project_file = self._custom_file('data.csv')

        response = self.client.delete(self.url, {'fileId': str(project_file.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Insufficient permissions to delete files')
        self.assertTrue(ProjectFile.objects.filter(pk=project_file.pk).exists())

    def test_admin_deletes(self):
        project_file = self._custom_file('data.csv')
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(self.url, {'fileId': str(project_file.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'File deleted successfully')
        self.assertFalse(ProjectFile.objects.filter(pk=project_file.pk).exists())
        self.assertFalse(storages[storage.CUSTOM_FILES_BUCKET].exists(project_file.file_path))

    def test_admin_deletes_submitted_additional_file(self):
        path = f'{self.project.id}/notes.csv'
        storages[storage.PROJECT_FILES_BUCKET].save(path, csv_upload('notes.csv'))
        project_file = ProjectFile.objects.create(project=self.project, file_name='notes.csv',
                                                  file_type=ProjectFile.CUSTOM_CSV, file_path=path, is_initial=True)
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(self.url, {'fileId': str(project_file.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(project_file.bucket, storage.PROJECT_FILES_BUCKET)
        self.assertFalse(storages[storage.PROJECT_FILES_BUCKET].exists(path))

    def test_delete_survives_storage_failure(self):
        project_file = self._custom_file('data.csv')
        self.client.force_authenticate(user=self.admin)

        with mock.patch('projects.storage.remove_files', side_effect=storage.StorageError('unavailable')):
            response = self.client.delete(self.url, {'fileId': str(project_file.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ProjectFile.objects.filter(pk=project_file.pk).exists())

    def test_delete_requires_file_id(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File ID is required')

    def test_delete_unknown_file(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(self.url, {'fileId': 'not-a-file'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'File not found')

    def test_viewer_cannot_upload(self):
        viewer = make_user('viewer@example.com')
        add_member(self.organization, viewer, 'viewer')
        self.client.force_authenticate(user=viewer)

        response = self.client.post(self.url, {'files': [csv_upload('data.csv')]}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
