"""
Tests for the health check
"""
from unittest import mock

from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

IN_MEMORY = {'BACKEND': 'django.core.files.storage.InMemoryStorage'}


@override_settings(STORAGES={
    'default': IN_MEMORY,
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    'project-files': IN_MEMORY,
    'projects': IN_MEMORY,
    'preview-files': IN_MEMORY,
})
class HealthCheckTests(APITestCase):

    def test_healthy_without_authentication(self):
        response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')
        self.assertEqual(response.data['services']['storage']['status'], 'ok')

    def test_degraded_when_storage_fails(self):
        with mock.patch('health.views.check_storage', return_value={'status': 'error', 'message': 'down'}):
            response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['status'], 'degraded')
