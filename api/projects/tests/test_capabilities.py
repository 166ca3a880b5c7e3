"""
Tests for the platform capability registry

Tests cover:
1. Mode derivation for CSV, API, plugin and custom platforms
2. Exactly one mode holds for every stored platform
3. Normalisation and rejection of shapes no mode covers
4. Loading platforms, including load failures
5. Seeding the registry
"""
from io import StringIO
from unittest import mock

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from projects.capabilities import Capabilities, MigrationMode, fetch_platforms
from projects.exceptions import PlatformLoadError
from projects.models import Platform

from .helpers import make_platform, make_user

MODE_FLAGS = ('is_csv_migration', 'is_api_migration', 'is_plugin_migration', 'is_custom_migration')


class CapabilityDerivationTests(SimpleTestCase):

    def test_csv_platform(self):
        caps = Capabilities.for_platform(Platform(id='magento', files=['products', 'customers']))
        self.assertEqual(caps.mode, MigrationMode.CSV)
        self.assertTrue(caps.requires_files)
        self.assertFalse(caps.requires_api)

    def test_api_platform(self):
        caps = Capabilities.for_platform(Platform(id='woo', api={'api_key': {}, 'api_secret': {}}))
        self.assertEqual(caps.mode, MigrationMode.API)
        self.assertTrue(caps.requires_api)
        self.assertFalse(caps.requires_plugin)
        self.assertFalse(caps.requires_files)

    def test_plugin_platform(self):
        caps = Capabilities.for_platform(
            Platform(id='wix', api={'site_id': {}}, plugin='https://example.com/plugin')
        )
        self.assertEqual(caps.mode, MigrationMode.PLUGIN)
        self.assertTrue(caps.requires_api)
        self.assertTrue(caps.requires_plugin)

    def test_custom_platform(self):
        caps = Capabilities.for_platform(Platform(id='other'))
        self.assertEqual(caps.mode, MigrationMode.CUSTOM)
        self.assertTrue(caps.requires_files)
        self.assertFalse(caps.requires_api)

    def test_no_platform_has_no_capabilities(self):
        caps = Capabilities.for_platform(None)
        self.assertIsNone(caps.mode)
        self.assertFalse(caps.requires_files)
        self.assertFalse(caps.requires_api)

    def test_as_dict_includes_derived_flags(self):
        data = Capabilities.for_platform(Platform(id='other')).as_dict()
        self.assertEqual(data['mode'], 'custom')
        self.assertTrue(data['requires_files'])
        self.assertFalse(data['requires_plugin'])


class PlatformShapeTests(TestCase):

    def test_exactly_one_mode_for_every_stored_platform(self):
        make_platform('csv', files=['products'])
        make_platform('empty-files', files=[])
        make_platform('api', api={'api_key': {'label': 'API key'}})
        make_platform('empty-api', api={})
        make_platform('plugin', api={'token': {}}, plugin='https://example.com/app')
        make_platform('custom')

        for platform in Platform.objects.all():
            caps = Capabilities.for_platform(platform)
            flags = [getattr(caps, flag) for flag in MODE_FLAGS]
            self.assertEqual(flags.count(True), 1, platform.id)

    def test_empty_files_is_stored_as_null(self):
        platform = make_platform('empty-files', files=[])
        platform.refresh_from_db()
        self.assertIsNone(platform.files)
        self.assertEqual(Capabilities.for_platform(platform).mode, MigrationMode.CUSTOM)

    def test_plugin_without_api_is_rejected(self):
        with self.assertRaises(ValidationError):
            make_platform('broken', plugin='https://example.com/app')

    def test_files_and_api_together_are_rejected(self):
        with self.assertRaises(ValidationError):
            make_platform('broken', files=['products'], api={'api_key': {}})


class FetchPlatformsTests(TestCase):

    def test_ordered_by_name(self):
        make_platform('woo', name='WooCommerce')
        make_platform('bigc', name='BigCommerce')
        make_platform('magento', name='Magento')

        names = [p.name for p in fetch_platforms()]
        self.assertEqual(names, ['BigCommerce', 'Magento', 'WooCommerce'])

    def test_query_failure_raises_load_error(self):
        with mock.patch.object(Platform.objects, 'order_by', side_effect=DatabaseError('down')):
            with self.assertRaises(PlatformLoadError) as ctx:
                fetch_platforms()
        self.assertEqual(ctx.exception.message, 'Failed to load platforms')


class PlatformApiTests(APITestCase):

    def setUp(self):
        self.user = make_user('user@example.com')
        self.client.force_authenticate(user=self.user)

    def test_list_platforms_with_capabilities(self):
        make_platform('magento', name='Magento', files=['products'])
        make_platform('custom', name='Custom')

        response = self.client.get('/api/v1/platforms/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], ['custom', 'magento'])
        self.assertEqual(response.data[1]['capabilities']['mode'], 'csv')

    def test_load_failure_is_reported(self):
        with mock.patch('projects.views.fetch_platforms', side_effect=PlatformLoadError()):
            response = self.client.get('/api/v1/platforms/')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['error'], 'Failed to load platforms')

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/v1/platforms/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SeedPlatformsCommandTests(TestCase):

    def test_one_platform_per_mode(self):
        call_command('seed_platforms', stdout=StringIO())

        modes = {Capabilities.for_platform(p).mode for p in Platform.objects.all()}
        self.assertEqual(modes, {MigrationMode.CSV, MigrationMode.API, MigrationMode.PLUGIN, MigrationMode.CUSTOM})

    def test_rerun_updates_and_clear_removes_extras(self):
        make_platform('legacy', name='Legacy')
        call_command('seed_platforms', stdout=StringIO())
        call_command('seed_platforms', '--clear', stdout=StringIO())

        self.assertFalse(Platform.objects.filter(id='legacy').exists())
        self.assertEqual(Platform.objects.filter(id='magento').count(), 1)
