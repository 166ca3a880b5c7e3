"""
Tests for the new-project wizard

Tests cover:
1. The pure transition function and the symmetric step-3 skip
2. ProjectForm navigation, platform selection and submission guard
3. The wizard HTTP endpoint
"""
from unittest import mock

from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.organizations.context import resolve_context
from projects.capabilities import Capabilities
from projects.exceptions import PlatformLoadError, SubmissionError
from projects.form_data import UploadedFile
from projects.models import Platform
from projects.wizard import Direction, ProjectForm, WizardStep, transition

from .helpers import VALID_TOKEN, add_member, make_organization, make_platform, make_user

NO_INTAKE = Capabilities()
CSV = Capabilities(is_csv_migration=True)
API = Capabilities(is_api_migration=True)


class TransitionTests(SimpleTestCase):

    def test_forward_through_every_step(self):
        self.assertEqual(transition(1, Direction.NEXT, CSV), WizardStep.SHOPIFY_SETUP)
        self.assertEqual(transition(2, Direction.NEXT, CSV), WizardStep.DATA_AND_FILES)
        self.assertEqual(transition(3, Direction.NEXT, API), WizardStep.REVIEW)

    def test_skip_is_symmetric(self):
        self.assertEqual(transition(2, Direction.NEXT, NO_INTAKE), WizardStep.REVIEW)
        self.assertEqual(transition(4, Direction.PREV, NO_INTAKE), WizardStep.SHOPIFY_SETUP)

    def test_no_skip_when_step_applies(self):
        self.assertEqual(transition(4, Direction.PREV, API), WizardStep.DATA_AND_FILES)

    def test_ends_are_sticky(self):
        self.assertEqual(transition(1, Direction.PREV, CSV), WizardStep.BASIC_INFO)
        self.assertEqual(transition(4, Direction.NEXT, CSV), WizardStep.REVIEW)

    def test_validate_never_moves(self):
        self.assertEqual(transition(3, 'validate', CSV), WizardStep.DATA_AND_FILES)

    def test_data_step_applicability(self):
        self.assertFalse(WizardStep.DATA_AND_FILES.applicable(NO_INTAKE))
        self.assertTrue(WizardStep.DATA_AND_FILES.applicable(Capabilities(is_custom_migration=True)))
        self.assertTrue(WizardStep.REVIEW.applicable(NO_INTAKE))


class ProjectFormTests(SimpleTestCase):

    def setUp(self):
        self.csv = Platform(id='magento', name='Magento', files=['products'])
        self.api = Platform(id='woo', name='WooCommerce', api={'api_key': {}})
        self.form = ProjectForm(platforms=[self.csv, self.api])

    def _fill_first_two_steps(self):
        self.form.update(
            domain='example.com',
            shopify_url='test.myshopify.com',
            shopify_access_token=VALID_TOKEN,
            items=['product'],
        )

    def test_next_step_blocked_by_errors(self):
        self.assertEqual(self.form.next_step(), WizardStep.BASIC_INFO)
        self.assertIn('domain', self.form.errors)
        self.assertIn('source_platform', self.form.errors)

    def test_walk_to_review(self):
        self.form.select_platform('woo')
        self._fill_first_two_steps()
        self.assertEqual(self.form.next_step(), WizardStep.SHOPIFY_SETUP)
        self.assertEqual(self.form.next_step(), WizardStep.DATA_AND_FILES)

        self.assertEqual(self.form.next_step(), WizardStep.DATA_AND_FILES)
        self.assertEqual(self.form.errors, {'api_api_key': 'api_key is required'})

        self.form.update(api={'api_key': 'secret'})
        self.assertEqual(self.form.next_step(), WizardStep.REVIEW)

    def test_prev_step_never_validates(self):
        self.form.go_to(WizardStep.SHOPIFY_SETUP)
        self.assertEqual(self.form.prev_step(), WizardStep.BASIC_INFO)
        self.assertEqual(self.form.errors, {})

    def test_select_platform_resets_dependent_state(self):
        self.form.select_platform('woo')
        self.form.update(api={'api_key': 'secret'})
        self.form.files = [UploadedFile(name='p.csv')]
        self.form.errors = {'files': 'x'}

        self.form.select_platform('magento')
        self.assertEqual(self.form.form_data.source_platform, 'magento')
        self.assertEqual(self.form.form_data.api, {})
        self.assertEqual(self.form.files, [])
        self.assertEqual(self.form.errors, {})

    def test_update_rejects_unknown_fields(self):
        with self.assertRaises(TypeError):
            self.form.update(colour='blue')

    def test_unknown_platform_is_rejected(self):
        self.form.update(domain='example.com', source_platform='nope')
        self.assertFalse(self.form.validate_step(1))
        self.assertEqual(self.form.errors, {'source_platform': 'Please select a valid source platform'})

    def test_load_failure_sets_general_error(self):
        with mock.patch('projects.wizard.fetch_platforms', side_effect=PlatformLoadError()):
            self.form.load_platforms()
        self.assertEqual(self.form.platforms, [])
        self.assertEqual(self.form.errors, {'general': 'Failed to load platforms'})

    def test_submit_while_loading_is_refused(self):
        self.form.loading = True
        with self.assertRaises(SubmissionError) as ctx:
            self.form.submit(context=None)
        self.assertEqual(ctx.exception.message, 'Submission already in progress')

    def test_submit_clears_loading_flag(self):
        with mock.patch('projects.wizard.submit_project', side_effect=SubmissionError('insert failed')):
            with self.assertRaises(SubmissionError):
                self.form.submit(context=None)
        self.assertFalse(self.form.loading)


class FormSubmitTests(TestCase):

    def test_submit_returns_project_id(self):
        user = make_user('member@example.com')
        organization = make_organization()
        add_member(organization, user, 'member')
        platform = make_platform('custom-source', name='Other')

        form = ProjectForm(platforms=[platform])
        form.update(
            source_platform='custom-source',
            domain='example.com',
            shopify_url='test.myshopify.com',
            shopify_access_token=VALID_TOKEN,
            items=['product'],
        )
        project_id = form.submit(resolve_context(user))

        self.assertTrue(organization.projects.filter(pk=project_id).exists())


class WizardApiTests(APITestCase):

    def setUp(self):
        self.user = make_user('member@example.com')
        self.organization = make_organization()
        add_member(self.organization, self.user, 'member')
        make_platform('woo', name='WooCommerce', api={'api_key': {}})
        self.client.force_authenticate(user=self.user)

    def _post(self, step, direction, form):
        return self.client.post(
            '/api/v1/projects/wizard/',
            {'step': step, 'direction': direction, 'form': form},
            format='json',
        )

    def test_next_with_errors_stays(self):
        response = self._post(1, 'next', {'domain': 'invalid-domain'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['step'], 1)
        self.assertEqual(response.data['errors']['domain'], 'Please enter a valid domain (e.g., example.com)')

    def test_next_advances_and_reports_capabilities(self):
        response = self._post(1, 'next', {'domain': 'example.com', 'source_platform': 'woo'})
        self.assertEqual(response.data['step'], 2)
        self.assertEqual(response.data['errors'], {})
        self.assertEqual(response.data['capabilities']['mode'], 'api')

    def test_data_step_validates_file_descriptors(self):
        make_platform('magento', name='Magento', files=['products', 'customers'])
        response = self._post(3, 'validate', {
            'source_platform': 'magento',
            'files': [{'name': 'p.csv', 'selected_type': 'products'}],
        })
        self.assertEqual(response.data['step'], 3)
        self.assertEqual(response.data['errors'], {'files': 'Please upload files for: customers'})

    def test_prev_does_not_validate(self):
        response = self._post(2, 'prev', {})
        self.assertEqual(response.data['step'], 1)
        self.assertEqual(response.data['errors'], {})

    def test_invalid_direction(self):
        response = self._post(1, 'sideways', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
