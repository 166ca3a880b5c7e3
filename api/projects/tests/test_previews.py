"""
Tests for the preview reader

Tests cover:
1. Latest preview file per type, in display order
2. Streaming pagination over JSONL objects
3. Missing records, missing objects and malformed lines
4. Context views for known and unknown data types
5. The preview endpoints
"""
import io
import json
from datetime import timedelta

from django.core.files.base import ContentFile
from django.core.files.storage import storages
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from projects import storage
from projects.models import PreviewFile
from projects.previews import (
    fetch_preview_page,
    list_available_preview_kinds,
    read_jsonl_window,
    render_context,
)

from .helpers import IN_MEMORY_STORAGES, add_member, make_organization, make_project, make_user


def jsonl(records):
    return ''.join(json.dumps(record) + '\n' for record in records).encode('utf-8')


def store_preview(project, kind, content, minutes_ago=0, name=None):
    path = storages[storage.PREVIEW_FILES_BUCKET].save(
        f'{project.id}/{name or kind}.jsonl', ContentFile(content)
    )
    return PreviewFile.objects.create(
        project=project,
        type=kind,
        file_path=path,
        size=len(content),
        created_at=timezone.now() - timedelta(minutes=minutes_ago),
    )


class ReadJsonlWindowTests(SimpleTestCase):

    def test_window_and_total(self):
        stream = io.BytesIO(jsonl([{'n': n} for n in range(7)]))
        items, total = read_jsonl_window(stream, 2, 4)
        self.assertEqual(items, [{'n': 2}, {'n': 3}])
        self.assertEqual(total, 7)

    def test_blank_lines_are_not_counted(self):
        stream = io.BytesIO(b'{"n": 0}\n\n   \n{"n": 1}\n')
        items, total = read_jsonl_window(stream, 0, 10)
        self.assertEqual(items, [{'n': 0}, {'n': 1}])
        self.assertEqual(total, 2)

    def test_malformed_line_is_skipped(self):
        stream = io.BytesIO(b'{"n": 0}\n{broken\n{"n": 2}\n')
        with self.assertLogs('projects.previews', level='ERROR'):
            items, total = read_jsonl_window(stream, 0, 10)
        self.assertEqual(items, [{'n': 0}, {'n': 2}])
        self.assertEqual(total, 3)

    def test_undecodable_line_is_skipped_but_counted(self):
        stream = io.BytesIO(b'{"n": 0}\n\xff\xfe\n{"n": 2}\n')
        with self.assertLogs('projects.previews', level='ERROR') as logs:
            items, total = read_jsonl_window(stream, 0, 10)
        self.assertEqual(items, [{'n': 0}, {'n': 2}])
        self.assertEqual(total, 3)
        self.assertIn('Undecodable JSONL line 1', logs.output[0])


@override_settings(STORAGES=IN_MEMORY_STORAGES)
class PreviewReaderTests(TestCase):

    def setUp(self):
        self.project = make_project(make_organization())

    def test_latest_file_per_type_in_display_order(self):
        store_preview(self.project, 'customer', b'{}\n')
        store_preview(self.project, 'product', b'{}\n', minutes_ago=30, name='product-old')
        latest_product = store_preview(self.project, 'product', b'{}\n', name='product-new')
        store_preview(self.project, 'zebra', b'{}\n')

        files = list_available_preview_kinds(self.project.id)

        self.assertEqual([f.type for f in files], ['product', 'customer', 'zebra'])
        self.assertEqual(files[0].pk, latest_product.pk)

    def test_third_page_of_twenty_five(self):
        store_preview(self.project, 'product', jsonl([{'title': f'P{n}'} for n in range(25)]))

        result = fetch_preview_page(self.project.id, 'product', 3)

        self.assertTrue(result['exists'])
        self.assertEqual(result['fileType'], 'product')
        self.assertEqual([item['title'] for item in result['items']], ['P20', 'P21', 'P22', 'P23', 'P24'])
        self.assertEqual(result['pagination'], {
            'page': 3,
            'itemsPerPage': 10,
            'totalItems': 25,
            'totalPages': 3,
            'hasNext': False,
            'hasPrevious': True,
        })

    def test_reads_newest_file(self):
        store_preview(self.project, 'order', jsonl([{'name': 'old'}]), minutes_ago=5, name='order-old')
        store_preview(self.project, 'order', jsonl([{'name': 'new'}]), name='order-new')

        result = fetch_preview_page(self.project.id, 'order', 1)
        self.assertEqual(result['items'], [{'name': 'new'}])

    def test_no_preview_file(self):
        result = fetch_preview_page(self.project.id, 'product', 1)
        self.assertFalse(result['exists'])
        self.assertEqual(result['items'], [])
        self.assertEqual(result['pagination']['totalPages'], 0)

    def test_missing_object(self):
        PreviewFile.objects.create(project=self.project, type='product', file_path='gone/product.jsonl')
        result = fetch_preview_page(self.project.id, 'product', 1)
        self.assertFalse(result['exists'])

    def test_empty_object(self):
        store_preview(self.project, 'product', b'')
        self.assertFalse(fetch_preview_page(self.project.id, 'product', 1)['exists'])

    def test_page_must_be_positive(self):
        with self.assertRaises(ValueError):
            fetch_preview_page(self.project.id, 'product', 0)


class RenderContextTests(SimpleTestCase):

    def test_product(self):
        item = {
            'title': 'Shirt',
            'status': 'ACTIVE',
            'variants': [{'price': '19.99', 'file': {'originalSource': 'https://cdn.example.com/v.png'}}],
            'seo': {'description': 'A shirt'},
            'tags': ['summer'],
        }
        rendered = render_context('product', item)

        self.assertEqual(rendered['view'], 'product')
        self.assertEqual(rendered['identifier'], 'Shirt')
        self.assertEqual(rendered['context']['price'], '19.99')
        self.assertEqual(rendered['context']['vendor'], 'N/A')
        self.assertEqual(rendered['context']['image'], 'https://cdn.example.com/v.png')
        self.assertEqual(rendered['context']['variant_count'], 1)

    def test_order_totals(self):
        item = {
            'name': '#1001',
            'lineItems': [
                {'quantity': 2, 'priceSet': {'shopMoney': {'amount': '10.00'}}},
                {'quantity': 1, 'priceSet': {'shopMoney': {'amount': '5.50'}}},
            ],
            'shippingLines': [{'priceSet': {'shopMoney': {'amount': '4.50'}}}],
            'taxLines': [{'priceSet': {'shopMoney': {'amount': '3.00'}}}],
        }
        context = render_context('order', item)['context']

        self.assertEqual(context['subtotal'], 25.5)
        self.assertEqual(context['shipping'], 4.5)
        self.assertEqual(context['tax'], 3.0)
        self.assertEqual(context['total'], 30.0)
        self.assertEqual(context['line_item_count'], 2)

    def test_unknown_kind_falls_back_to_fields(self):
        item = {f'field{n}': n for n in range(12)}
        item['metafields'] = [{'key': 'hidden'}]
        rendered = render_context('giftcard', item)

        self.assertEqual(rendered['view'], 'default')
        self.assertEqual(len(rendered['context']['fields']), 10)
        self.assertNotIn('metafields', rendered['context']['fields'])
        self.assertEqual(rendered['context']['more_fields'], 2)

    def test_non_object_record(self):
        rendered = render_context('product', 'just text')
        self.assertEqual(rendered['view'], 'raw')
        self.assertEqual(rendered['context']['fields'], {'value': 'just text'})


@override_settings(STORAGES=IN_MEMORY_STORAGES)
class PreviewApiTests(APITestCase):

    def setUp(self):
        self.user = make_user('viewer@example.com')
        self.organization = make_organization()
        add_member(self.organization, self.user, 'viewer')
        self.project = make_project(self.organization)
        self.client.force_authenticate(user=self.user)

    def test_preview_page(self):
        store_preview(self.project, 'product', jsonl([{'title': 'Shirt'}]))

        response = self.client.get(f'/api/v1/projects/{self.project.id}/preview/', {'type': 'product', 'page': 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['exists'])
        self.assertEqual(response.data['items'], [{'title': 'Shirt'}])
        self.assertEqual(response.data['contexts'][0]['view'], 'product')

    def test_undecodable_line_does_not_fail_the_page(self):
        store_preview(self.project, 'product', b'\xff\xfe\n{"title": "Shirt"}\n')

        with self.assertLogs('projects.previews', level='ERROR'):
            response = self.client.get(f'/api/v1/projects/{self.project.id}/preview/', {'type': 'product', 'page': 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [{'title': 'Shirt'}])
        self.assertEqual(response.data['pagination']['totalItems'], 2)

    def test_page_zero(self):
        response = self.client.get(f'/api/v1/projects/{self.project.id}/preview/', {'page': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Page must be >= 1')

    def test_page_not_a_number(self):
        response = self.client.get(f'/api/v1/projects/{self.project.id}/preview/', {'page': 'two'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Page must be a number')

    def test_preview_files(self):
        store_preview(self.project, 'order', b'{}\n')
        store_preview(self.project, 'product', b'{}\n')

        response = self.client.get(f'/api/v1/projects/{self.project.id}/preview-files/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([f['type'] for f in response.data], ['product', 'order'])
