"""
Seed the source platform registry.
Creates or updates one platform per intake mode so the new-project wizard
has something to offer on a fresh database.
"""
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from projects.capabilities import Capabilities
from projects.models import ItemType, Platform

ALL_ITEMS = list(ItemType.values)

DEFAULT_PLATFORMS = [
    {
        'id': 'woocommerce',
        'name': 'WooCommerce',
        'description': 'Migrate through the WooCommerce REST API.',
        'api': {
            'store_url': {'label': 'Store URL', 'type': 'url'},
            'consumer_key': {'label': 'Consumer key', 'type': 'text'},
            'consumer_secret': {'label': 'Consumer secret', 'type': 'password'},
        },
        'items': ALL_ITEMS,
    },
    {
        'id': 'bigcommerce',
        'name': 'BigCommerce',
        'description': 'Migrate through the BigCommerce API.',
        'api': {
            'store_hash': {'label': 'Store hash', 'type': 'text'},
            'access_token': {'label': 'API access token', 'type': 'password'},
        },
        'items': ['product', 'order', 'customer', 'collection'],
    },
    {
        'id': 'magento',
        'name': 'Magento',
        'description': 'Export your catalog and customers as CSV files.',
        'files': ['products', 'customers', 'orders'],
        'items': ['product', 'order', 'customer'],
    },
    {
        'id': 'squarespace',
        'name': 'Squarespace',
        'description': 'Upload the Squarespace product export.',
        'files': ['products'],
        'items': ['product'],
    },
    {
        'id': 'wix',
        'name': 'Wix',
        'description': 'Install our export app, then paste the key it shows.',
        'api': {
            'export_key': {'label': 'Export key', 'type': 'password'},
        },
        'plugin': 'https://www.wix.com/app-market/',
        'items': ['product', 'customer', 'order'],
    },
    {
        'id': 'other',
        'name': 'Other platform',
        'description': 'Upload whatever exports you have and describe them.',
        'items': ALL_ITEMS,
    },
]


class Command(BaseCommand):
    help = 'Seed the source platform registry with one platform per migration mode'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete platforms that are not part of the default registry',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            stale = Platform.objects.exclude(id__in=[p['id'] for p in DEFAULT_PLATFORMS])
            count = stale.count()
            stale.delete()
            self.stdout.write(self.style.WARNING(f'Removed {count} platform(s).'))

        self.stdout.write('Seeding platforms...')
        for data in DEFAULT_PLATFORMS:
            data = dict(data)
            platform_id = data.pop('id')
            defaults = {
                'name': data.pop('name'),
                'description': data.pop('description', None),
                'files': data.pop('files', None),
                'api': data.pop('api', None),
                'plugin': data.pop('plugin', None),
                'items': data.pop('items', None),
            }
            try:
                platform, created = Platform.objects.update_or_create(id=platform_id, defaults=defaults)
            except ValidationError as exc:
                raise CommandError(f'Invalid platform {platform_id}: {exc}') from exc

            mode = Capabilities.for_platform(platform).mode
            verb = 'Created' if created else 'Updated'
            self.stdout.write(f'  {verb} {platform.name} ({mode})')

        self.stdout.write(self.style.SUCCESS(f'{len(DEFAULT_PLATFORMS)} platforms seeded.'))
