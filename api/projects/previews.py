"""
Preview Reader
==============
Read-only access to the previews generated by the migration engine.

Preview files are JSONL objects in the ``preview-files`` bucket. A page is
read by streaming the object line by line: only lines inside the requested
window are parsed, the rest are just counted.
"""

import json
import logging
import math

from django.conf import settings

from . import storage
from .models import PreviewFile

logger = logging.getLogger(__name__)

PREVIEW_KIND_ORDER = ['product', 'order', 'customer', 'collection', 'giftcard', 'discountCode']
DEFAULT_KIND = 'product'


def _kind_rank(kind):
    try:
        return PREVIEW_KIND_ORDER.index(kind)
    except ValueError:
        return len(PREVIEW_KIND_ORDER)


def list_available_preview_kinds(project_id):
    """The latest preview file of each type, in display order."""
    latest = {}
    for preview_file in PreviewFile.objects.filter(project_id=project_id).order_by('-created_at', '-id'):
        latest.setdefault(preview_file.type, preview_file)
    return sorted(latest.values(), key=lambda f: (_kind_rank(f.type), f.type))


def latest_preview_file(project_id, kind):
    return PreviewFile.objects.filter(project_id=project_id, type=kind).order_by('-created_at', '-id').first()


def _pagination(page, page_size, total_items):
    return {
        'page': page,
        'itemsPerPage': page_size,
        'totalItems': total_items,
        'totalPages': math.ceil(total_items / page_size) if total_items else 0,
        'hasNext': total_items > page * page_size,
        'hasPrevious': page > 1,
    }


def _empty_page(kind, page, page_size):
    return {
        'items': [],
        'pagination': _pagination(page, page_size, 0),
        'fileType': kind,
        'exists': False,
    }


def read_jsonl_window(stream, start, stop):
    """
    Parse the non-empty lines ``start <= n < stop`` of a JSONL stream and
    count all non-empty lines. Returns ``(items, total)``.
    """
    items = []
    total = 0
    for raw in stream:
        line = raw.strip()
        if not line:
            continue
        if start <= total < stop:
            try:
                if isinstance(line, bytes):
                    line = line.decode('utf-8')
                items.append(json.loads(line))
            except UnicodeDecodeError as exc:
                logger.error("Undecodable JSONL line %d: %s", total, exc)
            except ValueError as exc:
                logger.error("Error parsing JSONL line %d: %s", total, exc)
        total += 1
    return items, total


def fetch_preview_page(project_id, kind, page, page_size=None):
    """
    One page of preview records of ``kind`` for the project.

    Missing preview files, missing objects and empty files all read as
    ``exists: False``.
    """
    if page < 1:
        raise ValueError('Page must be >= 1')
    page_size = page_size or settings.PREVIEW_PAGE_SIZE

    preview_file = latest_preview_file(project_id, kind)
    if preview_file is None:
        return _empty_page(kind, page, page_size)

    start = (page - 1) * page_size
    try:
        with storage.open_file(storage.PREVIEW_FILES_BUCKET, preview_file.file_path) as stream:
            items, total = read_jsonl_window(stream, start, start + page_size)
    except FileNotFoundError:
        logger.warning("Preview object %s is missing", preview_file.file_path)
        return _empty_page(kind, page, page_size)

    if total == 0:
        return _empty_page(kind, page, page_size)

    return {
        'items': items,
        'pagination': _pagination(page, page_size, total),
        'fileType': kind,
        'exists': True,
    }


# Context views

def _get(item, *path, default=None):
    value = item
    for key in path:
        if isinstance(value, dict):
            value = value.get(key)
        elif isinstance(value, list) and isinstance(key, int):
            value = value[key] if -len(value) <= key < len(value) else None
        else:
            return default
        if value is None:
            return default
    return value


def _amount(value):
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _money_total(lines, with_quantity=False):
    total = 0.0
    for line in lines or []:
        amount = _amount(_get(line, 'priceSet', 'shopMoney', 'amount'))
        if with_quantity:
            amount *= _amount(_get(line, 'quantity'))
        total += amount
    return total


def _product_context(item):
    variants = item.get('variants') or []
    price = _get(item, 'variants', 0, 'price')
    return {
        'title': item.get('title'),
        'status': item.get('status'),
        'vendor': item.get('vendor') or 'N/A',
        'price': price,
        'variant_count': len(variants),
        'image': _get(item, 'files', 0, 'originalSource') or _get(item, 'variants', 0, 'file', 'originalSource'),
        'seo_description': _get(item, 'seo', 'description'),
        'tags': item.get('tags') or [],
        'variants': variants[:5],
    }


def _order_context(item):
    subtotal = _money_total(item.get('lineItems'), with_quantity=True)
    shipping = _money_total(item.get('shippingLines'))
    return {
        'name': item.get('name'),
        'email': item.get('email'),
        'phone': item.get('phone') or 'N/A',
        'financial_status': item.get('financialStatus'),
        'currency': item.get('currency'),
        'subtotal': subtotal,
        'shipping': shipping,
        'tax': _money_total(item.get('taxLines')),
        'taxes_included': bool(item.get('taxesIncluded')),
        'total': subtotal + shipping,
        'billing_address': item.get('billingAddress'),
        'line_item_count': len(item.get('lineItems') or []),
    }


def _collection_context(item):
    rules = _get(item, 'ruleSet', 'rules', default=[])
    return {
        'title': item.get('title'),
        'rule_count': len(rules),
        'match': 'Any condition' if _get(item, 'ruleSet', 'appliedDisjunctively') else 'All conditions',
        'rules': rules,
        'description_html': item.get('descriptionHtml'),
        'metafields': (item.get('metafields') or [])[:5],
    }


def _customer_context(item):
    return {
        'name': ' '.join(filter(None, [item.get('firstName'), item.get('lastName')])),
        'email': item.get('email'),
        'phone': item.get('phone') or 'N/A',
        'tax_exempt': bool(item.get('taxExempt')),
        'locale': item.get('locale') or 'N/A',
        'addresses': item.get('addresses') or [],
        'tags': item.get('tags') or [],
    }


FALLBACK_HIDDEN_KEYS = {'metafields', 'files', 'variants'}
FALLBACK_FIELD_LIMIT = 10


def _fallback_context(item):
    keys = [key for key in item if key not in FALLBACK_HIDDEN_KEYS]
    return {
        'fields': {key: str(item[key]) for key in keys[:FALLBACK_FIELD_LIMIT]},
        'more_fields': max(len(keys) - FALLBACK_FIELD_LIMIT, 0),
    }


CONTEXT_VIEWS = {
    'product': _product_context,
    'order': _order_context,
    'collection': _collection_context,
    'customer': _customer_context,
}


def _identifier(item):
    for key in ('original_id', 'id', 'title', 'name', 'handle', 'email'):
        if item.get(key):
            return str(item[key])
    return None


def render_context(kind, item):
    """
    Summarize one preview record for display. Known kinds get a structured
    view; anything else (or a non-object record) falls back to raw fields.
    """
    if not isinstance(item, dict):
        return {'view': 'raw', 'identifier': None, 'context': {'fields': {'value': str(item)}, 'more_fields': 0}}

    view = CONTEXT_VIEWS.get(kind)
    if view is None:
        return {'view': 'default', 'identifier': _identifier(item), 'context': _fallback_context(item)}
    return {'view': kind, 'identifier': _identifier(item), 'context': view(item)}
