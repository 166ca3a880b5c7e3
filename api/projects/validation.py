"""
Project Validation
==================
Pure, synchronous checks run before every wizard transition and before a
project is submitted. Nothing here touches the network or the database.

``validate_step`` returns a mapping of field name to message; an empty
mapping means the step is complete.
"""

import re

from .capabilities import Capabilities

DOMAIN_PATTERN = re.compile(r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$')
SHOPIFY_URL_PATTERN = re.compile(r'^[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?\.myshopify\.com$')
ACCESS_TOKEN_PATTERN = re.compile(r'^(?:shpat|shppa|shpss|shpca)_[a-zA-Z0-9]{16,}$')
PROTOCOL_PATTERN = re.compile(r'^https?://', re.IGNORECASE)

SHOPIFY_SUFFIX = '.myshopify.com'


def _strip_protocol_and_path(value):
    value = PROTOCOL_PATTERN.sub('', value.strip())
    return value.split('/', 1)[0]


def normalize_domain(domain):
    """``https://www.Example.com/path`` -> ``example.com``"""
    if not domain:
        return ''
    cleaned = _strip_protocol_and_path(domain).lower()
    if cleaned.startswith('www.'):
        cleaned = cleaned[len('www.'):]
    return cleaned


def validate_domain(domain):
    """Strict syntax check; protocols and trailing slashes are rejected."""
    if not domain:
        return False
    return bool(DOMAIN_PATTERN.match(domain))


def normalize_shopify_url(url):
    """``https://MyStore.myshopify.com/admin`` -> ``mystore.myshopify.com``; a bare store name gets the suffix."""
    if not url:
        return ''
    cleaned = _strip_protocol_and_path(url).lower()
    if cleaned and not cleaned.endswith(SHOPIFY_SUFFIX) and '.' not in cleaned:
        cleaned = f'{cleaned}{SHOPIFY_SUFFIX}'
    return cleaned


def validate_shopify_url(url):
    if not url:
        return False
    return bool(SHOPIFY_URL_PATTERN.match(url))


def validate_shopify_access_token(token):
    if not token:
        return False
    return bool(ACCESS_TOKEN_PATTERN.match(token))


def _validate_basic_info(form):
    errors = {}
    if not form.domain:
        errors['domain'] = 'Domain is required'
    elif not validate_domain(normalize_domain(form.domain)):
        errors['domain'] = 'Please enter a valid domain (e.g., example.com)'

    if not form.source_platform:
        errors['source_platform'] = 'Source platform is required'
    return errors


def _validate_shopify_setup(form):
    errors = {}
    if not form.shopify_url:
        errors['shopify_url'] = 'Shopify URL is required'
    elif not validate_shopify_url(normalize_shopify_url(form.shopify_url)):
        errors['shopify_url'] = 'Please enter a valid Shopify URL (e.g., mystore.myshopify.com)'

    if not form.shopify_access_token:
        errors['shopify_access_token'] = 'Shopify access token is required'
    elif not validate_shopify_access_token(form.shopify_access_token):
        errors['shopify_access_token'] = 'Please enter a valid Shopify access token'

    if not form.items:
        errors['items'] = 'Please select at least one data type to migrate'
    return errors


def _validate_csv_files(platform, files):
    if not files:
        return 'Please upload the required files'

    unmapped = [f.name for f in files if not f.selected_type]
    if unmapped:
        return f"Please select a file type for all uploaded files: {', '.join(unmapped)}"

    mapped = {f.selected_type for f in files}
    missing = [kind for kind in platform.files if kind not in mapped]
    if missing:
        return f"Please upload files for: {', '.join(missing)}"
    return None


def _validate_custom_files(files):
    if not files:
        return 'Please upload at least one file for custom migration'
    if any(not f.custom_name or not f.description for f in files):
        return 'All files must have descriptive names and descriptions'
    return None


def _validate_data_and_files(form, files, platform):
    errors = {}
    capabilities = Capabilities.for_platform(platform)

    if capabilities.is_csv_migration:
        message = _validate_csv_files(platform, files)
        if message:
            errors['files'] = message

    if capabilities.requires_api:
        provided = form.api or {}
        for key in platform.api:
            if not provided.get(key):
                errors[f'api_{key}'] = f'{key} is required'

    if capabilities.is_custom_migration:
        message = _validate_custom_files(files)
        if message:
            errors['files'] = message
    return errors


def validate_step(step, form, files=(), platform=None):
    """
    Validate one wizard step.

    ``step`` is 1-4 (or a ``WizardStep``); ``form`` is a ``ProjectFormData``;
    ``files`` the pending ``UploadedFile`` list; ``platform`` the selected
    ``Platform`` or None. The review step adds no rules of its own.
    """
    step = int(step)
    if step == 1:
        return _validate_basic_info(form)
    if step == 2:
        return _validate_shopify_setup(form)
    if step == 3:
        return _validate_data_and_files(form, list(files), platform)
    return {}
