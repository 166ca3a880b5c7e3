"""
API Exception Handling
======================
Outermost error mapping for every DRF view.

- DRF errors keep their status code; a bare ``detail`` message is exposed
  under ``error`` like the rest of the API.
- Anything unexpected is logged with request context and mapped to
  ``500 {'error': 'Internal server error'}``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is not None:
        data = response.data
        if isinstance(data, dict) and set(data.keys()) == {'detail'}:
            response.data = {'error': str(data['detail'])}
        return response

    request = context.get('request')
    view = context.get('view')
    logger.exception(
        "Unhandled error in %s (%s %s)",
        view.__class__.__name__ if view else 'unknown view',
        getattr(request, 'method', '?'),
        getattr(request, 'path', '?'),
    )
    return Response(
        {'error': 'Internal server error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
