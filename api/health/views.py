from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import serializers
from drf_spectacular.utils import extend_schema, inline_serializer
from django.core.files.storage import storages
from django.db import connection
import datetime
import logging
import os

from projects.storage import CUSTOM_FILES_BUCKET, PREVIEW_FILES_BUCKET, PROJECT_FILES_BUCKET

logger = logging.getLogger(__name__)

BUCKETS = [PROJECT_FILES_BUCKET, CUSTOM_FILES_BUCKET, PREVIEW_FILES_BUCKET]


def check_database():
    """Check database connectivity"""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return {"status": "ok", "message": "Database connected"}
    except Exception as e:
        logger.error("Health check: database error: %s", e)
        return {"status": "error", "message": f"Database error: {str(e)}"}


def check_storage():
    """Check that every bucket's storage backend is reachable"""
    try:
        for alias in BUCKETS:
            storages[alias].exists('.health')
        return {"status": "ok", "message": f"{len(BUCKETS)} buckets available"}
    except Exception as e:
        logger.error("Health check: storage error: %s", e)
        return {"status": "error", "message": f"Storage error: {str(e)}"}


@extend_schema(
    tags=['Health'],
    summary='Health Check',
    description='Check the database and object store. No authentication required.',
    responses=inline_serializer(
        name='HealthCheckResponse',
        fields={
            'status': serializers.CharField(),
            'timestamp': serializers.CharField(),
            'services': serializers.DictField(),
            'version': serializers.CharField(),
        }
    )
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    services = {
        "api": {"status": "ok", "message": "API server running"},
        "database": check_database(),
        "storage": check_storage(),
    }
    overall_status = "ok" if all(s["status"] == "ok" for s in services.values()) else "degraded"

    return Response({
        "status": overall_status,
        "timestamp": datetime.datetime.now().isoformat(),
        "services": services,
        "version": os.environ.get("APP_VERSION", "1.0.0"),
    }, status=200 if overall_status == "ok" else 503)
