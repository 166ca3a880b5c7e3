"""
Platform Capability Registry
============================
Which intake mode a platform uses, and therefore which wizard steps and
validation rules apply to it.
"""

import logging
from dataclasses import dataclass, asdict

from django.db import DatabaseError

from .exceptions import PlatformLoadError
from .models import Platform

logger = logging.getLogger(__name__)


class MigrationMode:
    CSV = 'csv'
    API = 'api'
    PLUGIN = 'plugin'
    CUSTOM = 'custom'


def fetch_platforms():
    """All platforms ordered by name."""
    try:
        return list(Platform.objects.order_by('name'))
    except DatabaseError as exc:
        logger.error("Error fetching platforms: %s", exc)
        raise PlatformLoadError() from exc


@dataclass(frozen=True)
class Capabilities:
    is_csv_migration: bool = False
    is_api_migration: bool = False
    is_plugin_migration: bool = False
    is_custom_migration: bool = False

    @classmethod
    def for_platform(cls, platform):
        """
        Derive the intake mode of ``platform``. No platform selected means
        no capability at all.
        """
        if platform is None:
            return cls()

        files = platform.files or None
        api = platform.api
        plugin = platform.plugin or None
        return cls(
            is_csv_migration=files is not None and len(files) > 0,
            is_api_migration=api is not None and plugin is None,
            is_plugin_migration=api is not None and plugin is not None,
            is_custom_migration=files is None and api is None and plugin is None,
        )

    @property
    def requires_files(self):
        return self.is_csv_migration or self.is_custom_migration

    @property
    def requires_api(self):
        return self.is_api_migration or self.is_plugin_migration

    @property
    def requires_plugin(self):
        return self.is_plugin_migration

    @property
    def mode(self):
        if self.is_csv_migration:
            return MigrationMode.CSV
        if self.is_plugin_migration:
            return MigrationMode.PLUGIN
        if self.is_api_migration:
            return MigrationMode.API
        if self.is_custom_migration:
            return MigrationMode.CUSTOM
        return None

    def as_dict(self):
        data = asdict(self)
        data.update({
            'requires_files': self.requires_files,
            'requires_api': self.requires_api,
            'requires_plugin': self.requires_plugin,
            'mode': self.mode,
        })
        return data
