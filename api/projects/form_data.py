"""
Project form data
=================
In-memory shape of a project being created, before anything is stored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ProjectFormData:
    domain: str = ''
    source_platform: str = ''
    special_demands: str = ''
    shopify_url: str = ''
    shopify_access_token: str = ''
    items: List[str] = field(default_factory=list)
    api: Dict[str, str] = field(default_factory=dict)


@dataclass
class UploadedFile:
    """
    A file picked in the data & files step. ``selected_type`` maps it to one
    of the platform's file kinds; ``custom_name`` and ``description`` are
    used by custom migrations.
    """
    name: str
    size: int = 0
    content: Optional[Any] = None
    selected_type: str = ''
    custom_name: str = ''
    description: str = ''

    @classmethod
    def from_upload(cls, upload, selected_type='', custom_name='', description=''):
        return cls(
            name=upload.name,
            size=upload.size,
            content=upload,
            selected_type=selected_type or '',
            custom_name=custom_name or '',
            description=description or '',
        )


@dataclass
class AdditionalFile:
    """A user-added custom CSV with its descriptive name."""
    name: str
    description: str
    content: Any = None

    @property
    def size(self):
        return getattr(self.content, 'size', 0) or 0
