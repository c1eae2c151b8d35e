"""
Database models package.
"""
from .site import Site
from .document import (
    Document,
    Webpage,
    TextPage,
    Layout,
    MediaCategory,
    get_document_type,
)
from .tag import Tag
from .widget import Widget
from .role import Role
from .url_history import UrlHistory
from .version import DocumentVersion, versioned_fields, snapshot_document

__all__ = [
    # Tenancy
    "Site",

    # Document models
    "Document",
    "Webpage",
    "TextPage",
    "Layout",
    "MediaCategory",
    "get_document_type",

    # Organization models
    "Tag",
    "Widget",
    "Role",
    "UrlHistory",

    # Versioning
    "DocumentVersion",
    "versioned_fields",
    "snapshot_document",
]
