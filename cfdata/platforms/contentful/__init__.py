"""Contentful platform adapters."""

from __future__ import annotations

from .access import ContentfulAccess
from .api import ContentfulApiError, ContentfulManagementClient, ErrorKind
from .credentials import ContentfulCredentials, ContentfulCredentialStore, CredentialsError
from .models import ASSET, ENTRY, AssetMeta

__all__ = [
    "ASSET",
    "ENTRY",
    "AssetMeta",
    "ContentfulAccess",
    "ContentfulApiError",
    "ContentfulCredentialStore",
    "ContentfulCredentials",
    "ContentfulManagementClient",
    "CredentialsError",
    "ErrorKind",
]
