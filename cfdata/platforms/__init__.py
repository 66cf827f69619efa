"""Platform integration package."""

from __future__ import annotations

from .base import ManagementClient

__all__ = ["ManagementClient"]
