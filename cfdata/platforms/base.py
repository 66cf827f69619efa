"""Base contracts for the content management platform."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class ManagementClient(Protocol):
    """Transport operations the access facade relies on.

    ``ContentfulManagementClient`` implements this against the live API;
    tests substitute in-memory fakes.
    """

    def query_entries(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Return one page of entries matching ``params``."""

    def create_entry(self, content_type_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        """Create a Draft entry of the given content type."""

    def delete_entry(self, entry_id: str) -> None:
        """Delete an unpublished entry."""

    def query_assets(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Return one page of assets matching ``params``."""

    def get_asset(self, asset_id: str) -> dict[str, Any]:
        """Fetch the current state of an asset."""

    def create_asset(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Create a Draft asset."""

    def update_asset_metadata(self, asset_id: str, metadata: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the metadata block of the current asset version."""

    def process_asset(self, asset_id: str) -> None:
        """Ask the service to process the asset file in every locale."""

    def delete_asset(self, asset_id: str) -> None:
        """Delete an unpublished asset."""

    def create_upload(self, data: bytes) -> dict[str, Any]:
        """Upload raw bytes and return the upload resource."""

    def bulk_publish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Submit a bulk publish action."""

    def bulk_unpublish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Submit a bulk unpublish action."""

    def get_bulk_action(self, action_id: str) -> dict[str, Any]:
        """Fetch the current state of a bulk action."""
