"""Workflow removing previously generated test data."""

from __future__ import annotations

from ..platforms.contentful import ContentfulAccess
from ..utils.logging import get_logger
from .models import TeardownResult

LOGGER = get_logger(__name__)


class TeardownWorkflow:
    """Unpublishes and deletes every entry and asset carrying a tag.

    Phases run strictly in order: unpublish entries, unpublish assets, delete
    entries, delete assets. Entries go first so no published entry still
    links an asset being removed. A run aborted part way is not safely
    repeatable; a second run re-unpublishes whatever is left.
    """

    def __init__(self, access: ContentfulAccess) -> None:
        self._access = access

    def run(self, tag: str) -> TeardownResult:
        LOGGER.info("Teardown started", extra={"event": "teardown.start", "tag": tag})
        entry_ids = self._access.find_tagged_entries(tag)
        asset_ids = self._access.find_tagged_assets(tag)

        self._access.unpublish_entries(entry_ids)
        self._access.unpublish_assets(asset_ids)
        self._access.delete_entries(entry_ids)
        self._access.delete_assets(asset_ids)

        LOGGER.info(
            "Teardown finished",
            extra={
                "event": "teardown.finish",
                "tag": tag,
                "entries": len(entry_ids),
                "assets": len(asset_ids),
            },
        )
        return TeardownResult(tag=tag, entry_ids=entry_ids, asset_ids=asset_ids)
