"""Access facade translating cfdata intents into Contentful API calls."""

from __future__ import annotations

import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from ...settings import AppConfig
from ...utils.logging import get_logger
from ..base import ManagementClient
from .api import ContentfulApiError, ErrorKind
from .models import (
    ASSET,
    ENTRY,
    MAX_BULK_ITEMS,
    AssetMeta,
    Item,
    ItemKind,
    asset_fields,
    is_processed,
    item_id,
    link,
    publish_payload,
    tag_metadata,
    unpublish_payload,
)

LOGGER = get_logger(__name__)

IMAGE_SERVICE_URL = "https://picsum.photos"

_T = TypeVar("_T")
_R = TypeVar("_R")


class ContentfulAccess:
    """Find, create, tag, process, publish and delete Contentful items.

    Every remote failure is raised unchanged as ``ContentfulApiError``.
    Per-item work inside one call runs on a bounded thread pool. The call
    returns once every item finished, or raises as soon as one item fails;
    siblings still queued are cancelled and completed ones are not rolled back.
    """

    def __init__(
        self,
        client: ManagementClient,
        *,
        max_workers: int = 8,
        poll_interval: float = 2.0,
        max_polls: int = 10,
        page_size: int = 100,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._max_workers = max(1, max_workers)
        self._poll_interval = poll_interval
        self._max_polls = max(1, max_polls)
        self._page_size = page_size
        self._sleep = sleep

    @classmethod
    def from_config(cls, client: ManagementClient, config: AppConfig) -> "ContentfulAccess":
        return cls(
            client,
            max_workers=config.contentful.max_workers,
            poll_interval=config.processing.poll_interval,
            max_polls=config.processing.max_polls,
        )

    # Lookup

    def find_tagged(self, tag: str, kind: ItemKind) -> list[str]:
        """Return the ids of every item of ``kind`` carrying ``tag``."""
        LOGGER.info(
            "Finding tagged items", extra={"event": "contentful.find", "tag": tag, "kind": kind}
        )
        query = self._client.query_entries if kind == ENTRY else self._client.query_assets
        ids: list[str] = []
        skip = 0
        while True:
            result = query(
                {
                    "metadata.tags.sys.id[all]": tag,
                    "limit": self._page_size,
                    "skip": skip,
                }
            )
            items = result.get("items", [])
            ids.extend(item_id(item) for item in items)
            skip += len(items)
            if not items or skip >= int(result.get("total", skip)):
                break
        LOGGER.info(
            "Found tagged items",
            extra={"event": "contentful.find", "tag": tag, "kind": kind, "count": len(ids)},
        )
        return ids

    def find_tagged_entries(self, tag: str) -> list[str]:
        return self.find_tagged(tag, ENTRY)

    def find_tagged_assets(self, tag: str) -> list[str]:
        return self.find_tagged(tag, ASSET)

    # Creation

    def create_entry(self, content_type_id: str, fields: Mapping[str, Any], tag: str) -> Item:
        """Create a Draft entry with ``tag`` attached at creation time."""
        LOGGER.info(
            "Creating entry",
            extra={"event": "contentful.create_entry", "content_type": content_type_id, "tag": tag},
        )
        LOGGER.debug("Entry fields: %s", fields)
        entry = self._client.create_entry(
            content_type_id, {"fields": dict(fields), "metadata": tag_metadata(tag)}
        )
        LOGGER.info(
            "Created entry",
            extra={"event": "contentful.create_entry", "id": item_id(entry)},
        )
        return entry

    def create_asset_from_file(
        self, meta: AssetMeta, path: Path, locale: str, tag: str
    ) -> Item:
        """Upload ``path`` and create a Draft asset from it, then tag it.

        Three remote calls (upload, create, tag); not atomic.
        """
        LOGGER.info(
            "Creating asset from file",
            extra={"event": "contentful.create_asset", "path": str(path), "tag": tag},
        )
        upload = self._client.create_upload(path.read_bytes())
        fields = asset_fields(meta, locale, {"uploadFrom": link("Upload", item_id(upload))})
        asset = self._client.create_asset({"fields": fields})
        LOGGER.info("Created asset", extra={"event": "contentful.create_asset", "id": item_id(asset)})
        return self.tag_asset(asset, tag)

    def create_asset_from_url(
        self, meta: AssetMeta, width: int, height: int, locale: str, tag: str
    ) -> Item:
        """Create a Draft asset pointing at a generated image, then tag it.

        Asset creation cannot carry tags, so this issues two remote calls and
        a created but untagged asset is observable if the second one fails.
        """
        LOGGER.info(
            "Creating asset from image service",
            extra={
                "event": "contentful.create_asset",
                "width": width,
                "height": height,
                "tag": tag,
            },
        )
        fields = asset_fields(
            meta, locale, {"upload": f"{IMAGE_SERVICE_URL}/{width}/{height}"}
        )
        asset = self._client.create_asset({"fields": fields})
        LOGGER.info("Created asset", extra={"event": "contentful.create_asset", "id": item_id(asset)})
        return self.tag_asset(asset, tag)

    def tag_asset(self, asset: Mapping[str, Any], tag: str) -> Item:
        """Replace the asset's tags with the single ``tag``."""
        asset_id = item_id(asset)
        LOGGER.info("Tagging asset", extra={"event": "contentful.tag", "id": asset_id, "tag": tag})
        updated = self._client.update_asset_metadata(asset_id, tag_metadata(tag))
        LOGGER.info("Updated asset", extra={"event": "contentful.tag", "id": item_id(updated)})
        return updated

    # Processing

    def process_assets(self, assets: Sequence[Mapping[str, Any]]) -> list[Item]:
        """Process every asset and wait until all of them are ready."""
        LOGGER.info(
            "Processing assets", extra={"event": "contentful.process", "count": len(assets)}
        )
        return self._join(self._process_asset, assets)

    def _process_asset(self, asset: Mapping[str, Any]) -> Item:
        asset_id = item_id(asset)
        locales = list(asset.get("fields", {}).get("file", {}))
        self._client.process_asset(asset_id)

        for _ in range(self._max_polls):
            self._sleep(self._poll_interval)
            current = self._client.get_asset(asset_id)
            if is_processed(current):
                LOGGER.info(
                    "Asset processed", extra={"event": "contentful.process", "id": asset_id}
                )
                return current

        raise ContentfulApiError(
            "Asset processing did not finish",
            kind=ErrorKind.PROCESSING,
            details={"id": asset_id, "locales": locales, "polls": self._max_polls},
        )

    # Publishing

    def publish_items(self, items: Iterable[Mapping[str, Any]]) -> Item | None:
        """Publish any mix of entries and assets in one bulk action.

        Returns ``None`` without contacting the service when ``items`` is empty.
        More than ``MAX_BULK_ITEMS`` items are rejected before any request.
        """
        items = list(items)
        LOGGER.info("Publishing items", extra={"event": "contentful.publish", "count": len(items)})
        if not items:
            return None
        if len(items) > MAX_BULK_ITEMS:
            raise ContentfulApiError(
                "Too many items for one bulk publish",
                kind=ErrorKind.VALIDATION,
                details={"count": len(items), "limit": MAX_BULK_ITEMS},
            )
        for item in items:
            LOGGER.debug("Publish %s", item_id(item))
        action = self._client.bulk_publish(publish_payload(items))
        return self._await_bulk_action(action)

    def unpublish_items(self, ids: Iterable[str], kind: ItemKind) -> list[Item]:
        """Unpublish ``ids`` in bulk actions of at most ``MAX_BULK_ITEMS`` links.

        Batches run one after another and each is awaited before the next.
        """
        ids = list(ids)
        LOGGER.info(
            "Unpublishing items",
            extra={"event": "contentful.unpublish", "count": len(ids), "kind": kind},
        )
        actions: list[Item] = []
        for start in range(0, len(ids), MAX_BULK_ITEMS):
            batch = ids[start : start + MAX_BULK_ITEMS]
            for identifier in batch:
                LOGGER.debug("Unpublish %s", identifier)
            action = self._client.bulk_unpublish(unpublish_payload(batch, kind))
            actions.append(self._await_bulk_action(action))
        return actions

    def unpublish_entries(self, ids: Iterable[str]) -> list[Item]:
        return self.unpublish_items(ids, ENTRY)

    def unpublish_assets(self, ids: Iterable[str]) -> list[Item]:
        return self.unpublish_items(ids, ASSET)

    def _await_bulk_action(self, action: Mapping[str, Any]) -> Item:
        action_id = item_id(action)
        for attempt in range(self._max_polls + 1):
            status = action.get("sys", {}).get("status")
            if status == "succeeded":
                LOGGER.info(
                    "Bulk action succeeded",
                    extra={"event": "contentful.bulk_action", "id": action_id},
                )
                return dict(action)
            if status == "failed":
                raise ContentfulApiError(
                    "Bulk action failed",
                    kind=ErrorKind.CONFLICT,
                    details={"id": action_id, "error": action.get("error")},
                )
            if attempt == self._max_polls:
                break
            self._sleep(self._poll_interval)
            action = self._client.get_bulk_action(action_id)

        raise ContentfulApiError(
            "Bulk action did not finish",
            kind=ErrorKind.PROCESSING,
            details={"id": action_id, "status": action.get("sys", {}).get("status")},
        )

    # Deletion

    def delete_entries(self, ids: Iterable[str]) -> None:
        """Delete unpublished entries by id."""
        ids = list(ids)
        LOGGER.info("Deleting entries", extra={"event": "contentful.delete", "count": len(ids)})
        self._join(self._delete_entry, ids)

    def delete_assets(self, ids: Iterable[str]) -> None:
        """Delete unpublished assets by id."""
        ids = list(ids)
        LOGGER.info("Deleting assets", extra={"event": "contentful.delete", "count": len(ids)})
        self._join(self._delete_asset, ids)

    def _delete_entry(self, entry_id: str) -> None:
        LOGGER.debug("Delete entry %s", entry_id)
        self._client.delete_entry(entry_id)

    def _delete_asset(self, asset_id: str) -> None:
        LOGGER.debug("Delete asset %s", asset_id)
        self._client.delete_asset(asset_id)

    def _join(self, func: Callable[[_T], _R], items: Sequence[_T]) -> list[_R]:
        if not items:
            return []
        workers = min(self._max_workers, len(items))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cfdata")
        try:
            futures = [executor.submit(func, item) for item in items]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["ContentfulAccess", "IMAGE_SERVICE_URL"]
