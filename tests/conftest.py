from __future__ import annotations

import copy
import threading
from typing import Any, Mapping

import pytest

from cfdata.platforms.contentful import ContentfulAccess, ContentfulApiError, ErrorKind


class FakeContentfulClient:
    """In-memory stand-in for ``ContentfulManagementClient``."""

    def __init__(self) -> None:
        self.entries: dict[str, dict[str, Any]] = {}
        self.assets: dict[str, dict[str, Any]] = {}
        self.uploads: dict[str, bytes] = {}
        self.calls: list[tuple[str, Any]] = []
        self.bulk_requests: list[tuple[str, dict[str, Any]]] = []
        self.fail_processing: set[str] = set()
        self.unprocessable: set[str] = set()
        self.process_gates: dict[str, threading.Event] = {}
        self.processed: list[str] = []
        self.bulk_statuses: list[str] = ["succeeded"]
        self._actions: dict[str, list[str]] = {}
        self._counter = 0
        self._lock = threading.Lock()

    # helpers

    def _next_id(self, prefix: str) -> str:
        with self._lock:
            self._counter += 1
            return f"{prefix}-{self._counter}"

    def _record(self, name: str, payload: Any = None) -> None:
        with self._lock:
            self.calls.append((name, payload))

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _store(self, kind: str) -> dict[str, dict[str, Any]]:
        return self.entries if kind == "Entry" else self.assets

    def _query(self, store: dict[str, dict[str, Any]], params: Mapping[str, Any]) -> dict[str, Any]:
        tag = params.get("metadata.tags.sys.id[all]")
        matching = [
            item
            for item in store.values()
            if tag is None
            or tag in [link["sys"]["id"] for link in item.get("metadata", {}).get("tags", [])]
        ]
        skip = int(params.get("skip", 0))
        limit = int(params.get("limit", 100))
        page = matching[skip : skip + limit]
        return {"total": len(matching), "skip": skip, "limit": limit, "items": copy.deepcopy(page)}

    # entries

    def query_entries(self, params: Mapping[str, Any]) -> dict[str, Any]:
        self._record("query_entries", dict(params))
        return self._query(self.entries, params)

    def create_entry(self, content_type_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        self._record("create_entry", content_type_id)
        entry_id = self._next_id("entry")
        entry = {
            "sys": {
                "id": entry_id,
                "type": "Entry",
                "version": 1,
                "contentType": {"sys": {"type": "Link", "linkType": "ContentType", "id": content_type_id}},
            },
            "fields": copy.deepcopy(dict(body["fields"])),
            "metadata": copy.deepcopy(body.get("metadata", {"tags": []})),
        }
        self.entries[entry_id] = entry
        return copy.deepcopy(entry)

    def delete_entry(self, entry_id: str) -> None:
        self._record("delete_entry", entry_id)
        self._delete(self.entries, entry_id)

    # assets

    def query_assets(self, params: Mapping[str, Any]) -> dict[str, Any]:
        self._record("query_assets", dict(params))
        return self._query(self.assets, params)

    def get_asset(self, asset_id: str) -> dict[str, Any]:
        self._record("get_asset", asset_id)
        return copy.deepcopy(self._get(self.assets, asset_id))

    def create_asset(self, body: Mapping[str, Any]) -> dict[str, Any]:
        self._record("create_asset", copy.deepcopy(dict(body)))
        asset_id = self._next_id("asset")
        asset = {
            "sys": {"id": asset_id, "type": "Asset", "version": 1},
            "fields": copy.deepcopy(dict(body["fields"])),
            "metadata": {"tags": []},
        }
        self.assets[asset_id] = asset
        return copy.deepcopy(asset)

    def update_asset_metadata(self, asset_id: str, metadata: Mapping[str, Any]) -> dict[str, Any]:
        self._record("update_asset_metadata", asset_id)
        asset = self._get(self.assets, asset_id)
        asset["metadata"] = copy.deepcopy(dict(metadata))
        asset["sys"]["version"] += 1
        return copy.deepcopy(asset)

    def process_asset(self, asset_id: str) -> None:
        self._record("process_asset", asset_id)
        gate = self.process_gates.get(asset_id)
        if gate is not None:
            gate.wait(timeout=5)
        if asset_id in self.fail_processing:
            raise ContentfulApiError(
                "Processing failed", kind=ErrorKind.VALIDATION, status=422
            )
        asset = self._get(self.assets, asset_id)
        if asset_id in self.unprocessable:
            return
        for file_value in asset["fields"]["file"].values():
            file_value["url"] = f"//images.example/{asset_id}/{file_value['fileName']}"
        asset["sys"]["version"] += 1
        with self._lock:
            self.processed.append(asset_id)

    def delete_asset(self, asset_id: str) -> None:
        self._record("delete_asset", asset_id)
        self._delete(self.assets, asset_id)

    def create_upload(self, data: bytes) -> dict[str, Any]:
        self._record("create_upload")
        upload_id = self._next_id("upload")
        self.uploads[upload_id] = bytes(data)
        return {"sys": {"id": upload_id, "type": "Upload"}}

    # bulk actions

    def bulk_publish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        self._record("bulk_publish", copy.deepcopy(dict(payload)))
        self.bulk_requests.append(("publish", copy.deepcopy(dict(payload))))
        for link in payload["entities"]["items"]:
            sys = link["sys"]
            item = self._get(self._store(sys["linkType"]), sys["id"])
            if item["sys"]["version"] != sys["version"]:
                raise ContentfulApiError("Version mismatch", kind=ErrorKind.CONFLICT, status=409)
            item["sys"]["publishedVersion"] = item["sys"]["version"]
            item["sys"]["version"] += 1
        return self._start_action()

    def bulk_unpublish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        self._record("bulk_unpublish", copy.deepcopy(dict(payload)))
        self.bulk_requests.append(("unpublish", copy.deepcopy(dict(payload))))
        for link in payload["entities"]["items"]:
            sys = link["sys"]
            item = self._get(self._store(sys["linkType"]), sys["id"])
            item["sys"].pop("publishedVersion", None)
        return self._start_action()

    def get_bulk_action(self, action_id: str) -> dict[str, Any]:
        self._record("get_bulk_action", action_id)
        statuses = self._actions[action_id]
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        return self._action(action_id, status)

    def _start_action(self) -> dict[str, Any]:
        action_id = self._next_id("bulk")
        statuses = list(self.bulk_statuses)
        self._actions[action_id] = statuses[1:] or statuses
        return self._action(action_id, statuses[0])

    def _action(self, action_id: str, status: str) -> dict[str, Any]:
        action: dict[str, Any] = {"sys": {"id": action_id, "type": "BulkAction", "status": status}}
        if status == "failed":
            action["error"] = {"sys": {"id": "BulkActionFailed"}}
        return action

    # storage

    def _get(self, store: dict[str, dict[str, Any]], item_id: str) -> dict[str, Any]:
        try:
            return store[item_id]
        except KeyError as exc:
            raise ContentfulApiError(
                "The resource could not be found.", kind=ErrorKind.NOT_FOUND, status=404
            ) from exc

    def _delete(self, store: dict[str, dict[str, Any]], item_id: str) -> None:
        item = self._get(store, item_id)
        if "publishedVersion" in item["sys"]:
            raise ContentfulApiError(
                "Cannot delete a published item", kind=ErrorKind.CONFLICT, status=409
            )
        with self._lock:
            del store[item_id]

    def published(self) -> list[dict[str, Any]]:
        return [
            item
            for item in [*self.entries.values(), *self.assets.values()]
            if "publishedVersion" in item["sys"]
        ]


@pytest.fixture()
def fake_client() -> FakeContentfulClient:
    return FakeContentfulClient()


@pytest.fixture()
def access(fake_client: FakeContentfulClient) -> ContentfulAccess:
    return ContentfulAccess(fake_client, max_workers=4, poll_interval=0, max_polls=3, sleep=lambda _: None)
