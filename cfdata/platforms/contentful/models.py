"""Data models and payload builders for Contentful items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping

ItemKind = Literal["Entry", "Asset"]

ENTRY: ItemKind = "Entry"
ASSET: ItemKind = "Asset"

# A single bulk action accepts at most this many entity links.
MAX_BULK_ITEMS = 200

# Entries and assets are kept as the plain JSON mappings returned by the API.
Item = dict[str, Any]


@dataclass(slots=True)
class AssetMeta:
    """Metadata describing an asset to create."""

    title: str
    description: str
    content_type: str
    file_name: str


def item_id(item: Mapping[str, Any]) -> str:
    return str(item["sys"]["id"])


def item_version(item: Mapping[str, Any]) -> int:
    return int(item["sys"]["version"])


def item_kind(item: Mapping[str, Any]) -> ItemKind:
    kind = item["sys"]["type"]
    if kind not in (ENTRY, ASSET):
        raise ValueError(f"Item {item_id(item)} is neither an Entry nor an Asset: {kind}")
    return kind


def link(link_type: str, target_id: str) -> dict[str, Any]:
    """Return a link reference to another resource."""
    return {"sys": {"type": "Link", "linkType": link_type, "id": target_id}}


def tag_metadata(tag: str) -> dict[str, Any]:
    """Metadata block carrying exactly one tag link."""
    return {"tags": [link("Tag", tag)]}


def tag_ids(item: Mapping[str, Any]) -> list[str]:
    tags = item.get("metadata", {}).get("tags", [])
    return [tag["sys"]["id"] for tag in tags]


def localized(locale: str, value: Any) -> dict[str, Any]:
    return {locale: value}


def asset_fields(meta: AssetMeta, locale: str, file_value: Mapping[str, Any]) -> dict[str, Any]:
    file_spec = {"contentType": meta.content_type, "fileName": meta.file_name}
    file_spec.update(file_value)
    return {
        "title": localized(locale, meta.title),
        "description": localized(locale, meta.description),
        "file": localized(locale, file_spec),
    }


def publish_payload(items: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Bulk publish payload linking each item by id, version and type."""
    return {
        "entities": {
            "sys": {"type": "Array"},
            "items": [
                {
                    "sys": {
                        "type": "Link",
                        "linkType": item_kind(item),
                        "id": item_id(item),
                        "version": item_version(item),
                    }
                }
                for item in items
            ],
        }
    }


def unpublish_payload(ids: Iterable[str], kind: ItemKind) -> dict[str, Any]:
    return {
        "entities": {
            "sys": {"type": "Array"},
            "items": [link(kind, identifier) for identifier in ids],
        }
    }


def is_processed(asset: Mapping[str, Any]) -> bool:
    """True once every locale of the asset file carries a delivery URL."""
    files = asset.get("fields", {}).get("file", {})
    return bool(files) and all(value.get("url") for value in files.values())


__all__ = [
    "ASSET",
    "ENTRY",
    "MAX_BULK_ITEMS",
    "AssetMeta",
    "Item",
    "ItemKind",
    "asset_fields",
    "is_processed",
    "item_id",
    "item_kind",
    "item_version",
    "link",
    "localized",
    "publish_payload",
    "tag_ids",
    "tag_metadata",
    "unpublish_payload",
]
