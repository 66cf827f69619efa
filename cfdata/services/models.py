"""Data models for the setup and teardown workflows."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..platforms.contentful.models import Item


@dataclass(slots=True)
class CreatedItems:
    """Assets and entries created during a run."""

    assets: list[Item] = field(default_factory=list)
    entries: list[Item] = field(default_factory=list)

    def extend(self, other: "CreatedItems") -> None:
        self.assets.extend(other.assets)
        self.entries.extend(other.entries)


@dataclass(slots=True)
class SetupResult:
    """Outcome of a setup run."""

    tag: str
    locale: str
    entries: list[Item]
    assets: list[Item]
    bulk_action: Item | None = None

    @property
    def published_count(self) -> int:
        return len(self.entries) + len(self.assets)


@dataclass(slots=True)
class TeardownResult:
    """Ids removed by a teardown run."""

    tag: str
    entry_ids: list[str]
    asset_ids: list[str]

    @property
    def removed_count(self) -> int:
        return len(self.entry_ids) + len(self.asset_ids)
