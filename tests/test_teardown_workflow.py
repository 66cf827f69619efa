from __future__ import annotations

import pytest

from cfdata.platforms.contentful import ContentfulAccess, ContentfulApiError
from cfdata.services import ContentGenerator, SetupWorkflow, TeardownWorkflow


def test_teardown_after_setup_leaves_nothing_tagged(access: ContentfulAccess, fake_client) -> None:
    SetupWorkflow(access, ContentGenerator(seed=1), count=10).run("demo", "en-US")
    other = access.create_entry("address", {}, "keep")

    result = TeardownWorkflow(access).run("demo")

    assert len(result.entry_ids) == 20
    assert len(result.asset_ids) == 10
    assert result.removed_count == 30
    assert access.find_tagged_entries("demo") == []
    assert access.find_tagged_assets("demo") == []
    assert list(fake_client.entries) == [other["sys"]["id"]]
    assert fake_client.assets == {}


def test_teardown_phases_run_in_order(access: ContentfulAccess, fake_client) -> None:
    SetupWorkflow(access, ContentGenerator(seed=3), count=2).run("demo", "en-US")
    fake_client.calls.clear()

    TeardownWorkflow(access).run("demo")

    phases = []
    for name in fake_client.call_names():
        if name in {"get_bulk_action"}:
            continue
        if not phases or phases[-1] != name:
            phases.append(name)
    assert phases == [
        "query_entries",
        "query_assets",
        "bulk_unpublish",
        "delete_entry",
        "delete_asset",
    ]
    unpublish_kinds = [
        payload["entities"]["items"][0]["sys"]["linkType"]
        for kind, payload in fake_client.bulk_requests
        if kind == "unpublish"
    ]
    assert unpublish_kinds == ["Entry", "Asset"]


def test_teardown_with_nothing_tagged_issues_no_bulk_actions(
    access: ContentfulAccess, fake_client
) -> None:
    result = TeardownWorkflow(access).run("empty")

    assert result.removed_count == 0
    assert fake_client.bulk_requests == []
    assert fake_client.call_names() == ["query_entries", "query_assets"]


def test_teardown_stops_at_first_failed_delete(access: ContentfulAccess, fake_client) -> None:
    SetupWorkflow(access, ContentGenerator(seed=5), count=1).run("demo", "en-US")

    def delete_entry(entry_id: str) -> None:
        raise ContentfulApiError("boom", status=500)

    fake_client.delete_entry = delete_entry

    with pytest.raises(ContentfulApiError):
        TeardownWorkflow(access).run("demo")

    assert "delete_asset" not in fake_client.call_names()
    assert len(fake_client.assets) == 1
