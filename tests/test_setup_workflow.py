from __future__ import annotations

import pytest

from cfdata.platforms.contentful import ContentfulAccess, ContentfulApiError
from cfdata.platforms.contentful.models import tag_ids
from cfdata.services import ContentGenerator, SetupWorkflow
from cfdata.settings import MAX_SETUP_COUNT


def _workflow(access: ContentfulAccess, *, count: int = 10) -> SetupWorkflow:
    return SetupWorkflow(access, ContentGenerator(seed=42), count=count)


def _content_type(entry) -> str:
    return entry["sys"]["contentType"]["sys"]["id"]


def test_setup_creates_tags_and_publishes_every_triple(access: ContentfulAccess, fake_client) -> None:
    result = _workflow(access).run("demo", "en-US")

    addresses = [e for e in fake_client.entries.values() if _content_type(e) == "address"]
    articles = [e for e in fake_client.entries.values() if _content_type(e) == "article"]
    assert len(addresses) == 10
    assert len(articles) == 10
    assert len(fake_client.assets) == 10

    for item in [*fake_client.entries.values(), *fake_client.assets.values()]:
        assert tag_ids(item) == ["demo"]
        assert "publishedVersion" in item["sys"]

    publishes = [payload for kind, payload in fake_client.bulk_requests if kind == "publish"]
    assert len(publishes) == 1
    link_types = [link["sys"]["linkType"] for link in publishes[0]["entities"]["items"]]
    assert link_types.count("Entry") == 20
    assert link_types.count("Asset") == 10
    assert len(result.entries) == 20
    assert len(result.assets) == 10
    assert result.published_count == 30


def test_article_links_resolve_within_the_run(access: ContentfulAccess, fake_client) -> None:
    result = _workflow(access, count=3).run("demo", "en-GB")

    address_ids = {e["sys"]["id"] for e in result.entries if _content_type(e) == "address"}
    asset_ids = {a["sys"]["id"] for a in result.assets}
    articles = [e for e in result.entries if _content_type(e) == "article"]

    assert len(articles) == 3
    for article in articles:
        fields = article["fields"]
        assert fields["address"]["en-GB"]["sys"]["linkType"] == "Entry"
        assert fields["address"]["en-GB"]["sys"]["id"] in address_ids
        assert fields["mainImage"]["en-GB"]["sys"]["linkType"] == "Asset"
        assert fields["mainImage"]["en-GB"]["sys"]["id"] in asset_ids
        assert fields["slug"]["en-GB"] == fields["slug"]["en-GB"].lower()


def test_triple_is_created_image_address_article(access: ContentfulAccess, fake_client) -> None:
    _workflow(access, count=1).run("demo", "en-US")

    creates = [
        (name, payload)
        for name, payload in fake_client.calls
        if name in {"create_asset", "create_entry"}
    ]
    assert [name for name, _ in creates] == ["create_asset", "create_entry", "create_entry"]
    assert [payload for name, payload in creates if name == "create_entry"] == ["address", "article"]

    names = fake_client.call_names()
    assert names.index("bulk_publish") > max(
        index for index, name in enumerate(names) if name == "process_asset"
    )


def test_processing_failure_publishes_nothing(access: ContentfulAccess, fake_client) -> None:
    original_create = fake_client.create_asset
    created: list[str] = []

    def create_asset(body):
        asset = original_create(body)
        created.append(asset["sys"]["id"])
        if len(created) == 4:
            fake_client.fail_processing.add(asset["sys"]["id"])
        return asset

    fake_client.create_asset = create_asset

    with pytest.raises(ContentfulApiError):
        _workflow(access).run("demo", "en-US")

    assert fake_client.bulk_requests == []
    assert fake_client.published() == []
    assert len(fake_client.assets) == 10


def test_generator_seed_is_deterministic() -> None:
    first = ContentGenerator(seed=7).article()
    second = ContentGenerator(seed=7).article()

    assert first.name == second.name
    assert first.address == second.address
    assert first.image.file_name.endswith(".jpg")
    assert " " not in first.image.file_name
    assert set(first.address) == {"houseNumberAndStreet", "town", "county", "postcode"}


@pytest.mark.parametrize("count", [0, MAX_SETUP_COUNT + 1])
def test_count_outside_single_publish_range_is_rejected(
    access: ContentfulAccess, count: int
) -> None:
    with pytest.raises(ValueError):
        SetupWorkflow(access, ContentGenerator(), count=count)
