"""Workflow generating tagged, published test data."""

from __future__ import annotations

from ..platforms.contentful import ContentfulAccess
from ..platforms.contentful.models import item_id
from ..settings import MAX_SETUP_COUNT, SetupSettings
from ..utils.logging import get_logger
from .generator import ContentGenerator, address_fields, article_fields
from .models import CreatedItems, SetupResult

LOGGER = get_logger(__name__)

ADDRESS_CONTENT_TYPE = "address"
ARTICLE_CONTENT_TYPE = "article"


class SetupWorkflow:
    """Creates ``count`` Address/Image/Article triples and publishes them together.

    Triples are created one after another; within a triple the image and the
    address exist before the article linking them is created. Publishing waits
    until every asset of the run has been processed, so one failing asset
    leaves the whole run unpublished.
    """

    def __init__(
        self,
        access: ContentfulAccess,
        generator: ContentGenerator,
        *,
        count: int = 10,
        image_width: int = 400,
        image_height: int = 225,
    ) -> None:
        if not 1 <= count <= MAX_SETUP_COUNT:
            raise ValueError(f"count must be between 1 and {MAX_SETUP_COUNT}, got {count}")
        self._access = access
        self._generator = generator
        self._count = count
        self._image_width = image_width
        self._image_height = image_height

    @classmethod
    def from_settings(
        cls,
        access: ContentfulAccess,
        settings: SetupSettings,
        *,
        count: int | None = None,
    ) -> "SetupWorkflow":
        return cls(
            access,
            ContentGenerator.from_settings(settings),
            count=count if count is not None else settings.count,
            image_width=settings.image_width,
            image_height=settings.image_height,
        )

    def run(self, tag: str, locale: str) -> SetupResult:
        LOGGER.info(
            "Setup started",
            extra={"event": "setup.start", "tag": tag, "locale": locale, "count": self._count},
        )
        created = CreatedItems()
        for index in range(self._count):
            created.extend(self._create_triple(tag, locale))
            LOGGER.info(
                "Created content triple",
                extra={"event": "setup.triple", "index": index + 1, "count": self._count},
            )

        processed_assets = self._access.process_assets(created.assets)
        bulk_action = self._access.publish_items([*created.entries, *processed_assets])

        LOGGER.info(
            "Setup finished",
            extra={
                "event": "setup.finish",
                "tag": tag,
                "entries": len(created.entries),
                "assets": len(processed_assets),
            },
        )
        return SetupResult(
            tag=tag,
            locale=locale,
            entries=created.entries,
            assets=processed_assets,
            bulk_action=bulk_action,
        )

    def _create_triple(self, tag: str, locale: str) -> CreatedItems:
        article = self._generator.article()

        image = self._access.create_asset_from_url(
            article.image, self._image_width, self._image_height, locale, tag
        )
        LOGGER.info("Created image asset %s", item_id(image))

        address = self._access.create_entry(
            ADDRESS_CONTENT_TYPE, address_fields(article, locale), tag
        )
        LOGGER.info("Created address entry %s", item_id(address))

        entry = self._access.create_entry(
            ARTICLE_CONTENT_TYPE,
            article_fields(
                article, locale, address_id=item_id(address), image_id=item_id(image)
            ),
            tag,
        )
        LOGGER.info("Created article entry %s", item_id(entry))

        return CreatedItems(assets=[image], entries=[address, entry])
