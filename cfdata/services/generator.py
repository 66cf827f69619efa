"""Fake content generation for test data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from faker import Faker

from ..platforms.contentful.models import ASSET, ENTRY, AssetMeta, link, localized
from ..settings import SetupSettings
from ..utils.text import kebab_case, snake_case


@dataclass(slots=True)
class GeneratedArticle:
    """Values for one content triple, before any ids exist."""

    name: str
    image: AssetMeta
    address: dict[str, str]

    @property
    def slug(self) -> str:
        return kebab_case(self.name)


class ContentGenerator:
    """Produces field values for Address, Article and Image items.

    ``faker_locale`` controls the shape of generated data (e.g. ``en_GB``
    gives UK postcodes), independent of the Contentful locale the fields are
    written under. A fixed ``seed`` yields the same sequence every run.
    """

    def __init__(self, *, faker_locale: str = "en_GB", seed: int | None = None) -> None:
        self._faker = Faker(faker_locale)
        if seed is not None:
            self._faker.seed_instance(seed)

    @classmethod
    def from_settings(cls, settings: SetupSettings) -> "ContentGenerator":
        return cls(faker_locale=settings.faker_locale, seed=settings.seed)

    def article(self) -> GeneratedArticle:
        name = self._faker.company()
        image = AssetMeta(
            title=f"{name} featured image",
            description=f"Main image for {name}.",
            content_type="image/jpeg",
            file_name=f"{snake_case(name)}.jpg",
        )
        return GeneratedArticle(name=name, image=image, address=self._address())

    def _address(self) -> dict[str, str]:
        county = getattr(self._faker, "county", None)
        return {
            "houseNumberAndStreet": self._faker.street_address(),
            "town": self._faker.city(),
            "county": county() if county else self._faker.state(),
            "postcode": self._faker.postcode(),
        }


def address_fields(article: GeneratedArticle, locale: str) -> dict[str, Any]:
    return {key: localized(locale, value) for key, value in article.address.items()}


def article_fields(
    article: GeneratedArticle, locale: str, *, address_id: str, image_id: str
) -> dict[str, Any]:
    return {
        "name": localized(locale, article.name),
        "address": localized(locale, link(ENTRY, address_id)),
        "mainImage": localized(locale, link(ASSET, image_id)),
        "slug": localized(locale, article.slug),
    }


__all__ = ["ContentGenerator", "GeneratedArticle", "address_fields", "article_fields"]
