# src/scrapers/site_profile.py

"""Per-site selector tables loaded from ``selectors.json``."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.browser.base import PageElement
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.profile")


@dataclass(frozen=True)
class FieldStrategy:
    """One way of reading a logical field: a locator plus an extractor.

    With no ``attribute`` the element's text is read, otherwise the
    named attribute.
    """

    selector: str
    attribute: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FieldStrategy":
        """Build from a ``{"selector": ..., "attribute": ...}`` entry."""
        return cls(
            selector=str(raw["selector"]),
            attribute=raw.get("attribute"),
        )

    async def extract(self, scope: PageElement) -> str | None:
        """Locate within *scope* and read text or attribute."""
        element = await scope.query(self.selector)
        if element is None:
            return None
        if self.attribute:
            return await element.attribute(self.attribute)
        return await element.text()


def _strategies(raw: list[dict[str, Any]] | None) -> tuple[FieldStrategy, ...]:
    return tuple(FieldStrategy.from_dict(r) for r in raw or [])


@dataclass(frozen=True)
class SiteProfile:
    """Everything site-specific the pipeline needs to read a listing."""

    name: str
    wait_candidates: tuple[str, ...]
    product_card: tuple[str, ...]
    product_url: tuple[FieldStrategy, ...]
    image_url: tuple[FieldStrategy, ...]
    title: tuple[FieldStrategy, ...]
    brand: tuple[FieldStrategy, ...]
    page_brand: tuple[FieldStrategy, ...] = ()
    size_openers: tuple[str, ...] = ()
    size_panels: tuple[str, ...] = ()
    size_options: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, name: str, raw: dict[str, Any]) -> "SiteProfile":
        """Build a profile from one site entry of the selectors file."""
        page: dict[str, Any] = raw.get("product_page", {})
        return cls(
            name=name,
            wait_candidates=tuple(raw.get("wait_candidates", [])),
            product_card=tuple(raw.get("product_card", [])),
            product_url=_strategies(raw.get("product_url")),
            image_url=_strategies(raw.get("image_url")),
            title=_strategies(raw.get("title")),
            brand=_strategies(raw.get("brand")),
            page_brand=_strategies(page.get("brand")),
            size_openers=tuple(page.get("size_openers", [])),
            size_panels=tuple(page.get("size_panels", [])),
            size_options=tuple(page.get("size_options", [])),
        )

    @classmethod
    def load(
        cls,
        name: str | None = None,
        path: Path | None = None,
    ) -> "SiteProfile":
        """Load the profile *name* (default: ``Settings.SITE_PROFILE``)."""
        site = name or Settings.SITE_PROFILE
        selectors_path = path or Settings.SELECTORS_PATH
        with open(selectors_path, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        if site not in all_selectors:
            known = ", ".join(sorted(all_selectors))
            raise KeyError(f"Unknown site profile '{site}' (known: {known})")
        logger.debug("Loaded site profile '%s' from %s", site, selectors_path)
        return cls.from_dict(site, all_selectors[site])
