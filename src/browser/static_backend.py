# src/browser/static_backend.py

"""Non-JS rendering backend: fetched HTML parsed with BeautifulSoup.

Useful for server-rendered listing pages and for replaying saved
markup.  Scrolling and clicking have no effect, so lazy content never
grows and consent dialogs are never dismissed.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from curl_cffi import requests as curl_requests

from src.browser.base import (
    BrowserSession,
    PageElement,
    PageLoadError,
    PageSession,
)
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.browser")

# Cloudflare challenge page markers (checked before keyword scan)
_CF_CHALLENGE_MARKERS: list[str] = [
    "challenges.cloudflare.com",
    "cdn-cgi/challenge-platform",
    "just a moment",
    "cf-turnstile",
    "cf_chl_opt",
]

# Tags whose content starts on its own line, as in rendered innerText
_BLOCK_TAGS: frozenset[str] = frozenset({
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
})
_SKIPPED_TAGS: frozenset[str] = frozenset({"script", "style", "template", "noscript"})


def block_text(tag: Tag) -> str:
    """Text of *tag* with line breaks only at block boundaries and <br>.

    Inline runs such as ``<span>€</span><span>39,99</span>`` stay on one
    line so a currency marker and its amount are read together.
    """
    parts: list[str] = []
    for child in tag.children:
        if isinstance(child, Tag):
            if child.name in _SKIPPED_TAGS:
                continue
            if child.name == "br":
                parts.append("\n")
            elif child.name in _BLOCK_TAGS:
                parts.append(f"\n{block_text(child)}\n")
            else:
                parts.append(block_text(child))
        elif isinstance(child, NavigableString) and not isinstance(
            child, PreformattedString
        ):
            parts.append(str(child))
    return "".join(parts)


class SoupElement(PageElement):
    """PageElement backed by a BeautifulSoup ``Tag``."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    async def query(self, selector: str) -> PageElement | None:
        try:
            found = self._tag.select_one(selector)
        except Exception as exc:
            logger.debug("Selector %r unsupported: %s", selector, exc)
            return None
        return SoupElement(found) if found is not None else None

    async def query_all(self, selector: str) -> list[PageElement]:
        try:
            found = self._tag.select(selector)
        except Exception as exc:
            logger.debug("Selector %r unsupported: %s", selector, exc)
            return []
        return [SoupElement(t) for t in found]

    async def text(self) -> str:
        return block_text(self._tag)

    async def attribute(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)


class StaticPage(PageSession):
    """PageSession over a fetched (or supplied) HTML document."""

    def __init__(
        self,
        session: Any | None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._session = session
        self._url = "about:blank"
        self._soup = BeautifulSoup("", "lxml")

    @classmethod
    def from_html(
        cls,
        html: str,
        url: str = "about:blank",
        settings: Settings | None = None,
    ) -> "StaticPage":
        """Build a page from markup without any network access."""
        page = cls(session=None, settings=settings)
        page._load(html, url)
        return page

    def _load(self, html: str, url: str) -> None:
        self._soup = BeautifulSoup(html, "lxml")
        self._url = url

    def _validate_text(self, text: str) -> bool:
        """Reject Cloudflare challenge and CAPTCHA interstitials."""
        lower = text.lower()
        for marker in _CF_CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge detected (marker: '%s')", marker
                )
                return False
        # Skip the keyword scan on content-rich pages (false positives)
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    logger.warning("CAPTCHA keyword '%s' detected", keyword)
                    return False
        return True

    def _fetch(self, url: str, timeout_s: float) -> tuple[str, str]:
        """Fetch *url*, falling back to cloudscraper on failure.

        Returns the document text and the final (post-redirect) URL.
        """
        if self._session is None:
            raise PageLoadError(url, "page has no HTTP session")
        headers: dict[str, str] = dict(self.settings.DEFAULT_HEADERS)

        # Primary: curl_cffi (browser-impersonating TLS)
        try:
            resp = self._session.get(url, headers=headers, timeout=timeout_s)
            if resp.status_code == 200 and self._validate_text(resp.text):
                return resp.text, str(resp.url or url)
            logger.warning("HTTP %d from %s", resp.status_code, url)
        except Exception as exc:
            logger.warning(
                "Request error for %s: %s", url, exc, exc_info=True
            )

        # Fallback: cloudscraper (JS challenge solver)
        logger.info("curl_cffi failed, falling back to cloudscraper")
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback: Any = scraper.get(
                url, headers=headers, timeout=timeout_s
            )
            text = str(fallback.text)
            if fallback.status_code == 200 and self._validate_text(text):
                return text, str(fallback.url or url)
        except Exception as exc:
            logger.error(
                "cloudscraper fallback also failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
        raise PageLoadError(url, "all fetch strategies failed")

    @property
    def url(self) -> str:
        return self._url

    async def goto(self, url: str, timeout_ms: int) -> None:
        text, final_url = await asyncio.to_thread(
            self._fetch, url, timeout_ms / 1000
        )
        self._load(text, final_url)

    async def wait_for_load_state(self, state: str, timeout_ms: int) -> None:
        # The document is complete once fetched
        return None

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        return await self.count(selector) > 0

    async def count(self, selector: str) -> int:
        return len(await self.query_all(selector))

    async def query_all(self, selector: str) -> list[PageElement]:
        try:
            found = self._soup.select(selector)
        except Exception as exc:
            logger.debug("Selector %r unsupported: %s", selector, exc)
            return []
        return [SoupElement(t) for t in found]

    async def click(self, selector: str, timeout_ms: int) -> None:
        logger.debug("Static page ignores click on %r", selector)

    async def scroll(self, delta_y: int) -> None:
        return None

    async def wait(self, ms: int) -> None:
        await asyncio.sleep(ms / 1000)

    async def screenshot(self, path: Path) -> bool:
        return False

    async def content(self) -> str:
        return str(self._soup)

    async def close(self) -> None:
        return None


class StaticBrowser(BrowserSession):
    """Shared curl_cffi session (cookies persist across categories)."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.session: curl_requests.Session | None = None

    async def start(self) -> None:
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        logger.info(
            "Static session started (impersonate=%s)",
            self.settings.IMPERSONATE_BROWSER,
        )

    async def new_page(self) -> PageSession:
        if self.session is None:
            raise RuntimeError("StaticBrowser.start() was not called")
        return StaticPage(self.session, self.settings)

    async def close(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
