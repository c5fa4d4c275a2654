# src/browser/playwright_backend.py

"""Chromium rendering backend built on Playwright's async API."""

import logging
from pathlib import Path

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from src.browser.base import BrowserSession, PageElement, PageSession
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.browser")


class PlaywrightElement(PageElement):
    """PageElement backed by a Playwright ``ElementHandle``."""

    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle

    async def query(self, selector: str) -> PageElement | None:
        found = await self._handle.query_selector(selector)
        return PlaywrightElement(found) if found else None

    async def query_all(self, selector: str) -> list[PageElement]:
        handles = await self._handle.query_selector_all(selector)
        return [PlaywrightElement(h) for h in handles]

    async def text(self) -> str:
        # inner_text keeps block-level line breaks, text_content does not
        return await self._handle.inner_text()

    async def attribute(self, name: str) -> str | None:
        return await self._handle.get_attribute(name)


class PlaywrightPage(PageSession):
    """PageSession backed by a Playwright ``Page``."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, timeout_ms: int) -> None:
        await self._page.goto(
            url, wait_until="domcontentloaded", timeout=timeout_ms
        )

    async def wait_for_load_state(self, state: str, timeout_ms: int) -> None:
        await self._page.wait_for_load_state(
            state,  # type: ignore[arg-type]
            timeout=timeout_ms,
        )

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.locator(selector).first.wait_for(
                timeout=timeout_ms
            )
            return True
        except PlaywrightError:
            return False

    async def count(self, selector: str) -> int:
        return await self._page.locator(selector).count()

    async def query_all(self, selector: str) -> list[PageElement]:
        handles = await self._page.query_selector_all(selector)
        return [PlaywrightElement(h) for h in handles]

    async def click(self, selector: str, timeout_ms: int) -> None:
        await self._page.locator(selector).first.click(timeout=timeout_ms)

    async def scroll(self, delta_y: int) -> None:
        await self._page.mouse.wheel(0, delta_y)

    async def wait(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def screenshot(self, path: Path) -> bool:
        await self._page.screenshot(path=str(path), full_page=True)
        return True

    async def content(self) -> str:
        return await self._page.content()

    async def close(self) -> None:
        await self._page.close()


class PlaywrightBrowser(BrowserSession):
    """Single Chromium context shared by every category.

    The context carries the locale, timezone and geolocation hints
    so consent acceptance and geo configuration persist across
    categories.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def start(self) -> None:
        s = self.settings
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=s.HEADLESS,
            slow_mo=s.SLOW_MO_MS,
        )
        self._context = await self._browser.new_context(
            user_agent=s.USER_AGENT,
            viewport=s.VIEWPORT,  # type: ignore[arg-type]
            locale=s.LOCALE,
            timezone_id=s.TIMEZONE_ID,
            geolocation=s.GEOLOCATION,  # type: ignore[arg-type]
            permissions=["geolocation"],
            extra_http_headers={"accept-language": s.ACCEPT_LANGUAGE},
        )
        logger.info(
            "Chromium started (headless=%s, locale=%s, tz=%s)",
            s.HEADLESS,
            s.LOCALE,
            s.TIMEZONE_ID,
        )

    async def new_page(self) -> PageSession:
        if self._context is None:
            raise RuntimeError("PlaywrightBrowser.start() was not called")
        page = await self._context.new_page()
        return PlaywrightPage(page)

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as exc:
            logger.warning("Error while closing browser: %s", exc)
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._playwright = None
            self._browser = None
            self._context = None
