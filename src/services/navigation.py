# src/services/navigation.py

"""Bounded-retry navigation with consent dismissal and gate detection."""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from src.browser.base import PageSession
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.navigation")


class NavigationStatus(Enum):
    """How an ``open()`` call ended."""

    OK = "ok"
    GATED = "gated"
    FAILED = "failed"


@dataclass(frozen=True)
class NavigationOutcome:
    """Result of opening a listing page."""

    status: NavigationStatus
    final_url: str = ""
    attempts: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        """True only when the listing itself was reached."""
        return self.status is NavigationStatus.OK


class NavigationController:
    """Open listing pages on the shared page session.

    Transient load failures are retried with a flat backoff.  A
    redirect to a country/availability gate is a business condition,
    not a failure, and is never retried.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._gate_re = re.compile(
            self.settings.GATE_URL_PATTERN, re.IGNORECASE
        )

    def is_gate(self, landed_url: str) -> bool:
        """True if *landed_url* looks like a country/availability gate."""
        return bool(self._gate_re.search(landed_url or ""))

    async def _settle(self, page: PageSession) -> None:
        """Best-effort load-state waits; timeouts here are not fatal."""
        for state in ("domcontentloaded", "networkidle"):
            try:
                await page.wait_for_load_state(
                    state, self.settings.NAV_IDLE_TIMEOUT_MS
                )
            except Exception as exc:
                logger.debug("Load state '%s' not reached: %s", state, exc)

    async def dismiss_consent(self, page: PageSession) -> bool:
        """Click the first consent button that exists.

        Returns True if a button was found (whether or not the click
        went through).  Absence of a dialog is not an error.
        """
        try:
            await page.wait(self.settings.CONSENT_PRE_WAIT_MS)
            for selector in self.settings.CONSENT_BUTTON_SELECTORS:
                if not await page.count(selector):
                    continue
                try:
                    await page.click(
                        selector, self.settings.CONSENT_CLICK_TIMEOUT_MS
                    )
                    logger.info("Consent accepted via %s", selector)
                except Exception as exc:
                    logger.debug("Consent click on %s failed: %s", selector, exc)
                await page.wait(self.settings.CONSENT_POST_WAIT_MS)
                return True
        except Exception as exc:
            logger.debug("Consent lookup failed: %s", exc)
        return False

    async def open(
        self,
        page: PageSession,
        url: str,
        max_attempts: int | None = None,
    ) -> NavigationOutcome:
        """Navigate *page* to *url*, then handle consent and gates."""
        attempts = (
            max_attempts
            if max_attempts is not None
            else self.settings.NAV_MAX_ATTEMPTS
        )
        last_error = ""

        for attempt in range(1, attempts + 1):
            try:
                logger.info("goto %d/%d: %s", attempt, attempts, url)
                await page.goto(url, self.settings.NAV_TIMEOUT_MS)
            except Exception as exc:
                last_error = str(exc) or exc.__class__.__name__
                logger.warning(
                    "goto failed on attempt %d for %s: %s",
                    attempt,
                    url,
                    last_error,
                )
                if attempt < attempts:
                    await page.wait(self.settings.NAV_BACKOFF_MS)
                continue

            await self._settle(page)
            await self.dismiss_consent(page)

            landed = page.url
            if self.is_gate(landed):
                logger.warning("Redirected to country gate: %s", landed)
                return NavigationOutcome(
                    NavigationStatus.GATED, landed, attempt
                )
            return NavigationOutcome(NavigationStatus.OK, landed, attempt)

        logger.error(
            "Navigation exhausted %d attempts for %s: %s",
            attempts,
            url,
            last_error,
        )
        return NavigationOutcome(
            NavigationStatus.FAILED, page.url, attempts, last_error
        )
