# src/config/settings.py

"""Central configuration for the deal_scout harvester."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_int_or_none(name: str, default: int | None) -> int | None:
    """Read an optional integer from the environment ("" / "none" disables)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip().lower() in ("", "none", "off"):
        return None
    return int(raw)


class Settings:
    """Central configuration for the deal_scout harvester."""

    # --- Categories ---
    CATEGORY_URLS: list[str] = [
        "https://www.zalando.it/occhiali-sole-donna/?order=sale",
        "https://www.zalando.it/scarpe-donna/?order=sale",
    ]
    SITE_PROFILE: str = "zalando"
    MAX_ITEMS_PER_CATEGORY: int = 80

    # --- Business filters ---
    MIN_SALE_PRICE: float = 10.0        # Guards against stray tiny numbers
    MIN_DISCOUNT_PERCENT: int | None = _env_int_or_none(
        "DEAL_SCOUT_MIN_DISCOUNT", 35
    )

    # --- Navigation ---
    NAV_MAX_ATTEMPTS: int = 3
    NAV_TIMEOUT_MS: int = 120_000       # DOM-ready wait per attempt
    NAV_IDLE_TIMEOUT_MS: int = 60_000   # Best-effort network-idle wait
    NAV_BACKOFF_MS: int = 2_500         # Flat delay between attempts
    GATE_URL_PATTERN: str = r"countries|country|available|choose"

    # --- Consent dialog ---
    CONSENT_BUTTON_SELECTORS: list[str] = [
        'button:has-text("Accetta tutto")',
        'button:has-text("Accetta")',
        'button:has-text("Accept all")',
        'button:has-text("Accept")',
        'button[aria-label*="Accetta"]',
        'button[aria-label*="Accept"]',
    ]
    CONSENT_PRE_WAIT_MS: int = 1_500
    CONSENT_CLICK_TIMEOUT_MS: int = 5_000
    CONSENT_POST_WAIT_MS: int = 800

    # --- Content loading ---
    PRODUCT_WAIT_TIMEOUT_MS: int = 45_000
    MIN_VISIBLE_PRODUCTS: int = 5       # Wait candidate must exceed this
    SCROLL_STEPS: int = 10
    SCROLL_GRACE_STEPS: int = 2         # No-growth check starts at step 3
    SCROLL_DELTA_PX: int = 1_800
    SCROLL_SETTLE_MS: int = 1_200

    # --- Field extraction ---
    FIELD_TIMEOUT_S: float = 5.0
    CURRENCY_MARKERS: list[str] = ["€", "eur"]
    UNIT_TOKENS: list[str] = ["ml", "cl", "g", "kg", "l"]

    # --- Product-page enrichment ---
    ENRICH_SIZES: bool = False
    ENRICH_MAX_PER_CATEGORY: int = 25
    ENRICH_TIMEOUT_MS: int = 60_000
    ENRICH_PANEL_TIMEOUT_MS: int = 6_000
    ENRICH_OPENER_TIMEOUT_MS: int = 4_000

    # --- Rendering backend ---
    BROWSER_BACKEND: str = os.getenv("DEAL_SCOUT_BACKEND", "playwright")
    HEADLESS: bool = os.getenv("DEAL_SCOUT_HEADLESS", "1") != "0"
    SLOW_MO_MS: int = 50
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    )
    VIEWPORT: dict[str, int] = {"width": 1280, "height": 800}
    LOCALE: str = "it-IT"
    TIMEZONE_ID: str = "Europe/Rome"
    GEOLOCATION: dict[str, float] = {
        "latitude": 41.9028,
        "longitude": 12.4964,
    }
    ACCEPT_LANGUAGE: str = "it-IT,it;q=0.9,en-US;q=0.8,en;q=0.7"

    # --- Static backend (no JS) ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "it-IT,it;q=0.9,en-US;q=0.8,en;q=0.7",
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Diagnostics ---
    DEBUG_CAPTURE: bool = True

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    OUTPUT_PATH: Path = BASE_DIR / "public" / "products.json"
    RESULTS_DIR: Path = BASE_DIR / "results"
    DEBUG_DIR: Path = BASE_DIR / "debug"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Backends (registry for future extensibility) ---
    AVAILABLE_BACKENDS: list[dict[str, str]] = [
        {
            "id": "playwright",
            "label": "Playwright (Chromium)",
            "browser": "src.browser.playwright_backend.PlaywrightBrowser",
        },
        {
            "id": "static",
            "label": "Static HTML (curl_cffi)",
            "browser": "src.browser.static_backend.StaticBrowser",
        },
    ]
