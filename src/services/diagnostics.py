# src/services/diagnostics.py

"""Best-effort screenshot + markup dumps for failed categories."""

import logging
import time
from pathlib import Path

from src.browser.base import PageSession
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.diagnostics")


class DiagnosticsRecorder:
    """Write ``<prefix>-<epoch_ms>.png/.html`` under the debug directory.

    Capture failures are logged and swallowed; they never change a
    category's outcome.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    async def capture(self, page: PageSession, prefix: str) -> list[Path]:
        """Dump what *page* shows; return the files actually written."""
        if not self.settings.DEBUG_CAPTURE:
            return []
        written: list[Path] = []
        try:
            debug_dir: Path = self.settings.DEBUG_DIR
            debug_dir.mkdir(parents=True, exist_ok=True)
            stem = f"{prefix}-{int(time.time() * 1000)}"

            png = debug_dir / f"{stem}.png"
            try:
                if await page.screenshot(png):
                    written.append(png)
            except Exception as exc:
                logger.debug("Screenshot failed: %s", exc)

            html = await page.content()
            if html:
                html_path = debug_dir / f"{stem}.html"
                html_path.write_text(html, encoding="utf-8")
                written.append(html_path)
        except Exception as exc:
            logger.warning("Debug capture '%s' failed: %s", prefix, exc)
            return written

        if written:
            logger.info("Debug capture saved: %s", ", ".join(map(str, written)))
        return written
