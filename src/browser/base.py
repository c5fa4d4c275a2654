# src/browser/base.py

"""Abstract rendering-backend interface used by the harvesting pipeline.

The pipeline never talks to a browser library directly.  It needs a
small capability set: navigate with a DOM-ready signal plus a separate
best-effort load-state wait, query element handles scoped to a page or
to an element, read text/attributes, scroll to reveal more content,
and bounded waits.  Each backend implements these three classes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType


class PageLoadError(Exception):
    """Navigation did not produce a usable document."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")


class PageElement(ABC):
    """Handle to one element (e.g. a listing fragment) in a live page."""

    @abstractmethod
    async def query(self, selector: str) -> "PageElement | None":
        """Return the first descendant matching *selector*."""
        ...

    @abstractmethod
    async def query_all(self, selector: str) -> list["PageElement"]:
        """Return every descendant matching *selector*."""
        ...

    @abstractmethod
    async def text(self) -> str:
        """Rendered text with line breaks between blocks."""
        ...

    @abstractmethod
    async def attribute(self, name: str) -> str | None:
        """Return attribute *name*, or ``None`` if absent."""
        ...


class PageSession(ABC):
    """One navigable page (tab) in the shared rendering session."""

    @property
    @abstractmethod
    def url(self) -> str:
        """The URL the page currently shows (after redirects)."""
        ...

    @abstractmethod
    async def goto(self, url: str, timeout_ms: int) -> None:
        """Navigate and wait for DOM-ready; raise on failure."""
        ...

    @abstractmethod
    async def wait_for_load_state(self, state: str, timeout_ms: int) -> None:
        """Wait for ``domcontentloaded`` / ``networkidle``; raise on timeout."""
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait for the first match of *selector*; False on timeout."""
        ...

    @abstractmethod
    async def count(self, selector: str) -> int:
        """Number of elements currently matching *selector*."""
        ...

    @abstractmethod
    async def query_all(self, selector: str) -> list[PageElement]:
        """Element handles for every match of *selector*."""
        ...

    @abstractmethod
    async def click(self, selector: str, timeout_ms: int) -> None:
        """Click the first match of *selector*; raise on failure."""
        ...

    @abstractmethod
    async def scroll(self, delta_y: int) -> None:
        """Reveal more content (mouse-wheel equivalent)."""
        ...

    @abstractmethod
    async def wait(self, ms: int) -> None:
        """Fixed settle delay."""
        ...

    @abstractmethod
    async def screenshot(self, path: Path) -> bool:
        """Write a full-page screenshot; False if unsupported."""
        ...

    @abstractmethod
    async def content(self) -> str:
        """Serialised markup of the current document."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the page."""
        ...


class BrowserSession(ABC):
    """Shared rendering session (cookies, consent and locale state)."""

    @abstractmethod
    async def start(self) -> None:
        """Acquire backend resources."""
        ...

    @abstractmethod
    async def new_page(self) -> PageSession:
        """Open a new page sharing this session's state."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        ...

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
