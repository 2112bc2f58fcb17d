"""Capability interface between the extraction pipeline and a browser.

The pipeline only ever talks to these protocols.  Two adapters ship with the
package:

* :class:`price_watch.browser.fetcher.PlaywrightPage` — a live headless
  Chromium page;
* :class:`price_watch.browser.snapshot.SnapshotPage` — static HTML parsed
  with BeautifulSoup (offline extraction and tests).

Timeouts are expressed in seconds throughout.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Protocol

__all__ = ("WaitUntil", "NavigationResponse", "Element", "Page")

WaitUntil = Literal["load", "domcontentloaded"]


@dataclass(slots=True, frozen=True)
class NavigationResponse:
    """Main-document response of a navigation."""

    status: int
    status_text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Element(Protocol):
    """A node located on the page."""

    async def inner_text(self) -> str:
        """Rendered text of the node."""
        ...

    async def query_in_parent(self, selector: str) -> Optional["Element"]:
        """First descendant of this node's parent matching CSS *selector*."""
        ...

    async def closest(self, class_marker: str) -> Optional["Element"]:
        """Nearest ancestor ``div`` whose class attribute contains *class_marker*."""
        ...


class Page(Protocol):
    """A loaded (or loading) document."""

    async def goto(self, url: str, *, wait_until: WaitUntil, timeout: float) -> Optional[NavigationResponse]:
        """Navigate; raise :class:`~price_watch.exceptions.NavigationError` on failure."""
        ...

    async def wait(self, seconds: float) -> None:
        ...

    async def content(self) -> str:
        """Full document markup."""
        ...

    async def text(self) -> str:
        """Rendered text of the whole document body."""
        ...

    async def find_text(self, text: str, *, timeout: float) -> Element:
        """First element containing *text*; raise ``LookupError`` or ``TimeoutError`` when absent."""
        ...
