"""Static-HTML implementation of the page capability interface.

:class:`SnapshotPage` lets the extraction pipeline run over a saved page
(``price-watch extract page.html``) or over fixtures in tests, without a
browser.  Text lookup follows Playwright's ``get_by_text``: case-insensitive,
whitespace collapsed, and the deepest element whose text contains the needle
wins, so labels split across child tags or wrapped over lines are found.
"""
from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from typing import Optional

from bs4 import BeautifulSoup, Tag

from price_watch.browser.page import Element, NavigationResponse, WaitUntil

__all__: Sequence[str] = ("SnapshotPage", "SnapshotElement")

_INVISIBLE = ["script", "style", "noscript", "template"]
_WHITESPACE = re.compile(r"\s+")


def _visible_text(tag: Tag) -> str:
    return tag.get_text("\n", strip=True)


def _normalized(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip().lower()


class SnapshotElement:
    """Element backed by a BeautifulSoup tag."""

    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    async def inner_text(self) -> str:
        return _visible_text(self.tag)

    async def query_in_parent(self, selector: str) -> Optional[Element]:
        parent = self.tag.parent
        if parent is None:
            return None
        found = parent.select_one(selector)
        return SnapshotElement(found) if found is not None else None

    async def closest(self, class_marker: str) -> Optional[Element]:
        for ancestor in self.tag.parents:
            if ancestor.name != "div":
                continue
            classes = " ".join(ancestor.get("class") or [])
            if class_marker in classes:
                return SnapshotElement(ancestor)
        return None


class SnapshotPage:
    """Page over fixed markup; navigation always "succeeds" with status 200."""

    def __init__(self, html: str, url: str = "about:blank") -> None:
        self.url = url
        self._html = html
        self._soup = BeautifulSoup(html, "html.parser")
        for element in self._soup(_INVISIBLE):
            element.decompose()

    async def goto(self, url: str, *, wait_until: WaitUntil, timeout: float) -> Optional[NavigationResponse]:
        self.url = url
        return NavigationResponse(status=200, status_text="OK")

    async def wait(self, seconds: float) -> None:
        # nothing renders in a snapshot
        await asyncio.sleep(0)

    async def content(self) -> str:
        return self._html

    async def text(self) -> str:
        root = self._soup.body or self._soup
        return _visible_text(root)

    async def find_text(self, text: str, *, timeout: float) -> Element:
        needle = _normalized(text)

        def contains(tag: Tag) -> bool:
            return needle in _normalized(tag.get_text())

        node = self._soup.body or self._soup
        if not needle or not contains(node):
            raise LookupError(f"{text!r} not found on page")
        # descend while some child still holds the whole needle
        while True:
            child = next((c for c in node.find_all(True, recursive=False) if contains(c)), None)
            if child is None:
                return SnapshotElement(node)
            node = child
