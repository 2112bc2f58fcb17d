# price_watch/browser/fetcher.py
"""
Fetcher module: drives a headless browser to the target page.

Navigation policy (:func:`fetch_page`): one full ``load`` attempt, one
degraded ``domcontentloaded`` retry with a shorter timeout, then a fixed
settle delay for client-side rendering.  A non-OK status is only logged:
single-page apps often render fine after a 404/503 shell response.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)
from playwright.async_api import Page as _PlaywrightPage

from price_watch.browser.page import Element, NavigationResponse, Page, WaitUntil
from price_watch.config import MonitorConfig
from price_watch.exceptions import FetchError, NavigationError
from price_watch.logger import logger

__all__ = ("FetchedPage", "fetch_page", "BrowserSession", "PlaywrightPage", "PlaywrightElement")

VIEWPORT = {"width": 1366, "height": 920}
LAUNCH_ARGS = ["--no-sandbox"]


@dataclass(slots=True)
class FetchedPage:
    """A navigated, settled page ready for extraction."""

    page: Page
    navigation_ok: bool
    status: Optional[int] = None


async def fetch_page(page: Page, url: str, config: MonitorConfig) -> FetchedPage:
    """
    Navigate *page* to *url* and wait for rendering to settle.

    Raises FetchError when both navigation attempts fail.
    """
    logger.info("Navigating to: %s", url)
    try:
        resp = await page.goto(url, wait_until="load", timeout=config.navigation_timeout)
    except NavigationError as exc:
        logger.info("Navigation failed, trying with DOMContentLoaded: %s", exc)
        try:
            resp = await page.goto(url, wait_until="domcontentloaded", timeout=config.retry_navigation_timeout)
        except NavigationError as retry_exc:
            raise FetchError(f"navigation to {url} failed: {retry_exc}") from retry_exc

    if resp is None:
        logger.warning("No navigation response; page may still render via SPA.")
    else:
        logger.info("Navigation response: %s %s", resp.status, resp.status_text)
        if not resp.ok:
            logger.warning("Initial navigation response not OK; page may still render via SPA.")

    logger.info("Waiting %.1fs for page to render...", config.settle_delay)
    await page.wait(config.settle_delay)

    return FetchedPage(
        page=page,
        navigation_ok=resp is not None and resp.ok,
        status=resp.status if resp is not None else None,
    )


# --------------------------------------------------------------------------- #
# Playwright adapter                                                          #
# --------------------------------------------------------------------------- #


def _ms(seconds: float) -> float:
    return seconds * 1000.0


class PlaywrightElement:
    """:class:`~price_watch.browser.page.Element` over a Playwright locator."""

    def __init__(self, locator: Locator) -> None:
        self._locator = locator

    async def inner_text(self) -> str:
        return await self._locator.inner_text()

    async def query_in_parent(self, selector: str) -> Optional[Element]:
        candidate = self._locator.locator("xpath=..").locator(selector).first
        if await candidate.count() == 0:
            return None
        return PlaywrightElement(candidate)

    async def closest(self, class_marker: str) -> Optional[Element]:
        ancestors = self._locator.locator(f"xpath=ancestor::div[contains(@class, '{class_marker}')]")
        if await ancestors.count() == 0:
            return None
        # ancestor axis comes back in document order, nearest one is last
        return PlaywrightElement(ancestors.last)


class PlaywrightPage:
    """:class:`~price_watch.browser.page.Page` over a live Playwright page."""

    def __init__(self, page: _PlaywrightPage) -> None:
        self._page = page

    async def goto(self, url: str, *, wait_until: WaitUntil, timeout: float) -> Optional[NavigationResponse]:
        try:
            resp = await self._page.goto(url, wait_until=wait_until, timeout=_ms(timeout))
        except PlaywrightError as exc:
            raise NavigationError(exc.message) from exc
        if resp is None:
            return None
        return NavigationResponse(status=resp.status, status_text=resp.status_text)

    async def wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def content(self) -> str:
        return await self._page.content()

    async def text(self) -> str:
        return await self._page.inner_text("body")

    async def find_text(self, text: str, *, timeout: float) -> Element:
        locator = self._page.get_by_text(text).first
        try:
            await locator.wait_for(timeout=_ms(timeout))
        except PlaywrightTimeoutError as exc:
            raise TimeoutError(f"{text!r} not found within {timeout}s") from exc
        return PlaywrightElement(locator)


class BrowserSession:
    """
    Scoped headless Chromium: ``async with BrowserSession(cfg) as page``.

    Context, browser and the Playwright driver are closed on exit, on both
    success and failure paths.
    """

    def __init__(self, config: MonitorConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> PlaywrightPage:
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True, args=LAUNCH_ARGS)
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                bypass_csp=True,
                viewport=VIEWPORT,
            )
            page = await self._context.new_page()
        except PlaywrightError as exc:
            await self.close()
            raise FetchError(f"browser launch failed: {exc.message}") from exc
        return PlaywrightPage(page)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as exc:
                logger.debug("Context close failed: %s", exc)
            self._context = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as exc:
                logger.debug("Browser close failed: %s", exc)
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
