# File: tests/test_pipeline.py
"""Extraction pipeline: strategy order, fallbacks and terminal failure."""
from __future__ import annotations

import pytest

from conftest import (
    CARD_HTML,
    LABELED_HTML,
    NO_LABEL_HTML,
    NO_PRICE_HTML,
    REGEX_HTML,
    UNIT_LOCATOR_HTML,
)
from price_watch.browser.snapshot import SnapshotElement, SnapshotPage
from price_watch.config import ExtractionSettings
from price_watch.exceptions import ExtractionError
from price_watch.extraction import PricePipeline, Strategy, extract_price
from price_watch.extraction.strategies import unit_pattern


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "html,value,strategy",
    [
        (LABELED_HTML, 4.74, "labeled-element"),
        (CARD_HTML, 4.74, "card-container"),
        (NO_LABEL_HTML, 4.74, "whole-page"),
        (REGEX_HTML, 4.74, "unit-regex"),
        (UNIT_LOCATOR_HTML, 5.0, "unit-locator"),
    ],
)
async def test_strategy_that_wins(html, value, strategy):
    price = await extract_price(SnapshotPage(html))
    assert price.value == pytest.approx(value)
    assert price.strategy == strategy


@pytest.mark.asyncio()
async def test_no_strategy_finds_a_number():
    # the footer year would be found by a whole-page scan, which only runs without a label
    with pytest.raises(ExtractionError, match="Could not extract"):
        await extract_price(SnapshotPage(NO_PRICE_HTML))


@pytest.mark.asyncio()
async def test_empty_page():
    with pytest.raises(ExtractionError):
        await extract_price(SnapshotPage("<html><body></body></html>"))


@pytest.mark.asyncio()
async def test_custom_markers():
    html = """
    <section class="card-xl"><h3>Spot</h3><em class="big">12.5</em></section>
    """
    settings = ExtractionSettings(label_text="spot", value_selector="em.big", card_class="card-xl")
    price = await extract_price(SnapshotPage(html), settings)
    assert price.value == 12.5
    assert price.strategy == "labeled-element"


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "label_markup",
    [
        "Current\n        Price",
        "Current <b>Price</b>",
        "<span>CURRENT</span>&nbsp;<span>price</span>",
    ],
)
async def test_label_wrapped_or_split_across_tags(label_markup):
    # the leading "24h" number would win a whole-page scan
    html = f"""
    <html><body>
      <nav>24h volume</nav>
      <div class="rounded-2xl">
        <div>
          <p class="text-sm">{label_markup}</p>
          <span class="text-2xl">4.74</span>
        </div>
      </div>
    </body></html>
    """
    price = await extract_price(SnapshotPage(html))
    assert price.strategy == "labeled-element"
    assert price.value == 4.74


@pytest.mark.asyncio()
async def test_find_text_returns_deepest_match():
    page = SnapshotPage("<div id='outer'><section><p id='label'>Current <i>Price</i></p></section></div>")
    element = await page.find_text("current price", timeout=1)
    assert element.tag.get("id") == "label"


@pytest.mark.asyncio()
async def test_find_text_missing():
    with pytest.raises(LookupError):
        await SnapshotPage("<p>Current</p><p>Price</p>").find_text("Current Price", timeout=1)


class _BrokenElement(SnapshotElement):
    async def query_in_parent(self, selector):
        raise RuntimeError("locator detached")


class _CountingPage(SnapshotPage):
    def __init__(self, html: str) -> None:
        super().__init__(html)
        self.lookups: list[str] = []

    async def find_text(self, text, *, timeout):
        self.lookups.append(text)
        element = await super().find_text(text, timeout=timeout)
        return _BrokenElement(element.tag)


@pytest.mark.asyncio()
async def test_strategy_error_falls_through_to_card():
    page = _CountingPage(LABELED_HTML)

    price = await extract_price(page)

    assert price.strategy == "card-container"
    assert price.value == 4.74
    # the label is located once and shared by the label-based strategies
    assert page.lookups == ["Current Price"]


@pytest.mark.asyncio()
async def test_driver_order_and_exception_isolation():
    calls: list[str] = []

    def make(name, result):
        async def find(page, ctx):
            calls.append(name)
            if isinstance(result, Exception):
                raise result
            return result

        return Strategy(name, find)

    pipeline = PricePipeline(
        strategies=[
            make("boom", TimeoutError("15s")),
            make("empty", None),
            make("words", "no digits"),
            make("hit", "7.5 USDrise per ATOM"),
            make("never", "1.0"),
        ]
    )

    price = await pipeline.extract(SnapshotPage(""))

    assert calls == ["boom", "empty", "words", "hit"]
    assert price.value == 7.5
    assert price.strategy == "hit"


@pytest.mark.asyncio()
async def test_regex_runs_before_unit_locator():
    # both fallbacks would match; the regex over the markup wins
    html = """
    <div class="rounded-2xl"><p>Current Price</p></div>
    <p>Approx 9 USDrise per ATOM</p>
    <script>window.price = "3.25 USDrise per ATOM";</script>
    """
    price = await extract_price(SnapshotPage(html))
    assert price.strategy == "unit-regex"
    assert price.value == 3.25


@pytest.mark.asyncio()
async def test_idempotent_on_static_page():
    page = SnapshotPage(CARD_HTML)
    first = await extract_price(page)
    second = await extract_price(page)
    assert first == second


def test_unit_pattern_allows_flexible_spacing():
    pattern = unit_pattern("USDrise per ATOM")
    assert pattern.search("4.74USDrise  per\nATOM").group(1) == "4.74"
    assert pattern.search("5 USDrise per ATOM") is None
