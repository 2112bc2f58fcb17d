# price_watch/extraction/pipeline.py
"""
Price extraction pipeline: tries strategies in priority order, first number wins.
"""
from __future__ import annotations

from typing import Optional, Sequence

from price_watch.browser.page import Page
from price_watch.config import ExtractionSettings
from price_watch.exceptions import ExtractionError
from price_watch.extraction.strategies import DEFAULT_STRATEGIES, ExtractionContext, Strategy
from price_watch.logger import logger
from price_watch.models import ExtractedPrice
from price_watch.numbers import parse_number

__all__ = ("PricePipeline", "extract_price")


def _preview(text: str, limit: int = 80) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[: limit - 1] + "…"


class PricePipeline:
    """Ordered, fault-tolerant sequence of extraction strategies.

    Strategies run strictly one after another.  An exception or an empty
    candidate from one strategy only moves the loop on to the next one;
    :class:`ExtractionError` is raised when none yields a number.
    """

    def __init__(
        self,
        settings: Optional[ExtractionSettings] = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.strategies = tuple(strategies)

    async def extract(self, page: Page) -> ExtractedPrice:
        ctx = ExtractionContext(self.settings)
        for strategy in self.strategies:
            try:
                candidate = await strategy.find(page, ctx)
            except Exception as exc:
                logger.debug("Strategy %s failed: %s", strategy.name, exc)
                continue
            if not candidate:
                logger.debug("Strategy %s: no candidate", strategy.name)
                continue

            value = parse_number(candidate)
            if value is None:
                logger.debug("Strategy %s: no number in %r", strategy.name, _preview(candidate))
                continue

            logger.info("Found price via %s: %s", strategy.name, _preview(candidate))
            return ExtractedPrice(value=value, strategy=strategy.name)

        logger.debug("All %d strategies failed", len(self.strategies))
        raise ExtractionError()


async def extract_price(page: Page, settings: Optional[ExtractionSettings] = None) -> ExtractedPrice:
    """Shortcut: run the default pipeline over *page*."""
    return await PricePipeline(settings).extract(page)
