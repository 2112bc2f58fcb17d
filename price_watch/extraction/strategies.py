# price_watch/extraction/strategies.py
"""
Стратегии поиска текста с ценой на странице.

Каждая стратегия — корутина ``(page, ctx) -> str | None``: возвращает
фрагмент текста (кандидат), в котором, возможно, есть число, либо ``None``.
Исключения стратегий перехватывает конвейер.

Порядок — от точного структурного поиска к грубому текстовому.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple

from price_watch.browser.page import Element, Page
from price_watch.config import ExtractionSettings

__all__ = (
    "ExtractionContext",
    "Strategy",
    "labeled_element",
    "card_container",
    "whole_page",
    "unit_regex",
    "unit_locator",
    "unit_pattern",
    "DEFAULT_STRATEGIES",
)


@dataclass(slots=True)
class ExtractionContext:
    """Состояние одного прохода конвейера: подпись ищется один раз на всех."""

    settings: ExtractionSettings
    _label: Optional[Element] = field(default=None, repr=False)
    _label_error: Optional[Exception] = field(default=None, repr=False)
    _looked_up: bool = field(default=False, repr=False)

    async def _lookup(self, page: Page) -> None:
        if self._looked_up:
            return
        self._looked_up = True
        try:
            self._label = await page.find_text(
                self.settings.label_text, timeout=self.settings.label_timeout
            )
        except Exception as exc:
            self._label_error = exc

    async def label(self, page: Page) -> Element:
        """Элемент подписи; повторно бросает ошибку первого поиска."""
        await self._lookup(page)
        if self._label is None:
            raise LookupError(f"label {self.settings.label_text!r} not found") from self._label_error
        return self._label

    async def label_missing(self, page: Page) -> bool:
        await self._lookup(page)
        return self._label is None


StrategyFn = Callable[[Page, ExtractionContext], Awaitable[Optional[str]]]


@dataclass(slots=True, frozen=True)
class Strategy:
    name: str
    find: StrategyFn


async def labeled_element(page: Page, ctx: ExtractionContext) -> Optional[str]:
    """Крупный элемент значения рядом с подписью (например ``span.text-2xl``)."""
    label = await ctx.label(page)
    element = await label.query_in_parent(ctx.settings.value_selector)
    if element is None:
        return None
    return (await element.inner_text()).strip() or None


async def card_container(page: Page, ctx: ExtractionContext) -> Optional[str]:
    """Весь текст карточки, в которой лежит подпись, в одну строку."""
    label = await ctx.label(page)
    card = await label.closest(ctx.settings.card_class)
    if card is None:
        return None
    return (await card.inner_text()).replace("\n", " ").strip() or None


async def whole_page(page: Page, ctx: ExtractionContext) -> Optional[str]:
    """Текст всей страницы, только если подпись вообще не нашлась."""
    if not await ctx.label_missing(page):
        return None
    return await page.text()


def unit_pattern(unit_phrase: str) -> re.Pattern[str]:
    """``4.74 USDrise per ATOM`` → ``(\\d+\\.\\d+)\\s*USDrise\\s*per\\s*ATOM``."""
    words = r"\s*".join(re.escape(word) for word in unit_phrase.split())
    return re.compile(rf"(\d+\.\d+)\s*{words}")


async def unit_regex(page: Page, ctx: ExtractionContext) -> Optional[str]:
    """Число, за которым сразу идёт единица измерения, в сырой разметке."""
    match = unit_pattern(ctx.settings.unit_phrase).search(await page.content())
    return match.group(1) if match else None


async def unit_locator(page: Page, ctx: ExtractionContext) -> Optional[str]:
    """Текст элемента, содержащего единицу измерения."""
    element = await page.find_text(ctx.settings.unit_phrase, timeout=ctx.settings.label_timeout)
    return await element.inner_text()


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    Strategy("labeled-element", labeled_element),
    Strategy("card-container", card_container),
    Strategy("whole-page", whole_page),
    Strategy("unit-regex", unit_regex),
    Strategy("unit-locator", unit_locator),
)
