# File: price_watch/engine.py
"""price_watch.engine: один запуск мониторинга — загрузка, извлечение, оценка, уведомление."""

from __future__ import annotations

from typing import Any, AsyncContextManager, Callable, Optional

from price_watch.browser.fetcher import BrowserSession, fetch_page
from price_watch.browser.page import Page
from price_watch.config import MonitorConfig
from price_watch.evaluator import evaluate
from price_watch.extraction import PricePipeline
from price_watch.logger import logger
from price_watch.models import NotificationMessage, RunResult
from price_watch.notifier import DiscordNotifier

__all__ = ["run_once"]

SessionFactory = Callable[[MonitorConfig], AsyncContextManager[Page]]


async def run_once(
    config: MonitorConfig,
    *,
    session_factory: Optional[SessionFactory] = None,
    notifier: Optional[Any] = None,
    dry_run: bool = False,
) -> RunResult:
    """
    Выполняет один запуск и возвращает RunResult.

    Браузер открыт только на время загрузки и извлечения; уведомление
    отправляется уже после его закрытия. Любая фатальная ошибка
    (FetchError, ExtractionError, NotificationError) пробрасывается наверх.
    """
    factory = session_factory or BrowserSession
    url = str(config.target_url)
    pipeline = PricePipeline(config.extraction)

    async with factory(config) as page:
        fetched = await fetch_page(page, url, config)
        price = await pipeline.extract(fetched.page)

    low, high = config.threshold_low, config.threshold_high
    logger.info("Current Price = %s, low = %s, high = %s", price.value, low, high)

    decision = evaluate(price.value, low, high, config.notify_policy)
    result = RunResult(price=price, decision=decision)
    if not decision.notify:
        logger.info("In range -> no notification (%s)", decision.reason)
        return result

    result.message = NotificationMessage(
        url=url, value=price.value, low=low, high=high, title=config.alert_title
    )
    if dry_run:
        logger.info("Out of range (%s), dry run -> notification skipped", decision.reason)
        return result

    logger.info("Out of range (%s) -> notifying Discord", decision.reason)
    notifier = notifier or DiscordNotifier(str(config.discord_webhook_url), timeout=config.webhook_timeout)
    await notifier.send(result.message)
    result.notified = True
    return result
