# price_watch/notifier.py
"""
Notifier module: delivers an alert to a Discord webhook over HTTP.

One POST per run, no retries; the aiohttp session lives only for that call.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession, ClientTimeout

from price_watch.exceptions import NotificationError
from price_watch.logger import logger
from price_watch.models import NotificationMessage

__all__ = ("DiscordNotifier",)


class DiscordNotifier:
    """Posts :class:`NotificationMessage` payloads to a single webhook URL."""

    def __init__(self, webhook_url: str, timeout: float = 15.0) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send(self, message: NotificationMessage) -> int:
        """
        POST the message; return the HTTP status on success.

        Raises NotificationError on a non-2xx response (body included) or when
        no response arrives within the timeout.
        """
        try:
            async with ClientSession(timeout=ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.webhook_url, json=message.payload()) as resp:
                    if not 200 <= resp.status < 300:
                        body = await resp.text()
                        raise NotificationError(resp.status, body)
                    logger.info("Webhook accepted notification: %s", resp.status)
                    return resp.status
        except asyncio.TimeoutError as exc:
            raise NotificationError(None, f"no response within {self.timeout}s") from exc
        except ClientError as exc:
            raise NotificationError(None, str(exc) or type(exc).__name__) from exc
