"""Error hierarchy for PriceWatch.

Every fatal condition of a run is a :class:`PriceWatchError`; the CLI turns
it into a message on stderr and exit code 1.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "PriceWatchError",
    "ConfigError",
    "NavigationError",
    "FetchError",
    "ExtractionError",
    "NotificationError",
)


class PriceWatchError(Exception):
    """Base class for all PriceWatch errors."""


class ConfigError(PriceWatchError, ValueError):
    """Missing or invalid configuration, detected before any network activity."""


class NavigationError(PriceWatchError):
    """A single navigation attempt failed (timeout, DNS, browser crash...)."""


class FetchError(PriceWatchError):
    """Both navigation attempts failed; the page could not be loaded."""


class ExtractionError(PriceWatchError):
    """No extraction strategy produced a number."""

    def __init__(self, message: str = "Could not extract Current Price number from page.") -> None:
        super().__init__(message)


class NotificationError(PriceWatchError):
    """Webhook delivery failed.

    ``status`` is the HTTP status code, or ``None`` when no response was received.
    """

    def __init__(self, status: Optional[int], body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Discord webhook failed: {body}")
        else:
            super().__init__(f"Discord webhook failed: {status} {body}")
