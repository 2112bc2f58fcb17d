# price_watch/models.py
"""
Data models for a single PriceWatch run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

__all__ = ("ExtractedPrice", "Decision", "NotificationMessage", "RunResult")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


@dataclass(slots=True, frozen=True)
class ExtractedPrice:
    """Numeric price together with the name of the strategy that produced it."""

    value: float
    strategy: str


@dataclass(slots=True, frozen=True)
class Decision:
    """Evaluator verdict: whether to notify, and why."""

    notify: bool
    reason: str


@dataclass(slots=True, frozen=True)
class NotificationMessage:
    """Alert payload, built right before dispatch."""

    url: str
    value: float
    low: float
    high: float
    title: str = "Current Price Alert"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        return (
            f"**{self.title}**\n"
            f"- URL: {self.url}\n"
            f"- Current Price: `{self.value}`\n"
            f"- Thresholds: low=`{self.low}`, high=`{self.high}`\n"
            f"- Time: {self.timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)}"
        )

    def payload(self) -> Dict[str, Any]:
        """JSON body for the webhook: a single text field."""
        return {"content": self.render()}


@dataclass(slots=True)
class RunResult:
    """Outcome of a completed run."""

    price: ExtractedPrice
    decision: Decision
    notified: bool = False
    message: Optional[NotificationMessage] = None
