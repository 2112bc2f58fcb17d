# price_watch/evaluator.py
"""Решение об уведомлении по порогам low/high."""
from __future__ import annotations

from price_watch.config import NotifyPolicy
from price_watch.models import Decision

__all__ = ("evaluate",)


def evaluate(value: float, low: float, high: float, policy: NotifyPolicy = NotifyPolicy.BAND) -> Decision:
    """
    Сравнивает *value* с диапазоном ``[low, high]`` (границы включительно).

    BAND: уведомляем, если ``value <= low`` или ``value >= high``.
    LEGACY: дополнительно уведомляем при любом ненулевом значении.
    """
    if value <= low:
        return Decision(notify=True, reason=f"{value} <= low {low}")
    if value >= high:
        return Decision(notify=True, reason=f"{value} >= high {high}")
    if policy is NotifyPolicy.LEGACY and value != 0:
        return Decision(notify=True, reason=f"{value} != 0 (legacy policy)")
    return Decision(notify=False, reason=f"{low} < {value} < {high}")
