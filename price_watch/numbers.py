# price_watch/numbers.py
"""
Извлечение первого десятичного числа из произвольного текста.

Разделитель дробной части всегда точка, независимо от локали.
"""
from __future__ import annotations

import re
from typing import Final, Optional

__all__ = ("NUMBER_RE", "parse_number")

NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?")


def parse_number(text: Optional[str]) -> Optional[float]:
    """Возвращает первое число в *text* или ``None``, если числа нет.

    >>> parse_number("4.74 USDrise per ATOM")
    4.74
    >>> parse_number("-3.2e2 units")
    -320.0
    """
    if not text:
        return None
    match = NUMBER_RE.search(text)
    if match is None:
        return None
    try:
        return float(match.group(0))
    except ValueError:
        return None
