# price_watch/logger.py
"""Логгер проекта PriceWatch.

Ход работы (навигация, сработавшая стратегия, решение) пишется в stdout,
при необходимости дублируется в файл с ротацией. Фатальные ошибки выводит
в stderr сам CLI, а не этот модуль.

    from price_watch.logger import logger
    logger.info("Navigating to: %s", url)
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME = "PriceWatch"


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Настраивает логгер ``PriceWatch`` заново: старые обработчики закрываются,
    stdout-обработчик привязывается к текущему ``sys.stdout`` (важно для
    CliRunner), файл ротируется по 5 МБ, хранится 3 копии.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    lg.propagate = False

    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)
    return lg


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
