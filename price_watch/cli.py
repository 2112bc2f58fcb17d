# === FILE: price_watch/cli.py ===
#!/usr/bin/env python3
"""
Точка входа PriceWatch для запуска из командной строки (cron, CI и т.п.).

Команды:
  run       Один запуск мониторинга: загрузить страницу, извлечь цену,
            сравнить с порогами и при необходимости отправить уведомление
  config    Показать текущую конфигурацию (webhook замаскирован)
  extract   Извлечь цену из сохранённого HTML без браузера

Общие опции:
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stdout, если не указан)
  --log-format FORMAT Формат логирования

Источник конфигурации для run/config:
  --config PATH       YAML/JSON-файл; без него — переменные окружения
                      TARGET_URL, THRESHOLD_LOW, THRESHOLD_HIGH, DISCORD_WEBHOOK_URL
  --env-file PATH     .env-файл (переменные окружения имеют приоритет)

Код возврата: 0 — запуск завершён (с уведомлением или без), 1 — фатальная ошибка.

Пример:
  price-watch --log-level DEBUG run --env-file .env --settle-delay 5
"""
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Dict, Optional

import click
from dotenv import dotenv_values

from price_watch import __version__
from price_watch.browser.snapshot import SnapshotPage
from price_watch.config import ExtractionSettings, MonitorConfig, NotifyPolicy, load_config, load_config_from_env
from price_watch.engine import run_once
from price_watch.exceptions import ConfigError, ExtractionError, NotificationError
from price_watch.extraction import extract_price
from price_watch.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _environ(env_file: Optional[Path]) -> Dict[str, str]:
    environ: Dict[str, str] = {}
    if env_file is not None:
        if not env_file.is_file():
            raise ConfigError(f'env file not found: {env_file}')
        environ.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    environ.update(os.environ)
    return environ


def _load(config_path: Optional[Path], env_file: Optional[Path]) -> MonitorConfig:
    try:
        if config_path is not None:
            return load_config(config_path)
        return load_config_from_env(_environ(env_file))
    except (ConfigError, FileNotFoundError) as e:
        print_error(f'Configuration error: {e}')


config_option = click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='YAML/JSON-файл конфигурации (иначе переменные окружения).'
)
env_file_option = click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Файл .env с переменными окружения.'
)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PriceWatch, version %(version)s')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
def cli(log_level, log_file, log_format):
    """Группа команд PriceWatch CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@config_option
@env_file_option
@click.option(
    '--settle-delay', 'settle_delay',
    type=click.FloatRange(min=0),
    default=None,
    help='Пауза после навигации, секунд (override settle_delay)'
)
@click.option(
    '--policy', 'policy',
    type=click.Choice([p.value for p in NotifyPolicy]),
    default=None,
    help='Правило уведомления (override notify_policy)'
)
@click.option(
    '--dry-run', is_flag=True,
    help='Не отправлять уведомление, только показать решение'
)
def run(config_path, env_file, settle_delay, policy, dry_run):
    """Выполнить один запуск мониторинга."""
    cfg = _load(config_path, env_file)
    overrides = {}
    if settle_delay is not None:
        overrides['settle_delay'] = settle_delay
    if policy is not None:
        overrides['notify_policy'] = NotifyPolicy(policy)
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    click.echo(f'Starting run for: {cfg.target_url}')
    try:
        result = asyncio.run(run_once(cfg, dry_run=dry_run))
    except ExtractionError as e:
        print_error(str(e))
    except NotificationError as e:
        print_error(str(e))
    except Exception as e:
        print_error(f'Fetch/parse failed: {e}')

    if result.notified:
        status = 'notified'
    elif result.decision.notify:
        status = 'notification skipped (dry run)'
    else:
        status = 'in range'
    click.echo(f'Current Price {result.price.value} ({result.price.strategy}): {status}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@config_option
@env_file_option
def show_config(config_path, env_file):
    """Показать текущую конфигурацию в JSON."""
    cfg = _load(config_path, env_file)
    click.echo(json.dumps(cfg.masked(), ensure_ascii=False, indent=2))


@cli.command('extract', context_settings=CONTEXT_SETTINGS)
@click.argument('html_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--label', 'label', default=None, help='Текст подписи рядом с ценой')
@click.option('--unit', 'unit', default=None, help='Единица измерения после числа')
def extract(html_file, label, unit):
    """Извлечь цену из сохранённой HTML-страницы."""
    fields = {}
    if label:
        fields['label_text'] = label
    if unit:
        fields['unit_phrase'] = unit
    settings = ExtractionSettings(**fields)

    page = SnapshotPage(html_file.read_text(encoding='utf-8'), url=html_file.resolve().as_uri())
    try:
        price = asyncio.run(extract_price(page, settings))
    except ExtractionError as e:
        print_error(str(e))
    click.echo(json.dumps({'value': price.value, 'strategy': price.strategy}))


if __name__ == "__main__":
    cli()
