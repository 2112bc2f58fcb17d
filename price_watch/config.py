# === FILE: price_watch/config.py ===
"""
Модуль для загрузки и валидации конфигурации PriceWatch.
Используется Pydantic для описания схемы и проверки данных.

Конфигурация собирается один раз при старте процесса (из переменных
окружения или из YAML/JSON-файла) и дальше передаётся параметром во все
компоненты; сами компоненты окружение не читают.
"""
from __future__ import annotations

import json
import math
import os
import errno
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
    model_validator,
)

from price_watch.exceptions import ConfigError

__all__ = (
    "NotifyPolicy",
    "ExtractionSettings",
    "MonitorConfig",
    "ENV_NAMES",
    "load_config",
    "load_config_from_env",
)


#: десятичная запись без "_" и без запятой: 4.5, -.5, 1e3
_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class NotifyPolicy(str, Enum):
    """Правило, по которому оценщик решает, отправлять ли уведомление."""

    BAND = "band"
    LEGACY = "legacy"


class ExtractionSettings(BaseModel):
    """Маркеры разметки, по которым конвейер ищет цену на странице."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    label_text: str = Field("Current Price", min_length=1, description="Текст подписи рядом с ценой.")
    value_selector: str = Field("span.text-2xl", min_length=1, description="CSS-селектор элемента со значением.")
    card_class: str = Field("rounded-2xl", min_length=1, description="Фрагмент class карточки-контейнера.")
    unit_phrase: str = Field("USDrise per ATOM", min_length=1, description="Единица измерения после числа.")
    label_timeout: float = Field(15.0, gt=0, description="Ожидание подписи (секунд).")

    @field_validator("card_class")
    def _no_quotes(cls, v: str) -> str:
        # маркер подставляется в XPath-литерал
        if "'" in v or '"' in v:
            raise ValueError("card_class must not contain quotes")
        return v


class MonitorConfig(BaseModel):
    """Конфигурация одного запуска мониторинга."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target_url: HttpUrl = Field(..., description="Страница для мониторинга.")
    threshold_low: float = Field(..., allow_inf_nan=False, description="Нижняя граница диапазона.")
    threshold_high: float = Field(..., allow_inf_nan=False, description="Верхняя граница диапазона.")
    discord_webhook_url: HttpUrl = Field(..., description="Discord webhook для уведомлений.")

    settle_delay: float = Field(8.0, ge=0, description="Пауза после навигации (секунд).")
    navigation_timeout: float = Field(30.0, gt=0, description="Таймаут первой навигации (секунд).")
    retry_navigation_timeout: float = Field(20.0, gt=0, description="Таймаут повторной навигации (секунд).")
    webhook_timeout: float = Field(15.0, gt=0, description="Таймаут POST в webhook (секунд).")
    notify_policy: NotifyPolicy = Field(NotifyPolicy.BAND, description="Правило уведомления.")
    alert_title: str = Field("Current Price Alert", min_length=1, description="Заголовок сообщения.")
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; PriceWatch/1.0)", min_length=1, description="Заголовок User-Agent браузера."
    )
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)

    @field_validator("threshold_low", "threshold_high", mode="before")
    def _parse_invariant_float(cls, v: Any) -> Any:
        # "4,5" не принимаем: разделитель дробной части только точка
        if isinstance(v, str):
            if not _DECIMAL_RE.match(v.strip()):
                raise ValueError(f"not a number: {v!r}")
            return float(v.strip())
        return v

    @model_validator(mode="after")
    def _check_band(self) -> MonitorConfig:
        if self.threshold_low > self.threshold_high:
            raise ValueError(
                f"threshold_low ({self.threshold_low}) must not exceed threshold_high ({self.threshold_high})"
            )
        return self

    def masked(self) -> Dict[str, Any]:
        """JSON-совместимый dict без секретной части webhook URL."""
        data = self.model_dump(mode="json")
        webhook = data["discord_webhook_url"]
        head, sep, _ = webhook.rpartition("/")
        data["discord_webhook_url"] = f"{head}{sep}***" if sep else "***"
        return data


# --------------------------------------------------------------------------- #
# Environment                                                                 #
# --------------------------------------------------------------------------- #

#: field name → environment variable name
ENV_NAMES: Dict[str, str] = {
    "target_url": "TARGET_URL",
    "threshold_low": "THRESHOLD_LOW",
    "threshold_high": "THRESHOLD_HIGH",
    "discord_webhook_url": "DISCORD_WEBHOOK_URL",
    "settle_delay": "SETTLE_DELAY",
    "notify_policy": "NOTIFY_POLICY",
}
_REQUIRED_ENV = ("TARGET_URL", "THRESHOLD_LOW", "THRESHOLD_HIGH", "DISCORD_WEBHOOK_URL")
_NUMERIC_ENV = ("THRESHOLD_LOW", "THRESHOLD_HIGH", "SETTLE_DELAY")


def _is_float(value: str) -> bool:
    value = value.strip()
    return bool(_DECIMAL_RE.match(value)) and math.isfinite(float(value))


def load_config_from_env(environ: Mapping[str, str]) -> MonitorConfig:
    """
    Собирает MonitorConfig из словаря в стиле переменных окружения.

    Отсутствующие или пустые обязательные переменные, а также нечисловые
    пороги дают ConfigError с именем переменной в сообщении.
    """
    for name in _REQUIRED_ENV:
        if not (environ.get(name) or "").strip():
            raise ConfigError(f"{name} must be set")
    for name in _NUMERIC_ENV:
        value = environ.get(name)
        if value is not None and value.strip() and not _is_float(value):
            raise ConfigError(f"{name} must be numeric")

    data = {
        field: environ[env].strip()
        for field, env in ENV_NAMES.items()
        if (environ.get(env) or "").strip()
    }
    return _build(data, source="environment")


# --------------------------------------------------------------------------- #
# Files                                                                       #
# --------------------------------------------------------------------------- #


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _build(data: Mapping[str, Any], source: str) -> MonitorConfig:
    try:
        return MonitorConfig(**data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid configuration ({source}): {problems}") from exc


def load_config(path: Union[str, Path]) -> MonitorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MonitorConfig.
    При отсутствии файла бросает FileNotFoundError, при ошибках формата
    и валидации — ConfigError.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigError(f"Неподдерживаемый формат конфига: {suffix}")

    return _build(data, source=str(path_obj))
