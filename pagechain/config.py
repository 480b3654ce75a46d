# === FILE: pagechain/config.py ===
"""
Модуль для загрузки и валидации конфигурации PageChain.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)


class HandlerSpec(BaseModel):
    """Один хендлер цепочки: тип из реестра плюс его параметры."""
    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = Field(..., min_length=1, description="Имя хендлера в реестре (например, to_lower).")
    name: Optional[str] = Field(None, description="Имя хендлера в логах.")

    @field_validator("type")
    def _known_type(cls, v: str) -> str:
        from pagechain.handlers import HANDLER_TYPES

        if v not in HANDLER_TYPES:
            raise ValueError(f"неизвестный тип хендлера '{v}', доступны: {', '.join(sorted(HANDLER_TYPES))}")
        return v

    @property
    def options(self) -> Dict[str, Any]:
        """Параметры конструктора хендлера (всё, кроме type)."""
        options = dict(self.model_extra or {})
        if self.name is not None:
            options["name"] = self.name
        return options


class RedialConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    command: Optional[List[str]] = Field(None, description="Команда переподключения; None — без редиала.")
    timeout: float = Field(60.0, gt=0, description="Таймаут команды (секунд).")

    @field_validator("command", mode="before")
    def _split_command(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.split()
        return v


class CookieConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    file: Optional[Path] = Field(None, description="Файл с cookie (строка a=1; b=2 или YAML/JSON).")


class CrawlConfig(BaseModel):
    """Конфигурация одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корневой URL для обхода.")
    identity: Optional[str] = Field(None, description="Идентификатор паука; по умолчанию — домен.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(1000, ge=1, description="Жесткий лимит по числу страниц.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("PageChainBot/1.0", min_length=1, description="Заголовок User-Agent.")
    rate_limit: float = Field(1.0, gt=0, description="Лимит запросов в секунду.")
    retry_times: int = Field(3, ge=0, description="Число повторных попыток при 5xx.")
    concurrency: int = Field(4, ge=1, description="Число параллельных воркеров.")
    cycle_retry_times: int = Field(5, ge=1, description="Лимит циклических повторов одного URL.")
    headers: Dict[str, str] = Field(default_factory=dict, description="Дополнительные заголовки.")

    redial: RedialConfig = Field(default_factory=RedialConfig)
    cookies: CookieConfig = Field(default_factory=CookieConfig)
    handlers: List[HandlerSpec] = Field(default_factory=list, description="Цепочка хендлеров по порядку.")

    @field_validator("base_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlConfig(**data)


__all__ = ["CrawlConfig", "HandlerSpec", "RedialConfig", "CookieConfig", "load_config", "ValidationError"]
