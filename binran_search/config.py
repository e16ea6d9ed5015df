"""
Модуль для загрузки и валидации конфигурации краулера BinranSearch.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple, Union
from urllib.parse import urlsplit

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

DEFAULT_START_URL = "https://sites.google.com/zen.ac.jp/zen-gakuseibinran/home"
DEFAULT_PATH_PREFIX = "/zen.ac.jp/zen-gakuseibinran/"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; BinranSearch/1.0)"
DEFAULT_CONTENT_SELECTORS: Tuple[str, ...] = ('[role="main"]', "#main-content", ".main-content")


class CrawlConfig(BaseModel):
    """Неизменяемые параметры одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    start_url: HttpUrl = Field(DEFAULT_START_URL, description="Стартовая страница обхода.")
    allowed_hostname: str = Field("", description="Разрешённый хост (по умолчанию хост start_url).")
    allowed_path_prefix: str = Field(DEFAULT_PATH_PREFIX, min_length=1, description="Разрешённый префикс пути.")
    delay: float = Field(0.5, ge=0, description="Пауза перед каждой попыткой запроса (секунд).")
    max_concurrency: int = Field(5, ge=1, description="Макс. число одновременных запросов.")
    max_retries: int = Field(3, ge=1, description="Число попыток загрузки одной страницы.")
    backoff_base: float = Field(1.0, ge=0, description="База линейной задержки между попытками (секунд).")
    timeout: Optional[float] = Field(None, gt=0, description="Таймаут одного запроса (секунд), None означает без таймаута.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    content_selectors: Tuple[str, ...] = Field(
        DEFAULT_CONTENT_SELECTORS, min_length=1, description="CSS-селекторы основного содержимого."
    )
    max_filename_length: int = Field(100, ge=1, description="Макс. длина имени текстового файла.")
    output_root: Path = Field(Path("."), description="Каталог, в котором создаётся text-YYYYMMDD.")

    @model_validator(mode="before")
    @classmethod
    def _derive_hostname(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("allowed_hostname"):
            start = str(data.get("start_url") or DEFAULT_START_URL)
            data = {**data, "allowed_hostname": urlsplit(start).hostname or ""}
        return data

    @field_validator("allowed_hostname")
    @classmethod
    def _lower_hostname(cls, v: str) -> str:
        return v.lower()

    @field_validator("allowed_path_prefix")
    @classmethod
    def _check_prefix(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("allowed_path_prefix must start with '/'")
        return v

    @model_validator(mode="after")
    def _check_start_in_scope(self) -> CrawlConfig:
        start = urlsplit(str(self.start_url))
        if (start.hostname or "") != self.allowed_hostname:
            raise ValueError(
                f"start_url host {start.hostname!r} differs from allowed_hostname {self.allowed_hostname!r}"
            )
        if not start.path.startswith(self.allowed_path_prefix):
            raise ValueError(f"start_url path {start.path!r} is outside {self.allowed_path_prefix!r}")
        return self


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


def load_config(path: Union[str, Path, None] = None) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    Без пути использует configs/default.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл приводит к FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlConfig()
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


__all__ = ["CrawlConfig", "load_config", "ValidationError"]
