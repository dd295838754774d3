# === FILE: edge_esi/config.py ===
"""
Модуль для загрузки и валидации конфигурации EdgeESI.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import json
import os
import errno
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class EsiConfig(BaseModel):
    """Настройки перехватчика ответов и загрузки фрагментов."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    fetch_timeout: float = Field(10.0, gt=0, description="Таймаут на загрузку одного фрагмента (секунд).")
    user_agent: str = Field("EdgeESI/0.1", min_length=1, description="Заголовок User-Agent для фрагментов.")
    concurrent_fetches: bool = Field(False, description="Загружать фрагменты параллельно.")
    max_concurrency: int = Field(8, ge=1, description="Лимит одновременных загрузок фрагментов.")
    expose_error_details: bool = Field(
        True, description="Показывать текст исключения в HTML-комментарии об ошибке."
    )
    max_nesting: int = Field(3, ge=1, description="Максимальная глубина вложенных включений.")
    asset_root: Path = Field(Path("public"), description="Каталог со статикой для `serve`.")
    host: str = Field("127.0.0.1", min_length=1, description="Адрес для `serve`.")
    port: int = Field(8080, ge=1, le=65535, description="Порт для `serve`.")

    @field_validator("asset_root", mode="before")
    def _expand_root(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
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


def load_config(path: Union[str, Path, None]) -> EsiConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект EsiConfig.
    Без пути берётся configs/default.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл даёт FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return EsiConfig()
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

    try:
        return EsiConfig(**data)
    except ValidationError:
        raise


__all__ = ["EsiConfig", "load_config"]
