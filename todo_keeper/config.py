"""Configuration loading utilities for Todo Keeper."""
from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "data" / "settings.yaml"


def _checked_encoding(value: Any) -> str:
    name = str(value)
    try:
        codecs.lookup(name)
    except LookupError as exc:
        raise ValueError(f"Unknown storage encoding: {name!r}") from exc
    return name


@dataclass(frozen=True)
class Settings:
    """Typed view over the settings YAML file."""

    data_dir: Path
    encoding: str
    io_workers: int
    bot_names: tuple[str, ...]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        storage_cfg = data.get("storage") or {}
        bot_cfg = data.get("bot") or {}
        names = bot_cfg.get("names") or []
        return Settings(
            data_dir=Path(storage_cfg.get("data_dir", "todos")),
            encoding=_checked_encoding(storage_cfg.get("encoding", "ascii")),
            io_workers=max(1, int(storage_cfg.get("io_workers", 4))),
            bot_names=tuple(str(name).strip() for name in names if str(name).strip()),
        )

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Return a copy with ``TODO_KEEPER_*`` environment overrides applied."""

        env = os.environ if environ is None else environ
        updated = self
        data_dir = env.get("TODO_KEEPER_DATA_DIR")
        if data_dir:
            updated = replace(updated, data_dir=Path(data_dir))
        names_raw = env.get("TODO_KEEPER_BOT_NAMES")
        if names_raw is not None:
            names = tuple(name.strip() for name in names_raw.split(",") if name.strip())
            if names:
                updated = replace(updated, bot_names=names)
            else:
                logger.warning("Ignoring empty TODO_KEEPER_BOT_NAMES value")
        return updated


class SettingsLoader:
    """Loads and caches settings from YAML configuration files."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_SETTINGS_PATH
        self._cache: Settings | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> Settings:
        if self._cache is not None and not force:
            return self._cache
        with self._path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        self._cache = Settings.from_dict(data)
        return self._cache


def get_settings(path: Path | None = None) -> Settings:
    """Convenience accessor for settings with environment overrides."""

    if path is None:
        env_path = os.environ.get("TODO_KEEPER_SETTINGS")
        path = Path(env_path) if env_path else None
    return SettingsLoader(path).load().with_env()


__all__ = ["Settings", "SettingsLoader", "get_settings", "DEFAULT_SETTINGS_PATH"]
