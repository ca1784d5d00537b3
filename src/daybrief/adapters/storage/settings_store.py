"""YAML-file settings store for per-installation values such as API keys."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from daybrief.core.interfaces import SettingsStore

logger = logging.getLogger(__name__)


class YamlSettingsStore(SettingsStore):
    """Keep settings in a flat YAML mapping, re-read on every lookup."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a mapping", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: Optional[str]) -> None:
        data = self._load()
        if value is None or value == "":
            data.pop(key, None)
        else:
            data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=True)

    def all(self) -> dict:
        return dict(self._load())


class MemorySettingsStore(SettingsStore):
    """Dict-backed settings, mostly for tests."""

    def __init__(self, values: Optional[dict[str, str]] = None) -> None:
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        if value is None or value == "":
            self.values.pop(key, None)
        else:
            self.values[key] = value
