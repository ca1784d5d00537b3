"""Persistence adapters."""

from daybrief.adapters.storage.settings_store import MemorySettingsStore, YamlSettingsStore
from daybrief.adapters.storage.sqlite_store import SqliteKeyValueStore

__all__ = ["MemorySettingsStore", "YamlSettingsStore", "SqliteKeyValueStore"]
