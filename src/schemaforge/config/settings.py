"""
Settings - Immutable configuration snapshot for the metadata engine

Settings are read from the packaged default_settings.yaml and optionally
merged with a user YAML file. Nested YAML mappings are flattened to dotted
keys, so

    db:
      oracle:
        ddl_needs_commit: true

is available as "db.oracle.ddl_needs_commit".

Dialect specific values are looked up as "db.<dialect-id>.<key>", then
"db.<family>.<key>", then "db.default.<key>".

A Settings instance never changes. with_overrides() returns a new snapshot,
so a MetadataFacade keeps seeing the configuration it was created with.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import yaml

import logging
logger = logging.getLogger(__name__)

_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "default_settings.yaml"

_TRUE_VALUES = ("true", "yes", "on", "1")
_FALSE_VALUES = ("false", "no", "off", "0")


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into a dict with dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not data:
        return {}
    if not isinstance(data, Mapping):
        logger.warning(f"Ignoring settings file {path}: top level is not a mapping")
        return {}
    return _flatten(data)


class Settings:
    """
    Read-only key/value configuration.

    Usage:
        settings = Settings.load()
        settings.get_bool("ddl.auto_generate_pk_name")
        settings.get_dialect_bool("ddl_needs_commit", "oracle")
    """

    def __init__(self, properties: Optional[Mapping[str, Any]] = None):
        self._properties = MappingProxyType(dict(properties or {}))

    @classmethod
    def load(cls, user_file: Optional[Union[str, Path]] = None) -> "Settings":
        """
        Load the packaged defaults and merge an optional user file on top.

        Args:
            user_file: Optional YAML file with user overrides

        Returns:
            New Settings snapshot
        """
        properties = _read_yaml(_DEFAULT_SETTINGS_FILE)
        if user_file:
            user_path = Path(user_file)
            if user_path.exists():
                properties.update(_read_yaml(user_path))
                logger.info(f"Loaded user settings from {user_path}")
            else:
                logger.warning(f"User settings file not found: {user_path}")
        return cls(properties)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "Settings":
        """Return a new snapshot with the given keys replaced."""
        merged = dict(self._properties)
        merged.update(_flatten(overrides))
        return Settings(merged)

    def __contains__(self, key: str) -> bool:
        return key in self._properties

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    # ==================== Typed getters ====================

    def get_property(self, key: str, default: Any = None) -> Any:
        value = self._properties.get(key)
        return default if value is None else value

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._to_bool(key, self._properties.get(key), default)

    def get_int(self, key: str, default: int = 0) -> int:
        return self._to_int(key, self._properties.get(key), default)

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        return self._to_list(self._properties.get(key), default)

    # ==================== Dialect scoped getters ====================

    def _dialect_value(self, key: str, db_id: str, family: Optional[str]) -> Any:
        candidates = [f"db.{db_id}.{key}"]
        if family and family != db_id:
            candidates.append(f"db.{family}.{key}")
        candidates.append(f"db.default.{key}")
        for candidate in candidates:
            value = self._properties.get(candidate)
            if value is not None:
                return value
        return None

    def get_dialect_property(
        self,
        key: str,
        db_id: str,
        family: Optional[str] = None,
        default: Any = None
    ) -> Any:
        """
        Get a dialect specific value.

        Args:
            key: Key below the dialect namespace (e.g. "ddl_needs_commit")
            db_id: Dialect id derived from the product name
            family: Dialect family id (e.g. "db2" for "db2_linuxx8664")
            default: Value returned when no level defines the key
        """
        value = self._dialect_value(key, db_id, family)
        return default if value is None else value

    def get_dialect_bool(
        self, key: str, db_id: str, family: Optional[str] = None, default: bool = False
    ) -> bool:
        return self._to_bool(key, self._dialect_value(key, db_id, family), default)

    def get_dialect_int(
        self, key: str, db_id: str, family: Optional[str] = None, default: int = 0
    ) -> int:
        return self._to_int(key, self._dialect_value(key, db_id, family), default)

    def get_dialect_list(
        self,
        key: str,
        db_id: str,
        family: Optional[str] = None,
        default: Optional[List[str]] = None
    ) -> List[str]:
        return self._to_list(self._dialect_value(key, db_id, family), default)

    # ==================== Conversion ====================

    @staticmethod
    def _to_bool(key: str, value: Any, default: bool) -> bool:
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid boolean value for {key}: {value!r}, using {default}")
        return default

    @staticmethod
    def _to_int(key: str, value: Any, default: int) -> int:
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer value for {key}: {value!r}, using {default}")
            return default

    @staticmethod
    def _to_list(value: Any, default: Optional[List[str]]) -> List[str]:
        if value is None:
            return list(default) if default else []
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if str(v).strip()]
        return [part.strip() for part in str(value).split(",") if part.strip()]


# Singleton instance with the packaged defaults
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the shared default Settings snapshot."""
    global _default_settings
    if _default_settings is None:
        _default_settings = Settings.load()
    return _default_settings
