"""
Typed Property Store
Typed load/store/clear primitives over an untyped hierarchical key-value
backend, plus the declarative ``Setting`` descriptor every settings entity
is built from.

Key layout:
  <group>/<key>     group defaults to the entity's settings_path()

Storage contract:
  * A value equal to its declared default is never written; the key is
    removed instead, so "absent" and "default" read back the same.
  * A stored value that cannot be converted to the requested type reads
    back as the caller's default.
"""

from __future__ import annotations
import copy
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable

from PyQt6.QtCore import QByteArray, QSettings

logger = logging.getLogger(__name__)


class PersistenceUnavailable(OSError):
    """The backing store could not be read or written."""


# ---------------------------------------------------------------------- #
# Backends                                                                 #
# ---------------------------------------------------------------------- #

class SettingsBackend(ABC):
    """
    Minimal hierarchical key-value store.
    Keys are forward-slash separated paths; values are untyped.
    """

    @abstractmethod
    def value(self, key: str) -> Any:
        """Return the raw stored value, or None if the key is absent."""
        ...

    @abstractmethod
    def set_value(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key`` and, if it names a group, everything below it."""
        ...

    @abstractmethod
    def contains(self, key: str) -> bool:
        self._check_status()
        ...

    @abstractmethod
    def all_keys(self) -> list[str]:
        self._check_status()
        ...

    def sync(self) -> None:
        """Flush pending writes. Backends without buffering need not override."""


class QSettingsBackend(SettingsBackend):
    """SettingsBackend over PyQt6 QSettings (native store or INI file)."""

    def __init__(self, settings: QSettings):
        self._settings = settings
        self._format_warned = False
        self._check_status()

    @classmethod
    def native(cls, organization: str, application: str) -> "QSettingsBackend":
        return cls(QSettings(organization, application))

    @classmethod
    def ini(cls, path: Path | str) -> "QSettingsBackend":
        return cls(QSettings(str(path), QSettings.Format.IniFormat))

    @property
    def location(self) -> str:
        return self._settings.fileName()

    def value(self, key: str) -> Any:
        self._check_status()
        return _from_qt(self._settings.value(key))

    def set_value(self, key: str, value: Any) -> None:
        if isinstance(value, (bytes, bytearray)):
            value = QByteArray(bytes(value))
        self._settings.setValue(key, value)
        self._check_status()

    def remove(self, key: str) -> None:
        self._settings.remove(key.rstrip("/"))
        self._check_status()

    def contains(self, key: str) -> bool:
        self._check_status()
        return self._settings.contains(key)

    def all_keys(self) -> list[str]:
        self._check_status()
        return list(self._settings.allKeys())

    def sync(self) -> None:
        self._settings.sync()
        self._check_status()

    def _check_status(self):
        status = self._settings.status()
        if status == QSettings.Status.AccessError:
            raise PersistenceUnavailable(f"Settings store is not accessible: {self.location}")
        if status == QSettings.Status.FormatError and not self._format_warned:
            self._format_warned = True
            logger.warning(f"Settings store is malformed, unreadable entries ignored: {self.location}")


def _from_qt(value: Any) -> Any:
    if isinstance(value, QByteArray):
        return value.data()
    if isinstance(value, list):
        return [_from_qt(v) for v in value]
    return value


# ---------------------------------------------------------------------- #
# Type coercion                                                            #
# ---------------------------------------------------------------------- #

def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw != 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in ("true", "1"):
            return True
        if text in ("false", "0", ""):
            return False
    raise TypeError(f"cannot read {raw!r} as bool")


def _to_int(raw: Any) -> int:
    if isinstance(raw, (bool, int)):
        return int(raw)
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        return int(raw.strip())
    raise TypeError(f"cannot read {raw!r} as int")


def _to_str(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (int, float)):
        return str(raw)
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    raise TypeError(f"cannot read {raw!r} as str")


def _to_bytes(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if isinstance(raw, str):
        return raw.encode("utf-8")
    raise TypeError(f"cannot read {raw!r} as bytes")


def _to_str_list(raw: Any) -> list[str]:
    # INI files flatten a one-element list to a plain string
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, (list, tuple)):
        return [_to_str(v) for v in raw]
    raise TypeError(f"cannot read {raw!r} as list")


_COERCERS: dict[type, Callable[[Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    str: _to_str,
    bytes: _to_bytes,
    list: _to_str_list,
}


def coerce_value(raw: Any, default: Any) -> Any:
    """
    Convert a raw stored value to the type of ``default``.
    Raises TypeError or ValueError when the value cannot be converted.
    Custom types provide a ``from_settings_value`` classmethod.
    """
    target = type(default)
    coercer = _COERCERS.get(target)
    if coercer is not None:
        return coercer(raw)
    from_settings = getattr(target, "from_settings_value", None)
    if from_settings is not None:
        return from_settings(raw)
    if isinstance(raw, target):
        return raw
    raise TypeError(f"cannot read {raw!r} as {target.__name__}")


def encode_value(value: Any) -> Any:
    to_settings = getattr(value, "to_settings_value", None)
    if to_settings is not None:
        return to_settings()
    return value


# ---------------------------------------------------------------------- #
# Declarative settings                                                     #
# ---------------------------------------------------------------------- #

class Setting:
    """
    A single persisted property of a StoreObject.

    ``key`` defaults to the attribute name and may contain ``{index}`` for
    per-entity keys. ``default`` may be a zero-argument callable for mutable
    or environment-dependent defaults. ``firmware`` marks the subset reverted
    by Profile.reset_fw_variables().

    Reading the attribute returns the in-memory value. Assigning it updates
    memory and persists with default-omission; use StoreObject.set_value()
    with ``store=False`` to update memory only.
    """

    def __init__(self, key: str | None = None, default: Any = "", *, firmware: bool = False):
        self.key = key
        self._default = default
        self.firmware = firmware
        self.name = ""

    def __set_name__(self, owner, name: str):
        self.name = name
        if self.key is None:
            self.key = name

    def default(self) -> Any:
        if callable(self._default):
            return self._default()
        return self._default

    def key_for(self, obj: "StoreObject") -> str:
        if "{" in self.key:
            return self.key.format(index=obj.index)
        return self.key

    def __get__(self, obj, owner=None):
        if obj is None:
            return self
        if self.name in obj._values:
            return obj._values[self.name]
        return self.default()

    def __set__(self, obj, value):
        obj.set_value(self.name, value)

    def __repr__(self):
        return f"Setting({self.key!r}, default={self._default!r})"


class StoreObject:
    """
    Base class for anything persisted through a SettingsBackend.
    Subclasses declare ``Setting`` class attributes and override
    ``settings_path()`` to namespace their keys.
    """

    index: int = -1
    _fields: dict[str, Setting] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        fields: dict[str, Setting] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, Setting):
                    fields[name] = attr
        cls._fields = fields

    def __init__(self, backend: SettingsBackend):
        self._backend = backend
        self._values: dict[str, Any] = {}

    @property
    def backend(self) -> SettingsBackend:
        return self._backend

    def settings_path(self) -> str:
        """Default group for keys of this entity. Empty means the store root."""
        return ""

    @classmethod
    def setting_names(cls) -> list[str]:
        return list(cls._fields)

    @classmethod
    def setting(cls, name: str) -> Setting:
        return cls._fields[name]

    # ------------------------------------------------------------------ #
    # Raw primitives                                                       #
    # ------------------------------------------------------------------ #

    def path_for_key(self, key: str, group: str | None = None) -> str:
        path = group if group else self.settings_path()
        if path and not path.endswith("/"):
            path += "/"
        return path + key

    def load(self, key: str, default: Any, group: str | None = None) -> Any:
        """Return the stored value for ``key``, or ``default`` if absent or unconvertible."""
        path = self.path_for_key(key, group)
        raw = self._backend.value(path)
        if raw is None:
            return default
        try:
            return coerce_value(raw, default)
        except (TypeError, ValueError) as e:
            logger.debug(f"Ignoring stored value for {path}: {e}")
            return default

    def store(self, value: Any, key: str, group: str | None = None) -> None:
        self._backend.set_value(self.path_for_key(key, group), encode_value(value))

    def clear(self, key: str, group: str | None = None) -> None:
        self._backend.remove(self.path_for_key(key, group))

    def getset(self, key: str, default: Any, group: str | None = None) -> Any:
        """Load then store, materializing the default on first read."""
        value = self.load(key, default, group)
        self.store(value, key, group)
        return value

    # ------------------------------------------------------------------ #
    # Declared settings                                                    #
    # ------------------------------------------------------------------ #

    def set_value(self, name: str, value: Any, store: bool = True) -> None:
        setting = self._fields[name]
        self._values[name] = copy.copy(value)
        if not store:
            return
        key = setting.key_for(self)
        if value == setting.default():
            self.clear(key)
        else:
            self.store(value, key)

    def reset_value(self, name: str, store: bool = True) -> None:
        self.set_value(name, self._fields[name].default(), store)

    def default_value(self, name: str) -> Any:
        return self._fields[name].default()

    def init_value(self, name: str) -> None:
        setting = self._fields[name]
        self._values[name] = self.load(setting.key_for(self), setting.default())

    def init_values(self) -> None:
        for name in self._fields:
            self.init_value(name)

    def values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._fields}
