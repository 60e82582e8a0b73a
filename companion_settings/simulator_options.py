"""
Simulator Options
Per-profile simulator startup state, persisted as a single JSON string.
"""

from __future__ import annotations
import base64
import json
from dataclasses import dataclass, asdict, fields
from enum import IntEnum
from typing import Any


class StartupDataType(IntEnum):
    NONE = 0
    FILE = 1
    FOLDER = 2
    SD_PATH = 3


@dataclass
class SimulatorOptions:
    startup_data_type: int = StartupDataType.NONE
    firmware_id: str = ""
    data_folder: str = ""
    sd_path: str = ""
    data_file: str = ""
    lcd_color: str = ""
    window_geometry: bytes = b""
    controls_state: bytes = b""

    _BLOB_FIELDS = ("window_geometry", "controls_state")

    def to_dict(self) -> dict:
        data = asdict(self)
        for name in self._BLOB_FIELDS:
            data[name] = base64.b64encode(data[name]).decode("ascii")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SimulatorOptions":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for name in cls._BLOB_FIELDS:
            if name in kwargs:
                kwargs[name] = base64.b64decode(kwargs[name])
        if "startup_data_type" in kwargs:
            kwargs["startup_data_type"] = int(kwargs["startup_data_type"])
        return cls(**kwargs)

    # Hooks used by the typed property store
    def to_settings_value(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_settings_value(cls, raw: Any) -> "SimulatorOptions":
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if isinstance(raw, str):
            raw = json.loads(raw)
        if not isinstance(raw, dict):
            raise TypeError(f"cannot read {raw!r} as SimulatorOptions")
        return cls.from_dict(raw)
