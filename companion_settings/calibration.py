"""
Device calibration and firmware revision records.

Joystick calibration keys are flat inside the JsCalibration group and carry
the joystick index in the key name itself:
  JsCalibration/stick<N>_axe    axis id, -1 when unassigned
  JsCalibration/stick<N>_min    raw minimum
  JsCalibration/stick<N>_med    raw centre
  JsCalibration/stick<N>_max    raw maximum
  JsCalibration/stick<N>_inv    inverted flag
"""

from __future__ import annotations

from companion_settings.store import Setting, SettingsBackend, StoreObject


class JoystickCalibration(StoreObject):
    axis = Setting("stick{index}_axe", -1)
    minimum = Setting("stick{index}_min", -32767)
    median = Setting("stick{index}_med", 0)
    maximum = Setting("stick{index}_max", 32767)
    inverted = Setting("stick{index}_inv", 0)

    def __init__(self, backend: SettingsBackend):
        super().__init__(backend)
        self.index = -1

    def settings_path(self) -> str:
        return "JsCalibration/"

    def init(self, index: int):
        self.index = index
        self.init_values()

    def reset(self):
        """Reset every calibration value to its default, clearing it from storage."""
        for name in self._fields:
            self.reset_value(name)

    def exists_on_disk(self) -> bool:
        return self.load(self.setting("axis").key_for(self), -1) > -1

    def __repr__(self):
        return f"<JoystickCalibration {self.index}: axis={self.axis}>"


class FwRevision(StoreObject):
    """Last known firmware revision per firmware type, under FwRevisions/<fwType>."""

    def settings_path(self) -> str:
        return "FwRevisions/"

    def get(self, fw_type: str) -> int:
        return self.load(fw_type, 0)

    def set(self, fw_type: str, revision: int):
        if revision == 0:
            self.clear(fw_type)
        else:
            self.store(revision, fw_type)

    def remove(self, fw_type: str):
        self.clear(fw_type)
