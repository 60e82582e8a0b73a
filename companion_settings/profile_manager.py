"""
Profile Manager
Radio profiles and the registry that owns them.

Profile storage layout (one shared backing store):
  Profiles/
    profile<N>/
      Name                ← existence marker, a profile is configured iff present
      fwType, fwName, ... ← one key per non-default field

A profile's index is fixed when the registry initializes it; copying
another profile into it never changes that index.
"""

from __future__ import annotations
import logging

from companion_settings.constants import MAX_PROFILES
from companion_settings.simulator_options import SimulatorOptions
from companion_settings.store import Setting, SettingsBackend, StoreObject

logger = logging.getLogger(__name__)


class Profile(StoreObject):
    name = Setting("Name")
    splash_file = Setting("SplashFileName")
    fw_name = Setting("fwName")
    fw_type = Setting("fwType")
    sd_path = Setting("sdPath")
    p_backup_dir = Setting("pBackupDir")

    channel_order = Setting("default_channel_order", 0)
    default_mode = Setting("default_mode", 1)
    volume_gain = Setting("volumeGain", 10)

    rename_fw_files = Setting("rename_firmware_files", False)
    burn_firmware = Setting("burnFirmware", False)
    penable_backup = Setting("penableBackup", False)

    simulator_options = Setting("simulatorOptions", SimulatorOptions)

    # Firmware-dependent values, see reset_fw_variables()
    beeper = Setting("Beeper", firmware=True)
    country_code = Setting("countryCode", firmware=True)
    display = Setting("Display", firmware=True)
    haptic = Setting("Haptic", firmware=True)
    speaker = Setting("Speaker", firmware=True)
    stick_pot_calib = Setting("StickPotCalib", firmware=True)
    time_stamp = Setting("TimeStamp", firmware=True)
    trainer_calib = Setting("TrainerCalib", firmware=True)
    control_types = Setting("ControlTypes", firmware=True)
    control_names = Setting("ControlNames", firmware=True)

    gs_stick_mode = Setting("GSStickMode", 0, firmware=True)
    ppm_multiplier = Setting("PPM_Multiplier", 0, firmware=True)
    v_bat_warn = Setting("vBatWarn", 0, firmware=True)
    v_bat_min = Setting("VbatMin", 0, firmware=True)
    v_bat_max = Setting("VbatMax", 0, firmware=True)
    tx_current_calibration = Setting("currentCalib", 0, firmware=True)
    tx_voltage_calibration = Setting("VbatCalib", 0, firmware=True)

    def __init__(self, backend: SettingsBackend):
        super().__init__(backend)
        self.index = -1

    def settings_path(self) -> str:
        return f"Profiles/profile{self.index}/"

    def init(self, index: int):
        """Bind to ``index`` and load every field, using defaults for absent keys."""
        self.index = index
        self.init_values()

    def exists_on_disk(self) -> bool:
        return self._backend.contains(self.path_for_key("Name"))

    def remove(self):
        """Delete every persisted key of this profile and reload defaults."""
        self._backend.remove(self.settings_path())
        self.init(self.index)
        logger.info(f"Removed profile slot {self.index}")

    def reset_fw_variables(self):
        for name, setting in self._fields.items():
            if setting.firmware:
                self.reset_value(name)

    def assign(self, other: "Profile") -> "Profile":
        """Copy every field value of ``other`` into this profile and persist it."""
        for name in self._fields:
            self.set_value(name, getattr(other, name))
        return self

    def __repr__(self):
        return f"<Profile {self.index}: {self.name!r}>"


class ProfileRegistry(StoreObject):
    """
    Fixed pool of MAX_PROFILES profiles plus the current-profile selection.

    Two selections are tracked:
      persisted_id  last explicit user choice, saved as ``profileId``
      session_id    profile active in this process, never saved
    Setting persisted_id also moves session_id; the reverse never happens.
    Out-of-range ids are ignored by both setters.
    """

    PROFILE_ID_KEY = "profileId"

    def __init__(self, backend: SettingsBackend):
        super().__init__(backend)
        self._profiles = [Profile(backend) for _ in range(MAX_PROFILES)]
        self._profile_id = 0
        self._session_id = 0

    def init_profiles(self):
        for i, profile in enumerate(self._profiles):
            profile.init(i)

    def load_selection(self):
        index = self.load(self.PROFILE_ID_KEY, 0)
        self._profile_id = index if _valid_index(index) else 0
        self.session_id = self._profile_id

    def __len__(self):
        return len(self._profiles)

    def __iter__(self):
        return iter(self._profiles)

    def __getitem__(self, index: int) -> Profile:
        if not _valid_index(index):
            raise IndexError(f"Profile index out of range: {index}")
        return self._profiles[index]

    def get_profile(self, index: int) -> Profile:
        """Return the profile at ``index``, or profile 0 if ``index`` is invalid."""
        if _valid_index(index):
            return self._profiles[index]
        return self._profiles[0]

    def list_configured_profiles(self) -> dict[int, str]:
        return {
            p.index: p.name
            for p in self._profiles
            if p.exists_on_disk()
        }

    # ------------------------------------------------------------------ #
    # Selection                                                            #
    # ------------------------------------------------------------------ #

    @property
    def session_id(self) -> int:
        return self._session_id

    @session_id.setter
    def session_id(self, index: int):
        if not _valid_index(index):
            logger.debug(f"Ignoring out-of-range session profile id {index}")
            return
        self._session_id = index

    @property
    def persisted_id(self) -> int:
        return self._profile_id

    @persisted_id.setter
    def persisted_id(self, index: int):
        if not _valid_index(index):
            logger.debug(f"Ignoring out-of-range profile id {index}")
            return
        self._profile_id = index
        self.session_id = index
        self.store(index, self.PROFILE_ID_KEY)

    def current_profile(self) -> Profile:
        return self.get_profile(self._session_id)


def _valid_index(index) -> bool:
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < MAX_PROFILES
