"""
App-level settings: the facade owning every settings entity of one store.

Construct one AppSettings at startup, call init() once, then hand the
object to whatever needs it. Nothing here is global; tests build as many
independent instances as they like.
"""

from __future__ import annotations
import logging
import sys

from PyQt6.QtCore import QStandardPaths

from companion_settings import migration
from companion_settings.calibration import FwRevision, JoystickCalibration
from companion_settings.constants import (
    COMPANY,
    MAX_JOYSTICKS,
    PRODUCT,
    SETTINGS_VERSION,
    SETTINGS_VERSION_KEY,
    DownloadBranch,
)
from companion_settings.migration import BackendFactory
from companion_settings.profile_manager import Profile, ProfileRegistry
from companion_settings.store import QSettingsBackend, Setting, SettingsBackend, StoreObject

logger = logging.getLogger(__name__)


def _default_app_logs_dir() -> str:
    docs = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DocumentsLocation)
    return f"{docs}/{COMPANY}/DebugLogs"


class AppSettings(StoreObject):
    recent_files = Setting("recentFileList", list)

    main_win_geo = Setting("mainWindowGeometry", b"")
    main_win_state = Setting("mainWindowState", b"")
    model_edit_geo = Setting("modelEditGeometry", b"")
    mdi_win_geo = Setting("mdiWinGeo", b"")
    mdi_win_state = Setting("mdiWinState", b"")
    compare_win_geo = Setting("compareWinGeo", b"")

    arm_mcu = Setting("arm_mcu", "at91sam3s4-9x")
    avr_arguments = Setting("avr_arguments")
    avr_port = Setting("avr_port")
    avrdude_location = Setting("avrdudeLocation")
    dfu_arguments = Setting("dfu_arguments", "-a 0")
    dfu_location = Setting("dfu_location")
    samba_location = Setting("samba_location")
    samba_port = Setting("samba_port", "\\USBserial\\COM23")
    backup_dir = Setting("backupPath")
    eeprom_dir = Setting("lastDir")
    flash_dir = Setting("lastFlashDir")
    images_dir = Setting("lastImagesDir")
    log_dir = Setting("lastLogDir")
    lib_dir = Setting("libraryPath")
    snapshot_dir = Setting("snapshotpath")
    updates_dir = Setting("lastUpdatesDir")

    locale = Setting("locale")
    ge_path = Setting("gePath")
    mcu = Setting("mcu", "m64")
    programmer = Setting("programmer", "usbasp")
    app_logs_dir = Setting("appLogsDir", _default_app_logs_dir)

    opentx_branch = Setting("OpenTxBranch", int(DownloadBranch.RELEASE_STABLE))
    new_model_action = Setting("newModelAction", 1)  # 0=no action; 1=model wizard; 2=model edit

    embed_splashes = Setting("embedded_splashes", 0)
    fw_server_fails = Setting("fwserver", 0)
    icon_size = Setting("icon_size", 2)
    js_ctrl = Setting("js_ctrl", 0)
    history_size = Setting("history_size", 10)
    general_edit_tab = Setting("generalEditTab", 0)
    theme = Setting("theme", 1)
    warning_id = Setting("warningId", 0)

    js_support = Setting("js_support", False)
    show_splash = Setting("show_splash", True)
    snap_to_clpbrd = Setting("snapshot_to_clipboard", False)
    auto_check_app = Setting("startup_check_companion", True)
    auto_check_fw = Setting("startup_check_fw", True)

    enable_backup = Setting("enableBackup", False)
    backup_on_flash = Setting("backupOnFlash", True)
    output_display_details = Setting("outputDisplayDetails", False)
    check_hardware_compatibility = Setting("checkHardwareCompatibility", True)
    remove_model_slots = Setting("removeModelSlots", True)
    maximized = Setting("maximized", False)
    tabbed_mdi = Setting("tabbedMdi", False)
    app_debug_log = Setting("appDebugLog", False)
    fw_trace_log = Setting("fwTraceLog", False)

    # Simulator globals (not per profile)
    simu_dbg_filters = Setting("simuDbgFilters", list)
    back_light = Setting("backLight", 0)
    simu_last_prof_id = Setting("simuLastProfId", -1)
    simu_sw = Setting("simuSW", True)

    def __init__(
        self,
        backend: SettingsBackend | None = None,
        store_factory: BackendFactory = QSettingsBackend.native,
    ):
        super().__init__(backend or store_factory(COMPANY, PRODUCT))
        self._store_factory = store_factory
        self.profiles = ProfileRegistry(self._backend)
        self.joysticks = [JoystickCalibration(self._backend) for _ in range(MAX_JOYSTICKS)]
        self.fw_revisions = FwRevision(self._backend)
        self._first_use: bool | None = None
        self._upgrade_from_version = ""

    def init(self):
        """
        Load everything from the backing store, in order:
          cleanup → profiles → joysticks → version marker → selection → globals
        """
        if self._first_use is None:
            self._first_use = not self.has_current_settings()
        logger.info(f"Settings init with {self.location}, first use: {self._first_use}")

        migration.convert_settings(self)

        self.profiles.init_profiles()
        for i, joystick in enumerate(self.joysticks):
            joystick.init(i)

        # Version marker; only the migration path may change it
        self.getset(SETTINGS_VERSION_KEY, SETTINGS_VERSION)

        self.profiles.load_selection()
        self.init_values()

    @property
    def location(self) -> str:
        return getattr(self._backend, "location", type(self._backend).__name__)

    def sync(self):
        self._backend.sync()

    # ------------------------------------------------------------------ #
    # State derived at init                                                #
    # ------------------------------------------------------------------ #

    def is_first_use(self) -> bool:
        return bool(self._first_use)

    def previous_version(self) -> str:
        return self._upgrade_from_version

    def has_current_settings(self) -> bool:
        return self._backend.contains(SETTINGS_VERSION_KEY)

    def settings_version(self) -> str:
        return self.load(SETTINGS_VERSION_KEY, "")

    # ------------------------------------------------------------------ #
    # Profiles                                                             #
    # ------------------------------------------------------------------ #

    @property
    def session_id(self) -> int:
        return self.profiles.session_id

    @session_id.setter
    def session_id(self, index: int):
        self.profiles.session_id = index

    @property
    def profile_id(self) -> int:
        return self.profiles.persisted_id

    @profile_id.setter
    def profile_id(self, index: int):
        self.profiles.persisted_id = index

    def current_profile(self) -> Profile:
        return self.profiles.current_profile()

    def get_profile(self, index: int) -> Profile:
        return self.profiles.get_profile(index)

    def get_active_profiles(self) -> dict[int, str]:
        return self.profiles.list_configured_profiles()

    def joystick(self, index: int) -> JoystickCalibration:
        if not 0 <= index < MAX_JOYSTICKS:
            raise IndexError(f"Joystick index out of range: {index}")
        return self.joysticks[index]

    def bounded_opentx_branch(self, allow_nightly: bool = False) -> DownloadBranch:
        upper = DownloadBranch.NIGHTLY_UNSTABLE if allow_nightly else DownloadBranch.RC_TESTING
        return DownloadBranch(max(DownloadBranch.RELEASE_STABLE, min(self.opentx_branch, upper)))

    # ------------------------------------------------------------------ #
    # Migration                                                            #
    # ------------------------------------------------------------------ #

    def find_previous_version_settings(self) -> str | None:
        return migration.find_previous_version_settings(self._store_factory)

    def find_previous_versions(self) -> list[str]:
        return migration.find_previous_versions(self._store_factory)

    def import_settings(self, from_version: str, platform: str = sys.platform) -> bool:
        """
        Import a prior installation's settings. Call init() afterwards to
        reload in-memory values from the updated store.
        """
        self._upgrade_from_version = ""
        if not migration.import_settings(self._backend, from_version, self._store_factory, platform):
            return False
        self._upgrade_from_version = from_version
        return True
