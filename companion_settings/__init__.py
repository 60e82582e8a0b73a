"""
Typed, versioned persistent settings for OpenTX Companion.

Radio profiles, joystick calibration, firmware revisions and global options
share one hierarchical key-value store (PyQt6 QSettings). Values equal to
their defaults are never written, and settings from earlier installations
can be imported on demand.
"""

from companion_settings.calibration import FwRevision, JoystickCalibration
from companion_settings.profile_manager import Profile, ProfileRegistry
from companion_settings.settings import AppSettings
from companion_settings.simulator_options import SimulatorOptions
from companion_settings.store import (
    PersistenceUnavailable,
    QSettingsBackend,
    Setting,
    SettingsBackend,
    StoreObject,
)

__all__ = [
    "AppSettings",
    "FwRevision",
    "JoystickCalibration",
    "PersistenceUnavailable",
    "Profile",
    "ProfileRegistry",
    "QSettingsBackend",
    "Setting",
    "SettingsBackend",
    "SimulatorOptions",
    "StoreObject",
]
