"""
Store identity and fixed limits shared by every settings entity.
"""

from enum import IntEnum

COMPANY = "OpenTX"
COMPANY_DOMAIN = "open-tx.org"
PRODUCT = "Companion 2.2"
APP_COMPANION = "OpenTX Companion"
APP_SIMULATOR = "OpenTX Simulator"

# Written once per schema generation; only the migration path may change it.
SETTINGS_VERSION = "220"
SETTINGS_VERSION_KEY = "settings_version"

MAX_PROFILES = 15
MAX_JOYSTICKS = 8


class DownloadBranch(IntEnum):
    RELEASE_STABLE = 0
    RC_TESTING = 1
    NIGHTLY_UNSTABLE = 2
