"""
Migration
Carries settings across application versions.

Two independent steps:
  convert_settings()  in-place cleanup of the current store, run on every
                      startup before anything reads it; safe to repeat
  import_settings()   on-demand copy of a previous installation's store
                      into the current one, located by organization/product

Prior stores are probed newest first; the first one holding a version
marker wins even if older ones also exist.
"""

from __future__ import annotations
import logging
import sys
from dataclasses import dataclass
from typing import Callable

from companion_settings.constants import SETTINGS_VERSION_KEY
from companion_settings.store import SettingsBackend, StoreObject, coerce_value

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str, str], SettingsBackend]

# Unused keys removed on every load and never imported.
# Update this list whenever the store's product name changes.
DEPRECATED_SETTINGS = (
    "avrdude_location",  # superseded by avrdudeLocation, old installs keep re-importing it
    "last_simulator",    # removed in 2.1
    "companionBranch",
    "useCompanionNightlyBuilds",
    "useFirmwareNightlyBuilds",  # removed in 2.2
)

# Compiled-in server location, never meaningful in another install
NON_PORTABLE_KEYS = ("compilation-server",)

# Tool locations shipped with Windows installers and install metadata;
# "." is the registry default value which may hold the install path
WINDOWS_INSTALL_KEYS = (
    "avrdude_location",
    "avrdudeLocation",
    "dfu_location",
    "Start Menu Folder",
    ".",
)


@dataclass(frozen=True)
class PreviousStore:
    label: str
    organization: str
    product: str


# Newest first
PREVIOUS_STORES = (
    PreviousStore("2.1", "OpenTX", "Companion 2.1"),
    PreviousStore("2.0", "OpenTX", "Companion 2.0"),
    PreviousStore("1.x", "OpenTX", "OpenTX Companion"),
)


def previous_store(label: str) -> PreviousStore | None:
    for candidate in PREVIOUS_STORES:
        if candidate.label == label:
            return candidate
    return None


# ---------------------------------------------------------------------- #
# In-place cleanup                                                         #
# ---------------------------------------------------------------------- #

def convert_settings(app: StoreObject):
    """
    Rewrite keys whose meaning changed and purge deprecated ones.
    ``app`` is the root settings object owning ``new_model_action`` and
    ``warning_id``.
    """
    backend = app.backend

    if backend.contains("useWizard"):
        if not backend.contains("newModelAction"):
            try:
                use_wizard = coerce_value(backend.value("useWizard"), False)
            except (TypeError, ValueError):
                use_wizard = False
            app.set_value("new_model_action", 1 if use_wizard else 2)
            logger.info("Converted useWizard to newModelAction")
        backend.remove("useWizard")

    # warningId changed meaning during 2.2 development; 7 is an old-style
    # value and resetting it restores the default behaviour
    if app.load("warningId", 0) == 7:
        app.reset_value("warning_id")
        logger.info("Reset obsolete warningId")

    purge_deprecated(backend)


def purge_deprecated(backend: SettingsBackend):
    for key in DEPRECATED_SETTINGS:
        if backend.contains(key):
            backend.remove(key)
            logger.debug(f"Removed deprecated setting {key}")


# ---------------------------------------------------------------------- #
# Cross-installation import                                                #
# ---------------------------------------------------------------------- #

def find_previous_versions(factory: BackendFactory) -> list[str]:
    """Return labels of every prior store holding a version marker, newest first."""
    found = []
    for candidate in PREVIOUS_STORES:
        if factory(candidate.organization, candidate.product).contains(SETTINGS_VERSION_KEY):
            found.append(candidate.label)
    return found


def find_previous_version_settings(factory: BackendFactory) -> str | None:
    """Return the label of the newest prior store with a version marker, or None."""
    for candidate in PREVIOUS_STORES:
        if factory(candidate.organization, candidate.product).contains(SETTINGS_VERSION_KEY):
            logger.info(f"Found settings of version {candidate.label}")
            return candidate.label
    logger.info("No previous version settings found")
    return None


def excluded_import_keys(platform: str = sys.platform) -> set[str]:
    excluded = set(DEPRECATED_SETTINGS) | set(NON_PORTABLE_KEYS)
    if platform == "win32":
        excluded |= set(WINDOWS_INSTALL_KEYS)
    return excluded


def import_settings(
    target: SettingsBackend,
    label: str,
    factory: BackendFactory,
    platform: str = sys.platform,
) -> bool:
    """
    Copy every importable key of the prior store named by ``label`` into
    ``target``. Keys already in ``target`` but absent from the source are
    kept. Returns False, changing nothing, if ``label`` is not recognized.
    """
    candidate = previous_store(label)
    if candidate is None:
        logger.warning(f"Unknown settings version {label!r}, nothing imported")
        return False

    source = factory(candidate.organization, candidate.product)
    excluded = excluded_import_keys(platform)

    copied = 0
    for key in source.all_keys():
        if key in excluded:
            continue
        value = source.value(key)
        if value is None:
            continue
        target.set_value(key, value)
        copied += 1

    purge_deprecated(target)
    logger.info(f"Imported {copied} setting(s) from {candidate.organization}/{candidate.product}")
    return True
