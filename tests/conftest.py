from pathlib import Path

import pytest

from companion_settings import QSettingsBackend
from companion_settings.constants import COMPANY, PRODUCT
from companion_settings.simulator_options import SimulatorOptions


@pytest.fixture
def store_factory(tmp_path: Path):
    """(organization, product) -> INI backed store under tmp_path, one per pair."""
    opened = {}

    def factory(organization: str, product: str) -> QSettingsBackend:
        key = (organization, product)
        if key not in opened:
            opened[key] = QSettingsBackend.ini(tmp_path / organization / f"{product}.ini")
        return opened[key]

    return factory


@pytest.fixture
def backend(store_factory) -> QSettingsBackend:
    return store_factory(COMPANY, PRODUCT)


@pytest.fixture
def non_default():
    def make(default):
        if isinstance(default, bool):
            return not default
        if isinstance(default, int):
            return default + 7
        if isinstance(default, str):
            return default + "x"
        if isinstance(default, bytes):
            return default + b"\x01\x02"
        if isinstance(default, list):
            return ["alpha", "beta"]
        if isinstance(default, SimulatorOptions):
            return SimulatorOptions(firmware_id="opentx-x9d+", data_folder="/tmp/sim")
        raise AssertionError(f"no non-default value for {default!r}")

    return make
