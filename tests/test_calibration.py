from companion_settings.calibration import FwRevision, JoystickCalibration


def _joystick(backend, index):
    js = JoystickCalibration(backend)
    js.init(index)
    return js


def test_joystick_defaults(backend):
    js = _joystick(backend, 0)
    assert (js.axis, js.minimum, js.median, js.maximum, js.inverted) == (-1, -32767, 0, 32767, 0)
    assert not js.exists_on_disk()


def test_joystick_keys_carry_index(backend):
    js = _joystick(backend, 3)
    js.axis = 2
    js.minimum = -1000
    js.median = 12
    js.maximum = 1000
    js.inverted = 1
    assert backend.value("JsCalibration/stick3_axe") == 2
    assert backend.value("JsCalibration/stick3_min") == -1000
    assert backend.value("JsCalibration/stick3_med") == 12
    assert backend.value("JsCalibration/stick3_max") == 1000
    assert backend.value("JsCalibration/stick3_inv") == 1
    assert js.exists_on_disk()


def test_joystick_exists_requires_non_negative_axis(backend):
    backend.set_value("JsCalibration/stick1_axe", -5)
    assert not _joystick(backend, 1).exists_on_disk()
    backend.set_value("JsCalibration/stick1_axe", 0)
    assert _joystick(backend, 1).exists_on_disk()


def test_joystick_reset_clears_only_its_own_keys(backend):
    first = _joystick(backend, 0)
    second = _joystick(backend, 1)
    first.axis = 4
    first.maximum = 2000
    second.axis = 5

    first.reset()

    assert first.axis == -1
    assert first.maximum == 32767
    assert not first.exists_on_disk()
    assert sorted(backend.all_keys()) == ["JsCalibration/stick1_axe"]
    assert second.exists_on_disk()


def test_joystick_init_loads_stored_values(backend):
    backend.set_value("JsCalibration/stick7_axe", "1")
    backend.set_value("JsCalibration/stick7_inv", "1")
    js = _joystick(backend, 7)
    assert js.axis == 1
    assert js.inverted == 1
    assert js.minimum == -32767


def test_fw_revision_roundtrip(backend):
    revs = FwRevision(backend)
    assert revs.get("opentx-x9d") == 0
    revs.set("opentx-x9d", 1234)
    assert revs.get("opentx-x9d") == 1234
    assert backend.value("FwRevisions/opentx-x9d") == 1234
    revs.remove("opentx-x9d")
    assert not backend.contains("FwRevisions/opentx-x9d")


def test_fw_revision_zero_clears(backend):
    revs = FwRevision(backend)
    revs.set("opentx-x7", 55)
    revs.set("opentx-x7", 0)
    assert not backend.contains("FwRevisions/opentx-x7")


def test_fw_revision_unparsable_reads_zero(backend):
    backend.set_value("FwRevisions/opentx-t12", "r12")
    assert FwRevision(backend).get("opentx-t12") == 0
