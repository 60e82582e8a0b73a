import logging
from pathlib import Path

import pytest

from companion_settings import AppSettings
from companion_settings.store import (
    PersistenceUnavailable,
    QSettingsBackend,
    Setting,
    StoreObject,
    coerce_value,
    encode_value,
)


class Widget(StoreObject):
    title = Setting("Title")
    count = Setting("item_count", 3)
    enabled = Setting("enabled", True)
    tags = Setting("tags", list)
    blob = Setting("blob", b"")

    def settings_path(self) -> str:
        return "Widgets/widget/"


def test_path_for_key_uses_settings_path_when_group_missing(backend):
    w = Widget(backend)
    assert w.path_for_key("Title") == "Widgets/widget/Title"
    assert w.path_for_key("Title", "") == "Widgets/widget/Title"


def test_path_for_key_adds_single_separator(backend):
    w = Widget(backend)
    assert w.path_for_key("k", "Other") == "Other/k"
    assert w.path_for_key("k", "Other/") == "Other/k"
    assert StoreObject(backend).path_for_key("k") == "k"


def test_store_load_clear(backend):
    w = Widget(backend)
    w.store(42, "answer")
    assert backend.contains("Widgets/widget/answer")
    assert w.load("answer", 0) == 42
    w.clear("answer")
    assert not backend.contains("Widgets/widget/answer")
    assert w.load("answer", 5) == 5


def test_load_type_mismatch_returns_default(backend):
    w = Widget(backend)
    w.store("not a number", "answer")
    assert w.load("answer", 17) == 17
    w.store(["a", "b"], "answer")
    assert w.load("answer", "fallback") == "fallback"


def test_getset_materializes_default(backend):
    w = Widget(backend)
    assert not backend.contains("Widgets/widget/marker")
    assert w.getset("marker", "220") == "220"
    assert backend.value("Widgets/widget/marker") == "220"
    # An existing value wins over the default
    w.store("210", "marker")
    assert w.getset("marker", "220") == "210"


def test_default_omission(backend, non_default):
    w = Widget(backend)
    for name in Widget.setting_names():
        key = Widget.setting(name).key_for(w)
        default = w.default_value(name)

        w.set_value(name, non_default(default))
        assert getattr(w, name) == non_default(default)
        assert backend.contains(w.path_for_key(key)), name

        w.set_value(name, default)
        assert getattr(w, name) == default
        assert not backend.contains(w.path_for_key(key)), name


def test_set_value_without_store_only_changes_memory(backend):
    w = Widget(backend)
    w.set_value("title", "hello", store=False)
    assert w.title == "hello"
    assert not backend.contains("Widgets/widget/Title")


def test_attribute_assignment_persists(backend):
    w = Widget(backend)
    w.count = 9
    assert backend.contains("Widgets/widget/item_count")
    w.reset_value("count")
    assert w.count == 3
    assert not backend.contains("Widgets/widget/item_count")


def test_values_survive_reopening_ini_file(tmp_path: Path):
    path = tmp_path / "store.ini"
    first = QSettingsBackend.ini(path)
    w = Widget(first)
    w.title = "a, b"
    w.count = 12
    w.enabled = False
    w.tags = ["one"]
    w.blob = b"\x00\xffgeometry"
    first.sync()
    del w, first

    again = Widget(QSettingsBackend.ini(path))
    again.init_values()
    assert again.title == "a, b"
    assert again.count == 12
    assert again.enabled is False
    assert again.tags == ["one"]
    assert again.blob == b"\x00\xffgeometry"


def test_values_written_as_text_are_coerced(tmp_path: Path):
    path = tmp_path / "store.ini"
    path.write_text(
        "[Widgets]\n"
        "widget\\item_count=25\n"
        "widget\\enabled=false\n"
        "widget\\Title=abc\n",
        encoding="utf-8",
    )
    w = Widget(QSettingsBackend.ini(path))
    w.init_values()
    assert w.count == 25
    assert w.enabled is False
    assert w.title == "abc"


def test_unconvertible_text_falls_back_to_default(tmp_path: Path):
    path = tmp_path / "store.ini"
    path.write_text("[Widgets]\nwidget\\item_count=lots\nwidget\\enabled=maybe\n", encoding="utf-8")
    w = Widget(QSettingsBackend.ini(path))
    w.init_values()
    assert w.count == 3
    assert w.enabled is True


@pytest.mark.parametrize(
    "raw, default, expected",
    [
        ("12", 0, 12),
        (True, 0, 1),
        ("true", False, True),
        ("0", True, False),
        (5, "", "5"),
        (False, "", "false"),
        ("only", [], ["only"]),
        (["a", 1], [], ["a", "1"]),
        ("geo", b"", b"geo"),
    ],
)
def test_coerce_value(raw, default, expected):
    assert coerce_value(raw, default) == expected


@pytest.mark.parametrize("raw, default", [("x1", 0), ("maybe", False), ([1], ""), (3, b"")])
def test_coerce_value_mismatch_raises(raw, default):
    with pytest.raises((TypeError, ValueError)):
        coerce_value(raw, default)


def test_encode_value_passes_plain_values_through():
    assert encode_value(3) == 3
    assert encode_value(["a"]) == ["a"]


def test_unwritable_store_raises_persistence_unavailable(tmp_path: Path):
    # A directory where the INI file should be can be neither read nor written
    target = tmp_path / "adir"
    target.mkdir()
    with pytest.raises(PersistenceUnavailable):
        backend = QSettingsBackend.ini(target)
        AppSettings(backend).init()
        backend.sync()


def test_persistence_unavailable_is_an_os_error():
    assert issubclass(PersistenceUnavailable, OSError)


def test_malformed_store_warns_once(tmp_path: Path, caplog):
    path = tmp_path / "broken.ini"
    path.write_text("[Broken\nkey=1\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="companion_settings.store"):
        backend = QSettingsBackend.ini(path)
        backend.set_value("a", 1)
        backend.set_value("b", 2)
        backend.remove("a")
        backend.value("b")
    warnings = [r for r in caplog.records if "malformed" in r.getMessage()]
    assert len(warnings) == 1
