"""Tests for dataentry.input.device_manager — fully mocked evdev."""

from __future__ import annotations

import selectors
import sys
import types
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

# ---------------------------------------------------------------------------
# Build a fake evdev module so we never touch real devices
# ---------------------------------------------------------------------------

_fake_evdev = types.ModuleType("evdev")
_fake_ecodes = types.ModuleType("evdev.ecodes")

# Key constants used by DeviceManager
_fake_ecodes.EV_KEY = 1
_fake_ecodes.KEY_A = 30
_fake_ecodes.KEY_KP0 = 82

_fake_evdev.ecodes = _fake_ecodes
_fake_evdev.InputDevice = MagicMock  # will be patched per-test
_fake_evdev.list_devices = MagicMock(return_value=[])

# Inject into sys.modules BEFORE importing device_manager
sys.modules.setdefault("evdev", _fake_evdev)
sys.modules.setdefault("evdev.ecodes", _fake_ecodes)

from dataentry.input import device_manager as dm_module  # noqa: E402
from dataentry.input.device_manager import DeviceManager  # noqa: E402

# whichever evdev the module ended up with (fake, or real if imported earlier)
evdev = dm_module.evdev
ecodes = dm_module.ecodes


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_device(
    name: str = "Test Keyboard",
    path: str = "/dev/input/event0",
    has_ev_key: bool = True,
    has_key_a: bool = True,
    has_kp0: bool = False,
) -> MagicMock:
    """Create a mock evdev.InputDevice."""
    dev = MagicMock()
    dev.name = name
    dev.path = path

    keys: list[int] = []
    if has_key_a:
        keys.append(ecodes.KEY_A)
    if has_kp0:
        keys.append(ecodes.KEY_KP0)

    caps: dict = {}
    if has_ev_key:
        caps[ecodes.EV_KEY] = keys

    dev.capabilities.return_value = caps
    dev.read.return_value = []
    dev.close.return_value = None
    return dev


def _scan(dev, **kwargs) -> DeviceManager:
    with patch.object(evdev, "list_devices", return_value=[dev.path]), \
         patch.object(evdev, "InputDevice", return_value=dev):
        dm = DeviceManager(**kwargs)
        # Patch selector to avoid real fd registration
        dm.selector = MagicMock()
        dm.scan_devices()
    return dm


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestScanDevices:
    def test_finds_keyboard(self):
        dm = _scan(_make_device(path="/dev/input/event0"))
        assert "/dev/input/event0" in dm.devices
        dm.selector.register.assert_called_once()

    def test_finds_numeric_keypad(self):
        dm = _scan(_make_device(name="USB Keypad", has_key_a=False, has_kp0=True))
        assert dm.device_count == 1

    def test_skips_device_without_ev_key(self):
        dev = _make_device(has_ev_key=False, path="/dev/input/event1")
        dm = _scan(dev)
        assert dm.device_count == 0
        dev.close.assert_called_once()

    def test_skips_mouse(self):
        dm = _scan(_make_device(name="Mouse", has_key_a=False))
        assert dm.device_count == 0

    def test_open_error_skipped(self):
        with patch.object(evdev, "list_devices", return_value=["/dev/input/event9"]), \
             patch.object(evdev, "InputDevice", side_effect=PermissionError("denied")):
            dm = DeviceManager(debug=True)
            dm.selector = MagicMock()
            assert dm.scan_devices() == 0

    def test_already_known_path_not_added_twice(self):
        dev = _make_device()
        dm = _scan(dev)
        with patch.object(evdev, "InputDevice", return_value=dev):
            assert dm._try_add_device(dev.path) is False

    def test_only_filter(self):
        keyboard = _make_device(name="AT Translated Set 2 keyboard")
        assert _scan(keyboard, only=["keypad"]).device_count == 0
        keypad = _make_device(name="Genius Numeric KeyPad")
        assert _scan(keypad, only=["keypad"]).device_count == 1

    def test_grab(self):
        dev = _make_device()
        _scan(dev, grab=True)
        dev.grab.assert_called_once()

    def test_grab_failure_still_adds(self):
        dev = _make_device()
        dev.grab.side_effect = OSError("busy")
        assert _scan(dev, grab=True).device_count == 1


class TestIsSuitableDevice:
    def test_filters_own_devices_by_name(self):
        dm = DeviceManager()
        dev = _make_device(name="dataentry virtual keypad")
        assert dm._is_suitable_device(dev) is False

    @pytest.mark.parametrize("name", ["Some Virtual Device", "py-evdev-uinput"])
    def test_filters_via_device_filter(self, name):
        dm = DeviceManager()
        assert dm._is_suitable_device(_make_device(name=name)) is False

    def test_accepts_real_keyboard(self):
        dm = DeviceManager()
        dev = _make_device(name="AT Translated Set 2 keyboard")
        assert dm._is_suitable_device(dev) is True


@pytest.fixture
def manager():
    dm = DeviceManager()
    dm.selector = MagicMock()
    return dm


def _attach(dm, dev):
    dm.devices[dev.path] = dev
    return dev


def _ready(dm, *devices):
    keys = [SimpleNamespace(fileobj=dev) for dev in devices]
    dm.selector.select.return_value = [(key, selectors.EVENT_READ) for key in keys]


class TestRemoveDevice:
    def test_unplugged_keypad_is_closed_and_reported(self):
        removed = MagicMock()
        dm = DeviceManager(on_device_removed=removed)
        dm.selector = MagicMock()
        keypad = _attach(dm, _make_device(name="USB Keypad", path="/dev/input/event4"))

        assert dm.remove_device(keypad.path) is True
        assert dm.device_count == 0
        keypad.close.assert_called_once()
        dm.selector.unregister.assert_called_once_with(keypad)
        removed.assert_called_once_with(keypad)

    def test_unknown_path(self, manager):
        assert manager.remove_device("/dev/input/event99") is False

    def test_close_error_ignored(self, manager):
        dev = _attach(manager, _make_device())
        dev.close.side_effect = OSError("gone")
        assert manager.remove_device(dev.path) is True


class TestGetEvents:
    def test_events_from_two_devices_in_ready_order(self, manager):
        keyboard = _make_device(path="/dev/input/event0")
        keypad = _make_device(name="USB Keypad", path="/dev/input/event4")
        keyboard.read.return_value = ["k1"]
        keypad.read.return_value = ["p1", "p2"]
        _ready(manager, keypad, keyboard)

        events = list(manager.get_events(timeout=0.25))

        assert events == [(keypad, "p1"), (keypad, "p2"), (keyboard, "k1")]
        manager.selector.select.assert_called_once_with(timeout=0.25)

    def test_no_ready_devices(self, manager):
        manager.selector.select.return_value = []
        assert list(manager.get_events(timeout=None)) == []

    def test_read_error_drops_device_keeps_others(self, manager):
        broken = _attach(manager, _make_device(path="/dev/input/event0"))
        broken.read.side_effect = OSError("No such device")
        healthy = _attach(manager, _make_device(name="USB Keypad", path="/dev/input/event4"))
        healthy.read.return_value = ["p1"]
        _ready(manager, broken, healthy)

        assert list(manager.get_events()) == [(healthy, "p1")]
        assert list(manager.devices) == [healthy.path]


class TestCallbacks:
    def test_added_callback_receives_device(self):
        added = MagicMock()
        dev = _make_device()
        _scan(dev, on_device_added=added)
        added.assert_called_once_with(dev)

    def test_failing_callbacks_are_logged(self, caplog):
        dm = DeviceManager(
            on_device_added=MagicMock(side_effect=RuntimeError("boom")),
            on_device_removed=MagicMock(side_effect=RuntimeError("boom")),
        )
        dm.selector = MagicMock()
        dev = _make_device()

        with patch.object(evdev, "InputDevice", return_value=dev):
            assert dm._try_add_device(dev.path) is True
        assert dm.remove_device(dev.path) is True
        assert "on_device_added callback failed" in caplog.text
        assert "on_device_removed callback failed" in caplog.text


class TestClose:
    def test_closes_every_device_and_selector(self, manager):
        devs = [_attach(manager, _make_device(path=f"/dev/input/event{i}")) for i in range(3)]
        selector = manager.selector

        manager.close()

        assert manager.device_count == 0
        for dev in devs:
            dev.close.assert_called_once()
            dev.ungrab.assert_not_called()
        selector.close.assert_called_once()

    def test_grabbed_devices_released(self):
        dm = DeviceManager(grab=True)
        dm.selector = MagicMock()
        dev = _attach(dm, _make_device())
        dev.ungrab.side_effect = OSError("not grabbed")

        dm.close()

        dev.ungrab.assert_called_once()
        dev.close.assert_called_once()

    def test_with_block_closes(self, manager):
        with patch.object(manager, "close") as close:
            with manager as entered:
                assert entered is manager
        close.assert_called_once()
