"""DeviceManager — opens evdev keyboards/keypads and multiplexes their events."""

from __future__ import annotations

import logging
import selectors
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

import evdev
from evdev import ecodes

from dataentry.input.device_filter import should_include_device

logger = logging.getLogger(__name__)


class DeviceManager:
    """Manages physical evdev input devices feeding the entry."""

    def __init__(
        self,
        debug: bool = False,
        only: Iterable[str] | None = None,
        grab: bool = False,
        on_device_added: Optional[Callable] = None,
        on_device_removed: Optional[Callable] = None,
    ):
        self.debug = debug
        self.only = list(only or [])
        self.grab = grab
        self.devices: Dict[str, Any] = {}
        self.selector = selectors.DefaultSelector()
        self.on_device_added = on_device_added
        self.on_device_removed = on_device_removed

    @property
    def device_count(self) -> int:
        """Number of currently tracked devices."""
        return len(self.devices)

    # ------------------------------------------------------------------
    # Device scanning
    # ------------------------------------------------------------------

    def scan_devices(self) -> int:
        """Scan ``/dev/input/`` and register suitable devices.

        Returns:
            Number of newly registered devices.
        """
        count = 0
        for path in evdev.list_devices():
            if self._try_add_device(path):
                count += 1
        return count

    def _is_suitable_device(self, device: Any) -> bool:
        """Return True if *device* is a keyboard or a numeric keypad."""
        if not should_include_device(device.name, self.only):
            return False

        caps = device.capabilities()
        if ecodes.EV_KEY not in caps:
            return False

        keys = caps.get(ecodes.EV_KEY, [])
        return ecodes.KEY_A in keys or ecodes.KEY_KP0 in keys

    def _try_add_device(self, path: str) -> bool:
        """Try to open and register device at *path*.

        Returns:
            True if the device was successfully added.
        """
        if path in self.devices:
            return False

        try:
            device = evdev.InputDevice(path)
        except OSError as exc:
            if self.debug:
                logger.warning("Cannot open %s: %s", path, exc)
            return False

        if not self._is_suitable_device(device):
            device.close()
            return False

        if self.grab:
            try:
                device.grab()
            except OSError as exc:
                logger.warning("Cannot grab %s (%s): %s", device.name, path, exc)

        self.devices[path] = device
        self.selector.register(device, selectors.EVENT_READ)
        logger.info("Device added: %s (%s)", device.name, path)

        if self.on_device_added:
            try:
                self.on_device_added(device)
            except Exception:
                logger.exception("on_device_added callback failed for %s", path)
        return True

    # ------------------------------------------------------------------
    # Device removal
    # ------------------------------------------------------------------

    def remove_device(self, path: str) -> bool:
        """Safely remove device at *path*.

        Returns:
            True if the device was present and removed.
        """
        device = self.devices.pop(path, None)
        if device is None:
            return False

        try:
            self.selector.unregister(device)
        except (KeyError, ValueError):
            pass

        device_name = getattr(device, "name", "unknown")
        try:
            device.close()
        except OSError:
            pass

        logger.info("Device removed: %s (%s)", device_name, path)

        if self.on_device_removed:
            try:
                self.on_device_removed(device)
            except Exception:
                logger.exception("on_device_removed callback failed for %s", path)
        return True

    # ------------------------------------------------------------------
    # Event reading
    # ------------------------------------------------------------------

    def handle_read_error(self, device: Any, error: Exception) -> None:
        """Handle a read error — graceful removal (device unplugged)."""
        logger.warning("Read error on %s: %s", device.name, error)
        self.remove_device(device.path)

    def get_events(self, timeout: float | None = 0.1) -> Iterator[tuple]:
        """Yield ``(device, event)`` tuples from ready devices.

        Blocks at most *timeout* seconds (forever for None).
        """
        ready = self.selector.select(timeout=timeout)
        for key, _mask in ready:
            device = key.fileobj
            try:
                for event in device.read():
                    yield (device, event)
            except OSError as exc:
                self.handle_read_error(device, exc)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release all resources."""
        for path in list(self.devices.keys()):
            device = self.devices.pop(path)
            try:
                self.selector.unregister(device)
            except (KeyError, ValueError):
                pass
            if self.grab:
                try:
                    device.ungrab()
                except OSError:
                    pass
            try:
                device.close()
            except OSError:
                pass
        self.selector.close()

    def __enter__(self) -> "DeviceManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        self.close()
        return False
