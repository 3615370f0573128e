"""DataEntryApp — wires input devices, the entry core and the optional GUI."""

from __future__ import annotations

import logging
import signal
import sys

import dataentry.log  # registers TRACE level and logger.trace()
from dataentry.config import ConfigManager
from dataentry.core import commit
from dataentry.core.actions import ControlDispatcher
from dataentry.core.context import init_context, reconfigure, teardown_context
from dataentry.core.event_bus import EventBus
from dataentry.core.event_manager import EventManager
from dataentry.core.events import EventType
from dataentry.input.key_mapper import default_bindings

logger = logging.getLogger(__name__)

# Upper bound for one blocking wait on the input devices
IDLE_POLL_SECONDS = 0.5
# Qt pump interval in GUI mode
GUI_PUMP_MS = 20


class DataEntryApp:
    """Single-process application: evdev input, entry core, optional window.

    Modes:
        headless=True  — no GUI, runs as a background service
        headless=False — with the entry window (default)

    Input handling and the inactivity timer run on one thread: the loop
    blocks in ``select()`` no longer than the pending timeout, then polls
    the scheduler.  ``_init_platform()`` is separated from ``__init__`` so
    that tests can inject mocks without touching real evdev devices.
    """

    def __init__(
        self,
        headless: bool = False,
        debug: bool = False,
        config_path: str | None = None,
    ):
        self.headless = headless
        self.debug = debug
        self._running = False

        # Configuration
        self.config = ConfigManager(config_path=config_path, debug=debug)

        # Core components
        self.event_bus = EventBus()
        self.context = init_context(self.config.get_all(), bus=self.event_bus)
        self.dispatcher = ControlDispatcher(self.context, default_bindings())
        self.event_manager = EventManager(self.event_bus, debug=debug)

        # Platform: created by _init_platform()
        self.device_manager = None

    # ------------------------------------------------------------------
    # Platform initialisation (lazy, for testability)
    # ------------------------------------------------------------------

    def _init_platform(self):
        """Open input devices."""
        from dataentry.input.device_manager import DeviceManager

        self.device_manager = DeviceManager(
            debug=self.debug,
            only=self.config.get('devices'),
            grab=self.config.get('grab_devices', False),
        )

    # ------------------------------------------------------------------
    # Event bus wiring
    # ------------------------------------------------------------------

    def _wire_event_bus(self):
        """Subscribe event handlers to the EventBus."""
        self.event_bus.subscribe(EventType.KEY_PRESS, self._on_key_press)
        self.event_bus.subscribe(EventType.KEY_RELEASE, self._on_key_release)
        self.event_bus.subscribe(EventType.KEY_REPEAT, self._on_key_repeat)
        self.event_bus.subscribe(EventType.CONFIG_CHANGED, self._on_config_changed)

    # ------------------------------------------------------------------
    # Event callbacks
    # ------------------------------------------------------------------

    def _on_key_press(self, event):
        data = event.data
        handled = self.dispatcher.on_control_pressed(data.code)
        logger.trace(  # type: ignore[attr-defined]
            "KeyPress: code=%d dev=%s handled=%s | %r",
            data.code, data.device_name, handled, self.context,
        )

    def _on_key_release(self, event):
        self.dispatcher.on_control_released(event.data.code)

    def _on_key_repeat(self, event):
        self.dispatcher.on_control_repeated(event.data.code)

    def _on_config_changed(self, event):
        """Re-read the config file and apply it to the entry core."""
        if not self.config.reload():
            logger.warning("Config reload failed, keeping previous settings")
            return
        try:
            reconfigure(self.context, self.config.entry_config())
        except ValueError as exc:
            logger.error("Invalid configuration: %s", exc)
            return
        if self.debug:
            logger.debug("Config reloaded: %s", self.config.get_all())

    # ------------------------------------------------------------------
    # Commands (also used by the GUI and remote callers)
    # ------------------------------------------------------------------

    def press(self, control_id, modifier_slot: int | None = None) -> bool:
        """Press and immediately release a control."""
        handled = self.dispatcher.on_control_pressed(control_id, modifier_slot)
        self.dispatcher.on_control_released(control_id)
        return handled

    def enter(self, copy: str | None = None):
        """Externally triggered commit."""
        return commit.enter(self.context, copy)

    def snapshot(self):
        return self.context.snapshot()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def pump(self, max_wait: float = IDLE_POLL_SECONDS) -> int:
        """Read ready input events, then poll the inactivity timer.

        Blocks at most *max_wait* seconds, less if the timer is due sooner.
        Returns the number of raw events handled.
        """
        wait = max_wait
        remaining = self.context.scheduler.remaining()
        if remaining is not None:
            wait = min(wait, remaining)

        handled = 0
        if self.device_manager is not None:
            for device, event in self.device_manager.get_events(timeout=wait):
                self.event_manager.handle_raw_event(event, device.name)
                handled += 1
        self.context.scheduler.poll()
        return handled

    def run(self):
        """Blocking main event loop."""
        self._init_platform()
        self._wire_event_bus()

        count = self.device_manager.scan_devices()
        if count == 0:
            logger.warning("No input devices found (is the user in the 'input' group?)")

        self._running = True
        logger.info("dataentry started (headless=%s, %d devices)", self.headless, count)

        def _reload_handler(signum, frame):
            self.event_bus.emit(EventType.CONFIG_CHANGED)
        signal.signal(signal.SIGHUP, _reload_handler)

        if self.headless:
            self._run_evdev_loop()
        else:
            self._run_with_gui()

    def _run_evdev_loop(self):
        """Evdev event loop (blocking, main thread)."""
        try:
            while self._running:
                self.pump()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def _run_with_gui(self):
        """Qt event loop in the main thread; a QTimer pumps input and the timeout."""
        from PyQt5.QtCore import QTimer
        from PyQt5.QtWidgets import QApplication
        from dataentry.ui.entry_window import EntryWindow

        qt_app = QApplication.instance() or QApplication(sys.argv)

        window = EntryWindow(app=self, event_bus=self.event_bus, config=self.config)
        window.show()

        # APP_QUIT → exit Qt event loop
        def _on_quit(event):
            qt_app.quit()
        self.event_bus.subscribe(EventType.APP_QUIT, _on_quit)

        pump_timer = QTimer()
        pump_timer.timeout.connect(lambda: self.pump(max_wait=0))
        pump_timer.start(GUI_PUMP_MS)

        try:
            qt_app.exec_()
        finally:
            pump_timer.stop()
            window.cleanup()
            self.stop()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def stop(self):
        """Graceful shutdown — safe to call multiple times."""
        self._running = False
        teardown_context(self.context)
        if self.device_manager:
            try:
                self.device_manager.close()
            except OSError as exc:
                logger.warning("Closing input devices failed: %s", exc)
            self.device_manager = None
