"""EntryWindow — shows the entry state and an on-screen keypad."""

from __future__ import annotations

import logging

from PyQt5.QtCore import Qt, pyqtSignal, pyqtSlot
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QGridLayout, QGroupBox, QHBoxLayout, QLabel, QPushButton,
    QVBoxLayout, QWidget,
)

from dataentry.core.events import Event, EventType
from dataentry.input import key_mapper as km

logger = logging.getLogger(__name__)

# (label, control id, row, column); control ids are evdev keycodes
KEYPAD_LAYOUT = [
    ("7", km.KEY_KP7, 0, 0), ("8", km.KEY_KP8, 0, 1), ("9", km.KEY_KP9, 0, 2), ("⌫", km.KEY_BACKSPACE, 0, 3),
    ("4", km.KEY_KP4, 1, 0), ("5", km.KEY_KP5, 1, 1), ("6", km.KEY_KP6, 1, 2), ("C", km.KEY_ESC, 1, 3),
    ("1", km.KEY_KP1, 2, 0), ("2", km.KEY_KP2, 2, 1), ("3", km.KEY_KP3, 2, 2), ("◀", km.KEY_LEFT, 2, 3),
    ("0", km.KEY_KP0, 3, 0), (".", km.KEY_KPDOT, 3, 1), ("↵", km.KEY_KPENTER, 3, 2), ("▶", km.KEY_RIGHT, 3, 3),
]

MODIFIER_NAMES = ("Shift", "Ctrl", "Alt")


class EntryWindow(QWidget):
    """Renders :class:`~dataentry.core.state.EntrySnapshot` values.

    Bus handlers only emit a Qt signal; widgets are refreshed in the GUI
    thread.
    """

    _refresh_signal = pyqtSignal()

    def __init__(self, app=None, event_bus=None, config=None, parent=None):
        super().__init__(parent)
        self._app = app
        self._event_bus = event_bus
        self._config = config
        self._dialog = None

        self.setWindowTitle("Data Entry")
        self.setMinimumWidth(320)

        self._build_ui()
        self._refresh_signal.connect(self._refresh)
        self._subscribe_events()
        self._refresh()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        mono = QFont("Monospace")
        mono.setStyleHint(QFont.TypeWriter)
        mono.setPointSize(16)

        self._cursor_label = QLabel()
        self._cursor_label.setFont(mono)
        self._cursor_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(self._cursor_label)

        self._formatted_label = QLabel()
        layout.addWidget(self._formatted_label)

        history = QGroupBox("History")
        history_layout = QVBoxLayout(history)
        self._last_label = QLabel()
        self._second_last_label = QLabel()
        self._counter_label = QLabel()
        for label in (self._last_label, self._second_last_label, self._counter_label):
            label.setTextInteractionFlags(Qt.TextSelectableByMouse)
            history_layout.addWidget(label)
        layout.addWidget(history)

        # entries are user data, never markup
        for label in self._value_labels():
            label.setTextFormat(Qt.PlainText)

        mods = QHBoxLayout()
        self._modifier_buttons = []
        for slot, name in enumerate(MODIFIER_NAMES):
            btn = QPushButton(name)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, s=slot: self._toggle_modifier(s))
            mods.addWidget(btn)
            self._modifier_buttons.append(btn)
        layout.addLayout(mods)

        grid = QGridLayout()
        self._keypad_buttons = []
        for label, code, row, col in KEYPAD_LAYOUT:
            btn = QPushButton(label)
            btn.setMinimumHeight(40)
            btn.clicked.connect(lambda _checked, c=code: self._press(c))
            grid.addWidget(btn, row, col)
            self._keypad_buttons.append(btn)
        layout.addLayout(grid)

        bottom = QHBoxLayout()
        settings_btn = QPushButton("Settings…")
        settings_btn.clicked.connect(self._open_settings)
        bottom.addWidget(settings_btn)
        bottom.addStretch()
        quit_btn = QPushButton("Quit")
        quit_btn.clicked.connect(self._quit)
        bottom.addWidget(quit_btn)
        layout.addLayout(bottom)

    def _value_labels(self):
        return (self._cursor_label, self._formatted_label,
                self._last_label, self._second_last_label)

    # ------------------------------------------------------------------
    # EventBus
    # ------------------------------------------------------------------

    _EVENTS = (EventType.ENTRY_CHANGED, EventType.ENTRY_COMMITTED, EventType.MODIFIER_CHANGED)

    def _subscribe_events(self) -> None:
        if self._event_bus is None:
            return
        for evt in self._EVENTS:
            self._event_bus.subscribe(evt, self._on_event)

    def _unsubscribe_events(self) -> None:
        if self._event_bus is None:
            return
        for evt in self._EVENTS:
            self._event_bus.unsubscribe(evt, self._on_event)

    def _on_event(self, event: Event) -> None:
        self._refresh_signal.emit()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _press(self, control_id: int) -> None:
        if self._app is not None:
            self._app.press(control_id)

    def _toggle_modifier(self, slot: int) -> None:
        if self._app is not None:
            self._app.press(("ui-modifier", slot), modifier_slot=slot)

    def _open_settings(self) -> None:
        from dataentry.ui.config_dialog import ConfigDialog

        if self._dialog is None:
            self._dialog = ConfigDialog(config=self._config, event_bus=self._event_bus, parent=self)
        self._dialog.show()

    def _quit(self) -> None:
        if self._event_bus is not None:
            self._event_bus.emit(EventType.APP_QUIT)

    # ------------------------------------------------------------------
    # Refresh (GUI thread)
    # ------------------------------------------------------------------

    @pyqtSlot()
    def _refresh(self) -> None:
        if self._app is None:
            return
        snap = self._app.snapshot()
        self._cursor_label.setText(snap.cursor)
        self._formatted_label.setText(f"Formatted: {snap.formatted}")
        self._last_label.setText(f"Last: {snap.last}  ({snap.last_length})")
        self._second_last_label.setText(f"Second last: {snap.second_last}")
        self._counter_label.setText(f"Entries: {snap.counter}")

        modifiers = self._app.context.modifiers
        for slot, btn in enumerate(self._modifier_buttons):
            state = modifiers[slot]
            btn.setChecked(state.effective)
            btn.setText(MODIFIER_NAMES[slot] + (" ¹" if state.onetime else ""))

    def cleanup(self) -> None:
        """Unsubscribe from the bus before the window goes away."""
        self._unsubscribe_events()

    def closeEvent(self, event) -> None:
        self._quit()
        super().closeEvent(event)
