"""ConfigDialog — settings window."""

from __future__ import annotations

from PyQt5.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QCheckBox, QSpinBox, QDoubleSpinBox, QComboBox, QLineEdit,
    QPushButton, QDialogButtonBox, QMessageBox,
)

from dataentry.config import (
    AFTER_CHOICES,
    COPY_DATA_CHOICES,
    CRITERIA_LOGIC_CHOICES,
    DEFAULT_CONFIG,
    LENGTH_MAX,
    LENGTH_MIN,
    TIMEOUT_MAX,
    TIMEOUT_MIN,
    validate_config,
)
from dataentry.core.events import EventType


class ConfigDialog(QDialog):
    """Settings dialog opened from the entry window.

    Displays the auto-enter and formatting options and saves via
    ConfigManager; the application re-reads the file on CONFIG_CHANGED.
    """

    def __init__(self, config=None, event_bus=None, parent=None):
        super().__init__(parent)
        self.config = config
        self.event_bus = event_bus

        self.setWindowTitle("Data Entry Settings")
        self.setMinimumWidth(420)

        self._build_ui()
        self._load_values()

    # -- UI construction ---------------------------------------------------

    def _length_spin(self) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(LENGTH_MIN, LENGTH_MAX)
        return spin

    def _choice_combo(self, choices) -> QComboBox:
        combo = QComboBox()
        combo.addItems(list(choices))
        return combo

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self._auto_raw_cb = QCheckBox("Automatic enter when raw length is reached")
        self._raw_len_spin = self._length_spin()
        form.addRow(self._auto_raw_cb, self._raw_len_spin)

        self._auto_fmt_cb = QCheckBox("Automatic enter when formatted length is reached")
        self._fmt_len_spin = self._length_spin()
        form.addRow(self._auto_fmt_cb, self._fmt_len_spin)

        self._auto_regex_cb = QCheckBox("Automatic enter when regular expression matches")
        self._regex_edit = QLineEdit()
        form.addRow(self._auto_regex_cb, self._regex_edit)

        self._auto_time_cb = QCheckBox("Automatic enter after inactivity timeout (s)")
        self._timeout_spin = QDoubleSpinBox()
        self._timeout_spin.setRange(TIMEOUT_MIN, TIMEOUT_MAX)
        self._timeout_spin.setSingleStep(0.1)
        self._timeout_spin.setDecimals(1)
        form.addRow(self._auto_time_cb, self._timeout_spin)

        self._logic_combo = self._choice_combo(CRITERIA_LOGIC_CHOICES)
        form.addRow("Enter criteria:", self._logic_combo)

        self._copy_combo = self._choice_combo(COPY_DATA_CHOICES)
        form.addRow("When entering, copy:", self._copy_combo)

        self._after_combo = self._choice_combo(AFTER_CHOICES)
        form.addRow("After entering:", self._after_combo)

        self._format_edit = QLineEdit()
        form.addRow("Format:", self._format_edit)

        self._max_len_spin = self._length_spin()
        form.addRow("Maximum entry length:", self._max_len_spin)

        self._cursor_edit = QLineEdit()
        self._cursor_edit.setMaxLength(1)
        form.addRow("Cursor character:", self._cursor_edit)

        layout.addLayout(form)

        # Buttons
        btn_layout = QHBoxLayout()

        reset_btn = QPushButton("Reset defaults")
        reset_btn.clicked.connect(self._reset_defaults)
        btn_layout.addWidget(reset_btn)

        btn_layout.addStretch()

        button_box = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        btn_layout.addWidget(button_box)

        layout.addLayout(btn_layout)

    # -- value management --------------------------------------------------

    def _show(self, cfg: dict) -> None:
        self._auto_raw_cb.setChecked(cfg['auto_length_raw'])
        self._raw_len_spin.setValue(int(cfg['enter_length_raw']))
        self._auto_fmt_cb.setChecked(cfg['auto_length_formatted'])
        self._fmt_len_spin.setValue(int(cfg['enter_length_formatted']))
        self._auto_regex_cb.setChecked(cfg['auto_regex'])
        self._regex_edit.setText(cfg['enter_regex'])
        self._auto_time_cb.setChecked(cfg['auto_time'])
        self._timeout_spin.setValue(float(cfg['timeout']))
        self._logic_combo.setCurrentText(cfg['criteria_logic'])
        self._copy_combo.setCurrentText(cfg['copy_data'])
        self._after_combo.setCurrentText(cfg['after'])
        self._format_edit.setText(cfg['format'])
        self._max_len_spin.setValue(int(cfg['max_length']))
        self._cursor_edit.setText(cfg['cursor'])

    def _collect(self) -> dict:
        return {
            'auto_length_raw': self._auto_raw_cb.isChecked(),
            'enter_length_raw': self._raw_len_spin.value(),
            'auto_length_formatted': self._auto_fmt_cb.isChecked(),
            'enter_length_formatted': self._fmt_len_spin.value(),
            'auto_regex': self._auto_regex_cb.isChecked(),
            'enter_regex': self._regex_edit.text(),
            'auto_time': self._auto_time_cb.isChecked(),
            'timeout': self._timeout_spin.value(),
            'criteria_logic': self._logic_combo.currentText(),
            'copy_data': self._copy_combo.currentText(),
            'after': self._after_combo.currentText(),
            'format': self._format_edit.text(),
            'max_length': self._max_len_spin.value(),
            'cursor': self._cursor_edit.text(),
        }

    def _load_values(self) -> None:
        """Load current config values into widgets."""
        if self.config is None:
            return
        self._show(self.config.get_all())

    def _apply_values(self) -> bool:
        """Validate widget values, write them to ConfigManager and save."""
        if self.config is None:
            return True
        values = self._collect()
        try:
            validate_config({**self.config.get_all(), **values})
        except ValueError as exc:
            QMessageBox.warning(self, "Invalid settings", str(exc))
            return False
        self.config.update(values)
        return self.config.save()

    def _reset_defaults(self) -> None:
        """Reset widgets to DEFAULT_CONFIG values."""
        self._show(DEFAULT_CONFIG)

    # -- QDialog overrides -------------------------------------------------

    def accept(self) -> None:
        """Save config and publish CONFIG_CHANGED event."""
        if not self._apply_values():
            return
        if self.event_bus is not None:
            self.event_bus.emit(EventType.CONFIG_CHANGED)
        super().accept()
