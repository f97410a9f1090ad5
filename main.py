"""
main.py

DotSight - Crosshair Overlay

PyQt6 application that draws a click-through crosshair over a game window
or the screen centre, with:
- Built-in crosshair types (Classic, Dot, Cross, TShape)
- A vector editor for custom designs
- Named profiles persisted as JSON

Usage:
    python main.py

Dependencies:
    pip install PyQt6 platformdirs tomli-w   (plus pywin32 on Windows)
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from editor.dialog import CrosshairEditorDialog
from errors import PersistenceError, ValidationError
from models import (
    CENTER_ON_SCREEN,
    COLOR_PALETTE,
    DEFAULT_PROFILE_NAME,
    CrosshairProfile,
    CrosshairType,
    ProfileRecord,
)
from overlay.targets import TargetRectProvider, list_window_titles
from overlay.window import OverlayWindow
from profiles import CrosshairLibrary, JsonProfileStore, ProfileStore
from settings import SettingsManager, get_settings
from debug_trace import configure_logging, trace, trace_exception, close_log

log = logging.getLogger(__name__)

APP_TITLE = "DotSight"

THICKNESS_RANGE = (0.5, 10.0)
SIZE_RANGE = (2, 100)


class MainWindow(QMainWindow):
    """Control panel: overlay settings, target selection and profiles.

    Args:
        settings_manager: Application settings (tick interval, overlay size).
        store: Profile store; owned by the caller.
        library: Custom crosshair design library used by the editor.
        target_provider: Resolves the target selector each tick.
        overlay: Overlay window to drive. Created when omitted.
    """

    def __init__(
        self,
        settings_manager: SettingsManager,
        store: ProfileStore,
        library: CrosshairLibrary,
        target_provider: Optional[TargetRectProvider] = None,
        overlay: Optional[OverlayWindow] = None,
    ):
        super().__init__()
        self.settings_manager = settings_manager
        self.store = store
        self.library = library
        self.target_provider = target_provider or TargetRectProvider()
        self.overlay = overlay or OverlayWindow()
        self.setWindowTitle(APP_TITLE)

        self.current_profile_name = DEFAULT_PROFILE_NAME
        self._custom: Optional[CrosshairProfile] = None
        self._editor: Optional[CrosshairEditorDialog] = None
        self._applying = False

        self._build_ui()
        self._connect_signals()

        self.refresh_profiles()
        self.switch_profile(self.store.get_last_used())

        # Tick: re-query the target and place the overlay
        self.timer = QTimer(self)
        self.timer.setInterval(settings_manager.settings.overlay.tick_interval_ms)
        self.timer.timeout.connect(self.tick)
        self.timer.start()

    # ---- UI ----

    def _build_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)

        # Crosshair group
        cross_box = QGroupBox("Crosshair")
        form = QFormLayout(cross_box)

        self.enabled_check = QCheckBox("Show crosshair")
        form.addRow(self.enabled_check)

        target_row = QHBoxLayout()
        self.target_combo = QComboBox()
        self.target_combo.setEditable(True)
        self.target_combo.setInsertPolicy(QComboBox.InsertPolicy.NoInsert)
        self.target_combo.setToolTip("Window title (or part of it) to centre on")
        self.refresh_targets_btn = QPushButton("Refresh")
        target_row.addWidget(self.target_combo, 1)
        target_row.addWidget(self.refresh_targets_btn)
        form.addRow("Target:", target_row)

        self.type_combo = QComboBox()
        self.type_combo.addItems(list(CrosshairType.ALL))
        form.addRow("Type:", self.type_combo)

        self.color_combo = QComboBox()
        self.color_combo.addItems(list(COLOR_PALETTE))
        form.addRow("Color:", self.color_combo)

        self.thickness_spin = QDoubleSpinBox()
        self.thickness_spin.setRange(*THICKNESS_RANGE)
        self.thickness_spin.setSingleStep(0.5)
        self.thickness_spin.setDecimals(1)
        form.addRow("Thickness:", self.thickness_spin)

        size_row = QHBoxLayout()
        self.size_slider = QSlider(Qt.Orientation.Horizontal)
        self.size_slider.setRange(*SIZE_RANGE)
        self.size_value_label = QLabel()
        self.size_value_label.setMinimumWidth(30)
        size_row.addWidget(self.size_slider, 1)
        size_row.addWidget(self.size_value_label)
        form.addRow("Size:", size_row)

        self.editor_btn = QPushButton("Open Crosshair Editor...")
        form.addRow(self.editor_btn)
        layout.addWidget(cross_box)

        # Profile group
        prof_box = QGroupBox("Profiles")
        prof_layout = QVBoxLayout(prof_box)
        self.profile_combo = QComboBox()
        prof_layout.addWidget(self.profile_combo)
        btn_row = QHBoxLayout()
        self.new_btn = QPushButton("New...")
        self.save_btn = QPushButton("Save")
        self.reload_btn = QPushButton("Reload")
        self.delete_btn = QPushButton("Delete")
        for b in (self.new_btn, self.save_btn, self.reload_btn, self.delete_btn):
            btn_row.addWidget(b)
        prof_layout.addLayout(btn_row)
        layout.addWidget(prof_box)
        layout.addStretch(1)

        self.setCentralWidget(central)
        self.refresh_targets()

    def _connect_signals(self):
        self.enabled_check.toggled.connect(lambda _: self.tick())
        self.refresh_targets_btn.clicked.connect(self.refresh_targets)
        self.type_combo.currentTextChanged.connect(self._on_type_changed)
        self.color_combo.currentTextChanged.connect(lambda _: self.push_render_state())
        self.thickness_spin.valueChanged.connect(lambda _: self.push_render_state())
        self.size_slider.valueChanged.connect(self._on_size_changed)
        self.editor_btn.clicked.connect(self.open_editor)

        self.profile_combo.currentTextChanged.connect(self._on_profile_selected)
        self.new_btn.clicked.connect(self._on_new_clicked)
        self.save_btn.clicked.connect(self.save_profile)
        self.reload_btn.clicked.connect(self.reload_profile)
        self.delete_btn.clicked.connect(self._on_delete_clicked)

    def refresh_targets(self):
        """Repopulate the target list, keeping the current text."""
        current = self.target_combo.currentText() or CENTER_ON_SCREEN
        self.target_combo.blockSignals(True)
        self.target_combo.clear()
        self.target_combo.addItem(CENTER_ON_SCREEN)
        for title in list_window_titles():
            if title != self.windowTitle():
                self.target_combo.addItem(title)
        self.target_combo.setCurrentText(current)
        self.target_combo.blockSignals(False)

    def refresh_profiles(self):
        self.profile_combo.blockSignals(True)
        self.profile_combo.clear()
        self.profile_combo.addItems(self.store.list())
        self.profile_combo.setCurrentText(self.current_profile_name)
        self.profile_combo.blockSignals(False)

    # ---- record <-> controls ----

    def current_record(self) -> ProfileRecord:
        """Build a ProfileRecord from the controls."""
        crosshair_type = self.type_combo.currentText()
        return ProfileRecord(
            name=self.current_profile_name,
            crosshair_enabled=self.enabled_check.isChecked(),
            selected_game_window=self.target_combo.currentText().strip() or CENTER_ON_SCREEN,
            selected_color=self.color_combo.currentText(),
            crosshair_thickness=self.thickness_spin.value(),
            crosshair_size=float(self.size_slider.value()),
            crosshair_type=crosshair_type,
            custom_crosshair=self._custom,
        )

    def apply_record(self, record: ProfileRecord) -> None:
        """Load a record into the controls and the overlay in one step."""
        self._applying = True
        try:
            self.current_profile_name = record.name
            self._custom = record.custom_crosshair
            self.enabled_check.setChecked(record.crosshair_enabled)
            self.target_combo.setCurrentText(record.selected_game_window)
            self.type_combo.setCurrentText(record.crosshair_type)
            self.color_combo.setCurrentText(record.selected_color)
            self.thickness_spin.setValue(record.crosshair_thickness)
            self.size_slider.setValue(int(round(record.crosshair_size)))
            self.size_value_label.setText(str(self.size_slider.value()))
        finally:
            self._applying = False
        self.push_render_state()
        self.tick()

    def push_render_state(self) -> None:
        """Send the full render state to the overlay in a single call."""
        if self._applying:
            return
        crosshair_type = self.type_combo.currentText()
        custom = self._custom if crosshair_type == CrosshairType.CUSTOM else None
        if crosshair_type == CrosshairType.CUSTOM and custom is None:
            crosshair_type = CrosshairType.CLASSIC
        self.overlay.apply_settings(
            self.color_combo.currentText(),
            self.thickness_spin.value(),
            float(self.size_slider.value()),
            crosshair_type,
            custom,
        )

    def _on_size_changed(self, value: int):
        self.size_value_label.setText(str(value))
        self.push_render_state()

    def _on_type_changed(self, crosshair_type: str):
        if self._applying:
            return
        if crosshair_type == CrosshairType.CUSTOM and self._custom is None:
            # Nothing to show yet; let the user draw one
            self.open_editor()
            return
        self.push_render_state()

    # ---- tick ----

    def tick(self) -> None:
        """Resolve the target and place (or hide) the overlay."""
        selector = self.target_combo.currentText().strip() or CENTER_ON_SCREEN
        rect = self.target_provider.query_target_rect(selector)
        self.overlay.place_at(rect, self.enabled_check.isChecked())

    # ---- editor ----

    def open_editor(self):
        if self._editor is not None:
            self._editor.raise_()
            self._editor.activateWindow()
            return
        self._editor = CrosshairEditorDialog(self.library, initial=self._custom, parent=self)
        self._editor.crosshair_applied.connect(self.on_crosshair_applied)
        self._editor.finished.connect(self._on_editor_finished)
        self._editor.show()

    def _on_editor_finished(self, _result):
        self._editor = None
        if self.type_combo.currentText() == CrosshairType.CUSTOM and self._custom is None:
            self.type_combo.setCurrentText(CrosshairType.CLASSIC)

    def on_crosshair_applied(self, profile: CrosshairProfile):
        """Switch the overlay to the design just applied in the editor."""
        self._custom = profile
        self._applying = True
        self.type_combo.setCurrentText(CrosshairType.CUSTOM)
        self._applying = False
        self.push_render_state()
        log.info("Applied custom crosshair %r", profile.name)

    # ---- profiles ----

    def switch_profile(self, name: str):
        record = self.store.load(name)
        self.apply_record(record)
        self.refresh_profiles()
        try:
            self.store.set_last_used(record.name)
        except PersistenceError as e:
            log.warning("Could not record last used profile: %s", e)

    def _on_profile_selected(self, name: str):
        if name and name != self.current_profile_name:
            self.switch_profile(name)

    def save_profile(self) -> bool:
        try:
            self.store.save(self.current_record())
        except ValidationError as e:
            QMessageBox.warning(self, APP_TITLE, str(e))
            return False
        except PersistenceError as e:
            QMessageBox.critical(self, APP_TITLE, str(e))
            return False
        self.statusBar().showMessage(f"Profile '{self.current_profile_name}' saved.", 3000)
        return True

    def create_profile(self, name: str) -> bool:
        """Save the current controls as a new profile called ``name``."""
        record = self.current_record()
        record.name = name.strip()
        try:
            self.store.create(record)
        except ValidationError as e:
            QMessageBox.warning(self, APP_TITLE, str(e))
            return False
        except PersistenceError as e:
            QMessageBox.critical(self, APP_TITLE, str(e))
            return False
        self.current_profile_name = record.name
        self.refresh_profiles()
        self.statusBar().showMessage(f"Profile '{record.name}' created.", 3000)
        return True

    def _on_new_clicked(self):
        name, ok = QInputDialog.getText(self, "New Profile", "Profile name:")
        if ok:
            self.create_profile(name)

    def reload_profile(self):
        self.apply_record(self.store.load(self.current_profile_name))
        self.statusBar().showMessage(f"Profile '{self.current_profile_name}' reloaded.", 3000)

    def delete_profile(self, name: str) -> bool:
        if name == DEFAULT_PROFILE_NAME:
            QMessageBox.warning(self, APP_TITLE, "Cannot delete the Default profile.")
            return False
        if not self.store.delete(name):
            return False
        if name == self.current_profile_name:
            self.switch_profile(DEFAULT_PROFILE_NAME)
        else:
            self.refresh_profiles()
        return True

    def _on_delete_clicked(self):
        name = self.profile_combo.currentText()
        if name != DEFAULT_PROFILE_NAME:
            answer = QMessageBox.question(
                self, "Confirm Delete", f"Are you sure you want to delete the '{name}' profile?"
            )
            if answer != QMessageBox.StandardButton.Yes:
                return
        self.delete_profile(name)

    def closeEvent(self, event):
        trace("MainWindow closing", "MAIN")
        self.timer.stop()
        self.overlay.close()
        super().closeEvent(event)


def _install_excepthook():
    """Log uncaught exceptions (including those raised inside Qt slots)."""
    def excepthook(exc_type, exc_value, exc_tb):
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        log.critical("Uncaught exception:\n%s",
                     "".join(traceback.format_exception(exc_type, exc_value, exc_tb)))
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook


def main():
    """Application entry point."""
    _install_excepthook()
    app = QApplication(sys.argv)
    app.setApplicationName(APP_TITLE)

    # Load settings (use singleton to ensure single instance)
    settings_manager = get_settings()
    settings_manager.ensure_file_complete()
    configure_logging(settings_manager.settings.general.log_level, settings_manager.get_log_dir())
    log.info("Starting %s, data dir %s", APP_TITLE, settings_manager.get_data_dir())

    data_dir = settings_manager.get_data_dir()
    store = JsonProfileStore(data_dir)
    library = CrosshairLibrary(data_dir)

    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager, store, library)
    w.show()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
