"""Fractal controls: iteration, mode, color and view buttons.

Every button emits command_requested with the same command names the
canvas uses for its keyboard shortcuts, so the view has a single dispatch
path for both.
"""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QPushButton, QGroupBox,
)

from escape_time import FractalMode


# Command names
CMD_MORE_ITERATIONS = "more_iterations"
CMD_FEWER_ITERATIONS = "fewer_iterations"
CMD_LOW_ITERATIONS = "low_iterations"
CMD_TOGGLE_MODE = "toggle_mode"
CMD_CYCLE_COLOR = "cycle_color"
CMD_RESET = "reset"
CMD_TOGGLE_INFO = "toggle_info"
CMD_QUIT = "quit"

SHORTCUT_HELP = (
    "Left drag: zoom in    Right drag: zoom out\n"
    "Q / A: more / fewer iterations    L: 5 iterations\n"
    "J: Julia mode    C: cycle colors    R: reset\n"
    "I: info overlay    Esc: cancel / quit"
)


class FractalControls(QWidget):
    """Control panel for the explorer."""

    command_requested = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)

        # --- Iterations ---
        iter_group = QGroupBox("Iterations")
        iter_layout = QGridLayout()
        iter_group.setLayout(iter_layout)

        self.iterations_label = QLabel()
        iter_layout.addWidget(QLabel("Max iterations:"), 0, 0)
        iter_layout.addWidget(self.iterations_label, 0, 1)

        iter_row = QHBoxLayout()
        self.more_btn = self._make_button("More (Q)", CMD_MORE_ITERATIONS)
        self.fewer_btn = self._make_button("Fewer (A)", CMD_FEWER_ITERATIONS)
        self.low_btn = self._make_button("Low (L)", CMD_LOW_ITERATIONS)
        iter_row.addWidget(self.more_btn)
        iter_row.addWidget(self.fewer_btn)
        iter_row.addWidget(self.low_btn)
        iter_layout.addLayout(iter_row, 1, 0, 1, 2)

        main_layout.addWidget(iter_group)

        # --- Rendering ---
        render_group = QGroupBox("Rendering")
        render_layout = QGridLayout()
        render_group.setLayout(render_layout)

        render_layout.addWidget(QLabel("Mode:"), 0, 0)
        self.mode_label = QLabel()
        render_layout.addWidget(self.mode_label, 0, 1)
        self.mode_btn = self._make_button("Toggle Julia (J)", CMD_TOGGLE_MODE)
        render_layout.addWidget(self.mode_btn, 0, 2)

        render_layout.addWidget(QLabel("Color:"), 1, 0)
        self.color_label = QLabel()
        render_layout.addWidget(self.color_label, 1, 1)
        self.color_btn = self._make_button("Cycle (C)", CMD_CYCLE_COLOR)
        render_layout.addWidget(self.color_btn, 1, 2)

        main_layout.addWidget(render_group)

        # --- View ---
        view_group = QGroupBox("View")
        view_layout = QHBoxLayout()
        view_group.setLayout(view_layout)

        self.reset_btn = self._make_button("Reset (R)", CMD_RESET)
        self.info_btn = self._make_button("Info (I)", CMD_TOGGLE_INFO)
        self.info_btn.setCheckable(True)
        view_layout.addWidget(self.reset_btn)
        view_layout.addWidget(self.info_btn)

        main_layout.addWidget(view_group)

        self.hint_label = QLabel(SHORTCUT_HELP)
        self.hint_label.setStyleSheet(
            "color: #888; font-style: italic; font-size: 11px;"
        )
        main_layout.addWidget(self.hint_label)
        main_layout.addStretch()

    def _make_button(self, text, command):
        button = QPushButton(text)
        # Keep keyboard focus on the canvas so shortcuts keep working
        button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        button.clicked.connect(lambda _checked=False: self.command_requested.emit(command))
        return button

    # -- Public accessors --

    def update_state(self, state) -> None:
        """Refresh the labels from a RenderState snapshot."""
        self.iterations_label.setText(str(state.max_iterations))
        self.color_label.setText(state.color_algorithm.value)
        if state.mode is FractalMode.JULIA:
            self.mode_label.setText("Julia")
            self.mode_btn.setText("Mandelbrot (J)")
        else:
            self.mode_label.setText("Mandelbrot")
            self.mode_btn.setText("Toggle Julia (J)")

    def set_info_checked(self, checked: bool) -> None:
        self.info_btn.setChecked(checked)
