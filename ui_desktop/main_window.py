"""Desktop viewer main window driving a local simulator."""

from __future__ import annotations

import time
from typing import Any

from PySide6.QtCore import QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QHBoxLayout, QMainWindow, QWidget

from core.simulator import Simulator
from streaming.state_serializer import to_payload
from ui_desktop.metrics_panel import MetricsPanel
from ui_desktop.models.render_state_model import RenderStateModel
from ui_desktop.render_viewport import RenderViewport


class MainWindow(QMainWindow):
    """Viewport | metrics. A QTimer feeds wall-clock time to the simulator."""

    def __init__(self, simulator: Simulator, model: RenderStateModel, frame_ms: int = 16) -> None:
        super().__init__()
        self.simulator = simulator
        self.model = model
        self.setWindowTitle("Idle Chase")
        self.resize(900, 700)

        self.viewport = RenderViewport(on_trigger=self.simulator.handle_input)
        self.metrics = MetricsPanel()

        center = QWidget()
        root = QHBoxLayout(center)
        root.addWidget(self.viewport, stretch=8)
        root.addWidget(self.metrics, stretch=2)
        self.setCentralWidget(center)

        self.model.subscribe(self._on_model_update)
        self.simulator.event_bus.subscribe("render_state", self._on_render_state)
        self.simulator.event_bus.subscribe("exit", self._on_exit)
        self.simulator.start()

        self._last_tick = time.monotonic()
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._advance)
        self._timer.start(max(1, int(frame_ms)))

    def _advance(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_tick
        self._last_tick = now
        self.simulator.run_for(elapsed)

    def _on_render_state(self, state: Any) -> None:
        self.model.update_state(to_payload(state))

    def _on_model_update(self, state: dict[str, Any]) -> None:
        self.viewport.set_render_state(state)
        self.metrics.update_metrics(state.get("metrics", {}), state.get("hud"))
        self.metrics.set_score_history(self.model.score_history())

    def _on_exit(self, _payload: Any) -> None:
        self.close()

    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        self._timer.stop()
        self.simulator.close()
        super().closeEvent(event)
