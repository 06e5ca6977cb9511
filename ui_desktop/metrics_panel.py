"""Side panel listing score and runtime metrics."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pyqtgraph as pg
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget


class MetricsPanel(QWidget):
    """Displays latest HUD values, metrics and a score plot; supports CSV export."""

    def __init__(self) -> None:
        super().__init__()
        self._latest: dict[str, float] = {}
        layout = QVBoxLayout(self)
        self.hud_label = QLabel("Waiting for first frame")
        self.label = QLabel("No metrics yet")
        layout.addWidget(self.hud_label)
        layout.addWidget(self.label)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setLabel("left", "score")
        self.plot_widget.setMinimumHeight(140)
        self._score_curve = self.plot_widget.plot(pen=pg.mkPen("#D2691E", width=2))
        layout.addWidget(self.plot_widget)
        layout.addStretch(1)

    def update_metrics(self, metrics: dict[str, float], hud: dict[str, Any] | None = None) -> None:
        self._latest = dict(metrics)
        if hud:
            power = f"{hud.get('power_time_remaining', 0)}s" if hud.get("power_active") else "off"
            self.hud_label.setText(
                f"Score: {hud.get('score', 0)}\nHigh score: {hud.get('high_score', 0)}\nPower: {power}"
            )
        lines = [f"{k}: {v:g}" for k, v in sorted(metrics.items())]
        self.label.setText("\n".join(lines) if lines else "No metrics yet")

    def set_score_history(self, scores: list[int]) -> None:
        self._score_curve.setData(list(range(len(scores))), [float(score) for score in scores])

    def plotted_points(self) -> int:
        x_data, _ = self._score_curve.getData()
        return 0 if x_data is None else len(x_data)

    def export_csv(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        lines = ["metric,value"] + [f"{k},{v}" for k, v in sorted(self._latest.items())]
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
