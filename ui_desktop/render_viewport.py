"""Painter-based arena viewport for the idle chase screen."""

from __future__ import annotations

import math
from typing import Any, Callable

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QKeyEvent, QMouseEvent, QPainter
from PySide6.QtWidgets import QWidget

TRIGGER_KEYS = (Qt.Key.Key_Space, Qt.Key.Key_Return, Qt.Key.Key_Enter)

BACKGROUND = QColor(255, 248, 231)
SEEKER_COLOR = QColor("#FFD700")
SCARED_COLOR = QColor("#3B82F6")
SPECIAL_COLOR = QColor("#FF1493")
TARGET_COLOR = QColor("#D2691E")


class RenderViewport(QWidget):
    """Paints one frame scaled to the widget and forwards tap/key triggers."""

    def __init__(self, on_trigger: Callable[[str], None] | None = None) -> None:
        super().__init__()
        self.on_trigger = on_trigger
        self._state: dict[str, Any] = {}
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(480, 480)

    def set_render_state(self, state: dict[str, Any]) -> None:
        self._state = state
        self.update()

    def _trigger(self, action: str) -> None:
        if self.on_trigger is not None:
            self.on_trigger(action)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._trigger("tap")
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        if event.key() in TRIGGER_KEYS:
            self._trigger("key")
            event.accept()
            return
        super().keyPressEvent(event)

    def _scale(self) -> float:
        size = float(self._state.get("environment", {}).get("size", 100.0)) or 100.0
        return min(self.width(), self.height()) / size

    def paintEvent(self, _event: Any) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), BACKGROUND)
        s = self._scale()
        env = self._state.get("environment", {})

        painter.setPen(Qt.PenStyle.NoPen)
        for obstacle in env.get("obstacles", []):
            painter.setBrush(QColor(obstacle.get("color", "#B45309")))
            painter.drawRoundedRect(
                QRectF(obstacle["x"] * s, obstacle["y"] * s, obstacle["width"] * s, obstacle["height"] * s),
                2.0,
                2.0,
            )

        for target in env.get("resources", []):
            x, y = target["position"]
            special = bool(target.get("is_special"))
            painter.setBrush(SPECIAL_COLOR if special else TARGET_COLOR)
            radius = (2.5 if special else 1.8) * s
            painter.drawEllipse(QPointF(x * s, y * s), radius, radius)

        metadata = env.get("metadata", {})
        for agent in self._state.get("agents", []):
            x, y = agent["position"]
            if agent.get("kind") == "seeker":
                self._paint_seeker(painter, agent, bool(metadata.get("mouth_open", True)), s)
                continue
            painter.setBrush(SCARED_COLOR if agent.get("scared") else QColor(agent.get("color") or "#FF69B4"))
            painter.drawEllipse(QPointF(x * s, y * s), 2.5 * s, 2.5 * s)

        for particle in env.get("effects", []):
            x, y = particle["position"]
            color = QColor(particle.get("color", "#FFD700"))
            color.setAlphaF(max(0.0, min(1.0, float(particle.get("life", 1.0)))))
            painter.setBrush(color)
            painter.drawEllipse(QPointF(x * s, y * s), 0.6 * s, 0.6 * s)

        self._paint_hud(painter, self._state.get("hud", {}))
        painter.end()

    def _paint_seeker(self, painter: QPainter, agent: dict[str, Any], mouth_open: bool, s: float) -> None:
        x, y = agent["position"]
        dx, dy = agent.get("direction") or (1.0, 0.0)
        heading = -math.degrees(math.atan2(dy, dx))
        mouth = 30.0 if mouth_open else 5.0
        radius = 3.0 * s
        painter.setBrush(SEEKER_COLOR)
        painter.drawPie(
            QRectF(x * s - radius, y * s - radius, radius * 2, radius * 2),
            int((heading + mouth) * 16),
            int((360.0 - 2 * mouth) * 16),
        )

    def _paint_hud(self, painter: QPainter, hud: dict[str, Any]) -> None:
        painter.setPen(QColor(60, 40, 20))
        painter.setFont(QFont("Sans", 12, QFont.Weight.Bold))
        painter.drawText(12, 22, f"Score {hud.get('score', 0)}")
        painter.drawText(12, 42, f"Best {hud.get('high_score', 0)}")
        if hud.get("power_active"):
            painter.setPen(SCARED_COLOR)
            painter.drawText(12, 62, f"Power {hud.get('power_time_remaining', 0)}s")

        message = hud.get("message")
        if message:
            painter.setPen(QColor(120, 60, 20))
            painter.setFont(QFont("Sans", 18, QFont.Weight.Bold))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, str(message.get("text", "")))

        if hud.get("phase") == "title":
            painter.fillRect(self.rect(), QColor(0, 0, 0, 150))
            painter.setPen(QColor(255, 255, 255))
            painter.setFont(QFont("Sans", 20, QFont.Weight.Bold))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Tap anywhere to start")
