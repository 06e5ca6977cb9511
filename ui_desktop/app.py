"""Desktop app bootstrap for the idle chase viewer."""

from __future__ import annotations

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from core.simulator import Simulator
from ui_desktop.main_window import MainWindow
from ui_desktop.models.render_state_model import RenderStateModel


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="idle-chase-desktop")
    parser.add_argument("--config", default="configs/idle_chase.yaml", help="Session config path")
    parser.add_argument("--log-level", default=None, help="Overrides logging.log_level from the config")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    simulator = Simulator(args.config)
    level = (args.log_level or simulator.logging_config["log_level"]).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QApplication.instance() or QApplication(sys.argv)
    window = MainWindow(simulator=simulator, model=RenderStateModel())
    window.show()
    return int(app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
