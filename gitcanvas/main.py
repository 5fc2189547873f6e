#!/usr/bin/env python3
"""
gitcanvas - commit graph canvas with draggable, persistent layouts
"""

import argparse
import logging
import sys

import pygit2
from PySide6.QtWidgets import QApplication

from gitcanvas.config.settings import Settings
from gitcanvas.ui.main_window import MainWindow

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="gitcanvas",
        description="gitcanvas - commit graph canvas with persistent layouts",
    )
    parser.add_argument(
        "repos",
        nargs="*",
        help="Repositories to open on startup (default: the current directory, if it is one)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (DEBUG, INFO, WARNING, ...)",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    args = parse_args()
    settings = Settings()
    setup_logging(args.log_level or settings.get_log_level())

    app = QApplication(sys.argv)
    app.setApplicationName("gitcanvas")
    app.setOrganizationName("gitcanvas")

    repos = args.repos
    if not repos and pygit2.discover_repository(".") is not None:
        repos = ["."]

    window = MainWindow(settings, initial_repos=repos)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
