#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import os

from ui.main_window import MainWindow

from services.app_service import AppService
from services.notifier import SoundNotifier
from storage.db import Database

DEFAULT_DB_PATH = "pomodoro.db"
TRUTHY = ("1", "true", "yes", "on")


def main():
    level = os.environ.get("POMODORO_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = Database(db_path=os.environ.get("POMODORO_DB", DEFAULT_DB_PATH))
    db.init_schema()

    prefers_dark = os.environ.get("POMODORO_DARK_MODE", "").strip().lower() in TRUTHY
    app = AppService(db, notifier=SoundNotifier(), prefers_dark=prefers_dark)

    try:
        MainWindow(app).run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
