# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import copy
import json
import logging
import sqlite3
from dataclasses import asdict, replace
from typing import Any, List, Optional

from domain.models import SessionLog, Settings, Task, TimerState, UiState
from storage.db import Database

logger = logging.getLogger(__name__)

KEY_TASKS = "tm_tasks"
KEY_SESSIONS = "tm_sessions"
KEY_SETTINGS = "tm_settings"
KEY_TIMER = "tm_timer_state"
KEY_UI = "tm_ui_state"


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()


class JsonStore:
    """
    Best-effort JSON documents on top of app_state.
    Never raises: a failed load returns the default, a failed save is logged.
    """

    def __init__(self, state: AppStateRepo):
        self.state = state

    def load(self, key: str, default: Any) -> Any:
        try:
            raw = self.state.get(key)
            if not raw:
                return copy.deepcopy(default)
            return json.loads(raw)
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.warning("could not load %s, using default: %s", key, e)
            return copy.deepcopy(default)

    def save(self, key: str, value: Any) -> None:
        try:
            self.state.set(key, json.dumps(value))
        except (sqlite3.Error, ValueError, TypeError) as e:
            logger.warning("could not save %s: %s", key, e)


class TaskRepo:
    def __init__(self, store: JsonStore):
        self.store = store

    def list(self) -> List[Task]:
        raw = self.store.load(KEY_TASKS, [])
        if not isinstance(raw, list):
            return []
        out: List[Task] = []
        for item in raw:
            try:
                out.append(Task.from_dict(item))
            except (TypeError, AttributeError):
                logger.warning("skipping malformed task record: %r", item)
        return out

    def get(self, task_id: str) -> Optional[Task]:
        for t in self.list():
            if t.id == task_id:
                return t
        return None

    def save_all(self, tasks: List[Task]) -> None:
        self.store.save(KEY_TASKS, [asdict(t) for t in tasks])


class SessionRepo:
    def __init__(self, store: JsonStore):
        self.store = store

    def list(self) -> List[SessionLog]:
        raw = self.store.load(KEY_SESSIONS, [])
        if not isinstance(raw, list):
            return []
        out: List[SessionLog] = []
        for item in raw:
            try:
                out.append(SessionLog.from_dict(item))
            except (TypeError, AttributeError):
                logger.warning("skipping malformed session record: %r", item)
        return out

    def append(self, entry: SessionLog) -> None:
        # newest first
        logs = [entry] + self.list()
        self.store.save(KEY_SESSIONS, [asdict(s) for s in logs])


class _SliceRepo:
    key = ""
    model: Any = None

    def __init__(self, store: JsonStore, default=None):
        self.store = store
        # used when nothing usable is stored yet
        self.default = default if default is not None else self.model()

    def get(self):
        raw = self.store.load(self.key, None)
        if raw is None:
            return replace(self.default)
        try:
            return self.model.from_dict(raw)
        except (TypeError, AttributeError):
            logger.warning("malformed %s, using defaults", self.key)
            return replace(self.default)

    def save(self, value) -> None:
        self.store.save(self.key, asdict(value))


class SettingsRepo(_SliceRepo):
    key = KEY_SETTINGS
    model = Settings


class TimerRepo(_SliceRepo):
    key = KEY_TIMER
    model = TimerState


class UiRepo(_SliceRepo):
    key = KEY_UI
    model = UiState
