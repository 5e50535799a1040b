# -*- coding: utf-8 -*-

import logging
import time
from dataclasses import asdict
from typing import Callable, Optional

from domain.models import AppSnapshot, Settings, Task, UiState
from services.notifier import SoundNotifier
from services.settings_service import SettingsService
from services.stats_service import StatsService
from services.task_service import TaskService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import (
    AppStateRepo,
    JsonStore,
    SessionRepo,
    SettingsRepo,
    TaskRepo,
    TimerRepo,
    UiRepo,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AppService:
    """
    Single owner of the application state.
    The view calls the commands below and reads snapshot(); every write to the
    store goes through here, one call at a time.
    """

    def __init__(
        self,
        db: Database,
        notifier: Optional[SoundNotifier] = None,
        clock: Callable[[], int] = _now_ms,
        prefers_dark: bool = False,
    ):
        self.db = db
        store = JsonStore(AppStateRepo(db))

        self.task_repo = TaskRepo(store)
        self.session_repo = SessionRepo(store)
        # first run follows the desktop preference, after that the stored choice
        self.ui_repo = UiRepo(store, default=UiState(dark_mode=prefers_dark))

        self.tasks = TaskService(self.task_repo)
        self.settings = SettingsService(SettingsRepo(store))
        self.stats = StatsService(self.session_repo, self.task_repo)
        self.timer = TimerService(
            timer_repo=TimerRepo(store),
            session_repo=self.session_repo,
            ui_repo=self.ui_repo,
            task_service=self.tasks,
            settings_service=self.settings,
            notifier=notifier,
            clock=clock,
        )

        self._on_change: Optional[Callable[[], None]] = None

        # resume mid-interval from the stored end_time
        self.timer.restore()

    def set_on_change(self, fn: Callable[[], None]) -> None:
        self._on_change = fn

    def _changed(self) -> None:
        if self._on_change:
            self._on_change()

    # ----- read side -----
    def snapshot(self) -> AppSnapshot:
        timer = self.timer.get_snapshot()
        return AppSnapshot(
            tasks=tuple(self.tasks.list_tasks()),
            sessions=tuple(self.session_repo.list()),
            settings=self.settings.get(),
            timer=timer,
            ui=self.ui_repo.get(),
            current_task=self.tasks.get_task(timer.current_task_id),
        )

    # ----- timer commands -----
    def start_for_task(self, task_id: str) -> None:
        self.timer.start(task_id)
        self._changed()

    def pause(self) -> None:
        self.timer.pause()
        self._changed()

    def resume(self) -> None:
        self.timer.resume()
        self._changed()

    def reset(self) -> None:
        self.timer.reset()
        self._changed()

    def confirm_break(self) -> None:
        self.timer.confirm_break()
        self._changed()

    def continue_work(self) -> None:
        self.timer.continue_work()
        self._changed()

    def refresh(self) -> None:
        self.timer.refresh()

    # ----- task commands -----
    def add_task(self, title: str, description: str = "", estimate=1) -> Optional[Task]:
        task = self.tasks.add_task(title, description=description, estimate=estimate)
        self._changed()
        return task

    def update_task(self, task_id: str, **updates) -> None:
        self.tasks.update_task(task_id, **updates)
        self._changed()

    def delete_task(self, task_id: str) -> None:
        self.tasks.delete_task(task_id)
        self.timer.on_task_deleted(task_id)
        self._changed()

    # ----- settings / ui -----
    def set_settings(self, **updates) -> Settings:
        saved = self.settings.save(**updates)
        self.timer.on_settings_changed()
        logger.info("settings saved: %s", asdict(saved))
        self._changed()
        return saved

    def set_ui(self, **updates) -> UiState:
        # the break prompt belongs to the timer, only view flags are writable here
        ui = self.ui_repo.get()
        if "dark_mode" in updates:
            ui.dark_mode = bool(updates["dark_mode"])
        if "show_settings" in updates:
            ui.show_settings = bool(updates["show_settings"])
        self.ui_repo.save(ui)
        self._changed()
        return ui
