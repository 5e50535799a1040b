# -*- coding: utf-8 -*-

import logging
import time
import uuid
from typing import Any, Callable, Optional

from core.timer_engine import Expiry, TimerEngine
from domain.models import BREAK_MODES, MODE_SHORT, MODE_WORK, SessionLog, TimerState
from services.notifier import SoundNotifier
from services.settings_service import SettingsService
from services.task_service import TaskService
from storage.repos import SessionRepo, TimerRepo, UiRepo

logger = logging.getLogger(__name__)

POLL_MS = 500

Schedule = Callable[[int, Callable[[], None]], Any]
Cancel = Callable[[Any], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class TimerService:
    """
    Orchestrates:
    - TimerEngine state (persisted after every change)
    - the poll that re-derives remaining time from end_time
    - session logging + task progress when work ends
    - the break prompt kept in the ui slice
    - callbacks for UI
    """

    def __init__(
        self,
        timer_repo: TimerRepo,
        session_repo: SessionRepo,
        ui_repo: UiRepo,
        task_service: TaskService,
        settings_service: SettingsService,
        notifier: Optional[SoundNotifier] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.timer_repo = timer_repo
        self.session_repo = session_repo
        self.ui_repo = ui_repo
        self.task_service = task_service
        self.settings_service = settings_service
        self.notifier = notifier
        self.clock = clock

        self.engine = TimerEngine(settings=settings_service.get())

        self._schedule: Optional[Schedule] = None
        self._cancel: Optional[Cancel] = None
        self._poll_job = None

        self._on_tick: Optional[Callable[[TimerState], None]] = None
        self._on_phase_change: Optional[Callable[[TimerState], None]] = None
        self._on_state_change: Optional[Callable[[TimerState], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[TimerState], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[TimerState], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[TimerState], None]) -> None:
        self._on_state_change = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    # ----- Scheduling -----
    def set_scheduler(self, schedule: Schedule, cancel: Cancel) -> None:
        """Tk passes widget.after / widget.after_cancel here."""
        self._cancel_poll()
        self._schedule = schedule
        self._cancel = cancel
        self._sync_poll()

    def _cancel_poll(self) -> None:
        if self._poll_job is not None and self._cancel is not None:
            try:
                self._cancel(self._poll_job)
            except Exception as e:
                logger.debug("cancel of poll job failed: %s", e)
        self._poll_job = None

    def _sync_poll(self) -> None:
        # cancel first, so at most one poll is ever pending
        self._cancel_poll()
        if self._schedule is not None and self.engine.is_ticking:
            self._poll_job = self._schedule(POLL_MS, self._poll)

    def _poll(self) -> None:
        self._poll_job = None
        self.refresh()

    @property
    def has_pending_poll(self) -> bool:
        return self._poll_job is not None

    # ----- Public API -----
    def get_snapshot(self) -> TimerState:
        return self.engine.snapshot()

    def restore(self) -> None:
        """Load the persisted timer and pick up where it left off."""
        state = self.timer_repo.get()
        if state.is_paused and not state.is_running:
            state.is_paused = False
        if state.is_running and not state.is_paused and state.end_time is None:
            # cannot derive time without an end; treat as stopped
            state.is_running = False
        self.engine = TimerEngine(state=state, settings=self.settings_service.get())
        logger.info(
            "restored timer: mode=%s running=%s paused=%s",
            state.mode,
            state.is_running,
            state.is_paused,
        )
        self.refresh()

    def start(self, task_id: str) -> None:
        if not self.engine.is_idle:
            return
        if self.task_service.get_task(task_id) is None:
            logger.info("start ignored, unknown task %s", task_id)
            return

        self._set_prompt(False, None)
        self._sync_settings()
        self.engine.start(task_id, self.clock())
        self.task_service.mark_started(task_id)
        logger.info("work started for task %s", task_id)
        self._after_command()

    def pause(self) -> None:
        if not self.engine.pause(self.clock()):
            return
        self._after_command()

    def resume(self) -> None:
        if not self.engine.resume(self.clock()):
            return
        self._after_command()

    def reset(self) -> None:
        self.engine.reset()
        self._set_prompt(False, None)
        logger.info("timer reset")
        self._after_command()

    def confirm_break(self) -> None:
        ui = self.ui_repo.get()
        if not (ui.show_end_prompt and self.engine.is_idle):
            return
        mode = ui.intended_next_mode if ui.intended_next_mode in BREAK_MODES else MODE_SHORT
        self._set_prompt(False, None)
        self._sync_settings()
        self.engine.take_break(mode, self.clock())
        logger.info("%s break started, cycle %d", mode, self.engine.state.cycle_count)
        self._after_command()

    def continue_work(self) -> None:
        ui = self.ui_repo.get()
        if not (ui.show_end_prompt and self.engine.is_idle):
            return
        self._set_prompt(False, None)
        self._sync_settings()
        self.engine.switch_mode(MODE_WORK, self.clock())
        logger.info("break skipped, work continues")
        self._after_command()

    def on_task_deleted(self, task_id: str) -> None:
        if self.engine.state.current_task_id == task_id:
            self.reset()

    def on_settings_changed(self) -> None:
        # only future intervals pick this up, the running one keeps its end_time
        self._sync_settings()

    def refresh(self) -> None:
        """
        Poll body, also called when the window becomes visible again.
        Safe to call at any time; does nothing unless the timer is ticking.
        """
        before = self.engine.state.remaining
        if self.engine.is_ticking:
            self._sync_settings()
            done = self.engine.expire(self.clock())
            if done is not None:
                self._handle_expiry(done)
            elif self.engine.state.remaining != before:
                self.timer_repo.save(self.engine.state)
        self._sync_poll()
        self._emit_tick()

    # ----- Internals -----
    def _sync_settings(self) -> None:
        self.engine.settings = self.settings_service.get()

    def _after_command(self) -> None:
        self.timer_repo.save(self.engine.state)
        self._sync_poll()
        self._emit_state_change()
        self._emit_tick()

    def _set_prompt(self, show: bool, next_mode: Optional[str]) -> None:
        ui = self.ui_repo.get()
        if ui.show_end_prompt == show and ui.intended_next_mode == next_mode:
            return
        ui.show_end_prompt = show
        ui.intended_next_mode = next_mode
        self.ui_repo.save(ui)

    def _handle_expiry(self, done: Expiry) -> None:
        self._play_cue()

        if done.mode == MODE_WORK:
            self.session_repo.append(
                SessionLog(
                    id=uuid.uuid4().hex,
                    task_id=done.task_id,
                    type=MODE_WORK,
                    start=done.start,
                    end=done.end,
                )
            )
            self.task_service.record_work_session(done.task_id)
            self._set_prompt(True, done.next_break)
            logger.info("work session done, suggesting %s break", done.next_break)
        else:
            logger.info("%s break over, back to work", done.mode)

        self.timer_repo.save(self.engine.state)
        self._emit_phase_change()

    def _play_cue(self) -> None:
        if self.notifier is None or not self.engine.settings.sound:
            return
        try:
            self.notifier.play()
        except Exception as e:
            logger.debug("notification failed: %s", e)
