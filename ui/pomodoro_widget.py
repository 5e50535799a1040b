# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

from domain.models import MODE_LONG, MODE_SHORT, MODE_WORK, TimerState
from services.app_service import AppService

MODE_LABELS = {
    MODE_WORK: "Deep Work",
    MODE_SHORT: "Short Break",
    MODE_LONG: "Long Break",
}


def format_time(seconds: int) -> str:
    m = max(0, seconds) // 60
    s = max(0, seconds) % 60
    return f"{m:02d}:{s:02d}"


class PomodoroWidget(ttk.Frame):
    def __init__(
        self,
        master,
        app: AppService,
        get_selected_task_id: Callable[[], Optional[str]],
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.app = app
        self.get_selected_task_id = get_selected_task_id
        self.on_request_refresh = on_request_refresh

        self._build_ui()

        # wire callbacks from service -> widget UI
        timer = self.app.timer
        timer.set_on_tick(self._on_tick)
        timer.set_on_phase_change(self._on_phase_change)
        timer.set_on_state_change(self._on_state_change)

        # the timer owns its poll; Tk only provides the event loop
        timer.set_scheduler(self.after, self.after_cancel)

        # initial render
        self.render(timer.get_snapshot())

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.phase_var = tk.StringVar(value=MODE_LABELS[MODE_WORK])
        self.time_var = tk.StringVar(value="00:00")
        self.info_var = tk.StringVar(value="Select a task to start")
        self.task_var = tk.StringVar(value="")

        title = ttk.Label(self, text="Pomodoro", font=("Sans", 12, "bold"))
        title.grid(row=0, column=0, sticky="w", pady=(0, 6))

        self.phase_label = ttk.Label(self, textvariable=self.phase_var)
        self.phase_label.grid(row=1, column=0, sticky="w")

        self.time_label = ttk.Label(
            self, textvariable=self.time_var, font=("Sans", 32, "bold")
        )
        self.time_label.grid(row=2, column=0, sticky="w", pady=(8, 4))

        ttk.Label(self, textvariable=self.task_var).grid(row=3, column=0, sticky="w")

        self.info_label = ttk.Label(self, textvariable=self.info_var)
        self.info_label.grid(row=4, column=0, sticky="w", pady=(0, 10))

        btns = ttk.Frame(self)
        btns.grid(row=5, column=0, sticky="w")

        self.start_btn = ttk.Button(btns, text="Start", command=self._start)
        self.pause_btn = ttk.Button(btns, text="Pause", command=self._pause_or_resume)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)

        self.start_btn.grid(row=0, column=0, padx=(0, 6))
        self.pause_btn.grid(row=0, column=1, padx=(0, 6))
        self.reset_btn.grid(row=0, column=2)

        # end-of-session prompt, shown only after a work interval
        self.prompt = ttk.Labelframe(self, text="Session complete", padding=8)
        self.prompt_var = tk.StringVar(value="")
        ttk.Label(self.prompt, textvariable=self.prompt_var).grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 6)
        )
        ttk.Button(self.prompt, text="Take break", command=self._confirm_break).grid(
            row=1, column=0, padx=(0, 6)
        )
        ttk.Button(self.prompt, text="Continue working", command=self._continue_work).grid(
            row=1, column=1
        )

    def _update_buttons(self, snap: TimerState):
        has_task = bool(self.get_selected_task_id())

        # Start is only enabled if task selected AND idle
        if has_task and not snap.is_running:
            self.start_btn.state(["!disabled"])
        else:
            self.start_btn.state(["disabled"])

        if snap.is_running:
            self.pause_btn.state(["!disabled"])
            self.pause_btn.config(text="Resume" if snap.is_paused else "Pause")
        else:
            self.pause_btn.state(["disabled"])
            self.pause_btn.config(text="Pause")

        if snap.is_running or snap.current_task_id:
            self.reset_btn.state(["!disabled"])
        else:
            self.reset_btn.state(["disabled"])

    def _start(self):
        task_id = self.get_selected_task_id()
        if not task_id:
            self.info_var.set("Pick a task first.")
            return
        self.app.start_for_task(task_id)

    def _pause_or_resume(self):
        snap = self.app.timer.get_snapshot()
        if snap.is_paused:
            self.app.resume()
        else:
            self.app.pause()

    def _reset(self):
        self.app.reset()

    def _confirm_break(self):
        self.app.confirm_break()

    def _continue_work(self):
        self.app.continue_work()

    # ----- visibility -----
    def on_visible(self, event=None):
        # time may have passed while hidden or suspended
        self.app.refresh()

    # ---- Service callbacks ----
    def _on_tick(self, snap: TimerState):
        self.render(snap)

    def _on_phase_change(self, snap: TimerState):
        # a session may have been logged, task counts changed
        self.on_request_refresh()

    def _on_state_change(self, snap: TimerState):
        self.render(snap)

    def render(self, snap: TimerState):
        self.time_var.set(format_time(snap.remaining))
        self.phase_var.set(MODE_LABELS.get(snap.mode, snap.mode))

        task = self.app.tasks.get_task(snap.current_task_id)
        self.task_var.set(f"Task: {task.title}" if task else "")

        ui = self.app.ui_repo.get()
        if ui.show_end_prompt:
            nxt = MODE_LABELS.get(ui.intended_next_mode or MODE_SHORT, "Short Break")
            self.prompt_var.set(f"Nice work! Up next: {nxt}.")
            self.prompt.grid(row=6, column=0, sticky="ew", pady=(10, 0))
            self.info_var.set("Work session logged.")
        else:
            self.prompt.grid_remove()
            if snap.is_paused:
                self.info_var.set("Paused")
            elif snap.is_running:
                self.info_var.set("Running...")
            elif not self.get_selected_task_id():
                self.info_var.set("Select a task to start")
            else:
                self.info_var.set("Ready")

        self._update_buttons(snap)
