# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict, Optional

from tkinterweb import HtmlFrame

from domain.models import STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_PENDING, Task
from services.app_service import AppService
from ui.markdown_renderer import DARK_THEME, LIGHT_THEME, MarkdownRenderer
from ui.pomodoro_widget import PomodoroWidget
from ui.settings_dialog import SettingsDialog

PALETTES = {
    False: {"bg": "#F4F6FA", "fg": "#111827", "field": "#FFFFFF", "select": "#DBEAFE"},
    True: {"bg": "#18181B", "fg": "#E4E4E7", "field": "#27272A", "select": "#3F3F46"},
}

STATUS_MARKS = {
    STATUS_PENDING: "[ ]",
    STATUS_IN_PROGRESS: "[~]",
    STATUS_COMPLETED: "[x]",
}


def _fmt_hms(sec: int) -> str:
    sec = max(0, int(sec))
    h = sec // 3600
    m = (sec % 3600) // 60
    s = sec % 60
    if h > 0:
        return f"{h}h {m:02d}m"
    return f"{m}m {s:02d}s"


class MainWindow:
    def __init__(self, app: AppService):
        self.app = app

        self.root = tk.Tk()
        self.root.title("Pomodoro + Tasks")
        self.root.geometry("980x560")

        self.style = ttk.Style(self.root)
        try:
            self.style.theme_use("clam")
        except tk.TclError:
            pass

        self.selected_task_id: Optional[str] = None
        self._list_index_to_task_id: Dict[int, str] = {}
        self._settings_dialog: Optional[SettingsDialog] = None
        self._md = MarkdownRenderer()

        self._build_ui()

        self.app.set_on_change(self._refresh_all)
        if self.app.timer.notifier is not None:
            self.app.timer.notifier.fallback = self.root.bell

        # window shown again (deiconify, workspace switch, resume from suspend)
        self.root.bind("<Map>", self._on_visible)
        self.root.bind("<FocusIn>", self._on_visible)

        self._apply_theme()
        self._refresh_all()
        if self.app.ui_repo.get().show_settings:
            self._open_settings()

    def _build_ui(self):
        root = self.root

        outer = ttk.Frame(root, padding=10)
        outer.pack(fill="both", expand=True)

        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=1)
        outer.rowconfigure(1, weight=1)

        # header
        header = ttk.Frame(outer)
        header.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))
        ttk.Label(header, text="Pomodoro + Tasks", font=("Sans", 14, "bold")).pack(side="left")
        ttk.Button(header, text="Settings", command=self._open_settings).pack(side="right")
        self.dark_var = tk.BooleanVar(value=self.app.ui_repo.get().dark_mode)
        ttk.Checkbutton(
            header, text="Dark mode", variable=self.dark_var, command=self._toggle_dark
        ).pack(side="right", padx=(0, 10))

        # LEFT: Tasks panel
        left = ttk.Labelframe(outer, text="Tasks", padding=10)
        left.grid(row=1, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)
        left.rowconfigure(3, weight=1)

        self.counts_var = tk.StringVar(value="")
        ttk.Label(left, textvariable=self.counts_var).grid(row=0, column=0, sticky="w")

        form = ttk.Frame(left)
        form.grid(row=1, column=0, sticky="ew", pady=(6, 0))
        form.columnconfigure(1, weight=1)

        ttk.Label(form, text="Title").grid(row=0, column=0, sticky="w")
        self.title_var = tk.StringVar()
        ttk.Entry(form, textvariable=self.title_var).grid(row=0, column=1, columnspan=2, sticky="ew")

        ttk.Label(form, text="Description").grid(row=1, column=0, sticky="nw", pady=(4, 0))
        self.desc_text = tk.Text(form, height=3, wrap="word", relief="flat")
        self.desc_text.grid(row=1, column=1, columnspan=2, sticky="ew", pady=(4, 0))

        ttk.Label(form, text="Est. Pomodoros").grid(row=2, column=0, sticky="w", pady=(4, 0))
        self.estimate_var = tk.StringVar(value="1")
        ttk.Spinbox(form, from_=1, to=99, width=5, textvariable=self.estimate_var).grid(
            row=2, column=1, sticky="w", pady=(4, 0)
        )

        actions = ttk.Frame(form)
        actions.grid(row=3, column=0, columnspan=3, sticky="ew", pady=(6, 0))
        ttk.Button(actions, text="Add", command=self._add_task).pack(side="left")
        self.save_btn = ttk.Button(actions, text="Save changes", command=self._save_task)
        self.save_btn.pack(side="left", padx=(6, 0))
        self.delete_btn = ttk.Button(actions, text="Delete", command=self._delete_task)
        self.delete_btn.pack(side="left", padx=(6, 0))
        ttk.Button(actions, text="Clear", command=self._clear_selection).pack(side="right")

        self.err_var = tk.StringVar(value="")
        ttk.Label(left, textvariable=self.err_var, foreground="red").grid(
            row=2, column=0, sticky="w", pady=(6, 6)
        )

        self.task_list = tk.Listbox(left, height=12, exportselection=False, relief="flat")
        self.task_list.grid(row=3, column=0, sticky="nsew")
        self.task_list.bind("<<ListboxSelect>>", self._on_select_task)

        self.desc_view = HtmlFrame(left, horizontal_scrollbar="auto")
        self.desc_view.grid(row=4, column=0, sticky="nsew", pady=(8, 0))

        # RIGHT: Pomodoro + Stats
        right = ttk.Frame(outer)
        right.grid(row=1, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(1, weight=1)

        self.pomodoro = PomodoroWidget(
            right,
            app=self.app,
            get_selected_task_id=self.get_selected_task_id,
            on_request_refresh=self._refresh_all,
        )
        self.pomodoro.grid(row=0, column=0, sticky="ew")

        stats = ttk.Labelframe(right, text="Productivity", padding=10)
        stats.grid(row=1, column=0, sticky="nsew", pady=(10, 0))
        stats.columnconfigure(0, weight=1)

        self.stats_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.stats_var, font=("Sans", 11)).grid(
            row=0, column=0, sticky="w"
        )

        self.history = tk.Listbox(stats, height=8, relief="flat")
        self.history.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        stats.rowconfigure(1, weight=1)

    def run(self):
        self.root.mainloop()

    # ----- Selection helpers -----
    def get_selected_task_id(self) -> Optional[str]:
        return self.selected_task_id

    def _on_select_task(self, event=None):
        sel = self.task_list.curselection()
        if not sel:
            return
        self.selected_task_id = self._list_index_to_task_id.get(int(sel[0]))
        task = self.app.tasks.get_task(self.selected_task_id)
        if task:
            self._fill_form(task)
        self._refresh_details()
        self.pomodoro.render(self.app.timer.get_snapshot())

    def _fill_form(self, task: Task):
        self.title_var.set(task.title)
        self.desc_text.delete("1.0", tk.END)
        self.desc_text.insert("1.0", task.description or "")
        self.estimate_var.set(str(task.estimate))

    def _clear_selection(self):
        self.selected_task_id = None
        self.task_list.selection_clear(0, tk.END)
        self.title_var.set("")
        self.desc_text.delete("1.0", tk.END)
        self.estimate_var.set("1")
        self.err_var.set("")
        self._refresh_all()

    def _on_visible(self, event=None):
        if event is not None and event.widget is not self.root:
            return
        self.pomodoro.on_visible()

    # ----- UI actions -----
    def _form_values(self):
        return (
            self.title_var.get(),
            self.desc_text.get("1.0", tk.END).strip(),
            self.estimate_var.get(),
        )

    def _add_task(self):
        title, desc, estimate = self._form_values()
        if not title.strip():
            self.err_var.set("Task title cannot be empty.")
            return
        task = self.app.add_task(title, description=desc, estimate=estimate)
        self.err_var.set("")
        if task:
            self.selected_task_id = task.id
        self._refresh_all()

    def _save_task(self):
        if not self.selected_task_id:
            self.err_var.set("Select a task to edit.")
            return
        title, desc, estimate = self._form_values()
        if not title.strip():
            self.err_var.set("Task title cannot be empty.")
            return
        self.err_var.set("")
        self.app.update_task(
            self.selected_task_id, title=title, description=desc, estimate=estimate
        )

    def _delete_task(self):
        if not self.selected_task_id:
            return
        task = self.app.tasks.get_task(self.selected_task_id)
        if task and not messagebox.askyesno("Delete task", f"Delete '{task.title}'?"):
            return
        task_id = self.selected_task_id
        self.selected_task_id = None
        self.app.delete_task(task_id)
        self._clear_selection()

    def _toggle_dark(self):
        self.app.set_ui(dark_mode=self.dark_var.get())
        self._apply_theme()
        self._refresh_details()

    def _open_settings(self):
        if self._settings_dialog is not None:
            self._settings_dialog.lift()
            return
        self.app.set_ui(show_settings=True)
        self._settings_dialog = SettingsDialog(
            self.root,
            self.app.settings.get(),
            on_save=self.app.set_settings,
            on_close=self._settings_closed,
        )

    def _settings_closed(self):
        self._settings_dialog = None
        self.app.set_ui(show_settings=False)

    # ----- Theme -----
    def _apply_theme(self):
        dark = self.app.ui_repo.get().dark_mode
        p = PALETTES[dark]
        self._md = MarkdownRenderer(DARK_THEME if dark else LIGHT_THEME)

        self.root.configure(bg=p["bg"])
        for name in ("TFrame", "TLabelframe", "TCheckbutton"):
            self.style.configure(name, background=p["bg"], foreground=p["fg"])
        self.style.configure("TLabel", background=p["bg"], foreground=p["fg"])
        self.style.configure("TLabelframe.Label", background=p["bg"], foreground=p["fg"])
        for lb in (self.task_list, self.history):
            lb.configure(bg=p["field"], fg=p["fg"], selectbackground=p["select"], selectforeground=p["fg"])
        self.desc_text.configure(bg=p["field"], fg=p["fg"], insertbackground=p["fg"])

    # ----- Refresh -----
    def _refresh_all(self):
        self._refresh_tasks_only()
        self._refresh_details()
        self._refresh_stats_only()

    def _refresh_tasks_only(self):
        tasks = self.app.tasks.list_tasks()
        counts = self.app.tasks.counts()
        self.counts_var.set(
            f"Total {counts['total']} · Pending {counts[STATUS_PENDING]} · "
            f"In Progress {counts[STATUS_IN_PROGRESS]} · Completed {counts[STATUS_COMPLETED]}"
        )

        active_id = self.app.timer.get_snapshot().current_task_id

        self.task_list.delete(0, tk.END)
        self._list_index_to_task_id.clear()

        selected_index = None
        for i, t in enumerate(tasks):
            mark = STATUS_MARKS.get(t.status, "[?]")
            running = "  <- timer" if t.id == active_id else ""
            label = f"{mark} {t.title}  ({t.completed_sessions}/{t.estimate}){running}"
            self.task_list.insert(tk.END, label)
            self._list_index_to_task_id[i] = t.id
            if t.id == self.selected_task_id:
                selected_index = i

        if selected_index is not None:
            self.task_list.selection_set(selected_index)
            self.task_list.activate(selected_index)
        else:
            self.selected_task_id = None

    def _refresh_details(self):
        task = self.app.tasks.get_task(self.selected_task_id)
        html = self._md.to_html(task.description if task else "")
        try:
            self.desc_view.load_html(html)
        except Exception:
            self.desc_view.set_content(html)

        state = "!disabled" if task else "disabled"
        self.save_btn.state([state])
        self.delete_btn.state([state])

    def _refresh_stats_only(self):
        stats = self.app.stats
        self.stats_var.set(
            f"Today: {stats.pomodoros_today()} pomodoros, "
            f"{stats.tasks_completed_today()} tasks done\n"
            f"This week: {stats.pomodoros_this_week()} pomodoros\n"
            f"Tasks completed (all time): {stats.tasks_completed_total()}\n"
            f"Focused today: {_fmt_hms(stats.total_today_work_sec())}"
        )

        titles = {t.id: t.title for t in self.app.tasks.list_tasks()}
        self.history.delete(0, tk.END)
        for s in self.app.session_repo.list()[:50]:
            minutes = max(0, s.end - s.start) // 60000
            title = titles.get(s.task_id, "(deleted task)") if s.task_id else "(no task)"
            self.history.insert(tk.END, f"{s.type:<5} {minutes:>3}m  {title}")
