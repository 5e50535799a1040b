# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from domain.models import Settings

FIELDS = (
    ("work_minutes", "Work (minutes)"),
    ("short_break_minutes", "Short break (minutes)"),
    ("long_break_minutes", "Long break (minutes)"),
    ("long_break_every", "Long break every (sessions)"),
)


class SettingsDialog(tk.Toplevel):
    def __init__(self, master, settings: Settings, on_save: Callable[..., None], on_close: Callable[[], None]):
        super().__init__(master)
        self.title("Settings")
        self.resizable(False, False)
        self.transient(master)

        self.on_save = on_save
        self.on_close = on_close

        frm = ttk.Frame(self, padding=12)
        frm.pack(fill="both", expand=True)

        self._vars = {}
        for row, (name, label) in enumerate(FIELDS):
            ttk.Label(frm, text=label).grid(row=row, column=0, sticky="w", pady=3)
            var = tk.StringVar(value=str(getattr(settings, name)))
            ttk.Spinbox(frm, from_=1, to=600, width=6, textvariable=var).grid(
                row=row, column=1, sticky="e", padx=(10, 0), pady=3
            )
            self._vars[name] = var

        self.sound_var = tk.BooleanVar(value=settings.sound)
        ttk.Checkbutton(frm, text="Play sound when a session ends", variable=self.sound_var).grid(
            row=len(FIELDS), column=0, columnspan=2, sticky="w", pady=(8, 0)
        )

        btns = ttk.Frame(frm)
        btns.grid(row=len(FIELDS) + 1, column=0, columnspan=2, sticky="e", pady=(12, 0))
        ttk.Button(btns, text="Cancel", command=self._close).pack(side="right")
        ttk.Button(btns, text="Save", command=self._save).pack(side="right", padx=(0, 6))

        self.protocol("WM_DELETE_WINDOW", self._close)
        self.bind("<Escape>", lambda e: self._close())
        self.bind("<Return>", lambda e: self._save())

    def _save(self):
        # raw strings go through; the settings service clamps and rejects junk
        values = {name: var.get() for name, var in self._vars.items()}
        values["sound"] = self.sound_var.get()
        self.on_save(**values)
        self._close()

    def _close(self):
        self.destroy()
        self.on_close()
