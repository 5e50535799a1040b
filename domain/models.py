# -*- coding: utf-8 -*-

import math
from dataclasses import MISSING, dataclass, fields
from typing import Any, Dict, Optional, Union

MODE_WORK = "work"
MODE_SHORT = "short"
MODE_LONG = "long"
MODES = (MODE_WORK, MODE_SHORT, MODE_LONG)
BREAK_MODES = (MODE_SHORT, MODE_LONG)

STATUS_PENDING = "Pending"
STATUS_IN_PROGRESS = "In Progress"
STATUS_COMPLETED = "Completed"
STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED)

_BAD = object()


def _as_int(value: Any) -> Any:
    if isinstance(value, bool):
        return _BAD
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return _BAD


def _cast(tp: Any, value: Any) -> Any:
    if getattr(tp, "__origin__", None) is Union:
        # Optional[X]
        if value is None:
            return None
        tp = next(a for a in tp.__args__ if a is not type(None))
    if tp is int:
        return _as_int(value)
    if tp is bool:
        return value if isinstance(value, bool) else _BAD
    if tp is str:
        return value if isinstance(value, str) else _BAD
    return value


def _known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep only fields of cls whose stored value has the declared type.
    Keys written by other versions are dropped; a wrong-typed value falls
    back to the field default, or raises TypeError if the field has none.
    """
    if not isinstance(data, dict):
        raise TypeError(f"{cls.__name__} record is {type(data).__name__}, not an object")
    out: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = _cast(f.type, data[f.name])
        if value is _BAD:
            if f.default is MISSING:
                raise TypeError(f"{cls.__name__}.{f.name} has bad value {data[f.name]!r}")
            continue
        out[f.name] = value
    return out


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    estimate: int = 1
    status: str = STATUS_PENDING  # Pending | In Progress | Completed
    completed_sessions: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        known = _known(cls, data)
        if known.get("status", STATUS_PENDING) not in STATUSES:
            del known["status"]
        return cls(**known)


@dataclass(frozen=True)
class SessionLog:
    id: str
    task_id: Optional[str]  # weak ref, may outlive the task
    type: str  # work | short | long
    start: int
    end: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionLog":
        return cls(**_known(cls, data))


@dataclass
class Settings:
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_every: int = 4
    sound: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        return cls(**_known(cls, data))


@dataclass
class TimerState:
    mode: str = MODE_WORK
    is_running: bool = False
    is_paused: bool = False
    end_time: Optional[int] = None  # epoch ms, authoritative only while running
    remaining: int = 0  # seconds, cached
    current_task_id: Optional[str] = None
    cycle_count: int = 0
    last_start: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimerState":
        known = _known(cls, data)
        if known.get("mode", MODE_WORK) not in MODES:
            del known["mode"]
        return cls(**known)


@dataclass
class UiState:
    dark_mode: bool = False
    show_settings: bool = False
    show_end_prompt: bool = False
    intended_next_mode: Optional[str] = None  # short | long

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UiState":
        return cls(**_known(cls, data))


@dataclass(frozen=True)
class AppSnapshot:
    tasks: tuple
    sessions: tuple
    settings: Settings
    timer: TimerState
    ui: UiState
    current_task: Optional[Task] = None
